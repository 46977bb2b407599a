"""
Annotation list shown beside the page.
"""
from typing import List, Optional

from pagemark.core.annotations import Annotation, AnnotationKind, AnnotationStore

from .models import SidebarEntry

_SIZE_LABELS = {8: "S", 12: "M", 16: "L"}


def _size_label(size_px: int) -> str:
    return _SIZE_LABELS.get(size_px, f"{size_px}px")


def sidebar_entries(store: AnnotationStore, selected_id: Optional[str] = None) -> List[SidebarEntry]:
    """
    List every annotation of the document, ordered by page and then by
    vertical position.
    """
    ordered = sorted(store.list(), key=lambda a: (a.page_number, a.y_frac))
    return [_entry(ann, ann.id == selected_id) for ann in ordered]


def _entry(ann: Annotation, selected: bool) -> SidebarEntry:
    kind = ann.kind
    if kind is AnnotationKind.POINT:
        icon, title, details = "●", "Point", f"Size: {_size_label(ann.size_px)}"
    elif kind is AnnotationKind.TEXT:
        icon, title, details = "T", ann.text or "(empty text)", f"Size: {_size_label(ann.size_px)}"
    elif kind is AnnotationKind.HIGHLIGHT:
        icon, title, details = "H", ann.comment or "Highlight", ""
    elif kind is AnnotationKind.WHITEOUT:
        icon, title, details = "W", ann.comment or "Whiteout", ""
    elif kind is AnnotationKind.STAMP:
        icon, title, details = "S", ann.stamp_kind.label, ann.comment
    elif kind is AnnotationKind.IMAGE:
        icon, title, details = "I", "Image", ann.mime_type
    else:
        raise TypeError(f"Unknown annotation kind: {kind!r}")

    return SidebarEntry(
        annotation_id=ann.id,
        page_number=ann.page_number,
        icon=icon,
        title=title,
        details=details,
        selected=selected,
    )
