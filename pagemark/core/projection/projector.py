"""
Derivation of the drawable annotation layer from the store.
"""
import logging
from collections import defaultdict
from typing import AbstractSet, Callable, Dict, Iterable, List, Optional, Tuple

from pagemark.core.annotations import PEN_COLORS, Annotation, AnnotationKind, AnnotationStore

from .models import EMPTY_PLAN, Polyline, RenderItem, RenderPlan

log = logging.getLogger(__name__)


def project(store: AnnotationStore, page_number: int, selection_id: Optional[str],
            editing_id: Optional[str], graph_selection: AbstractSet[str]) -> RenderPlan:
    """
    Compute what the annotation layer shows for a page.

    Pure: the store is only read, and the same inputs give the same plan.

    Args:
        store: Annotation store
        page_number: Page on screen (1-based)
        selection_id: Selected annotation, drawn with an outline
        editing_id: Annotation hidden behind an open text editor
        graph_selection: Point ids to connect with polylines

    Returns:
        The render plan, items in store order
    """
    page_annotations = store.list(page_number)

    items = tuple(
        _decorate(ann, ann.id == selection_id, graph_selection)
        for ann in page_annotations
        if ann.id != editing_id
    )
    return RenderPlan(page_number, items, _graph_polylines(page_annotations, graph_selection))


def _decorate(ann: Annotation, selected: bool, graph_selection: AbstractSet[str]) -> RenderItem:
    kind = ann.kind
    if kind is AnnotationKind.POINT:
        return RenderItem(ann, selected, graph_marked=ann.id in graph_selection)
    if kind is AnnotationKind.IMAGE:
        return RenderItem(ann, selected, show_resize_handles=selected)
    if kind in (AnnotationKind.TEXT, AnnotationKind.HIGHLIGHT,
                AnnotationKind.WHITEOUT, AnnotationKind.STAMP):
        return RenderItem(ann, selected)
    raise TypeError(f"Unknown annotation kind: {kind!r}")


def _color_order(color: str) -> Tuple[int, str]:
    try:
        return PEN_COLORS.index(color), color
    except ValueError:
        return len(PEN_COLORS), color


def _graph_polylines(annotations: Iterable[Annotation],
                     graph_selection: AbstractSet[str]) -> Tuple[Polyline, ...]:
    if len(graph_selection) < 2:
        return ()

    groups: Dict[str, List[Annotation]] = defaultdict(list)
    for ann in annotations:
        if ann.kind is AnnotationKind.POINT and ann.id in graph_selection:
            groups[ann.color].append(ann)

    polylines = []
    for color in sorted(groups, key=_color_order):
        points = sorted(groups[color], key=lambda a: a.x_frac)
        if len(points) < 2:
            continue
        polylines.append(Polyline(
            color=color,
            points=tuple((p.x_frac, p.y_frac) for p in points),
            annotation_ids=tuple(p.id for p in points),
        ))
    return tuple(polylines)


class LayerProjector:
    """
    Keeps the last plan that was computed successfully.

    A failure while projecting is logged and leaves the previous plan in
    place, so the display never shows a half-built layer.
    """

    def __init__(self, project_fn: Callable[..., RenderPlan] = project):
        self._project = project_fn
        self.plan: RenderPlan = EMPTY_PLAN

    def refresh(self, session, editing_id: Optional[str] = None) -> RenderPlan:
        try:
            self.plan = self._project(
                session.store,
                session.page_number,
                session.selected_id,
                editing_id,
                session.visible_graph_selection,
            )
        except Exception:
            log.exception("Failed to project annotations for page %d; keeping previous layer",
                          session.page_number)
        return self.plan

    def clear(self) -> None:
        self.plan = EMPTY_PLAN
