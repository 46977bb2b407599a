from dataclasses import dataclass, field
from typing import Tuple

from pagemark.core.annotations import Annotation


@dataclass(frozen=True)
class RenderItem:
    """One annotation as it should be drawn."""

    annotation: Annotation
    selected: bool = False
    show_resize_handles: bool = False
    graph_marked: bool = False

    @property
    def annotation_id(self) -> str:
        return self.annotation.id


@dataclass(frozen=True)
class Polyline:
    """Connective line through same-colour graph points, in fractions."""

    color: str
    points: Tuple[Tuple[float, float], ...]
    annotation_ids: Tuple[str, ...]


@dataclass(frozen=True)
class RenderPlan:
    """Everything the annotation layer draws for one page, bottom to top."""

    page_number: int
    items: Tuple[RenderItem, ...] = field(default_factory=tuple)
    polylines: Tuple[Polyline, ...] = field(default_factory=tuple)

    def item(self, annotation_id: str):
        for item in self.items:
            if item.annotation_id == annotation_id:
                return item
        return None


EMPTY_PLAN = RenderPlan(page_number=0)


@dataclass(frozen=True)
class SidebarEntry:
    """A row of the annotation list."""

    annotation_id: str
    page_number: int
    icon: str
    title: str
    details: str = ""
    selected: bool = False
