from dataclasses import dataclass, field
from typing import Optional, Tuple

from pagemark.core.annotations import AnnotationKind, ResizeHandle
from pagemark.core.annotations.undo_redo import Snapshot

from .text_editor import TextEditSession

Point = Tuple[float, float]

# ==============================================================================
# Input
# ==============================================================================


@dataclass(frozen=True)
class PointerEvent:
    """
    Pointer position relative to the annotation layer, in pixels.

    target_id and handle describe what the visual layer reports under the
    pointer: an annotation body, one of its resize handles, or nothing.
    """

    x: float
    y: float
    target_id: Optional[str] = None
    handle: Optional[ResizeHandle] = None


# ==============================================================================
# States
# ==============================================================================


@dataclass(frozen=True)
class Idle:
    pass


@dataclass
class Dragging:
    annotation_id: str
    offset: Point  # pointer minus the annotation's pixel anchor at press
    origin: Snapshot = field(repr=False)


@dataclass
class Resizing:
    annotation_id: str
    handle: ResizeHandle
    anchor: Point  # pointer position at press
    origin_rect: Tuple[float, float, float, float]  # x, y, w, h fractions at press
    origin: Snapshot = field(repr=False)


@dataclass
class MarqueeSelecting:
    kind: AnnotationKind
    origin: Point
    current: Point

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        """Normalized (x, y, width, height) in pixels."""
        (x0, y0), (x1, y1) = self.origin, self.current
        return min(x0, x1), min(y0, y1), abs(x1 - x0), abs(y1 - y0)


@dataclass
class EditingText:
    editor: TextEditSession


IDLE = Idle()
