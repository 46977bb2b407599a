from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Type

# ==============================================================================
# Types
# ==============================================================================


class AnnotationKind(Enum):
    """The closed set of annotation variants."""

    POINT = "point"
    TEXT = "text"
    HIGHLIGHT = "highlight"
    WHITEOUT = "whiteout"
    STAMP = "stamp"
    IMAGE = "image"

    @property
    def is_box(self) -> bool:
        """Whether the variant carries a width and height."""
        return self in (AnnotationKind.HIGHLIGHT, AnnotationKind.WHITEOUT, AnnotationKind.IMAGE)


class StampKind(Enum):
    """Stamp presets."""

    OK = "ok"
    REVIEW = "review"
    FIX = "fix"

    @property
    def label(self) -> str:
        return _STAMP_LABELS[self]


_STAMP_LABELS = {
    StampKind.OK: "OK",
    StampKind.REVIEW: "REVIEW",
    StampKind.FIX: "FIX",
}


class ResizeHandle(Enum):
    """Corner handles of a box annotation."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"

    @property
    def adjusts_top(self) -> bool:
        return "n" in self.value

    @property
    def adjusts_bottom(self) -> bool:
        return "s" in self.value

    @property
    def adjusts_left(self) -> bool:
        return "w" in self.value

    @property
    def adjusts_right(self) -> bool:
        return "e" in self.value


PEN_COLORS = ("blue", "red", "black")

# ==============================================================================
# Annotation variants
# ==============================================================================


@dataclass
class Annotation:
    """
    Common fields of every annotation.

    Coordinates are fractions of the displayed page size; (x_frac, y_frac)
    is the anchor point. They are not clamped to [0, 1].
    """

    id: str
    page_number: int  # 1-based
    x_frac: float
    y_frac: float

    kind: ClassVar[AnnotationKind]

    @property
    def is_box(self) -> bool:
        return self.kind.is_box


@dataclass
class MarkerAnnotation(Annotation):
    """Annotation anchored at a single point, without extent."""

    w_frac: ClassVar[float] = 0.0
    h_frac: ClassVar[float] = 0.0


@dataclass
class BoxAnnotation(Annotation):
    """Annotation covering a rectangle hanging from its anchor."""

    w_frac: float = 0.0
    h_frac: float = 0.0


@dataclass
class PointAnnotation(MarkerAnnotation):
    kind: ClassVar[AnnotationKind] = AnnotationKind.POINT

    color: str = "blue"
    size_px: int = 12


@dataclass
class TextAnnotation(MarkerAnnotation):
    kind: ClassVar[AnnotationKind] = AnnotationKind.TEXT

    text: str = ""
    color: str = "black"
    size_px: int = 14
    font_name: str = "Noto Sans JP"


@dataclass
class HighlightAnnotation(BoxAnnotation):
    kind: ClassVar[AnnotationKind] = AnnotationKind.HIGHLIGHT
    color: ClassVar[str] = "yellow"

    comment: str = ""


@dataclass
class WhiteoutAnnotation(BoxAnnotation):
    kind: ClassVar[AnnotationKind] = AnnotationKind.WHITEOUT
    color: ClassVar[str] = "white"

    comment: str = ""


@dataclass
class StampAnnotation(MarkerAnnotation):
    kind: ClassVar[AnnotationKind] = AnnotationKind.STAMP

    stamp_kind: StampKind = StampKind.OK
    comment: str = ""


@dataclass
class ImageAnnotation(BoxAnnotation):
    kind: ClassVar[AnnotationKind] = AnnotationKind.IMAGE

    image_bytes: bytes = b""
    mime_type: str = "image/png"

    def __repr__(self):
        return (
            f"ImageAnnotation(id={self.id!r}, page_number={self.page_number}, "
            f"x_frac={self.x_frac}, y_frac={self.y_frac}, w_frac={self.w_frac}, "
            f"h_frac={self.h_frac}, mime_type={self.mime_type!r}, "
            f"image_bytes=<{len(self.image_bytes)} bytes>)"
        )


ANNOTATION_TYPES: Dict[AnnotationKind, Type[Annotation]] = {
    AnnotationKind.POINT: PointAnnotation,
    AnnotationKind.TEXT: TextAnnotation,
    AnnotationKind.HIGHLIGHT: HighlightAnnotation,
    AnnotationKind.WHITEOUT: WhiteoutAnnotation,
    AnnotationKind.STAMP: StampAnnotation,
    AnnotationKind.IMAGE: ImageAnnotation,
}


def annotation_class(kind: AnnotationKind) -> Type[Annotation]:
    """Return the dataclass implementing an annotation kind."""
    try:
        return ANNOTATION_TYPES[kind]
    except KeyError:
        raise TypeError(f"Unknown annotation kind: {kind!r}") from None


# ==============================================================================
# Creation requests
# ==============================================================================


@dataclass
class AnnotationDraft:
    """
    A new annotation expressed in annotation-layer pixels.

    The store turns a draft into an annotation by assigning an id and
    normalizing the pixel geometry against the current viewport.
    """

    kind: AnnotationKind
    page_number: int
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    fields: Dict[str, Any] = field(default_factory=dict)
