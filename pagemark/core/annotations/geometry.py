"""
Conversion between annotation-layer pixels and page fractions.

Fractions are measured against the annotation layer's displayed size, not
the page's intrinsic size, so placement survives zoom and window changes.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from pagemark.core.errors import GeometryUnavailable


@dataclass(frozen=True)
class Viewport:
    """Displayed size of the annotation layer in device-independent pixels."""

    width: float = 0.0
    height: float = 0.0

    @property
    def available(self) -> bool:
        return _usable(self.width) and _usable(self.height)

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2


def _usable(extent: Optional[float]) -> bool:
    return extent is not None and math.isfinite(extent) and extent > 0


def require_viewport(viewport_w: Optional[float], viewport_h: Optional[float]) -> None:
    """Raise GeometryUnavailable unless both extents are positive and finite."""
    if not (_usable(viewport_w) and _usable(viewport_h)):
        raise GeometryUnavailable(viewport_w, viewport_h)


def to_fraction(px: float, py: float, viewport_w: float,
                viewport_h: float) -> Tuple[float, float]:
    """
    Convert a layer-relative pixel position to page fractions.

    Args:
        px, py: Position relative to the annotation layer's top-left
        viewport_w, viewport_h: Displayed size of the annotation layer

    Returns:
        Tuple of (x_frac, y_frac)
    """
    require_viewport(viewport_w, viewport_h)
    return px / viewport_w, py / viewport_h


def to_pixels(x_frac: float, y_frac: float, viewport_w: float,
              viewport_h: float) -> Tuple[float, float]:
    """
    Convert page fractions back to a layer-relative pixel position.

    Args:
        x_frac, y_frac: Fractional position
        viewport_w, viewport_h: Displayed size of the annotation layer

    Returns:
        Tuple of (px, py)
    """
    require_viewport(viewport_w, viewport_h)
    return x_frac * viewport_w, y_frac * viewport_h


def length_to_fraction(length: float, extent: float) -> float:
    """Convert a pixel length along one axis to a fraction of that axis."""
    require_viewport(extent, extent)
    return length / extent


def fraction_to_length(frac: float, extent: float) -> float:
    """Convert a fractional length along one axis to pixels."""
    require_viewport(extent, extent)
    return frac * extent


def is_finite(*values: float) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def fit_scale(container_width: float, page_width: float, margin: float = 40) -> float:
    """
    Scale that fits a page to the viewer width.

    Pages are never shrunk below their intrinsic size.
    """
    if not _usable(page_width):
        raise GeometryUnavailable(page_width, None)
    scale = (container_width - margin) / page_width
    return scale if scale >= 1 else 1.0
