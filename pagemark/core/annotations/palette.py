"""
RGB values (0-255) for named annotation colors.
"""
from typing import Dict, Tuple

COLOR_RGB: Dict[str, Tuple[int, int, int]] = {
    "blue": (37, 99, 235),
    "red": (220, 38, 38),
    "black": (51, 51, 51),
    "yellow": (255, 235, 59),
    "white": (255, 255, 255),
}

STAMP_RGB: Dict[str, Tuple[int, int, int]] = {
    "ok": (22, 163, 74),
    "review": (234, 88, 12),
    "fix": (220, 38, 38),
}

HIGHLIGHT_OPACITY = 0.4


def color_rgb(name: str) -> Tuple[int, int, int]:
    """RGB for a color name; unknown names fall back to black."""
    return COLOR_RGB.get(name, COLOR_RGB["black"])
