"""
Mutable state of one annotation session.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Set

from pagemark.core.annotations import PEN_COLORS, AnnotationStore, StampKind, Viewport
from pagemark.utils.settings import AppConfig

log = logging.getLogger(__name__)


class ToolMode(Enum):
    """Active tool; exactly one at a time."""

    POINT = "point"
    TEXT = "text"
    HIGHLIGHT = "highlight"
    WHITEOUT = "whiteout"
    STAMP = "stamp"
    IMAGE = "image"


@dataclass
class ToolSettings:
    """Style applied to newly created markup."""

    color: str = "blue"
    size_px: int = 12
    stamp_kind: StampKind = StampKind.OK
    font_name: str = "Noto Sans JP"


def tool_settings_from(config: AppConfig) -> ToolSettings:
    """
    Starting tool settings from the configured defaults.

    A default color outside the pen palette or an unknown stamp name is
    logged and replaced with the built-in default.
    """
    settings = ToolSettings(size_px=config.default_point_size, font_name=config.default_font)

    if config.default_color in PEN_COLORS:
        settings.color = config.default_color
    else:
        log.warning("Unknown default color %r; using %s", config.default_color, settings.color)

    try:
        settings.stamp_kind = StampKind(config.default_stamp)
    except ValueError:
        log.warning("Unknown default stamp %r; using %s", config.default_stamp, settings.stamp_kind.value)
    return settings


class AnnotationSession:
    """
    Owner of all session state: the store and its history, tool settings,
    selection, graph selection, and the displayed page geometry.

    Components receive the session explicitly; nothing here is global.
    """

    def __init__(self, config: Optional[AppConfig] = None, store: Optional[AnnotationStore] = None):
        self.config = config or AppConfig()
        self.store = store or AnnotationStore(history_limit=self.config.history_limit)
        self.settings = tool_settings_from(self.config)

        self.tool_mode = ToolMode.POINT
        self.graph_mode = False
        self.graph_selection: Set[str] = set()
        self.selected_id: Optional[str] = None

        self.page_number = 1
        self.page_count = 0
        self.viewport = Viewport()
        self.display_scale = 1.0

    @property
    def document_loaded(self) -> bool:
        return self.page_count > 0

    @property
    def visible_graph_selection(self) -> FrozenSet[str]:
        """Graph selection as drawn: empty while graph mode is off."""
        return frozenset(self.graph_selection) if self.graph_mode else frozenset()

    def select(self, annotation_id: Optional[str]) -> None:
        if annotation_id is not None and annotation_id not in self.store:
            annotation_id = None
        self.selected_id = annotation_id

    def set_page_geometry(self, page_number: int, viewport: Viewport, scale: float = 1.0) -> None:
        """Record the page now on screen and its displayed size."""
        selected = self.store.get(self.selected_id)
        if selected is not None and selected.page_number != page_number:
            self.selected_id = None
        self.page_number = page_number
        self.viewport = viewport
        self.display_scale = scale

    def start_document(self, page_count: int) -> None:
        """Reset for a freshly loaded document."""
        self.reset()
        self.page_count = page_count
        log.info("Document loaded with %d page(s)", page_count)

    def reset(self) -> None:
        """Return to the empty pre-load state."""
        self.store.reset()
        self.graph_selection.clear()
        self.selected_id = None
        self.page_number = 1
        self.page_count = 0
        self.viewport = Viewport()
        self.display_scale = 1.0
