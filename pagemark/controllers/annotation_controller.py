"""
Controller for managing annotation operations.
"""
import logging
from typing import List, Optional, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from pagemark.core.annotations import Annotation, StampKind
from pagemark.core.errors import GeometryUnavailable, UnsupportedFileType
from pagemark.core.interaction import InteractionStateMachine, PointerEvent
from pagemark.core.projection import LayerProjector, RenderPlan, SidebarEntry, sidebar_entries
from pagemark.core.session import AnnotationSession, ToolMode

log = logging.getLogger(__name__)


class AnnotationController(QObject):
    """Routes user input into the state machine and publishes the results."""

    # Signals
    plan_changed = pyqtSignal(object)  # RenderPlan
    annotations_changed = pyqtSignal()  # Emitted when the collection changes
    selection_changed = pyqtSignal(object)  # Annotation or None
    editor_opened = pyqtSignal(object)  # TextEditSession
    editor_closed = pyqtSignal()
    history_changed = pyqtSignal(bool, bool)  # can_undo, can_redo
    tool_state_changed = pyqtSignal()  # tool mode, graph mode or style settings
    error_occurred = pyqtSignal(str, str)  # title, message

    def __init__(self, session: AnnotationSession, parent: QObject = None):
        super().__init__(parent)
        self.session = session
        self.machine = InteractionStateMachine(session)
        self.projector = LayerProjector()

    # --- Read access ---

    @property
    def plan(self) -> RenderPlan:
        return self.projector.plan

    @property
    def marquee_rect(self) -> Optional[Tuple[float, float, float, float]]:
        return self.machine.marquee_rect

    def selected_annotation(self) -> Optional[Annotation]:
        return self.session.store.get(self.session.selected_id)

    def sidebar_entries(self) -> List[SidebarEntry]:
        return sidebar_entries(self.session.store, self.session.selected_id)

    # --- Pointer input ---

    def pointer_down(self, event: PointerEvent) -> None:
        self._run(self.machine.pointer_down, event)

    def pointer_move(self, event: PointerEvent) -> None:
        if self.machine.is_idle:
            return
        editor = self.machine.editor
        self.machine.pointer_move(event)
        self._publish(editor, full=False)

    def pointer_up(self, event: PointerEvent) -> None:
        self._run(self.machine.pointer_up, event)

    def double_click(self, event: PointerEvent) -> None:
        self._run(self.machine.double_click, event)

    def key_press(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        return bool(self._run(self.machine.key_press, key, ctrl, shift))

    # --- Text editor ---

    def update_editor_text(self, text: str) -> None:
        self.machine.update_editor_text(text)

    def confirm_text(self, text: Optional[str] = None) -> None:
        self._run(self.machine.confirm_text, text)

    def editor_focus_lost(self, text: Optional[str] = None) -> None:
        self._run(self.machine.editor_focus_lost, text)

    def cancel_text(self) -> None:
        self._run(self.machine.cancel_text)

    def commit_pending(self) -> None:
        self._run(self.machine.commit_pending)

    # --- Tools and style ---

    def set_tool_mode(self, mode: ToolMode) -> None:
        self._run(self.machine.set_tool_mode, mode)
        self.tool_state_changed.emit()

    def set_graph_mode(self, enabled: bool) -> bool:
        accepted = self.machine.set_graph_mode(enabled)
        self.refresh()
        self.tool_state_changed.emit()
        return accepted

    def set_color(self, color: str) -> None:
        self._run(self.machine.set_color, color)
        self.tool_state_changed.emit()

    def set_size(self, size_px: int) -> None:
        self._run(self.machine.set_size, size_px)
        self.tool_state_changed.emit()

    def set_font(self, font_name: str) -> None:
        self._run(self.machine.set_font, font_name)
        self.tool_state_changed.emit()

    def set_stamp_kind(self, stamp_kind: StampKind) -> None:
        self._run(self.machine.set_stamp_kind, stamp_kind)
        self.tool_state_changed.emit()

    def set_comment(self, annotation_id: str, comment: str) -> None:
        self._run(self.machine.set_comment, annotation_id, comment)

    # --- Commands ---

    def select_annotation(self, annotation_id: Optional[str]) -> None:
        self._run(self.machine.select, annotation_id)

    def delete_annotation(self, annotation_id: str) -> None:
        self._run(self.machine.delete_annotation, annotation_id)

    def undo(self) -> bool:
        return bool(self._run(self.machine.undo))

    def redo(self) -> bool:
        return bool(self._run(self.machine.redo))

    def can_undo(self) -> bool:
        return self.session.store.can_undo()

    def can_redo(self) -> bool:
        return self.session.store.can_redo()

    def place_image(self, data: bytes, at: Optional[Tuple[float, float]] = None) -> Optional[str]:
        if not self.session.document_loaded:
            self.error_occurred.emit("No Document", "Open a PDF before adding images.")
            return None
        return self._run(self.machine.place_image, data, at)

    # --- Publishing ---

    def refresh(self) -> None:
        """Recompute the visible layer and notify every listener."""
        self._publish(self.machine.editor, full=True)

    def _run(self, action, *args):
        editor = self.machine.editor
        result = None
        try:
            result = action(*args)
        except GeometryUnavailable as e:
            log.warning("Geometry unavailable: %s", e)
            self.error_occurred.emit("Page Not Ready", str(e))
        except UnsupportedFileType as e:
            log.warning("Ignored file: %s", e)
        self._publish(editor, full=True)
        return result

    def _publish(self, previous_editor, full: bool) -> None:
        editor = self.machine.editor
        if previous_editor is not None and editor is not previous_editor:
            self.editor_closed.emit()
        if editor is not None and editor is not previous_editor:
            self.editor_opened.emit(editor)

        self.plan_changed.emit(self.projector.refresh(self.session, self.machine.editing_id))
        if not full:
            return

        store = self.session.store
        self.annotations_changed.emit()
        self.selection_changed.emit(store.get(self.session.selected_id))
        self.history_changed.emit(store.can_undo(), store.can_redo())
