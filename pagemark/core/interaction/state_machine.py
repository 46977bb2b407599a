"""
Translation of pointer and keyboard input into annotation store mutations.
"""
import logging
from dataclasses import fields
from typing import Optional, Tuple

from pagemark.core.annotations import (
    PEN_COLORS,
    Annotation,
    AnnotationDraft,
    AnnotationKind,
    StampKind,
)
from pagemark.core.annotations.geometry import to_fraction, to_pixels
from pagemark.core.document.file_types import read_image_size, sniff_file_type
from pagemark.core.errors import GeometryUnavailable, InvalidGeometry, UnsupportedFileType
from pagemark.core.session import AnnotationSession, ToolMode

from .states import (
    IDLE,
    Dragging,
    EditingText,
    Idle,
    MarqueeSelecting,
    PointerEvent,
    Resizing,
)
from .text_editor import TextEditSession

log = logging.getLogger(__name__)

# Tools that place markup on top of highlights and whiteouts instead of grabbing them
_PASS_THROUGH_TOOLS = (ToolMode.POINT, ToolMode.TEXT, ToolMode.STAMP)
_PASS_THROUGH_KINDS = (AnnotationKind.HIGHLIGHT, AnnotationKind.WHITEOUT)

_MARQUEE_KINDS = {
    ToolMode.HIGHLIGHT: AnnotationKind.HIGHLIGHT,
    ToolMode.WHITEOUT: AnnotationKind.WHITEOUT,
}

_GEOMETRY_KEYS = ("x_frac", "y_frac", "w_frac", "h_frac")


def _geometry_of(annotation: Annotation) -> dict:
    """Position and, for boxes, size fields of an annotation."""
    names = {f.name for f in fields(annotation)}
    return {k: getattr(annotation, k) for k in _GEOMETRY_KEYS if k in names}


class InteractionStateMachine:
    """
    Interaction state for one session.

    States are Idle, Dragging, Resizing, MarqueeSelecting and EditingText.
    Live drag and resize frames write to the store without history; the
    history entry is recorded once, when the gesture ends.
    """

    def __init__(self, session: AnnotationSession):
        self.session = session
        self.state = IDLE

    # --- Derived state ---

    @property
    def store(self):
        return self.session.store

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def editor(self) -> Optional[TextEditSession]:
        if isinstance(self.state, EditingText):
            return self.state.editor
        return None

    @property
    def editing_id(self) -> Optional[str]:
        """Existing annotation hidden behind the open editor, if any."""
        editor = self.editor
        return editor.annotation_id if editor else None

    @property
    def marquee_rect(self) -> Optional[Tuple[float, float, float, float]]:
        if isinstance(self.state, MarqueeSelecting):
            return self.state.rect
        return None

    # --- Tool configuration ---

    def set_tool_mode(self, mode: ToolMode) -> None:
        """Switch tools. Clears the selection; graph mode only survives on the point tool."""
        self.commit_pending()
        self.session.tool_mode = mode
        if mode is not ToolMode.POINT and self.session.graph_mode:
            self.session.graph_mode = False
            log.debug("Graph mode disabled by switching to %s", mode.value)
        self.session.select(None)

    def set_graph_mode(self, enabled: bool) -> bool:
        """
        Toggle graph mode.

        Returns:
            False if graph mode was requested outside the point tool
        """
        if enabled and self.session.tool_mode is not ToolMode.POINT:
            log.debug("Graph mode is only available with the point tool")
            return False
        self.session.graph_mode = enabled
        return True

    # --- Pointer input ---

    def pointer_down(self, event: PointerEvent) -> None:
        if not self.session.document_loaded:
            return

        # The pending editor or gesture is resolved before the new press is handled.
        self.commit_pending()

        session = self.session
        target = self._target_of(event)

        if target is not None and not self._passes_through(target):
            if session.graph_mode and target.kind is AnnotationKind.POINT:
                self._toggle_graph_member(target.id)
            elif event.handle is not None and target.is_box:
                self._start_resize(target, event)
            else:
                self._start_drag(target, event)
            return

        session.select(None)
        if session.graph_mode:
            return

        mode = session.tool_mode
        if mode in _MARQUEE_KINDS:
            self.state = MarqueeSelecting(_MARQUEE_KINDS[mode], (event.x, event.y), (event.x, event.y))
        elif mode is ToolMode.POINT:
            self._commit(AnnotationDraft(
                AnnotationKind.POINT, session.page_number, event.x, event.y,
                fields={"color": session.settings.color, "size_px": session.settings.size_px},
            ))
        elif mode is ToolMode.STAMP:
            self._commit(AnnotationDraft(
                AnnotationKind.STAMP, session.page_number, event.x, event.y,
                fields={"stamp_kind": session.settings.stamp_kind, "comment": ""},
            ))
        elif mode is ToolMode.TEXT:
            self._open_editor(TextEditSession(
                x=event.x,
                y=event.y,
                page_number=session.page_number,
                color=session.settings.color,
                size_px=session.settings.size_px,
                font_name=session.settings.font_name,
            ))

    def pointer_move(self, event: PointerEvent) -> bool:
        """
        Track the pointer during a gesture.

        Returns:
            True if anything visible changed
        """
        state = self.state
        if isinstance(state, MarqueeSelecting):
            state.current = (event.x, event.y)
            return True
        if isinstance(state, Dragging):
            return self._drag_to(state, event)
        if isinstance(state, Resizing):
            return self._resize_to(state, event)
        return False

    def pointer_up(self, event: PointerEvent) -> None:
        state = self.state
        if isinstance(state, (Dragging, Resizing)):
            self.pointer_move(event)
            self._end_gesture()
        elif isinstance(state, MarqueeSelecting):
            state.current = (event.x, event.y)
            self.state = IDLE
            self._commit_marquee(state)

    def double_click(self, event: PointerEvent) -> bool:
        """
        Open the editor on a text annotation.

        Returns:
            True if an editor was opened
        """
        target = self._target_of(event)
        if target is None or target.kind is not AnnotationKind.TEXT:
            return False

        # The first press of a double click may have started a drag.
        self.commit_pending()

        vw, vh = self.session.viewport.width, self.session.viewport.height
        x, y = to_pixels(target.x_frac, target.y_frac, vw, vh)
        self._open_editor(TextEditSession(
            x=x,
            y=y,
            page_number=target.page_number,
            annotation_id=target.id,
            text=target.text,
            color=target.color,
            size_px=target.size_px,
            font_name=target.font_name,
        ))
        return True

    # --- Text editing ---

    def update_editor_text(self, text: str) -> None:
        editor = self.editor
        if editor is not None:
            editor.text = text

    def confirm_text(self, text: Optional[str] = None) -> Optional[str]:
        """
        Close the editor and commit its text.

        Args:
            text: Final editor contents; defaults to the last text reported

        Returns:
            Id of the created or updated annotation, or None if nothing
            was committed
        """
        editor = self.editor
        if editor is None or not editor.close():
            return None
        self.state = IDLE

        if text is not None:
            editor.text = text
        return self._commit_text(editor)

    def editor_focus_lost(self, text: Optional[str] = None) -> Optional[str]:
        """Focus loss commits like an explicit accept."""
        return self.confirm_text(text)

    def cancel_text(self) -> bool:
        """Close the editor without committing."""
        editor = self.editor
        if editor is None or not editor.close():
            return False
        self.state = IDLE
        log.debug("Text editing cancelled")
        return True

    def commit_pending(self) -> None:
        """
        Resolve whatever is in progress: commit an open editor, finish a
        drag or resize, drop an unfinished marquee.
        """
        state = self.state
        if isinstance(state, EditingText):
            self.confirm_text()
        elif isinstance(state, (Dragging, Resizing)):
            self._end_gesture()
        elif isinstance(state, MarqueeSelecting):
            self.state = IDLE

    # --- Keyboard ---

    def key_press(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """
        Handle a key press.

        Args:
            key: Key name, e.g. "Delete", "Backspace", "Escape", "z", "y"
            ctrl: Ctrl (or Cmd) held
            shift: Shift held

        Returns:
            True if the key was consumed
        """
        if key == "Escape":
            if isinstance(self.state, EditingText):
                return self.cancel_text()
            if not self.is_idle:
                self._abandon_gesture()
                return True
            return False

        if isinstance(self.state, EditingText):
            # Keystrokes belong to the open editor.
            return False

        name = key.lower()
        if ctrl and name == "z":
            return self.redo() if shift else self.undo()
        if ctrl and name == "y":
            return self.redo()
        if key in ("Delete", "Backspace"):
            return self.delete_selected()
        return False

    def delete_selected(self) -> bool:
        selected = self.session.selected_id
        if selected is None or not self.is_idle:
            return False
        return self.delete_annotation(selected)

    def delete_annotation(self, annotation_id: str) -> bool:
        """Remove an annotation, e.g. from the sidebar's delete button."""
        self.commit_pending()
        removed = self.store.remove(annotation_id)
        if self.session.selected_id == annotation_id:
            self.session.select(None)
        return removed

    def select(self, annotation_id: Optional[str]) -> None:
        """Select an annotation directly, e.g. from the sidebar."""
        self.commit_pending()
        self.session.select(annotation_id)

    def undo(self) -> bool:
        if not self.is_idle:
            return False
        if self.store.undo():
            self.session.select(None)
            return True
        return False

    def redo(self) -> bool:
        if not self.is_idle:
            return False
        if self.store.redo():
            self.session.select(None)
            return True
        return False

    # --- Style ---

    def set_color(self, color: str) -> bool:
        """
        Set the pen color for new markup, the open editor and a selected
        point or text annotation.

        Returns:
            True if an annotation was changed
        """
        if color not in PEN_COLORS:
            raise ValueError(f"Unknown color {color!r}; expected one of {', '.join(PEN_COLORS)}")
        self.session.settings.color = color
        if self.editor is not None:
            self.editor.color = color
        return self._restyle_selection({"color": color}, (AnnotationKind.POINT, AnnotationKind.TEXT))

    def set_size(self, size_px: int) -> bool:
        if size_px <= 0:
            return False
        self.session.settings.size_px = size_px
        if self.editor is not None:
            self.editor.size_px = size_px
        return self._restyle_selection({"size_px": size_px}, (AnnotationKind.POINT, AnnotationKind.TEXT))

    def set_font(self, font_name: str) -> bool:
        self.session.settings.font_name = font_name
        if self.editor is not None:
            self.editor.font_name = font_name
        return self._restyle_selection({"font_name": font_name}, (AnnotationKind.TEXT,))

    def set_stamp_kind(self, stamp_kind: StampKind) -> bool:
        self.session.settings.stamp_kind = stamp_kind
        return self._restyle_selection({"stamp_kind": stamp_kind}, (AnnotationKind.STAMP,))

    def set_comment(self, annotation_id: str, comment: str) -> bool:
        """Set the comment of a highlight, whiteout or stamp."""
        annotation = self.store.get(annotation_id)
        if annotation is None or annotation.kind not in (
            AnnotationKind.HIGHLIGHT, AnnotationKind.WHITEOUT, AnnotationKind.STAMP
        ):
            return False
        if annotation.comment == comment:
            return False
        return self.store.update(annotation_id, {"comment": comment})

    # --- Images ---

    def place_image(self, data: bytes, at: Optional[Tuple[float, float]] = None) -> Optional[str]:
        """
        Add a PNG or JPEG image to the current page.

        The image keeps its aspect ratio, is scaled down to fit the
        configured maximum dimension and is centred on `at` or, by default,
        on the viewport.

        Returns:
            Id of the new image annotation, or None if nothing was added

        Raises:
            UnsupportedFileType: The data is not a decodable PNG/JPEG
            GeometryUnavailable: The page has no displayed size yet
        """
        session = self.session
        if not session.document_loaded:
            log.warning("Ignoring image: no document is open")
            return None

        file_type = sniff_file_type(data)
        if not file_type.is_image:
            raise UnsupportedFileType("Expected a PNG or JPEG image")
        width, height = read_image_size(data)

        self.commit_pending()

        max_px = session.config.image_max_px
        scale = min(max_px / width, max_px / height, 1)
        w, h = width * scale, height * scale
        cx, cy = at if at is not None else session.viewport.center

        annotation_id = self._commit(AnnotationDraft(
            AnnotationKind.IMAGE, session.page_number, cx - w / 2, cy - h / 2, w, h,
            fields={"image_bytes": data, "mime_type": file_type.mime_type},
        ))
        if annotation_id is not None:
            session.select(annotation_id)
        return annotation_id

    # --- Internals ---

    def _target_of(self, event: PointerEvent) -> Optional[Annotation]:
        target = self.store.get(event.target_id)
        if target is None or target.page_number != self.session.page_number:
            return None
        return target

    def _passes_through(self, target: Annotation) -> bool:
        return self.session.tool_mode in _PASS_THROUGH_TOOLS and target.kind in _PASS_THROUGH_KINDS

    def _toggle_graph_member(self, annotation_id: str) -> None:
        selection = self.session.graph_selection
        if annotation_id in selection:
            selection.discard(annotation_id)
        else:
            selection.add(annotation_id)

    def _commit(self, draft: AnnotationDraft) -> Optional[str]:
        try:
            return self.store.add(draft, self.session.viewport)
        except InvalidGeometry as e:
            log.warning("Rejected new %s annotation: %s", draft.kind.value, e)
            return None

    def _commit_marquee(self, marquee: MarqueeSelecting) -> Optional[str]:
        x, y, width, height = marquee.rect
        threshold = self.session.config.marquee_threshold_px
        if width <= threshold or height <= threshold:
            return None
        return self._commit(AnnotationDraft(
            marquee.kind, self.session.page_number, x, y, width, height,
            fields={"comment": ""},
        ))

    def _open_editor(self, editor: TextEditSession) -> None:
        self.state = EditingText(editor)
        log.debug("Editing %s", editor.annotation_id or "new text")

    def _commit_text(self, editor: TextEditSession) -> Optional[str]:
        text = editor.text.strip()
        if not text:
            return None

        if editor.is_new:
            return self._commit(AnnotationDraft(
                AnnotationKind.TEXT, editor.page_number, editor.x, editor.y,
                fields={
                    "text": text,
                    "color": editor.color,
                    "size_px": editor.size_px,
                    "font_name": editor.font_name,
                },
            ))

        annotation = self.store.get(editor.annotation_id)
        if annotation is None:
            return None
        patch = {
            "text": text,
            "color": editor.color,
            "size_px": editor.size_px,
            "font_name": editor.font_name,
        }
        patch = {k: v for k, v in patch.items() if getattr(annotation, k) != v}
        if patch:
            self.store.update(annotation.id, patch)
        return annotation.id

    def _restyle_selection(self, patch, kinds) -> bool:
        annotation = self.store.get(self.session.selected_id)
        if annotation is None or annotation.kind not in kinds:
            return False
        if annotation.id == self.editing_id:
            # The editor carries the pending style and applies it on commit.
            return False
        if all(getattr(annotation, k) == v for k, v in patch.items()):
            return False
        return self.store.update(annotation.id, patch)

    def _start_drag(self, target: Annotation, event: PointerEvent) -> None:
        vw, vh = self.session.viewport.width, self.session.viewport.height
        x, y = to_pixels(target.x_frac, target.y_frac, vw, vh)
        self.state = Dragging(target.id, (event.x - x, event.y - y), self.store.snapshot())
        self.session.select(target.id)

    def _start_resize(self, target: Annotation, event: PointerEvent) -> None:
        self.state = Resizing(
            target.id,
            event.handle,
            (event.x, event.y),
            (target.x_frac, target.y_frac, target.w_frac, target.h_frac),
            self.store.snapshot(),
        )
        self.session.select(target.id)

    def _drag_to(self, state: Dragging, event: PointerEvent) -> bool:
        vw, vh = self.session.viewport.width, self.session.viewport.height
        try:
            x_frac, y_frac = to_fraction(event.x - state.offset[0], event.y - state.offset[1], vw, vh)
        except GeometryUnavailable:
            log.debug("Drag frame skipped: viewport unavailable")
            return False
        return self._apply_live(state.annotation_id, {"x_frac": x_frac, "y_frac": y_frac})

    def _resize_to(self, state: Resizing, event: PointerEvent) -> bool:
        vw, vh = self.session.viewport.width, self.session.viewport.height
        try:
            left, top = to_pixels(state.origin_rect[0], state.origin_rect[1], vw, vh)
        except GeometryUnavailable:
            log.debug("Resize frame skipped: viewport unavailable")
            return False
        right = left + state.origin_rect[2] * vw
        bottom = top + state.origin_rect[3] * vh

        dx = event.x - state.anchor[0]
        dy = event.y - state.anchor[1]
        minimum = self.session.config.min_box_px
        handle = state.handle

        if handle.adjusts_left:
            left = min(left + dx, right - minimum)
        if handle.adjusts_right:
            right = max(right + dx, left + minimum)
        if handle.adjusts_top:
            top = min(top + dy, bottom - minimum)
        if handle.adjusts_bottom:
            bottom = max(bottom + dy, top + minimum)

        x_frac, y_frac = to_fraction(left, top, vw, vh)
        return self._apply_live(state.annotation_id, {
            "x_frac": x_frac,
            "y_frac": y_frac,
            "w_frac": (right - left) / vw,
            "h_frac": (bottom - top) / vh,
        })

    def _apply_live(self, annotation_id: str, patch) -> bool:
        try:
            return self.store.update(annotation_id, patch, checkpoint=False)
        except InvalidGeometry as e:
            log.warning("Rejected live update of %s: %s", annotation_id, e)
            return False

    def _end_gesture(self) -> None:
        state = self.state
        self.state = IDLE

        before = state.origin.get(state.annotation_id)
        after = self.store.get(state.annotation_id)
        if before is None or after is None or before == after:
            return

        final = _geometry_of(after)
        self.store.checkpoint(state.origin)
        self.store.update(state.annotation_id, final, checkpoint=False)
        log.debug("Committed %s of %s", type(state).__name__.lower(), state.annotation_id)

    def _abandon_gesture(self) -> None:
        state = self.state
        self.state = IDLE
        if isinstance(state, (Dragging, Resizing)):
            before = state.origin.get(state.annotation_id)
            if before is not None and state.annotation_id in self.store:
                restore = _geometry_of(before)
                self.store.update(state.annotation_id, restore, checkpoint=False)
