"""
Page widget: the rendered page with the annotation layer on top.
"""
import logging
from typing import Dict, Optional, Tuple

from PyQt5.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt5.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetrics,
    QImage,
    QPainter,
    QPen,
    QPixmap,
)
from PyQt5.QtWidgets import QLineEdit, QWidget

from pagemark.core.annotations import AnnotationKind, TextAnnotation
from pagemark.core.annotations.geometry import to_pixels
from pagemark.core.annotations.palette import HIGHLIGHT_OPACITY, STAMP_RGB, color_rgb
from pagemark.core.interaction import PointerEvent, TextEditSession
from pagemark.core.projection import EMPTY_PLAN, RenderItem, RenderPlan, handle_rects, hit_test, item_bounds

log = logging.getLogger(__name__)

SELECTION_COLOR = QColor(37, 99, 235)
GRAPH_RING_COLOR = QColor(234, 88, 12)


def _qcolor(name: str, alpha: int = 255) -> QColor:
    r, g, b = color_rgb(name)
    return QColor(r, g, b, alpha)


def annotation_font(family: str, size_px: int) -> QFont:
    font = QFont(family)
    font.setPixelSize(max(int(size_px), 1))
    return font


def measure_text(ann: TextAnnotation) -> Tuple[float, float]:
    """Pixel extent of a text annotation with its own font."""
    metrics = QFontMetrics(annotation_font(ann.font_name, ann.size_px))
    rect = metrics.boundingRect(ann.text or " ")
    return rect.width() + 8, metrics.height() + 4


class InlineTextEditor(QLineEdit):
    """Line edit that reports Escape and focus loss."""

    cancelled = pyqtSignal()
    focus_lost = pyqtSignal()

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.cancelled.emit()
            event.accept()
            return
        super().keyPressEvent(event)

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.focus_lost.emit()


class PageCanvas(QWidget):
    """
    Displays one page and its annotations, and turns mouse input into
    pointer events for the annotation controller.
    """

    # Signals
    files_dropped = pyqtSignal(list, object)  # paths, (x, y) drop point

    def __init__(self, controller, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.key_handler = None  # callable(QKeyEvent), set by the window
        self.pixmap: Optional[QPixmap] = None
        self.plan: RenderPlan = EMPTY_PLAN
        self._images: Dict[str, QImage] = {}
        self._editor_session: Optional[TextEditSession] = None

        self.editor = InlineTextEditor(self)
        self.editor.setFrame(False)
        self.editor.hide()
        self.editor.returnPressed.connect(self._on_editor_confirmed)
        self.editor.cancelled.connect(self._on_editor_cancelled)
        self.editor.focus_lost.connect(self._on_editor_focus_lost)
        self.editor.textChanged.connect(self._on_editor_text_changed)

        self.setAcceptDrops(True)
        self.setFocusPolicy(Qt.ClickFocus)
        self.setMinimumSize(200, 200)

        controller.plan_changed.connect(self.set_plan)
        controller.editor_opened.connect(self.open_editor)
        controller.editor_closed.connect(self.close_editor)

    # --- Content ---

    def set_page_image(self, image: QImage):
        """Show a freshly rendered page."""
        self.pixmap = QPixmap.fromImage(image)
        self.setFixedSize(self.pixmap.size())
        self.update()

    def clear_page(self):
        self.pixmap = None
        self.plan = EMPTY_PLAN
        self._images.clear()
        self.update()

    def set_plan(self, plan: RenderPlan):
        self.plan = plan
        live = {item.annotation_id for item in plan.items}
        for stale in set(self._images) - live:
            del self._images[stale]
        self.update()

    # --- Inline editor ---

    def open_editor(self, session: TextEditSession):
        self._editor_session = session
        self.editor.blockSignals(True)
        self.editor.setText(session.text)
        self.editor.blockSignals(False)
        self.editor.setFont(annotation_font(session.font_name, session.size_px))
        self.editor.setStyleSheet(
            "QLineEdit { background: rgba(255, 255, 255, 230); "
            "border: 1px dashed #2563eb; color: %s; }" % _qcolor(session.color).name()
        )
        self.editor.move(int(session.x), int(session.y))
        self.editor.resize(max(160, self.editor.sizeHint().width()), self.editor.sizeHint().height())
        self.editor.show()
        self.editor.setFocus()

    def close_editor(self):
        self._editor_session = None
        self.editor.hide()

    def is_editing(self) -> bool:
        return self._editor_session is not None

    def _current_editor(self) -> Optional[TextEditSession]:
        session = self._editor_session
        if session is None or session.closed:
            return None
        return session

    def _on_editor_confirmed(self):
        if self._current_editor() is not None:
            self.controller.confirm_text(self.editor.text())

    def _on_editor_cancelled(self):
        if self._current_editor() is not None:
            self.controller.cancel_text()

    def _on_editor_focus_lost(self):
        # Hiding the editor after a commit also takes its focus away.
        if self._current_editor() is not None:
            self.controller.editor_focus_lost(self.editor.text())

    def _on_editor_text_changed(self, text: str):
        if self._current_editor() is not None:
            self.controller.update_editor_text(text)

    # --- Mouse ---

    def _pointer_event(self, pos, with_target: bool = True) -> PointerEvent:
        x, y = pos.x(), pos.y()
        if not with_target:
            return PointerEvent(x, y)
        target_id, handle = hit_test(self.plan, x, y, self.controller.session.viewport, measure_text)
        return PointerEvent(x, y, target_id, handle)

    def mousePressEvent(self, event):
        if event.button() != Qt.LeftButton:
            super().mousePressEvent(event)
            return
        self.setFocus()
        self.controller.pointer_down(self._pointer_event(event.pos()))

    def mouseMoveEvent(self, event):
        if event.buttons() & Qt.LeftButton:
            self.controller.pointer_move(self._pointer_event(event.pos(), with_target=False))

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.controller.pointer_up(self._pointer_event(event.pos(), with_target=False))

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.controller.double_click(self._pointer_event(event.pos()))

    def keyPressEvent(self, event):
        # The scroll area would otherwise take the navigation keys.
        if self.key_handler is not None:
            self.key_handler(event)
            if event.isAccepted():
                return
        super().keyPressEvent(event)

    # --- Drag and drop ---

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event):
        paths = [url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()]
        if not paths:
            event.ignore()
            return
        pos = event.pos()
        self.files_dropped.emit(paths, (pos.x(), pos.y()))
        event.acceptProposedAction()

    # --- Painting ---

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            painter.fillRect(self.rect(), QColor(229, 231, 235))
            if self.pixmap is None:
                return
            painter.drawPixmap(0, 0, self.pixmap)

            self._paint_polylines(painter)
            for item in self.plan.items:
                self._paint_item(painter, item)
            self._paint_marquee(painter)
        except Exception:
            log.exception("Failed to paint page")
        finally:
            painter.end()

    def _paint_polylines(self, painter: QPainter):
        viewport = self.controller.session.viewport
        for polyline in self.plan.polylines:
            painter.setPen(QPen(_qcolor(polyline.color), 2))
            points = [QPointF(*to_pixels(x, y, viewport.width, viewport.height))
                      for x, y in polyline.points]
            for start, end in zip(points, points[1:]):
                painter.drawLine(start, end)

    def _paint_item(self, painter: QPainter, item: RenderItem):
        ann = item.annotation
        viewport = self.controller.session.viewport
        x, y, w, h = item_bounds(ann, viewport, measure_text)
        rect = QRectF(x, y, w, h)
        kind = ann.kind

        if kind is AnnotationKind.POINT:
            painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(_qcolor(ann.color)))
            painter.drawEllipse(rect)
            if item.graph_marked:
                painter.setBrush(Qt.NoBrush)
                painter.setPen(QPen(GRAPH_RING_COLOR, 2))
                painter.drawEllipse(rect.adjusted(-3, -3, 3, 3))

        elif kind is AnnotationKind.TEXT:
            painter.setFont(annotation_font(ann.font_name, ann.size_px))
            painter.setPen(_qcolor(ann.color))
            painter.drawText(rect.adjusted(4, 2, 0, 0), Qt.AlignLeft | Qt.AlignTop, ann.text)

        elif kind is AnnotationKind.HIGHLIGHT:
            painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(_qcolor(ann.color, int(255 * HIGHLIGHT_OPACITY))))
            painter.drawRect(rect)

        elif kind is AnnotationKind.WHITEOUT:
            painter.setPen(Qt.NoPen)
            painter.setBrush(QBrush(_qcolor(ann.color)))
            painter.drawRect(rect)

        elif kind is AnnotationKind.STAMP:
            color = QColor(*STAMP_RGB.get(ann.stamp_kind.value, (220, 38, 38)))
            painter.setBrush(QBrush(QColor(255, 255, 255, 200)))
            painter.setPen(QPen(color, 2))
            painter.drawRoundedRect(rect, 4, 4)
            font = QFont()
            font.setPixelSize(13)
            font.setBold(True)
            painter.setFont(font)
            painter.drawText(rect, Qt.AlignCenter, ann.stamp_kind.label)

        elif kind is AnnotationKind.IMAGE:
            image = self._image_for(ann)
            if image is not None:
                painter.drawImage(rect, image)

        if item.selected:
            painter.setBrush(Qt.NoBrush)
            painter.setPen(QPen(SELECTION_COLOR, 1, Qt.DashLine))
            painter.drawRect(rect.adjusted(-2, -2, 2, 2))

        if item.show_resize_handles:
            painter.setPen(QPen(SELECTION_COLOR, 1))
            painter.setBrush(QBrush(Qt.white))
            for hx, hy, hw, hh in handle_rects((x, y, w, h)).values():
                painter.drawRect(QRectF(hx, hy, hw, hh))

    def _image_for(self, ann) -> Optional[QImage]:
        image = self._images.get(ann.id)
        if image is None:
            image = QImage.fromData(ann.image_bytes)
            if image.isNull():
                log.warning("Could not decode image %s", ann.id)
                return None
            self._images[ann.id] = image
        return image

    def _paint_marquee(self, painter: QPainter):
        marquee = self.controller.marquee_rect
        if marquee is None:
            return
        x, y, w, h = marquee
        painter.setPen(QPen(SELECTION_COLOR, 1, Qt.DashLine))
        painter.setBrush(QBrush(QColor(37, 99, 235, 40)))
        painter.drawRect(QRectF(x, y, w, h))
