import logging
import os
from pathlib import Path

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QIntValidator
from PyQt5.QtWidgets import (
    QFileDialog, QFrame, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QListWidgetItem, QMainWindow, QMessageBox, QProgressDialog, QScrollArea,
    QSizePolicy, QSpacerItem, QToolButton, QVBoxLayout, QWidget,
)

from pagemark.controllers import AnnotationController, DocumentController, UserInputHandler
from pagemark.core.annotations import AnnotationKind
from pagemark.core.session import AnnotationSession
from pagemark.ui.toolbars import ToolToolbar
from pagemark.ui.widgets import PageCanvas
from pagemark.utils import AppConfig

log = logging.getLogger(__name__)

COMMENT_KINDS = (AnnotationKind.HIGHLIGHT, AnnotationKind.WHITEOUT, AnnotationKind.STAMP)


class MainWindow(QMainWindow):
    def __init__(self, config: AppConfig = None, file_path=None):
        super().__init__()
        self.setWindowTitle("Pagemark")

        self.config = config or AppConfig()
        self.session = AnnotationSession(self.config)
        self.annotation_controller = AnnotationController(self.session, self)
        self.document_controller = DocumentController(self.annotation_controller, parent=self)
        self.input_handler = UserInputHandler(self)
        self.export_progress_dialog = None

        self.setup_ui()
        self._connect_signals()
        self.tool_toolbar.sync(self.session)
        self._update_history_buttons(False, False)

        if file_path:
            self.document_controller.open_file(file_path)

    def _create_button(self, text, tooltip, parent):
        btn = QToolButton(parent)
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.setMinimumHeight(30)
        return btn

    def _separator(self):
        separator = QFrame()
        separator.setFrameShape(QFrame.VLine)
        separator.setFrameShadow(QFrame.Sunken)
        return separator

    def setup_ui(self):
        # TOP TOOLBAR
        self.top_frame = QFrame()
        self.top_frame.setObjectName("TopFrame")
        self.top_layout = QHBoxLayout(self.top_frame)
        self.top_layout.setContentsMargins(10, 8, 10, 8)
        self.top_layout.setSpacing(8)

        self.open_button = self._create_button("Open", "Open PDF or image (Ctrl+O)", self.top_frame)
        self.top_layout.addWidget(self.open_button)

        self.file_name_label = QLabel("No PDF Loaded", self.top_frame)
        self.file_name_label.setStyleSheet("font-weight: bold;")
        self.top_layout.addWidget(self.file_name_label)

        self.top_layout.addSpacerItem(QSpacerItem(40, 20, QSizePolicy.Expanding, QSizePolicy.Minimum))

        # Page controls
        self.prev_button = self._create_button("◀", "Previous page", self.top_frame)
        self.top_layout.addWidget(self.prev_button)

        self.page_edit = QLineEdit("1", self.top_frame)
        self.page_edit.setFixedWidth(50)
        self.page_edit.setAlignment(Qt.AlignCenter)
        self.top_layout.addWidget(self.page_edit)

        self.total_page_label = QLabel("/ 0", self.top_frame)
        self.top_layout.addWidget(self.total_page_label)

        self.next_button = self._create_button("▶", "Next page", self.top_frame)
        self.top_layout.addWidget(self.next_button)

        self.top_layout.addWidget(self._separator())

        self.undo_button = self._create_button("Undo", "Undo (Ctrl+Z)", self.top_frame)
        self.top_layout.addWidget(self.undo_button)
        self.redo_button = self._create_button("Redo", "Redo (Ctrl+Shift+Z)", self.top_frame)
        self.top_layout.addWidget(self.redo_button)

        self.top_layout.addWidget(self._separator())

        self.export_csv_button = self._create_button("Export CSV", "Export annotations as CSV", self.top_frame)
        self.top_layout.addWidget(self.export_csv_button)
        self.export_pdf_button = self._create_button("Export PDF", "Save an annotated copy of the PDF", self.top_frame)
        self.top_layout.addWidget(self.export_pdf_button)

        # TOOLS
        self.tool_toolbar = ToolToolbar(self)

        # SIDEBAR
        self.sidebar = QFrame()
        self.sidebar.setFixedWidth(260)
        sidebar_layout = QVBoxLayout(self.sidebar)
        sidebar_layout.setContentsMargins(8, 8, 8, 8)

        sidebar_title = QLabel("Annotations", self.sidebar)
        sidebar_title.setStyleSheet("font-weight: bold;")
        sidebar_layout.addWidget(sidebar_title)

        self.annotation_list = QListWidget(self.sidebar)
        sidebar_layout.addWidget(self.annotation_list)

        self.comment_edit = QLineEdit(self.sidebar)
        self.comment_edit.setPlaceholderText("Comment")
        self.comment_edit.setEnabled(False)
        sidebar_layout.addWidget(self.comment_edit)

        self.delete_button = self._create_button("Delete", "Delete the selected annotation (Del)", self.sidebar)
        self.delete_button.setEnabled(False)
        sidebar_layout.addWidget(self.delete_button)

        # PAGE DISPLAY AREA
        self.canvas = PageCanvas(self.annotation_controller)
        self.canvas.key_handler = self.input_handler.handle_key_press
        self.scroll_area = QScrollArea()
        self.scroll_area.setAlignment(Qt.AlignHCenter)
        self.scroll_area.setWidget(self.canvas)

        content_layout = QHBoxLayout()
        content_layout.setSpacing(0)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.addWidget(self.sidebar)
        content_layout.addWidget(self.scroll_area)

        content_widget = QWidget()
        content_widget.setLayout(content_layout)

        main_layout = QVBoxLayout()
        main_layout.setSpacing(0)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(self.top_frame)
        main_layout.addWidget(self.tool_toolbar)
        main_layout.addWidget(content_widget)

        container = QWidget()
        container.setLayout(main_layout)
        self.setCentralWidget(container)

    def _connect_signals(self):
        annotations = self.annotation_controller
        documents = self.document_controller
        toolbar = self.tool_toolbar

        self.open_button.clicked.connect(self.open_file_dialog)
        self.prev_button.clicked.connect(lambda: documents.change_page(-1))
        self.next_button.clicked.connect(lambda: documents.change_page(1))
        self.page_edit.returnPressed.connect(self.page_number_changed)
        self.undo_button.clicked.connect(annotations.undo)
        self.redo_button.clicked.connect(annotations.redo)
        self.export_csv_button.clicked.connect(self.export_csv)
        self.export_pdf_button.clicked.connect(self.export_pdf)

        toolbar.tool_mode_changed.connect(annotations.set_tool_mode)
        toolbar.color_changed.connect(annotations.set_color)
        toolbar.size_changed.connect(annotations.set_size)
        toolbar.font_changed.connect(annotations.set_font)
        toolbar.stamp_changed.connect(annotations.set_stamp_kind)
        toolbar.graph_mode_toggled.connect(annotations.set_graph_mode)
        toolbar.image_requested.connect(self.choose_image)

        self.annotation_list.itemClicked.connect(self._on_sidebar_item_clicked)
        self.comment_edit.editingFinished.connect(self._on_comment_edited)
        self.delete_button.clicked.connect(self._on_delete_clicked)
        self.canvas.files_dropped.connect(self._on_files_dropped)

        annotations.annotations_changed.connect(self.refresh_sidebar)
        annotations.selection_changed.connect(self._on_selection_changed)
        annotations.history_changed.connect(self._update_history_buttons)
        annotations.tool_state_changed.connect(lambda: toolbar.sync(self.session))
        annotations.error_occurred.connect(lambda title, message: QMessageBox.warning(self, title, message))

        documents.document_loaded.connect(self._on_document_loaded)
        documents.document_failed.connect(self._on_document_failed)
        documents.page_rendered.connect(self._on_page_rendered)
        documents.export_finished.connect(self._on_pdf_export_finished)

    # --- Files ---

    def open_file_dialog(self):
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open", "", "PDF and images (*.pdf *.png *.jpg *.jpeg);;All files (*)"
        )
        if file_path:
            self._open(file_path)

    def choose_image(self):
        if not self.session.document_loaded:
            QMessageBox.information(self, "No Document", "Open a PDF before adding images.")
            return
        file_path, _ = QFileDialog.getOpenFileName(self, "Choose Image", "", "Images (*.png *.jpg *.jpeg)")
        if file_path:
            self.document_controller.open_file(file_path)

    def _open(self, file_path, drop_point=None):
        if self.document_controller.open_file(file_path, drop_point):
            if Path(file_path).suffix.lower() == ".pdf":
                self.file_name_label.setText(os.path.basename(file_path))

    def _on_files_dropped(self, paths, drop_point):
        for path in paths:
            self._open(path, drop_point)

    def _on_document_loaded(self, page_count):
        self.total_page_label.setText(f"/ {page_count}")
        self.page_edit.setValidator(QIntValidator(1, page_count, self))
        self.page_edit.setText("1")
        self.document_controller.set_container_width(self.scroll_area.viewport().width())

    def _on_document_failed(self, message):
        if not self.session.document_loaded:
            self.canvas.clear_page()
            self.file_name_label.setText("No PDF Loaded")
            self.total_page_label.setText("/ 0")
        QMessageBox.critical(self, "Error", message)

    def _on_page_rendered(self, page_number, image):
        self.canvas.set_page_image(image)
        self.page_edit.setText(str(page_number))

    def page_number_changed(self):
        try:
            page_number = int(self.page_edit.text())
        except ValueError:
            return
        self.document_controller.go_to_page(page_number)

    # --- Sidebar ---

    def refresh_sidebar(self):
        self.annotation_list.blockSignals(True)
        self.annotation_list.clear()
        for entry in self.annotation_controller.sidebar_entries():
            text = f"{entry.icon}  {entry.title}\n    p.{entry.page_number}"
            if entry.details:
                text += f"  {entry.details}"
            item = QListWidgetItem(text)
            item.setData(Qt.UserRole, entry.annotation_id)
            self.annotation_list.addItem(item)
            if entry.selected:
                item.setSelected(True)
        self.annotation_list.blockSignals(False)

    def _on_sidebar_item_clicked(self, item):
        annotation_id = item.data(Qt.UserRole)
        annotation = self.session.store.get(annotation_id)
        if annotation is None:
            return
        self.annotation_controller.select_annotation(annotation_id)
        if annotation.page_number != self.session.page_number:
            self.document_controller.go_to_page(annotation.page_number)

    def _on_selection_changed(self, annotation):
        self.delete_button.setEnabled(annotation is not None)
        has_comment = annotation is not None and annotation.kind in COMMENT_KINDS
        self.comment_edit.setEnabled(has_comment)
        if not self.comment_edit.hasFocus():
            self.comment_edit.setText(annotation.comment if has_comment else "")

    def _on_comment_edited(self):
        annotation = self.annotation_controller.selected_annotation()
        if annotation is None or annotation.kind not in COMMENT_KINDS:
            return
        if annotation.comment != self.comment_edit.text():
            self.annotation_controller.set_comment(annotation.id, self.comment_edit.text())

    def _on_delete_clicked(self):
        selected = self.session.selected_id
        if selected is not None:
            self.annotation_controller.delete_annotation(selected)

    def _update_history_buttons(self, can_undo, can_redo):
        self.undo_button.setEnabled(can_undo)
        self.redo_button.setEnabled(can_redo)

    def is_editing_text(self) -> bool:
        return self.canvas.is_editing()

    # --- Export ---

    def export_csv(self):
        if len(self.session.store) == 0:
            QMessageBox.information(self, "No Annotations", "There are no annotations to export.")
            return
        start_dir = self.config.export_dir or str(Path.home())
        directory = QFileDialog.getExistingDirectory(self, "Export CSV To", start_dir)
        if not directory:
            return
        try:
            path = self.document_controller.export_csv(directory)
        except OSError as e:
            log.error("CSV export failed: %s", e)
            QMessageBox.critical(self, "Export Failed", f"Could not write CSV: {e}")
            return
        QMessageBox.information(self, "Exported", f"Annotations saved to {path}")

    def export_pdf(self):
        if not self.session.document_loaded:
            QMessageBox.warning(self, "No PDF", "No PDF document is currently loaded.")
            return

        output_path, _ = QFileDialog.getSaveFileName(
            self, "Save Annotated PDF", "annotated.pdf", "PDF Files (*.pdf)"
        )
        if not output_path:
            return

        progress = QProgressDialog("Preparing to export annotations...", None, 0, 100, self)
        progress.setWindowTitle("Saving PDF")
        progress.setWindowModality(Qt.WindowModal)
        progress.setMinimumDuration(0)
        progress.setCancelButton(None)
        progress.setAutoClose(False)
        progress.setAutoReset(False)

        def on_page_progress(current, total):
            if total > 0:
                progress.setValue(int(current / total * 100))

        self.document_controller.export_progress.connect(progress.setLabelText)
        self.document_controller.export_page_progress.connect(on_page_progress)
        self.export_progress_dialog = progress
        if self.document_controller.export_pdf(output_path):
            progress.show()
        else:
            self._close_progress_dialog()

    def _on_pdf_export_finished(self, success, message):
        self._close_progress_dialog()
        if success:
            QMessageBox.information(self, "Success", message)
        else:
            QMessageBox.critical(self, "Save Failed", message)

    def _close_progress_dialog(self):
        progress = self.export_progress_dialog
        if progress is None:
            return
        self.document_controller.export_progress.disconnect()
        self.document_controller.export_page_progress.disconnect()
        progress.close()
        progress.deleteLater()
        self.export_progress_dialog = None

    # --- Window events ---

    def keyPressEvent(self, event):
        self.input_handler.handle_key_press(event)
        if not event.isAccepted():
            super().keyPressEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.document_controller.set_container_width(self.scroll_area.viewport().width())

    def closeEvent(self, event):
        """Annotations are not persisted; confirm before discarding them."""
        self.annotation_controller.commit_pending()
        if len(self.session.store) == 0:
            event.accept()
            return
        reply = QMessageBox.question(
            self,
            "Discard Annotations",
            "Annotations are not saved between sessions. Close without exporting?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if reply == QMessageBox.Yes:
            event.accept()
        else:
            event.ignore()
