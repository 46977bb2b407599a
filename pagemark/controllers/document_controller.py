"""
Controller for the document: opening files, page navigation and exports.
"""
import logging
from pathlib import Path
from typing import Optional, Set, Tuple, Union

from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtGui import QImage

from pagemark.core.annotations import Viewport, fit_scale
from pagemark.core.document import FileType, PageRenderQueue, PDFDocumentReader, read_file
from pagemark.core.document.render_worker import RenderWorker
from pagemark.core.errors import DocumentLoadFailure, GeometryUnavailable, UnsupportedFileType
from pagemark.core.export import write_csv
from pagemark.core.export.export_worker import ExportWorker

from .annotation_controller import AnnotationController

log = logging.getLogger(__name__)


class DocumentController(QObject):
    """Loads documents and drives page rendering through a worker thread."""

    # Signals
    document_loaded = pyqtSignal(int)  # page count
    document_failed = pyqtSignal(str)  # message
    page_rendered = pyqtSignal(int, QImage)  # page_number, image
    export_progress = pyqtSignal(str)
    export_page_progress = pyqtSignal(int, int)  # current, total
    export_finished = pyqtSignal(bool, str)  # success, message

    def __init__(self, annotation_controller: AnnotationController,
                 reader: Optional[PDFDocumentReader] = None, parent: QObject = None):
        super().__init__(parent)
        self.annotations = annotation_controller
        self.session = annotation_controller.session
        self.reader = reader or PDFDocumentReader()
        self.render_queue = PageRenderQueue()
        self.container_width = 800
        self._generation = 0
        self._workers: Set[QObject] = set()

    @property
    def page_count(self) -> int:
        return self.session.page_count

    # --- Files ---

    def open_file(self, path: Union[str, Path], drop_point: Optional[Tuple[float, float]] = None) -> bool:
        """
        Open a PDF, or add a PNG/JPEG to the current page.

        Args:
            path: File to ingest
            drop_point: Where an image was dropped, in layer pixels

        Returns:
            True if the file was used
        """
        try:
            file_type, data = read_file(path)
        except UnsupportedFileType as e:
            log.warning("Ignoring %s: %s", path, e)
            return False
        except OSError as e:
            log.error("Could not read %s: %s", path, e)
            self.document_failed.emit(f"Could not read {path}: {e}")
            return False

        if file_type is FileType.PDF:
            return self.load_document(data, str(path))
        return self.annotations.place_image(data, drop_point) is not None

    def load_document(self, data: bytes, name: Optional[str] = None) -> bool:
        """
        Replace the current document. Annotations and history start empty.

        On failure the session returns to the empty pre-load state.
        """
        self.annotations.commit_pending()
        self._generation += 1
        self.render_queue.reset()

        try:
            page_count = self.reader.load_bytes(data)
        except DocumentLoadFailure as e:
            log.error("Failed to load %s: %s", name or "document", e)
            self.session.reset()
            self.annotations.projector.clear()
            self.annotations.refresh()
            self.document_failed.emit(str(e))
            return False

        self.reader.current_file_path = name
        self.session.start_document(page_count)
        self.annotations.refresh()
        self.document_loaded.emit(page_count)
        self.go_to_page(1)
        return True

    def close_document(self) -> None:
        self.annotations.commit_pending()
        self._generation += 1
        self.render_queue.reset()
        self.reader.close_document()
        self.session.reset()
        self.annotations.projector.clear()
        self.annotations.refresh()

    # --- Navigation ---

    def go_to_page(self, page_number: int) -> None:
        if not self.reader.is_open or not 1 <= page_number <= self.page_count:
            return
        self.annotations.commit_pending()
        page = self.render_queue.request(page_number)
        if page is not None:
            self._start_render(page)

    def change_page(self, offset: int) -> None:
        current = self.render_queue.target_page or self.session.page_number
        self.go_to_page(current + offset)

    def set_container_width(self, width: int) -> None:
        """Re-render the current page if the viewer width changes its scale."""
        if width == self.container_width:
            return
        self.container_width = width
        target = self.render_queue.target_page
        if self.reader.is_open and target is not None:
            # While a render is running this queues a second pass at the new width.
            self.go_to_page(target)

    def _start_render(self, page_number: int) -> None:
        page_width, _ = self.reader.page_size(page_number)
        try:
            scale = fit_scale(self.container_width, page_width, self.session.config.page_margin_px)
        except GeometryUnavailable as e:
            log.error("Cannot render page %d: %s", page_number, e)
            self._after_failure()
            return

        generation = self._generation
        worker = RenderWorker(self.reader.source_bytes, page_number, scale)
        worker.rendered.connect(
            lambda page, image, s, g=generation: self._on_rendered(g, page, image, s)
        )
        worker.failed.connect(lambda page, message, g=generation: self._on_render_failed(g, page, message))
        worker.finished.connect(lambda w=worker: self._workers.discard(w))
        self._workers.add(worker)
        worker.start()

    def _on_rendered(self, generation: int, page_number: int, image: QImage, scale: float) -> None:
        if generation != self._generation:
            return

        self.session.set_page_geometry(page_number, Viewport(image.width(), image.height()), scale)
        self.page_rendered.emit(page_number, image)
        self.annotations.refresh()

        next_page = self.render_queue.settle(page_number)
        if next_page is not None:
            self._start_render(next_page)

    def _on_render_failed(self, generation: int, page_number: int, message: str) -> None:
        if generation != self._generation:
            return
        log.error(message)
        self.document_failed.emit(message)
        self._after_failure()

    def _after_failure(self) -> None:
        next_page = self.render_queue.fail()
        if next_page is not None:
            self._start_render(next_page)

    # --- Export ---

    def export_csv(self, directory: Optional[Union[str, Path]] = None) -> Path:
        """Write the CSV export and return its path."""
        self.annotations.commit_pending()
        target = directory or self.session.config.export_dir or Path.home()
        return write_csv(self.session.store.list(), target)

    def export_pdf(self, output_path: str) -> bool:
        """Start writing an annotated copy of the document in the background."""
        if not self.reader.is_open:
            return False
        self.annotations.commit_pending()

        worker = ExportWorker(
            self.reader.source_bytes,
            output_path,
            self.session.store.list(),
            self.session.display_scale,
        )
        worker.progress.connect(self.export_progress)
        worker.page_progress.connect(self.export_page_progress)
        worker.finished.connect(self.export_finished)
        worker.finished.connect(lambda *_, w=worker: self._workers.discard(w))
        self._workers.add(worker)
        worker.start()
        return True
