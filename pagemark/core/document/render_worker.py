from PyQt5.QtCore import QThread, pyqtSignal
from PyQt5.QtGui import QImage

from pagemark.core.document.pdf_reader import PDFDocumentReader


class RenderWorker(QThread):
    """Worker thread that rasterizes one page without freezing the UI."""

    # Signals
    rendered = pyqtSignal(int, QImage, float)  # page_number, image, scale
    failed = pyqtSignal(int, str)  # page_number, message

    def __init__(self, source_bytes, page_number, scale):
        super().__init__()
        self.source_bytes = source_bytes
        self.page_number = page_number
        self.scale = scale

    def run(self):
        """Render in a background thread with a private document handle."""
        reader = PDFDocumentReader()
        try:
            reader.load_bytes(self.source_bytes)
            pix = reader.render_page(self.page_number, self.scale)
            if pix is None:
                raise ValueError(f"the document has no page {self.page_number}")
            image = QImage(
                pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888
            ).copy()
            self.rendered.emit(self.page_number, image, self.scale)
        except Exception as e:
            self.failed.emit(self.page_number, f"Error rendering page {self.page_number}: {e}")
        finally:
            reader.close_document()
