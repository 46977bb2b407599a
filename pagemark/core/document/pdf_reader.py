"""
PDF document loading and page rasterization.
"""
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import fitz  # PyMuPDF

from pagemark.core.errors import DocumentLoadFailure

log = logging.getLogger(__name__)


class PDFDocumentReader:
    """Handles PDF document loading, page geometry and rendering."""

    def __init__(self):
        self.doc: Optional[fitz.Document] = None
        self.total_pages: int = 0
        self.source_bytes: Optional[bytes] = None
        self.current_file_path: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.doc is not None

    def load_pdf(self, file_path: Union[str, Path]) -> int:
        """
        Load a PDF document from disk.

        Args:
            file_path: Path to the PDF file

        Returns:
            Number of pages

        Raises:
            DocumentLoadFailure: The file could not be read or decoded
        """
        try:
            data = Path(file_path).read_bytes()
        except OSError as e:
            self.close_document()
            raise DocumentLoadFailure(f"Error reading {file_path}: {e}") from e

        page_count = self.load_bytes(data)
        self.current_file_path = str(file_path)
        return page_count

    def load_bytes(self, data: bytes) -> int:
        """
        Load a PDF document from memory.

        The previous document is closed first; on failure no document
        stays open.

        Returns:
            Number of pages

        Raises:
            DocumentLoadFailure: The data is not a readable PDF
        """
        self.close_document()

        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentLoadFailure(f"Error loading PDF: {e}") from e

        if doc.page_count == 0:
            doc.close()
            raise DocumentLoadFailure("The document has no pages")

        self.doc = doc
        self.total_pages = doc.page_count
        self.source_bytes = data
        log.debug("Opened PDF with %d page(s)", self.total_pages)
        return self.total_pages

    def close_document(self) -> None:
        """Close the current PDF document and clear all state."""
        if self.doc:
            self.doc.close()
            self.doc = None

        self.total_pages = 0
        self.source_bytes = None
        self.current_file_path = None

    def get_page(self, page_number: int) -> Optional[fitz.Page]:
        """
        Get a page object for direct operations.

        Args:
            page_number: 1-based page number

        Returns:
            PyMuPDF page object, or None if invalid
        """
        if not self.doc or not 1 <= page_number <= self.total_pages:
            return None
        return self.doc.load_page(page_number - 1)

    def page_size(self, page_number: int) -> Tuple[float, float]:
        """
        Get the intrinsic size of a page in points.

        Returns:
            Tuple of (width, height), or (0, 0) for an invalid page
        """
        page = self.get_page(page_number)
        if page:
            rect = page.rect
            return rect.width, rect.height
        return 0.0, 0.0

    def render_page(self, page_number: int, scale: float) -> Optional[fitz.Pixmap]:
        """
        Rasterize a page.

        Args:
            page_number: 1-based page number
            scale: Zoom factor relative to the page's intrinsic size

        Returns:
            RGB pixmap, or None for an invalid page
        """
        page = self.get_page(page_number)
        if page is None:
            return None
        return page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
