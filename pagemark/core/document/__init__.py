"""
Document source: loading, page geometry, rasterization scheduling and file
type detection.
"""
from .file_types import FileType, read_file, read_image_size, sniff_file_type
from .pdf_reader import PDFDocumentReader
from .render_queue import PageRenderQueue

__all__ = [
    'PDFDocumentReader',
    'PageRenderQueue',
    'FileType',
    'sniff_file_type',
    'read_file',
    'read_image_size',
]
