"""
Detection of ingestible files and image decoding.
"""
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

import fitz  # PyMuPDF

from pagemark.core.errors import UnsupportedFileType


class FileType(Enum):
    """Supported inputs, by MIME type."""

    PDF = "application/pdf"
    PNG = "image/png"
    JPEG = "image/jpeg"

    @property
    def mime_type(self) -> str:
        return self.value

    @property
    def is_image(self) -> bool:
        return self is not FileType.PDF


_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_JPEG_SIGNATURE = b"\xff\xd8\xff"
_PDF_SIGNATURE = b"%PDF-"
_PDF_HEADER_WINDOW = 1024  # readers accept leading garbage before the header


def sniff_file_type(data: bytes, filename: Optional[str] = None) -> FileType:
    """
    Identify a file from its leading bytes.

    Args:
        data: File contents
        filename: Used in the error message only

    Returns:
        The detected file type

    Raises:
        UnsupportedFileType: Neither PDF, PNG nor JPEG
    """
    if data.startswith(_PNG_SIGNATURE):
        return FileType.PNG
    if data.startswith(_JPEG_SIGNATURE):
        return FileType.JPEG
    if _PDF_SIGNATURE in data[:_PDF_HEADER_WINDOW]:
        return FileType.PDF

    name = f" '{filename}'" if filename else ""
    raise UnsupportedFileType(f"Unsupported file{name}: expected a PDF, PNG or JPEG")


def read_file(path: Union[str, Path]) -> Tuple[FileType, bytes]:
    """
    Read a file from disk and identify it.

    Returns:
        Tuple of (file type, contents)
    """
    path = Path(path)
    data = path.read_bytes()
    return sniff_file_type(data, path.name), data


def read_image_size(data: bytes) -> Tuple[int, int]:
    """
    Decode a PNG or JPEG image to find its intrinsic size.

    Returns:
        Tuple of (width, height) in pixels
    """
    try:
        pix = fitz.Pixmap(data)
    except Exception as e:
        raise UnsupportedFileType(f"Could not decode image: {e}") from e

    if pix.width <= 0 or pix.height <= 0:
        raise UnsupportedFileType("Image has no pixels")
    return pix.width, pix.height
