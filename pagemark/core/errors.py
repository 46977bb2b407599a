"""
Error kinds raised by the annotation core.
"""


class PagemarkError(Exception):
    """Base class for all recoverable annotation errors."""


class GeometryUnavailable(PagemarkError):
    """The annotation layer has no usable size yet."""

    def __init__(self, width=None, height=None):
        self.width = width
        self.height = height
        super().__init__(
            f"Annotation layer size unavailable ({width} x {height}). "
            "Redraw the page and retry."
        )


class InvalidGeometry(PagemarkError):
    """A computed coordinate is not a finite number."""


class UnsupportedFileType(PagemarkError):
    """A file is neither a PDF document nor a PNG/JPEG image."""


class DocumentLoadFailure(PagemarkError):
    """The document could not be decoded."""
