"""
State of the inline text editor.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class TextEditSession:
    """
    An open inline editor, for a new text annotation or an existing one.

    Accept, focus loss and cancel all go through close(); only the first
    call wins, so an editor commits or discards exactly once.
    """

    x: float  # layer pixels of the editor's top-left
    y: float
    page_number: int
    annotation_id: Optional[str] = None  # None while creating a new annotation
    text: str = ""
    color: str = "black"
    size_px: int = 14
    font_name: str = "Noto Sans JP"
    closed: bool = False

    @property
    def is_new(self) -> bool:
        return self.annotation_id is None

    def close(self) -> bool:
        """
        Mark the editor closed.

        Returns:
            True if this call closed it, False if it was already closed
        """
        if self.closed:
            return False
        self.closed = True
        return True
