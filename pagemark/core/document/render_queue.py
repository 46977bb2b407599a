"""
Page-change sequencing while a render is in flight.
"""
import logging
from typing import Optional

log = logging.getLogger(__name__)


class PageRenderQueue:
    """
    Tracks the one in-flight page render and at most one pending page.

    A request made while a render is running supersedes any earlier pending
    request and is started only once the running render settles, so a page
    is never shown with another page's annotations.
    """

    def __init__(self):
        self.rendering_page: Optional[int] = None
        self.pending_page: Optional[int] = None
        self.displayed_page: Optional[int] = None

    @property
    def busy(self) -> bool:
        return self.rendering_page is not None

    @property
    def target_page(self) -> Optional[int]:
        """The page the user will end up on once everything settles."""
        if self.pending_page is not None:
            return self.pending_page
        if self.rendering_page is not None:
            return self.rendering_page
        return self.displayed_page

    def request(self, page_number: int) -> Optional[int]:
        """
        Ask for a page to be rendered.

        Returns:
            The page to start rendering now, or None if it was queued
        """
        if self.busy:
            self.pending_page = page_number
            log.debug("Page %d queued behind page %d", page_number, self.rendering_page)
            return None
        self.rendering_page = page_number
        return page_number

    def settle(self, page_number: int) -> Optional[int]:
        """
        Mark a render finished.

        Returns:
            The pending page to start rendering next, if any
        """
        if page_number == self.rendering_page:
            self.rendering_page = None
        self.displayed_page = page_number

        if self.pending_page is None:
            return None

        next_page, self.pending_page = self.pending_page, None
        self.rendering_page = next_page
        return next_page

    def fail(self) -> Optional[int]:
        """
        Forget the in-flight render after an error.

        Returns:
            The pending page to start rendering next, if any
        """
        self.rendering_page = None
        if self.pending_page is None:
            return None

        next_page, self.pending_page = self.pending_page, None
        self.rendering_page = next_page
        return next_page

    def reset(self) -> None:
        self.rendering_page = None
        self.pending_page = None
        self.displayed_page = None
