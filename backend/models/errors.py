"""Error types raised by the PageSift pipeline."""
from typing import Optional


class PageSiftError(Exception):
    """Base class for all PageSift errors."""


class LoadError(PageSiftError):
    """Source bytes could not be opened as a PDF document."""

    def __init__(self, message: str, name: Optional[str] = None):
        self.name = name
        super().__init__(message)


class RenderError(PageSiftError):
    """A single page failed to rasterize or yield its text."""

    def __init__(self, page_index: int, message: str):
        self.page_index = page_index
        super().__init__(f"Page {page_index}: {message}")


class ExtractError(PageSiftError):
    """A new document could not be assembled from the requested pages."""


class SessionNotFoundError(PageSiftError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionBusyError(PageSiftError):
    """Another operation is still outstanding on the session."""

    def __init__(self, session_id: str, status: str):
        self.session_id = session_id
        self.status = status
        super().__init__(f"Session {session_id} is busy ({status})")
