"""Data models for PageSift."""
from .document import Document, Page
from .selection import PageSelection
from .session import Session, SessionStatus
from .errors import (
    PageSiftError,
    LoadError,
    RenderError,
    ExtractError,
    SessionNotFoundError,
    SessionBusyError,
)
from .api import (
    ToggleRequest,
    ReplaceSelectionRequest,
    SearchRequest,
    PagePreview,
    DocumentSummary,
    DocumentResponse,
    SelectionResponse,
    SearchResponse,
    SessionResponse,
)

__all__ = [
    "Document",
    "Page",
    "PageSelection",
    "Session",
    "SessionStatus",
    "PageSiftError",
    "LoadError",
    "RenderError",
    "ExtractError",
    "SessionNotFoundError",
    "SessionBusyError",
    "ToggleRequest",
    "ReplaceSelectionRequest",
    "SearchRequest",
    "PagePreview",
    "DocumentSummary",
    "DocumentResponse",
    "SelectionResponse",
    "SearchResponse",
    "SessionResponse",
]
