"""Session data models."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from models.document import Document
from models.errors import SessionBusyError
from models.selection import PageSelection


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    PROCESSING = "PROCESSING"


@dataclass
class Session:
    """State of one user's workspace: at most one document and its selection."""
    session_id: str
    created_at: datetime
    status: SessionStatus = SessionStatus.IDLE
    document: Optional[Document] = None
    selection: PageSelection = field(default_factory=PageSelection)
    last_query: str = ""
    search_in_progress: bool = False
    error: Optional[str] = None

    @property
    def busy(self) -> bool:
        return (
            self.status in (SessionStatus.LOADING, SessionStatus.PROCESSING)
            or self.search_in_progress
        )

    def begin(self, status: SessionStatus) -> None:
        """Enter a long-running state, refusing re-entry while another operation runs."""
        if self.busy:
            raise SessionBusyError(self.session_id, self.status.value)
        self.status = status
        self.error = None

    def finish(self, status: SessionStatus, error: Optional[str] = None) -> None:
        self.status = status
        self.error = error

    def begin_search(self, query: str) -> None:
        if self.busy:
            raise SessionBusyError(self.session_id, self.status.value)
        self.search_in_progress = True
        self.last_query = query
        self.error = None

    def finish_search(self, error: Optional[str] = None) -> None:
        self.search_in_progress = False
        self.error = error
