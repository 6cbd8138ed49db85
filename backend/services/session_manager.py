"""Session manager for per-client document workspaces."""
import logging
import threading
import uuid
from datetime import datetime
from typing import Dict

from models.errors import SessionNotFoundError
from models.session import Session, SessionStatus

logger = logging.getLogger(__name__)


class SessionManager:
    """Keeps sessions in memory. Nothing is persisted across restarts."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        logger.info("SessionManager initialized (in-memory)")

    def create_session(self) -> Session:
        """
        Create a new idle session.

        Returns:
            Session with a fresh ID and no document
        """
        session = Session(
            session_id=self._generate_session_id(),
            created_at=datetime.now()
        )
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Created new session: {session.session_id}")
        return session

    def get_session(self, session_id: str) -> Session:
        """
        Look up a session.

        Raises:
            SessionNotFoundError: If no session has this ID
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Deleted session {session_id}")

    def reset(self, session_id: str) -> Session:
        """Discard the document and selection, returning the session to IDLE."""
        session = self.get_session(session_id)
        session.document = None
        session.selection.clear()
        session.last_query = ""
        session.search_in_progress = False
        session.finish(SessionStatus.IDLE)
        logger.info(f"Reset session {session_id}")
        return session

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _generate_session_id(self) -> str:
        """
        Generate a unique session ID.

        Returns:
            Unique session ID string
        """
        return f"sess_{uuid.uuid4().hex[:12]}"
