"""Unit tests for SessionManager."""
import sys
sys.path.insert(0, 'backend')

import pytest
from datetime import datetime

from models.document import Document
from models.errors import SessionNotFoundError, SessionBusyError
from models.session import SessionStatus
from services.session_manager import SessionManager


class TestSessionManager:
    """Test suite for SessionManager."""

    @pytest.fixture
    def manager(self):
        """Create a SessionManager instance."""
        return SessionManager()

    def test_create_new_session(self, manager):
        session = manager.create_session()

        assert session.session_id.startswith("sess_")
        assert session.status == SessionStatus.IDLE
        assert session.document is None
        assert len(session.selection) == 0
        assert isinstance(session.created_at, datetime)

    def test_session_id_uniqueness(self, manager):
        session1 = manager.create_session()
        session2 = manager.create_session()

        assert session1.session_id != session2.session_id
        assert manager.count() == 2

    def test_get_existing_session(self, manager):
        created = manager.create_session()

        assert manager.get_session(created.session_id) is created

    def test_get_nonexistent_session_raises(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.get_session("sess_nonexistent")

    def test_delete_session(self, manager):
        session = manager.create_session()

        manager.delete_session(session.session_id)

        with pytest.raises(SessionNotFoundError):
            manager.get_session(session.session_id)

    def test_reset_discards_document_and_selection(self, manager):
        session = manager.create_session()
        session.document = Document(name="a.pdf", size_bytes=3, raw_bytes=b"abc")
        session.selection.replace([0, 1])
        session.last_query = "invoices"
        session.finish(SessionStatus.READY)

        manager.reset(session.session_id)

        assert session.document is None
        assert len(session.selection) == 0
        assert session.last_query == ""
        assert session.status == SessionStatus.IDLE


class TestSessionState:
    """Test suite for Session status transitions."""

    def test_begin_blocks_reentry(self):
        session = SessionManager().create_session()
        session.begin(SessionStatus.PROCESSING)

        with pytest.raises(SessionBusyError):
            session.begin(SessionStatus.PROCESSING)

    def test_finish_allows_next_operation(self):
        session = SessionManager().create_session()
        session.begin(SessionStatus.LOADING)
        session.finish(SessionStatus.READY)

        session.begin(SessionStatus.PROCESSING)

        assert session.status == SessionStatus.PROCESSING

    def test_search_blocks_export(self):
        session = SessionManager().create_session()
        session.begin_search("invoices")

        with pytest.raises(SessionBusyError):
            session.begin(SessionStatus.PROCESSING)

        session.finish_search()
        assert not session.busy
        assert session.last_query == "invoices"

    def test_finish_records_error(self):
        session = SessionManager().create_session()
        session.begin(SessionStatus.LOADING)
        session.finish(SessionStatus.IDLE, error="Failed to process PDF.")

        assert session.error == "Failed to process PDF."
        assert session.status == SessionStatus.IDLE
