"""Browser session management for in-memory storage."""

from datetime import UTC, datetime, timedelta

from cuid2 import cuid_wrapper

from patient_admin.models.session import BrowserSession
from patient_admin.services.query_cache import QueryCache
from patient_admin.utils.debounce import Debouncer

cuid = cuid_wrapper()


class InMemorySessionManager:
    """Keeps one BrowserSession per browser, identified by a cookie value."""

    def __init__(
        self,
        session_timeout_minutes: int = 60,
        query_stale_seconds: float = 30.0,
        search_debounce_seconds: float = 0.3,
    ):
        """Initialize session manager.

        Args:
            session_timeout_minutes: Minutes of inactivity before a session expires
            query_stale_seconds: Freshness window of each session's query cache
            search_debounce_seconds: Debounce window for live search
        """
        self.sessions: dict[str, BrowserSession] = {}
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self.query_stale_seconds = query_stale_seconds
        self.search_debounce_seconds = search_debounce_seconds

    def get_or_create_session(self, session_id: str | None = None) -> BrowserSession:
        """Get existing session or create new one.

        Unknown or expired ids get a fresh session with a new id, so a client
        cannot choose its own session id.

        Args:
            session_id: Optional id read from the session cookie

        Returns:
            BrowserSession (existing or newly created)
        """
        self._cleanup_expired_sessions()

        if session_id and session_id in self.sessions:
            session = self.sessions[session_id]
            session.update_activity()
            return session

        new_session_id = self._generate_session_id()
        session = BrowserSession(
            session_id=new_session_id,
            query_cache=QueryCache(stale_seconds=self.query_stale_seconds),
            search_debouncer=Debouncer(delay=self.search_debounce_seconds),
        )
        self.sessions[new_session_id] = session
        return session

    def _generate_session_id(self) -> str:
        """Generate a new CUID-based session ID."""
        return cuid()

    def _cleanup_expired_sessions(self) -> None:
        """Remove expired sessions from memory."""
        current_time = datetime.now(UTC)
        expired_sessions = []

        for session_id, session in self.sessions.items():
            if current_time - session.last_activity > self.session_timeout:
                expired_sessions.append(session_id)

        for session_id in expired_sessions:
            del self.sessions[session_id]

    def get_session_count(self) -> int:
        """Get current number of active sessions."""
        self._cleanup_expired_sessions()
        return len(self.sessions)
