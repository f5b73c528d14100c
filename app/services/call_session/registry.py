"""In-memory registry of active call sessions."""
import logging
from typing import Dict, Optional

from app.services.call_session.models import CallSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Active sessions keyed by connection id.

    A session is registered under its correlation id before the answer
    request returns, so callbacks that race the answer response can still
    be routed through the correlation id in the callback path.
    """

    def __init__(self):
        self._by_connection: Dict[str, CallSession] = {}
        self._by_correlation: Dict[str, CallSession] = {}

    def __len__(self) -> int:
        return len(self._by_correlation)

    def add(self, session: CallSession) -> None:
        self._by_correlation[session.correlation_id] = session
        if session.connection_id:
            self._by_connection[session.connection_id] = session

    def bind(self, session: CallSession, connection_id: str) -> None:
        """Record the connection id returned by the telephony service."""
        session.connection_id = connection_id
        self._by_connection[connection_id] = session

    def find(
        self, connection_id: Optional[str], correlation_id: Optional[str] = None
    ) -> Optional[CallSession]:
        """Look up by connection id, falling back to the correlation id."""
        if connection_id and connection_id in self._by_connection:
            return self._by_connection[connection_id]
        session = self._by_correlation.get(correlation_id) if correlation_id else None
        if session and connection_id and session.connection_id is None:
            self.bind(session, connection_id)
        return session

    def remove(self, session: CallSession) -> None:
        self._by_correlation.pop(session.correlation_id, None)
        if session.connection_id:
            self._by_connection.pop(session.connection_id, None)
        logger.debug(
            f"[SESSION] Discarded session - ConnectionId: {session.connection_id}, "
            f"Active sessions: {len(self)}"
        )
