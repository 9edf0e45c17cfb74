"""
In-memory session storage for the Calc Studio API.

Each session owns one ``Calculator``. Sessions live for the lifetime of the
process; nothing is persisted.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

import structlog

from calc_studio.config import settings
from calc_studio.engine import Calculator
from calc_studio.models import EngineConfig, SessionSnapshot

logger = structlog.get_logger()


class SessionNotFoundError(KeyError):
    """Raised when a session id is not in the store."""
    pass


@dataclass
class Session:
    """A calculator owned by one API client."""
    calculator: Calculator
    session_id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            created_at=self.created_at,
            **self.calculator.snapshot().model_dump(),
        )


class SessionStore:
    """Bounded map of live sessions; the oldest session is evicted when full."""

    def __init__(self, max_sessions: int | None = None, config: EngineConfig | None = None):
        self.max_sessions = max_sessions or settings.max_sessions
        self.config = config or EngineConfig.from_settings()
        self._sessions: OrderedDict[UUID, Session] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: UUID) -> bool:
        return session_id in self._sessions

    def create(self) -> Session:
        """Create a session with a fresh calculator."""
        while len(self._sessions) >= self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info("Session evicted", session_id=str(evicted_id))

        session = Session(calculator=Calculator(config=self.config))
        self._sessions[session.session_id] = session
        logger.info("Session created", session_id=str(session.session_id))
        return session

    def get(self, session_id: UUID) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def delete(self, session_id: UUID) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info("Session deleted", session_id=str(session_id))

    def ids(self) -> list[UUID]:
        return list(self._sessions)


_store: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Get the process-wide session store."""
    global _store
    if _store is None:
        _store = SessionStore()
    return _store
