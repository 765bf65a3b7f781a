"""
Session storage for in-flight payment collections.
"""
import asyncio
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import structlog

from paylink.core.exceptions import SessionNotFoundError
from paylink.models.schemas import CollectionRequest, CollectionSession

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore(ABC):
    """Storage contract the orchestrator depends on."""

    @abstractmethod
    async def create(self, request: CollectionRequest) -> CollectionSession:
        """Create a session for a validated submission."""

    @abstractmethod
    async def get(self, session_id: Optional[str]) -> CollectionSession:
        """
        Look up a session.

        Raises:
            SessionNotFoundError: If the id is unknown or expired
        """

    @abstractmethod
    def lock(self, session_id: str) -> asyncio.Lock:
        """Lock serializing workflow steps for one session."""


class InMemorySessionStore(SessionStore):
    """
    Process-local session store.

    Sessions are never updated. Expired entries are evicted lazily on
    lookup, or all at once by ``purge_expired``.
    """

    def __init__(self, ttl_seconds: int = 86400, clock=_utcnow):
        self.ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._clock = clock
        self._sessions: Dict[str, CollectionSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @staticmethod
    def _generate_id() -> str:
        return uuid.uuid4().hex

    async def create(self, request: CollectionRequest) -> CollectionSession:
        now = self._clock()
        session_id = self._generate_id()
        while session_id in self._sessions:
            session_id = self._generate_id()

        session = CollectionSession(
            id=session_id,
            verification_email=request.verification_email,
            payment_email=request.payment_email,
            amount=request.amount,
            currency=request.currency,
            created_at=now,
            expires_at=now + self.ttl if self.ttl else None,
        )
        self._sessions[session_id] = session

        logger.info(
            "Session created",
            session_id=session_id,
            amount=str(session.amount),
            currency=session.currency,
            expires_at=session.expires_at.isoformat() if session.expires_at else None,
        )
        return session

    async def get(self, session_id: Optional[str]) -> CollectionSession:
        if not session_id:
            raise SessionNotFoundError(session_id)

        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        if session.is_expired(self._clock()):
            self._evict(session_id)
            logger.info("Session expired", session_id=session_id)
            raise SessionNotFoundError(session_id)

        return session

    def lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def purge_expired(self) -> int:
        """Evict every expired session; returns how many were removed."""
        now = self._clock()
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for session_id in expired:
            self._evict(session_id)

        if expired:
            logger.info("Expired sessions purged", count=len(expired))
        return len(expired)

    def count(self) -> int:
        """Number of sessions that have not expired."""
        now = self._clock()
        return sum(1 for s in self._sessions.values() if not s.is_expired(now))

    def _evict(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._locks[session_id]
