"""
In-memory conversation sessions for trace analysis.

SessionManager keeps sessions in a dict guarded by one lock. Sessions expire
after a period of inactivity (checked lazily on access and by a background
sweeper thread) and hold at most a fixed number of messages.

Usage:
    sessions = SessionManager(ttl=timedelta(minutes=30))
    session = sessions.create()
    sessions.add_message(session.id, MessageRole.USER, "why is this slow?")
    ...
    sessions.close()
"""

import logging
import secrets
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)

# How long a session stays alive without a write
DEFAULT_SESSION_TTL = timedelta(minutes=30)

# Older messages are evicted once a session holds this many
MAX_MESSAGES_PER_SESSION = 50

# How often the sweeper thread removes expired sessions
SWEEP_INTERVAL = timedelta(minutes=5)


class MessageRole(str, Enum):
    """Who sent a message in the conversation."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """A single turn in the conversation history."""
    role: MessageRole
    content: str


@dataclass
class Session:
    """Conversation state for one analysis thread."""
    id: str
    messages: List[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: _now())
    updated_at: datetime = field(default_factory=lambda: _now())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_session_id() -> str:
    """Return 128 random bits from the OS CSPRNG as 32 hex characters."""
    return secrets.token_hex(16)


class SessionManager:
    """
    Thread-safe, TTL-bounded session storage.

    Sessions live only in memory. Every operation runs under a single lock and
    does no I/O while holding it. Callers receive copies, never the stored
    Session object.

    The sweeper thread starts on construction; call close() (or use the manager
    as a context manager) to stop it.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        max_messages: int = MAX_MESSAGES_PER_SESSION,
        sweep_interval: timedelta = SWEEP_INTERVAL,
    ):
        if ttl <= timedelta(0):
            ttl = DEFAULT_SESSION_TTL
        if max_messages <= 0:
            max_messages = MAX_MESSAGES_PER_SESSION
        if sweep_interval <= timedelta(0):
            sweep_interval = SWEEP_INTERVAL

        self.ttl = ttl
        self.max_messages = max_messages
        self.sweep_interval = sweep_interval

        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}
        self._stop = threading.Event()
        self._closed = False

        self._sweeper = threading.Thread(
            target=self._run_sweeper,
            name="nlquery-session-sweeper",
            daemon=True,
        )
        self._sweeper.start()

    def __enter__(self) -> 'SessionManager':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> Session:
        """Start a new, empty session."""
        now = _now()
        session = Session(id=generate_session_id(), messages=[], created_at=now, updated_at=now)
        with self._lock:
            self._sessions[session.id] = session
            snapshot = _snapshot(session)
        logger.debug(f"Created session {session.id}")
        return snapshot

    def get(self, session_id: str) -> Optional[Session]:
        """
        Return a copy of the session, or None if it is absent or expired.

        An expired session is removed. Reading does not refresh the TTL.
        """
        with self._lock:
            session = self._live_session(session_id)
            if session is None:
                return None
            return _snapshot(session)

    def add_message(self, session_id: str, role: MessageRole, content: str) -> bool:
        """Append one message and refresh the TTL. False if absent or expired."""
        return self.add_messages(session_id, [(role, content)])

    def add_messages(self, session_id: str, messages: Iterable[Tuple[MessageRole, str]]) -> bool:
        """
        Append several messages in order under one lock acquisition.

        Either all messages are stored or, when the session is absent or
        expired, none are.
        """
        items = [Message(role=MessageRole(role), content=content) for role, content in messages]
        with self._lock:
            session = self._live_session(session_id)
            if session is None:
                return False
            for message in items:
                if len(session.messages) >= self.max_messages:
                    _evict_oldest(session.messages)
                session.messages.append(message)
            session.updated_at = _now()
            return True

    def delete(self, session_id: str) -> None:
        """Remove a session unconditionally."""
        with self._lock:
            self._sessions.pop(session_id, None)

    def close(self) -> None:
        """Stop the sweeper thread and wait for it to exit."""
        if self._closed:
            return
        self._closed = True
        self._stop.set()
        if self._sweeper is not threading.current_thread():
            self._sweeper.join()
        logger.debug("Session sweeper stopped")

    def sweep(self) -> int:
        """Remove every expired session. Returns how many were removed."""
        now = _now()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if now - s.updated_at > self.ttl]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.debug(f"Swept {len(expired)} expired session(s)")
        return len(expired)

    def _live_session(self, session_id: str) -> Optional[Session]:
        # Caller must hold self._lock.
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if _now() - session.updated_at > self.ttl:
            del self._sessions[session_id]
            return None
        return session

    def _run_sweeper(self) -> None:
        interval = self.sweep_interval.total_seconds()
        while not self._stop.wait(interval):
            self.sweep()


def _evict_oldest(messages: List[Message]) -> None:
    """Drop the oldest non-system message; the oldest message if all are system."""
    for i, message in enumerate(messages):
        if message.role != MessageRole.SYSTEM:
            del messages[i]
            return
    if messages:
        del messages[0]


def _snapshot(session: Session) -> Session:
    return replace(session, messages=list(session.messages))
