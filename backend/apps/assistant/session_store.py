"""
Session Store: in-memory conversation sessions with per-session locking.

- sliding TTL (a session expires ttl_seconds after its last turn)
- capacity cap (least recently active idle session is evicted first)
- per-session FIFO lock held for a whole orchestration turn
- different sessions never wait on each other; the id -> entry map guard
  is held only for dictionary bookkeeping

Django may run async views on different event loops (one per request under
WSGI, a shared loop under ASGI), so the per-session lock is built on a
threading.Lock and hands ownership to waiters on their own loop.
"""
import asyncio
import datetime
import logging
import threading
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Deque, Dict, List, Optional, Tuple

from django.conf import settings

from apps.assistant.state import Message, PendingInvocation

logger = logging.getLogger(__name__)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass
class Session:
    id: str
    messages: List[Message] = field(default_factory=list)
    pending: Optional[PendingInvocation] = None
    created_at: datetime.datetime = field(default_factory=_now)
    last_activity_at: datetime.datetime = field(default_factory=_now)

    def append(self, message: Message) -> None:
        self.messages.append(message)
        self.last_activity_at = _now()

    def set_pending(self, pending: Optional[PendingInvocation]) -> None:
        self.pending = pending
        self.last_activity_at = _now()

    def reset(self) -> None:
        self.messages = []
        self.pending = None
        self.last_activity_at = _now()

    def snapshot(self) -> 'Session':
        """Detached copy safe to hand out after the lock is released."""
        return Session(
            id=self.id,
            messages=list(self.messages),
            pending=self.pending,
            created_at=self.created_at,
            last_activity_at=self.last_activity_at,
        )


class SessionLock:
    """
    FIFO mutual exclusion usable from any thread and any event loop.

    Waiters park on a future of their own loop; release() hands the lock
    directly to the oldest waiter, so it is never observed as free while
    someone is queued.
    """

    def __init__(self):
        self._mutex = threading.Lock()
        self._locked = False
        self._waiters: Deque[Tuple[asyncio.AbstractEventLoop, asyncio.Future]] = deque()

    def locked(self) -> bool:
        return self._locked

    async def acquire(self) -> None:
        loop = asyncio.get_running_loop()
        with self._mutex:
            if not self._locked and not self._waiters:
                self._locked = True
                return
            waiter = (loop, loop.create_future())
            self._waiters.append(waiter)

        try:
            await waiter[1]
        except asyncio.CancelledError:
            with self._mutex:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)
                    owned = False
                else:
                    # Handed over already; a cancelled future is passed on by _grant
                    owned = waiter[1].done() and not waiter[1].cancelled()
            if owned:
                self.release()
            raise

    def release(self) -> None:
        while True:
            with self._mutex:
                if not self._waiters:
                    self._locked = False
                    return
                loop, future = self._waiters.popleft()
            try:
                loop.call_soon_threadsafe(self._grant, future)
                return
            except RuntimeError:
                # Waiter's loop is closed
                continue

    def _grant(self, future: asyncio.Future) -> None:
        if future.cancelled():
            self.release()
        else:
            future.set_result(True)

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.release()


class _Entry:
    __slots__ = ('session', 'lock', 'active', 'touched')

    def __init__(self, session: Session, touched: float):
        self.session = session
        self.lock = SessionLock()
        self.active = 0
        self.touched = touched


class SessionStore:
    """
    Process-wide session map.

    Args:
        ttl_seconds: Inactivity after which a session is discarded
        max_sessions: Capacity; idle sessions beyond it are evicted LRU
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_sessions: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._guard = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    # ------------------------------------------------------------------
    # Bookkeeping (call with _guard held)
    # ------------------------------------------------------------------

    def _expired_unlocked(self, entry: _Entry, now: float) -> bool:
        return entry.active == 0 and now - entry.touched >= self.ttl_seconds

    def _make_room_unlocked(self) -> None:
        while len(self._entries) >= self.max_sessions:
            idle = [(e.touched, sid) for sid, e in self._entries.items() if e.active == 0]
            if not idle:
                logger.warning(
                    "session_capacity_exceeded",
                    extra={'sessions': len(self._entries), 'max_sessions': self.max_sessions},
                )
                return
            _, victim = min(idle)
            del self._entries[victim]
            logger.info("session_evicted", extra={'session_id': victim, 'reason': 'capacity'})

    def _entry_unlocked(self, session_id: str) -> _Entry:
        now = self._clock()
        entry = self._entries.get(session_id)
        if entry is not None and self._expired_unlocked(entry, now):
            del self._entries[session_id]
            logger.info("session_evicted", extra={'session_id': session_id, 'reason': 'ttl'})
            entry = None
        if entry is None:
            self._make_room_unlocked()
            entry = _Entry(Session(id=session_id), touched=now)
            self._entries[session_id] = entry
            logger.debug("session_created", extra={'session_id': session_id})
        return entry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def session(self, session_id: str) -> AsyncIterator[Session]:
        """
        Hold the session exclusively for the duration of the block.

        Callers queue in arrival order. The session is protected from
        eviction while held or queued for.
        """
        with self._guard:
            entry = self._entry_unlocked(session_id)
            entry.active += 1
        try:
            async with entry.lock:
                yield entry.session
        finally:
            with self._guard:
                entry.active -= 1
                entry.touched = self._clock()

    async def get(self, session_id: str) -> Session:
        """Snapshot of the session, creating it if unseen."""
        async with self.session(session_id) as session:
            return session.snapshot()

    async def append(self, session_id: str, message: Message) -> None:
        async with self.session(session_id) as session:
            session.append(message)

    async def set_pending(self, session_id: str, pending: Optional[PendingInvocation]) -> None:
        async with self.session(session_id) as session:
            session.set_pending(pending)

    async def clear(self, session_id: str) -> None:
        """Drop history and pending state. Clearing an empty session is a no-op."""
        async with self.session(session_id) as session:
            session.reset()
        logger.info("session_cleared", extra={'session_id': session_id})

    async def history(self, session_id: str) -> List[Message]:
        async with self.session(session_id) as session:
            return list(session.messages)

    def sweep(self) -> int:
        """Evict expired idle sessions. Returns how many were removed."""
        now = self._clock()
        with self._guard:
            expired = [
                sid for sid, entry in self._entries.items()
                if self._expired_unlocked(entry, now)
            ]
            for sid in expired:
                del self._entries[sid]
        if expired:
            logger.info("sessions_swept", extra={'count': len(expired)})
        return len(expired)

    def __contains__(self, session_id: str) -> bool:
        with self._guard:
            entry = self._entries.get(session_id)
            return entry is not None and not self._expired_unlocked(entry, self._clock())

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


# ---------------------------------------------------------------------------
# Process-wide store (lazy singleton)
# ---------------------------------------------------------------------------

_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Lazy singleton configured from settings.ASSISTANT."""
    global _store
    if _store is None:
        config = settings.ASSISTANT
        _store = SessionStore(
            ttl_seconds=config['SESSION_TTL_SECONDS'],
            max_sessions=config['MAX_SESSIONS'],
        )
    return _store


def reset_session_store() -> None:
    """Discard the process-wide store (used by tests)."""
    global _store
    _store = None
