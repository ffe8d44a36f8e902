# Standard library imports
from collections.abc import Callable
import time
import uuid
from uuid import UUID

# Local application imports
from waterwatch.core.monitoring import get_logger
from waterwatch.services.issues.issue_store import IssueStore
from waterwatch.settings import settings

logger = get_logger(__name__)

StoreFactory = Callable[[UUID | None, bool], IssueStore]


class StoreRegistry:
    """
    Map sessions by id. Each session owns one ``IssueStore``.

    Sessions idle longer than ``idle_seconds`` are closed the next time a
    session is opened, and the least recently used session is closed once
    ``max_sessions`` are open.
    """

    def __init__(
        self,
        factory: StoreFactory,
        idle_seconds: float | None = None,
        max_sessions: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._factory = factory
        self._stores: dict[str, IssueStore] = {}
        self._last_seen: dict[str, float] = {}
        self.idle_seconds = settings.MAP_SESSION_IDLE_SECONDS if idle_seconds is None else idle_seconds
        self.max_sessions = settings.MAX_MAP_SESSIONS if max_sessions is None else max_sessions
        self._clock = clock

    def __len__(self) -> int:
        return len(self._stores)

    async def create(self, user_id: UUID | None = None, is_admin: bool = False) -> tuple[str, IssueStore]:
        await self.evict_idle()
        while self._stores and len(self._stores) >= self.max_sessions:
            oldest = min(self._last_seen, key=self._last_seen.__getitem__)
            logger.info(f"Map session limit of {self.max_sessions} reached, evicting {oldest}")
            await self.close(oldest)

        session_id = str(uuid.uuid4())
        store = self._factory(user_id, is_admin)
        self._stores[session_id] = store
        self._last_seen[session_id] = self._clock()
        logger.info(f"Opened map session {session_id} for {user_id or 'anonymous'}")
        return session_id, store

    def get(self, session_id: str, user_id: UUID | None = None) -> IssueStore | None:
        """The store for ``session_id`` if ``user_id`` may use it. Marks the session as used."""
        store = self._stores.get(session_id)
        if store is None or store.closed:
            return None
        if store.user_id is not None and store.user_id != user_id:
            return None
        self._last_seen[session_id] = self._clock()
        return store

    async def evict_idle(self) -> int:
        cutoff = self._clock() - self.idle_seconds
        idle = [sid for sid, seen in self._last_seen.items() if seen <= cutoff]
        for session_id in idle:
            await self.close(session_id)
        if idle:
            logger.info(f"Closed {len(idle)} idle map session(s)")
        return len(idle)

    async def close(self, session_id: str) -> bool:
        store = self._stores.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if store is None:
            return False
        await store.close()
        logger.info(f"Closed map session {session_id}")
        return True

    async def close_for_user(self, user_id: UUID) -> int:
        session_ids = [sid for sid, store in self._stores.items() if store.user_id == user_id]
        for session_id in session_ids:
            await self.close(session_id)
        return len(session_ids)

    async def close_all(self) -> None:
        for session_id in list(self._stores):
            await self.close(session_id)
