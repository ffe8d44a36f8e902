"""
Table change notifications.

Writers publish one event per committed insert, update or delete; readers
subscribe per table and receive every event for it. Events carry no row data:
subscribers are expected to re-read the table.
"""

# Standard library imports
import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
import json
from typing import Any, Literal, Protocol

# Third-party imports
import redis.asyncio as redis
from redis.exceptions import RedisError

# Local application imports
from waterwatch.core.monitoring import get_logger

logger = get_logger(__name__)

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]
ChangeCallback = Callable[["ChangeEvent"], Awaitable[None]]


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: ChangeType
    record_id: str | None = None
    occurred_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str | bytes) -> "ChangeEvent":
        payload: dict[str, Any] = json.loads(raw)
        return cls(
            table=payload["table"],
            event_type=payload["event_type"],
            record_id=payload.get("record_id"),
            occurred_at=payload.get("occurred_at") or datetime.now(UTC).isoformat(),
        )


class Subscription(Protocol):
    table: str

    async def unsubscribe(self) -> None: ...


class ChangeFeed(Protocol):
    async def publish(self, table: str, event_type: ChangeType, record_id: str | None = None) -> None: ...

    async def subscribe(self, table: str, callback: ChangeCallback) -> Subscription: ...

    async def close(self) -> None: ...


class RedisSubscription:
    def __init__(
        self,
        table: str,
        pubsub: Any,
        task: asyncio.Task[None],
        on_close: Callable[["RedisSubscription"], None],
    ):
        self.table = table
        self._pubsub = pubsub
        self._task = task
        self._on_close = on_close
        self._closed = False

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._on_close(self)
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        try:
            await self._pubsub.unsubscribe()
            await self._pubsub.aclose()
        except RedisError as e:
            logger.warning(f"Error closing realtime subscription for {self.table}: {e}")


class RedisChangeFeed:
    """Change feed over Redis pub/sub, one channel per table."""

    def __init__(self, client: redis.Redis, prefix: str = "realtime"):
        self._client = client
        self._prefix = prefix
        self._subscriptions: set[RedisSubscription] = set()

    def channel_for(self, table: str) -> str:
        return f"{self._prefix}:{table}"

    async def publish(self, table: str, event_type: ChangeType, record_id: str | None = None) -> None:
        event = ChangeEvent(table=table, event_type=event_type, record_id=record_id)
        try:
            await self._client.publish(self.channel_for(table), event.to_json())
        except RedisError as e:
            # The write is already committed; readers catch up on their next fetch
            logger.warning(f"Failed to publish {event_type} on {table}: {e}")

    async def subscribe(self, table: str, callback: ChangeCallback) -> RedisSubscription:
        pubsub = self._client.pubsub()
        await pubsub.subscribe(self.channel_for(table))
        task = asyncio.create_task(self._listen(pubsub, table, callback))
        subscription = RedisSubscription(table, pubsub, task, self._subscriptions.discard)
        self._subscriptions.add(subscription)
        return subscription

    async def _listen(self, pubsub: Any, table: str, callback: ChangeCallback) -> None:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                event = ChangeEvent.from_json(message["data"])
            except (ValueError, KeyError, TypeError):
                logger.warning(f"Dropping malformed change event on {table}: {message.get('data')!r}")
                continue
            try:
                await callback(event)
            except Exception:
                logger.exception(f"Change handler for {table} failed")

    async def close(self) -> None:
        for subscription in list(self._subscriptions):
            await subscription.unsubscribe()
        self._subscriptions.clear()
        await self._client.aclose()
