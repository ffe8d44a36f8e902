# Standard library imports
import asyncio
from collections.abc import Mapping
import os
from typing import Any
from uuid import UUID

# Backend credentials must exist before the settings module is imported
os.environ.setdefault("ENVIRONMENT", "dev")
os.environ.setdefault("DEBUG_MODE", "false")
os.environ.setdefault("POSTGRES_SERVER", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_USER", "waterwatch")
os.environ.setdefault("POSTGRES_PASSWORD", "waterwatch")
os.environ.setdefault("POSTGRES_DB", "waterwatch")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ADMIN_EMAIL", "admin@waterwatch.test")
os.environ.setdefault("ADMIN_PASSWORD", "admin-password")

# Third-party imports
import pytest
import pytest_asyncio

# Local application imports
from waterwatch.core.backend import BackendClient
from waterwatch.core.db import create_async_engine
from waterwatch.core.realtime import ChangeEvent
from waterwatch.models.auth.user import User
from waterwatch.services.chat.model_client import ChatTurn, ChatUnavailable
from waterwatch.services.issues.upvote_reconciler import UpvoteOutcome
from waterwatch.services.issues.issue_source import IssueSourceError
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult
from waterwatch.services.weather.weather_client import WeatherData, WeatherUnavailable
from waterwatch.utils.geo.coordinates import Coordinate
from waterwatch.utils.password_utils import get_password_hash


class InMemorySubscription:
    def __init__(self, feed: "InMemoryChangeFeed", table: str, callback):
        self.table = table
        self._feed = feed
        self._callback = callback

    async def unsubscribe(self) -> None:
        self._feed.subscribers = [entry for entry in self._feed.subscribers if entry is not self]


class InMemoryChangeFeed:
    """Change feed that records every event and delivers it to subscribers in-process."""

    def __init__(self) -> None:
        self.events: list[ChangeEvent] = []
        self.subscribers: list[InMemorySubscription] = []
        self.closed = False

    async def publish(self, table: str, event_type: str, record_id: str | None = None) -> None:
        event = ChangeEvent(table=table, event_type=event_type, record_id=record_id)  # type: ignore[arg-type]
        self.events.append(event)
        for subscription in list(self.subscribers):
            if subscription.table == table:
                await subscription._callback(event)

    async def subscribe(self, table: str, callback) -> InMemorySubscription:
        subscription = InMemorySubscription(self, table, callback)
        self.subscribers.append(subscription)
        return subscription

    async def close(self) -> None:
        self.closed = True
        self.subscribers.clear()


class FakeIssueSource:
    """Issue rows held in memory. ``gate`` lets a test hold a fetch mid-flight."""

    def __init__(self, rows: list[Mapping[str, Any]] | None = None):
        self.rows: list[Mapping[str, Any]] = list(rows or [])
        self.upvoted: dict[UUID, set[str]] = {}
        self.change_feed = InMemoryChangeFeed()
        self.toggle_calls: list[tuple[UUID, UUID, bool]] = []
        self.status_calls: list[tuple[UUID, str]] = []
        self.list_calls = 0
        self.fail_with: str | None = None
        self.gates: list[asyncio.Event] = []

    async def list_issue_rows(self) -> list[Mapping[str, Any]]:
        self.list_calls += 1
        rows = [dict(row) for row in self.rows]
        if self.gates:
            await self.gates.pop(0).wait()
        if self.fail_with:
            raise IssueSourceError(self.fail_with)
        return rows

    async def upvoted_issue_ids(self, user_id: UUID) -> set[str]:
        return set(self.upvoted.get(user_id, set()))

    async def toggle_upvote(self, issue_id: UUID, user_id: UUID, currently_upvoted: bool) -> ServiceResult[UpvoteOutcome]:
        self.toggle_calls.append((issue_id, user_id, currently_upvoted))
        upvoted = self.upvoted.setdefault(user_id, set())
        row = next(row for row in self.rows if str(row["id"]) == str(issue_id))
        if currently_upvoted:
            upvoted.discard(str(issue_id))
        else:
            upvoted.add(str(issue_id))
        row["upvote_count"] = sum(str(issue_id) in ids for ids in self.upvoted.values())  # type: ignore[index]
        return ServiceResult.success(
            UpvoteOutcome(issue_id=issue_id, has_upvoted=not currently_upvoted, upvote_count=row["upvote_count"])
        )

    async def update_status(self, issue_id: UUID, status: str) -> ServiceResult[Any]:
        self.status_calls.append((issue_id, status))
        row = next((row for row in self.rows if str(row["id"]) == str(issue_id)), None)
        if row is None:
            return ServiceResult.failure(ServiceError.Issues.ISSUE_NOT_FOUND)
        row["status"] = status  # type: ignore[index]
        return ServiceResult.success(row)


class FakeWeatherClient:
    def __init__(self, data: WeatherData | None = None, error: str | None = "Weather data is unavailable"):
        self.data = data
        self.error = error
        self.calls: list[tuple[float, float]] = []

    @property
    def configured(self) -> bool:
        return self.data is not None

    async def current(self, lat: float, lng: float) -> WeatherData:
        self.calls.append((lat, lng))
        if self.data is None:
            raise WeatherUnavailable(self.error or "Weather data is unavailable")
        return self.data


class FakeChatModel:
    """Replies from a script. Queue exceptions in ``errors`` to make calls fail."""

    def __init__(self, replies: list[str] | None = None, unavailable: bool = False):
        self.replies = list(replies or ["Thanks for reaching out."])
        self.errors: list[Exception] = []
        self.unavailable = unavailable
        self.prompts: list[tuple[list[ChatTurn], str]] = []

    async def prepare(self) -> None:
        if self.unavailable:
            raise ChatUnavailable("Gemini API key is missing. The assistant is unavailable.")

    async def generate(self, history, prompt: str) -> str:
        self.prompts.append((list(history), prompt))
        if self.errors:
            raise self.errors.pop(0)
        return self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]


class StaticPositionProvider:
    def __init__(self, position: Any):
        self.position = position

    async def get_position(self) -> Any:
        return self.position


class HangingPositionProvider:
    """Never answers within any reasonable timeout."""

    async def get_position(self) -> Any:
        await asyncio.sleep(60)
        return (0.0, 0.0)


def make_row(issue_id: str, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": issue_id,
        "location": "(77.21,28.61)",
        "issue_type": "leak",
        "description": "pipe burst",
        "severity": "high",
        "status": "pending",
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
        "user_id": "00000000-0000-0000-0000-000000000000",
        "upvote_count": 0,
    }
    row.update(overrides)
    return row


DELHI = Coordinate(28.6139, 77.209)


@pytest.fixture
def fake_source() -> FakeIssueSource:
    return FakeIssueSource()


@pytest.fixture
def fake_weather() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture
def fake_chat_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'waterwatch.db'}"


@pytest_asyncio.fixture
async def backend(database_url):
    client = BackendClient(create_async_engine(database_url), InMemoryChangeFeed())
    await client.open(create_schema=True)
    yield client
    await client.close()


@pytest_asyncio.fixture
async def db(backend):
    async with backend.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def citizen(db) -> User:
    user = User(email="citizen@example.com", hashed_password=get_password_hash("s3cret-pass"), full_name="Asha Verma")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db) -> User:
    user = User(email="ops@example.com", hashed_password=get_password_hash("admin-pass"), is_admin=True)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
