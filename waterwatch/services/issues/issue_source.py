# Standard library imports
from collections.abc import Mapping
from typing import Any, Protocol
from uuid import UUID

# Third-party imports
from sqlalchemy.exc import SQLAlchemyError

# Local application imports
from waterwatch.core.backend import BackendClient
from waterwatch.core.monitoring import get_logger
from waterwatch.core.realtime import ChangeFeed
from waterwatch.db_selectors.issues import list_issues
from waterwatch.db_selectors.upvotes import list_upvoted_issue_ids
from waterwatch.services.issues.issue_views import issue_to_row
from waterwatch.services.issues.triage import update_status
from waterwatch.services.issues.upvote_reconciler import UpvoteOutcome, toggle_upvote
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult

logger = get_logger(__name__)


class IssueSourceError(Exception):
    """The issue table could not be read. The message is shown to the user."""


class IssueSource(Protocol):
    @property
    def change_feed(self) -> ChangeFeed: ...

    async def list_issue_rows(self) -> list[Mapping[str, Any]]: ...

    async def upvoted_issue_ids(self, user_id: UUID) -> set[str]: ...

    async def toggle_upvote(
        self, issue_id: UUID, user_id: UUID, currently_upvoted: bool
    ) -> ServiceResult[UpvoteOutcome]: ...

    async def update_status(self, issue_id: UUID, status: str) -> ServiceResult[Any]: ...


class SqlIssueSource:
    """Issue reads and writes through the backend client's database sessions."""

    def __init__(self, backend: BackendClient):
        self._backend = backend

    @property
    def change_feed(self) -> ChangeFeed:
        return self._backend.change_feed

    async def list_issue_rows(self) -> list[Mapping[str, Any]]:
        try:
            async with self._backend.session_factory() as db:
                issues = await list_issues(db)
                return [issue_to_row(issue) for issue in issues]
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load water issues: {e}")
            raise IssueSourceError("Failed to load water issues. Please try again.") from e

    async def upvoted_issue_ids(self, user_id: UUID) -> set[str]:
        try:
            async with self._backend.session_factory() as db:
                return {str(issue_id) for issue_id in await list_upvoted_issue_ids(db, user_id)}
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load upvotes for {user_id}: {e}")
            raise IssueSourceError("Failed to load your upvotes. Please try again.") from e

    async def toggle_upvote(self, issue_id: UUID, user_id: UUID, currently_upvoted: bool) -> ServiceResult[UpvoteOutcome]:
        try:
            async with self._backend.session_factory() as db:
                return await toggle_upvote(db, self.change_feed, issue_id, user_id, currently_upvoted)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Upvote toggle failed for issue {issue_id}: {e}")
            return ServiceResult.failure(ServiceError.Common.NETWORK_ERROR)

    async def update_status(self, issue_id: UUID, status: str) -> ServiceResult[Any]:
        try:
            async with self._backend.session_factory() as db:
                return await update_status(db, self.change_feed, issue_id, status)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Status update failed for issue {issue_id}: {e}")
            return ServiceResult.failure(ServiceError.Common.NETWORK_ERROR)
