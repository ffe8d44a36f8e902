# Standard library imports
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal
from uuid import UUID

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.db_selectors.issues import list_issues_for_user

MAX_QUICK_ACTIONS = 4
RECENT_ISSUES_CONSIDERED = 3


@dataclass(frozen=True)
class QuickAction:
    id: str
    label: str
    query: str
    category: Literal["general", "report", "emergency"]


DEFAULT_QUICK_ACTIONS: tuple[QuickAction, ...] = (
    QuickAction("report-issue", "Report Water Issue", "I want to report a water issue in my area", "report"),
    QuickAction("water-quality", "Check Water Quality", "What's the water quality in my area?", "general"),
    QuickAction(
        "emergency",
        "Report Emergency",
        "There's a water emergency that needs immediate attention",
        "emergency",
    ),
    QuickAction("conservation", "Water Conservation Tips", "How can I conserve water?", "general"),
)


def build_quick_actions(recent_issue_types: Sequence[str]) -> list[QuickAction]:
    """Personalized status shortcuts first, then the defaults, at most four."""
    distinct_types = list(dict.fromkeys(recent_issue_types))
    personalized = [
        QuickAction(
            id=f"recent-{index}",
            label=f"Check {issue_type} Status",
            query=f"What's the status of my {issue_type} report?",
            category="report",
        )
        for index, issue_type in enumerate(distinct_types)
    ]
    return [*personalized, *DEFAULT_QUICK_ACTIONS][:MAX_QUICK_ACTIONS]


async def load_quick_actions(db: AsyncSession, user_id: UUID | None) -> list[QuickAction]:
    if user_id is None:
        return list(DEFAULT_QUICK_ACTIONS)
    issues = await list_issues_for_user(db, user_id, limit=RECENT_ISSUES_CONSIDERED)
    return build_quick_actions([issue.issue_type for issue in issues])
