# Local application imports
from waterwatch.services.issues.issue_store import IssueStore, StoreSnapshot, StoreState
from waterwatch.services.issues.issue_views import WaterIssueView, parse_issue_row
from waterwatch.services.issues.store_registry import StoreRegistry

__all__ = [
    "IssueStore",
    "StoreRegistry",
    "StoreSnapshot",
    "StoreState",
    "WaterIssueView",
    "parse_issue_row",
]
