from .issue_schemas import IssueCreate, IssueResponse, IssueStats, StatusUpdate, UpvoteResponse
from .map_schemas import (
    CenterUpdate,
    CenterUpdateResponse,
    IssueSelection,
    LayerToggle,
    MapRenderResponse,
    MapSessionCreate,
    MapSnapshotResponse,
    ZoomUpdate,
)

__all__ = [
    "CenterUpdate",
    "CenterUpdateResponse",
    "IssueCreate",
    "IssueResponse",
    "IssueSelection",
    "IssueStats",
    "LayerToggle",
    "MapRenderResponse",
    "MapSessionCreate",
    "MapSnapshotResponse",
    "StatusUpdate",
    "UpvoteResponse",
    "ZoomUpdate",
]
