"""
Database models package.

This package contains all SQLAlchemy models for the application.
"""

# Local application imports
from waterwatch.models.auth import Session, User
from waterwatch.models.issues import IssueUpvote, WaterIssue
from waterwatch.models.notifications import EmergencyNotification

__all__ = [
    # Authentication models
    "Session",
    "User",
    # Water watch models
    "WaterIssue",
    "IssueUpvote",
    "EmergencyNotification",
]
