"""
Pydantic schemas package.

This package contains all Pydantic schemas for request/response
validation and serialization.
"""

# Local application imports
from waterwatch.schemas.auth import (
    AccessTokenResponse,
    AuthUserResponse,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
)

__all__ = [
    # Auth schemas
    "AccessTokenResponse",
    "AuthUserResponse",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
]
