# Standard library imports
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID, uuid4

# Third-party imports
import jwt

# Local application imports
from waterwatch.settings import settings

ACCESS_TOKEN_TYPE = "access"  # nosec B105


def create_access_token(
    user_id: UUID,
    email: str,
    is_admin: bool = False,
    expires_delta: timedelta | None = None,
) -> tuple[str, str, datetime]:
    """
    Create a JWT access token.

    Args:
        user_id: The user's ID
        email: The user's email
        is_admin: Role claim read by admin-only routes
        expires_delta: Optional custom expiration time

    Returns:
        Tuple of (token, jti, expires_at)
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    # Generate a unique JWT ID
    jti = str(uuid4())

    to_encode = {
        "sub": str(user_id),  # Standard JWT claim for subject
        "email": email,
        "is_admin": is_admin,
        "exp": expire,
        "iat": now,
        "token_type": ACCESS_TOKEN_TYPE,
        "jti": jti,  # JWT ID for session tracking
    }

    token = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    return token, jti, expire


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        jwt.PyJWTError: If the token is invalid, expired or of the wrong type
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("token_type") != ACCESS_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Invalid token type")
    if not payload.get("sub") or not payload.get("jti"):
        raise jwt.InvalidTokenError("Invalid token: missing required fields")
    return payload
