# Standard library imports
from datetime import datetime

# Third-party imports
from pydantic import BaseModel

# ============================
# ----- Response schemas -----
# ============================


class AccessTokenResponse(BaseModel):
    """Response model for a successful sign-in or sign-up."""

    access_token: str
    token_type: str = "bearer"  # nosec B105
    user_id: str
    is_admin: bool = False
    expires_at: datetime

    model_config = {
        "json_schema_extra": {
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9",
                "token_type": "bearer",
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "is_admin": False,
                "expires_at": "2026-01-01T00:00:00Z",
            }
        }
    }
