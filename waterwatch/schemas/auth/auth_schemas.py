# Standard library imports
from datetime import datetime
from uuid import UUID

# Third-party imports
from pydantic import BaseModel, ConfigDict, EmailStr, Field

# ============================
# ----- Request schemas ------
# ============================


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = {"json_schema_extra": {"example": {"email": "citizen@example.com", "password": "s3cret-pass"}}}


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str | None = Field(None, max_length=200)

    model_config = {
        "json_schema_extra": {
            "example": {"email": "citizen@example.com", "password": "s3cret-pass", "full_name": "Asha Verma"}
        }
    }


# ============================
# ----- Response schemas -----
# ============================


class AuthUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: str | None = None
    is_admin: bool


class SessionResponse(BaseModel):
    user: AuthUserResponse
    is_admin: bool
    expires_at: datetime
