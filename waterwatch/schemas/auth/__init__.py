# Local application imports
from waterwatch.schemas.auth.auth_schemas import AuthUserResponse, SessionResponse, SignInRequest, SignUpRequest
from waterwatch.schemas.auth.token_schemas import AccessTokenResponse

__all__ = [
    "AccessTokenResponse",
    "AuthUserResponse",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
]
