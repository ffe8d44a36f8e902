# Third-party imports
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.db import get_async_session
from waterwatch.core.monitoring import get_logger
from waterwatch.dependancies.common import get_auth_gate, get_auth_session
from waterwatch.schemas.auth import AccessTokenResponse, AuthUserResponse, SessionResponse, SignInRequest, SignUpRequest
from waterwatch.schemas.common import BaseResponse
from waterwatch.services.auth import AuthGate, AuthSession

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(auth_session: AuthSession) -> AccessTokenResponse:
    return AccessTokenResponse(
        access_token=auth_session.access_token,
        user_id=str(auth_session.user.id),
        is_admin=auth_session.is_admin,
        expires_at=auth_session.expires_at,
    )


@router.post("/signin", response_model=BaseResponse[AccessTokenResponse])
async def signin(
    request: Request,
    credentials: SignInRequest,
    db: AsyncSession = Depends(get_async_session),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> BaseResponse[AccessTokenResponse]:
    """Sign in with email and password"""
    auth_session = (await auth_gate.sign_in(db, credentials.email, credentials.password, request)).unwrap()
    return BaseResponse.success(_token_response(auth_session))


@router.post("/signup", response_model=BaseResponse[AccessTokenResponse], status_code=201)
async def signup(
    request: Request,
    payload: SignUpRequest,
    db: AsyncSession = Depends(get_async_session),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> BaseResponse[AccessTokenResponse]:
    """Register a citizen account; the new account is signed in right away"""
    result = await auth_gate.sign_up(db, payload.email, payload.password, payload.full_name, request)
    return BaseResponse.success(_token_response(result.unwrap()))


@router.post("/signout", response_model=BaseResponse[dict])
async def signout(
    auth_session: AuthSession = Depends(get_auth_session),
    db: AsyncSession = Depends(get_async_session),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> BaseResponse[dict]:
    """Invalidate the current session; open map sessions of this user are closed"""
    (await auth_gate.sign_out(db, auth_session.jti)).unwrap()
    return BaseResponse.success({"message": "Signed out"})


@router.get("/session", response_model=BaseResponse[SessionResponse])
async def current_session(auth_session: AuthSession = Depends(get_auth_session)) -> BaseResponse[SessionResponse]:
    return BaseResponse.success(
        SessionResponse(
            user=AuthUserResponse.model_validate(auth_session.user),
            is_admin=auth_session.is_admin,
            expires_at=auth_session.expires_at,
        )
    )
