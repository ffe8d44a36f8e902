# Third-party imports
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.backend import BackendClient
from waterwatch.core.db import get_async_session
from waterwatch.core.events import EventChannel
from waterwatch.models.auth.user import User
from waterwatch.services.auth.auth_gate import AuthGate, AuthSession
from waterwatch.services.chat.registry import ConversationRegistry
from waterwatch.services.issues.store_registry import StoreRegistry
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult
from waterwatch.settings import settings

# OAuth2PasswordBearer for token extraction
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/signin", auto_error=False)


def get_backend(request: Request) -> BackendClient:
    return request.app.state.backend


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


def get_store_registry(request: Request) -> StoreRegistry:
    return request.app.state.stores


def get_conversations(request: Request) -> ConversationRegistry:
    return request.app.state.conversations


def get_event_channel(request: Request) -> EventChannel:
    return request.app.state.events


async def get_auth_session_optional(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_session),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> AuthSession | None:
    """Get the current session if a valid token is provided, otherwise None"""
    if not token:
        return None
    result = await auth_gate.get_session(db, token)
    return result.data if result.ok else None


async def get_auth_session(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_session),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> AuthSession:
    """Get the current session from the bearer token or answer 401 with a sign-in prompt"""
    if not token:
        raise ServiceResult.failure(ServiceError.Auth.SIGN_IN_REQUIRED).to_http_exception()

    result = await auth_gate.get_session(db, token)
    if not result.ok or result.data is None:
        exc = result.to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        raise exc
    return result.data


async def get_current_user_optional(
    auth_session: AuthSession | None = Depends(get_auth_session_optional),
) -> User | None:
    return auth_session.user if auth_session else None


async def get_current_user(auth_session: AuthSession = Depends(get_auth_session)) -> User:
    return auth_session.user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise ServiceResult.failure(ServiceError.Auth.ADMIN_REQUIRED).to_http_exception()
    return current_user
