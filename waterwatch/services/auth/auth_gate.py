"""
Sign-in, sign-up, sign-out and session lookup.

The admin flag is the ``is_admin`` column on the user, copied into the access
token as a role claim. The admin account is seeded from settings at startup
(``ensure_admin_account``); there is no credential that bypasses the database.
"""

# Standard library imports
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
import inspect
from uuid import UUID

# Third-party imports
from fastapi import Request
import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger, get_logger
from waterwatch.db_selectors.auth import create_user_in_db, get_user_by_email, get_user_by_id
from waterwatch.models.auth.user import User
from waterwatch.services.auth.session_services import create_session, get_valid_session, invalidate_session
from waterwatch.services.auth.token_services import create_access_token, decode_access_token
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult
from waterwatch.settings import settings
from waterwatch.utils.password_utils import get_password_hash, verify_password

logger = get_logger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


AuthListener = Callable[[AuthEvent, UUID], Awaitable[None] | None]


@dataclass(frozen=True)
class AuthSession:
    user: User
    access_token: str
    jti: str
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return bool(self.user.is_admin)


class AuthGate:
    def __init__(self) -> None:
        self._listeners: list[AuthListener] = []

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register ``listener(event, user_id)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _emit(self, event: AuthEvent, user_id: UUID) -> None:
        for listener in list(self._listeners):
            result = listener(event, user_id)
            if inspect.isawaitable(result):
                await result

    async def _open_session(
        self, db: AsyncSession, user: User, request: Request | None
    ) -> ServiceResult[AuthSession]:
        token, jti, expires_at = create_access_token(user.id, user.email, is_admin=user.is_admin)
        session_result = await create_session(db, user.id, jti, expires_at, request)
        if not session_result.ok:
            return ServiceResult.failure(session_result.error)  # type: ignore[arg-type]

        user.last_login = datetime.now(UTC)
        await db.commit()

        await self._emit(AuthEvent.SIGNED_IN, user.id)
        return ServiceResult.success(AuthSession(user=user, access_token=token, jti=jti, expires_at=expires_at))

    async def sign_in(
        self, db: AsyncSession, email: str, password: str, request: Request | None = None
    ) -> ServiceResult[AuthSession]:
        log = get_contextual_logger(__name__, email=email)
        user = await get_user_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            log.info("Sign-in rejected")
            return ServiceResult.failure(ServiceError.Auth.INVALID_CREDENTIALS)
        return await self._open_session(db, user, request)

    async def sign_up(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        full_name: str | None = None,
        request: Request | None = None,
    ) -> ServiceResult[AuthSession]:
        """Create a citizen account and sign it in."""
        email = email.strip().lower()
        if await get_user_by_email(db, email) is not None:
            return ServiceResult.failure(ServiceError.Auth.EMAIL_ALREADY_REGISTERED)

        user = User(email=email, hashed_password=get_password_hash(password), full_name=full_name, is_admin=False)
        try:
            user = await create_user_in_db(db, user)
        except IntegrityError:
            await db.rollback()
            return ServiceResult.failure(ServiceError.Auth.EMAIL_ALREADY_REGISTERED)

        logger.info(f"Registered user {user.id}")
        return await self._open_session(db, user, request)

    async def sign_out(self, db: AsyncSession, access_token_jti: str) -> ServiceResult[UUID]:
        result = await invalidate_session(db, access_token_jti, reason="sign_out")
        if not result.ok or result.data is None:
            return ServiceResult.failure(result.error)  # type: ignore[arg-type]
        user_id = result.data.user_id
        await self._emit(AuthEvent.SIGNED_OUT, user_id)
        return ServiceResult.success(user_id)

    async def get_session(self, db: AsyncSession, token: str) -> ServiceResult[AuthSession]:
        """Resolve a bearer token to its user, checking the persisted session."""
        try:
            payload = decode_access_token(token)
        except jwt.PyJWTError:
            return ServiceResult.failure(ServiceError.Auth.INVALID_TOKEN)

        session_result = await get_valid_session(db, payload["jti"])
        if not session_result.ok or session_result.data is None:
            return ServiceResult.failure(ServiceError.Auth.INVALID_TOKEN)

        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            return ServiceResult.failure(ServiceError.Auth.INVALID_TOKEN)

        user = await get_user_by_id(db, user_id)
        if user is None:
            return ServiceResult.failure(ServiceError.Auth.INVALID_TOKEN)

        return ServiceResult.success(
            AuthSession(user=user, access_token=token, jti=payload["jti"], expires_at=session_result.data.expires_at)
        )


async def ensure_admin_account(db: AsyncSession) -> User:
    """Create the configured admin account if it does not exist yet."""
    existing_admin = await get_user_by_email(db, settings.ADMIN_EMAIL)
    if existing_admin is not None:
        if not existing_admin.is_admin:
            existing_admin.is_admin = True
            await db.commit()
        logger.info("Admin user already exists.")
        return existing_admin

    admin_user = User(
        email=settings.ADMIN_EMAIL.strip().lower(),
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        full_name="Administrator",
        is_admin=True,
    )
    admin_user = await create_user_in_db(db, admin_user)
    logger.info("Admin user created.")
    return admin_user
