"""
Persisted sign-in sessions.

Every access token carries a ``jti`` that points at one row here. Signing out
flips the row, so a token stays unusable after sign-out even though its
signature and expiry are still fine.
"""

# Standard library imports
from datetime import datetime
from uuid import UUID

# Third-party imports
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.core.monitoring import get_contextual_logger
from waterwatch.db_selectors.auth import create_session_in_db, get_session_by_jti, invalidate_session_in_db
from waterwatch.models.auth.session import Session
from waterwatch.services.geo.geolocation import get_client_ip
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.service_response import ServiceResult


async def create_session(
    db: AsyncSession,
    user_id: UUID,
    access_token_jti: str,
    expires_at: datetime,
    request: Request | None = None,
) -> ServiceResult[Session]:
    logger = get_contextual_logger(__name__, user_id=user_id)
    session = Session(
        user_id=user_id,
        access_token_jti=access_token_jti,
        user_agent=request.headers.get("user-agent") if request else None,
        ip_address=get_client_ip(request) if request else None,
        expires_at=expires_at,
    )
    try:
        session = await create_session_in_db(db, session)
    except SQLAlchemyError:
        logger.error("Could not store sign-in session", exc_info=True)
        await db.rollback()
        return ServiceResult.failure(ServiceError.Common.INTERNAL_SERVER_ERROR)
    return ServiceResult.success(session)


async def get_valid_session(db: AsyncSession, access_token_jti: str) -> ServiceResult[Session]:
    session = await get_session_by_jti(db, access_token_jti)
    if session is None:
        return ServiceResult.failure(ServiceError.Session.SESSION_NOT_FOUND)
    if not session.is_valid:
        return ServiceResult.failure(ServiceError.Session.SESSION_EXPIRED)
    return ServiceResult.success(session)


async def invalidate_session(db: AsyncSession, access_token_jti: str, reason: str = "sign_out") -> ServiceResult[Session]:
    """Mark the session behind ``access_token_jti`` as ended. Ending it twice is an error."""
    session = await get_session_by_jti(db, access_token_jti)
    if session is None:
        return ServiceResult.failure(ServiceError.Session.SESSION_NOT_FOUND)
    if not session.is_active or session.invalidated_at is not None:
        return ServiceResult.failure(ServiceError.Session.SESSION_ALREADY_INVALIDATED)

    try:
        session = await invalidate_session_in_db(db, session, reason)
    except SQLAlchemyError:
        get_contextual_logger(__name__, user_id=session.user_id).error("Could not end session", exc_info=True)
        await db.rollback()
        return ServiceResult.failure(ServiceError.Common.INTERNAL_SERVER_ERROR)
    return ServiceResult.success(session)
