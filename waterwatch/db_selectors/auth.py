# Standard library imports
from uuid import UUID

# Third-party imports
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Local application imports
from waterwatch.models.auth.session import Session
from waterwatch.models.auth.user import User


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user_in_db(db: AsyncSession, user: User) -> User:
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_session_in_db(db: AsyncSession, session: Session) -> Session:
    db.add(session)
    await db.commit()
    await db.refresh(session)
    return session


async def get_session_by_jti(db: AsyncSession, access_token_jti: str) -> Session | None:
    result = await db.execute(select(Session).where(Session.access_token_jti == access_token_jti))
    return result.scalar_one_or_none()


async def invalidate_session_in_db(db: AsyncSession, session: Session, reason: str) -> Session:
    session.invalidate(reason)
    await db.commit()
    await db.refresh(session)
    return session
