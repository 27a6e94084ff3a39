"""Dependencies for API endpoints."""

from typing import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.db import SessionLocal
from app.models.user import User
from app.services.actors import Actor, AdminActor, actor_from_user
from app.services.storage import BlobStore, build_blob_store
from app.services.ticket_lifecycle import TicketLifecycle
from app.utils.exceptions import AuthenticationError, AuthorizationError
from app.utils.jwt_manager import decode_access_token
from app.utils.logging_config import logger

reusable_oauth2 = HTTPBearer(scheme_name="Bearer", auto_error=False)

_blob_store: BlobStore | None = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency to get a DB session.
    """
    async with SessionLocal() as session:
        yield session


async def get_current_user(
    token: HTTPAuthorizationCredentials | None = Depends(reusable_oauth2),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Dependency to get the current user from the bearer token.

    The token only names the user; role and department always come from the
    user row so that revoked or reassigned accounts take effect immediately.
    """
    if token is None:
        raise AuthenticationError("Not authorized, no token")

    user_id = decode_access_token(token.credentials)
    result = await db.execute(select(User).filter(User.id == user_id))
    user = result.scalars().first()

    if not user:
        logger.warning(f"Token presented for unknown user {user_id}")
        raise AuthenticationError("User not found.")
    return user


async def get_actor(user: User = Depends(get_current_user)) -> Actor:
    return actor_from_user(user)


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store is None:
        _blob_store = build_blob_store()
    return _blob_store


def get_ticket_lifecycle(
    db: AsyncSession = Depends(get_db_session),
    blob_store: BlobStore = Depends(get_blob_store),
) -> TicketLifecycle:
    return TicketLifecycle(db, blob_store=blob_store)


async def get_admin_actor(actor: Actor = Depends(get_actor)) -> AdminActor:
    if not isinstance(actor, AdminActor):
        raise AuthorizationError("Access denied. Admin only.")
    return actor
