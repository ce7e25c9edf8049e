"""Shared API dependencies."""

from fastapi import Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.database import Base, get_db
from bookstore.core.security import InvalidTokenError, decode_access_token
from bookstore.models.user import User
from bookstore.services.book_filters import content_range

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user."""
    if credentials is None:
        raise _unauthorized("User not authenticated")

    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidTokenError:
        raise _unauthorized("Invalid or expired token")

    user = await db.get(User, claims.user_id)
    if user is None:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("Account is deactivated")
    return user


def set_content_range(response: Response, resource: str, total: int) -> None:
    """Attach the collection range header used by list clients."""
    response.headers["Content-Range"] = content_range(resource, total)


async def stale_write_error(
    db: AsyncSession,
    model: type[Base],
    row_id: int,
    label: str,
) -> HTTPException:
    """Translate an optimistic-concurrency failure into 404 or 409.

    The row is gone: not found. The row still exists but changed underneath
    the update: conflict.
    """
    exists = await db.scalar(select(model.id).where(model.id == row_id))
    if exists is None:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"{label} was modified by another request",
    )
