"""User management API routes."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import get_current_user, set_content_range
from bookstore.api.schemas import MessageResponse, UpdateUserRequest, UserResponse
from bookstore.core.database import atomic, get_db
from bookstore.models.user import User
from bookstore.services.users import UserService, get_user_service

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(get_current_user)],
)


async def _load_user(users: UserService, user_id: str) -> User:
    user = await users.get(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("", response_model=list[UserResponse])
async def list_users(
    response: Response,
    users: UserService = Depends(get_user_service),
) -> list[User]:
    """List all users."""
    result = await users.list_users()
    set_content_range(response, "users", len(result))
    return result


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    users: UserService = Depends(get_user_service),
) -> User:
    """Get a user by ID."""
    return await _load_user(users, user_id)


@router.put("/{user_id}", response_model=MessageResponse)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    db: AsyncSession = Depends(get_db),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Update a user's profile names."""
    user = await _load_user(users, user_id)
    async with atomic(db):
        await users.update_profile(user, request.first_name, request.last_name)
    return MessageResponse(message="User updated successfully")


@router.delete("/{user_id}", response_model=MessageResponse)
async def deactivate_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    users: UserService = Depends(get_user_service),
) -> MessageResponse:
    """Deactivate a user account. The row is kept."""
    user = await _load_user(users, user_id)
    async with atomic(db):
        await users.deactivate(user)
    return MessageResponse(message="User deactivated successfully")
