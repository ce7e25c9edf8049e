"""User account service: registration, authentication and profile updates."""

import logging
from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.core.database import get_db
from bookstore.core.security import TokenClaims, hash_password, verify_password
from bookstore.models.user import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """Raised when registering an email or username that is already taken."""


class AuthenticationError(Exception):
    """Raised when credentials are wrong or the account is deactivated."""


class UserService:
    """Service for managing user accounts."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: str) -> User | None:
        """Get a user by id."""
        return await self.db.get(User, user_id)

    async def list_users(self) -> list[User]:
        """List all users, newest first."""
        result = await self.db.execute(select(User).order_by(User.created_at.desc(), User.email))
        return list(result.scalars().all())

    async def find_by_login(self, username_or_email: str) -> User | None:
        """Find a user by email, falling back to username."""
        result = await self.db.execute(
            select(User).where(
                or_(User.email == username_or_email, User.username == username_or_email)
            )
        )
        users = list(result.scalars().all())
        for user in users:
            if user.email == username_or_email:
                return user
        return users[0] if users else None

    async def register(
        self,
        email: str,
        password: str,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Create a new active user.

        Raises:
            DuplicateUserError: If the email or username is already registered.
        """
        username = username or email

        existing = await self.db.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
        for user in existing.scalars().all():
            if user.email == email:
                raise DuplicateUserError("User with this email already exists")
            raise DuplicateUserError("User with this username already exists")

        now = datetime.now(tz=timezone.utc)
        user = User(
            email=email,
            username=username,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self.db.add(user)
        await self.db.flush()

        logger.info(f"Registered user {user.id}")
        return user

    async def authenticate(self, username_or_email: str, password: str) -> User:
        """Check credentials and return the user.

        Raises:
            AuthenticationError: If the user is unknown, deactivated, or the
                password does not match.
        """
        user = await self.find_by_login(username_or_email)
        if user is None:
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user

    async def update_profile(
        self,
        user: User,
        first_name: str | None,
        last_name: str | None,
    ) -> User:
        """Replace the user's name fields."""
        user.first_name = first_name
        user.last_name = last_name
        user.updated_at = datetime.now(tz=timezone.utc)
        await self.db.flush()
        return user

    async def deactivate(self, user: User) -> User:
        """Soft-delete a user: the row stays, logins are refused."""
        user.is_active = False
        user.updated_at = datetime.now(tz=timezone.utc)
        await self.db.flush()

        logger.info(f"Deactivated user {user.id}")
        return user


def token_claims_for(user: User) -> TokenClaims:
    """Build the token claims carried for a user."""
    return TokenClaims(
        user_id=user.id,
        name=user.username,
        email=user.email,
        first_name=user.first_name or "",
        last_name=user.last_name or "",
        role=user.role,
    )


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Dependency that provides the user service."""
    return UserService(db)
