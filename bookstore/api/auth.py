"""Authentication API routes."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import get_current_user
from bookstore.api.schemas import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from bookstore.core.database import atomic, get_db
from bookstore.core.security import create_access_token
from bookstore.models.user import User
from bookstore.services.users import (
    AuthenticationError,
    DuplicateUserError,
    UserService,
    get_user_service,
    token_claims_for,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(message: str, user: User) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=create_access_token(token_claims_for(user)),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    users: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Register a new user and return a bearer token."""
    try:
        async with atomic(db):
            user = await users.register(
                email=request.email,
                password=request.password,
                username=request.username,
                first_name=request.first_name,
                last_name=request.last_name,
            )
    except DuplicateUserError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return _auth_response("Registration successful", user)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    users: UserService = Depends(get_user_service),
) -> AuthResponse:
    """Check credentials and return a bearer token."""
    try:
        user = await users.authenticate(request.username_or_email, request.password)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return _auth_response("Login successful", user)


@router.get("/profile", response_model=UserResponse)
@router.get("/me", response_model=UserResponse, include_in_schema=False)
async def get_profile(
    current_user: User = Depends(get_current_user),
) -> User:
    """Get the profile of the authenticated user."""
    return current_user
