"""Password hashing and bearer token signing."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from bookstore.core.config import Settings, get_settings


class InvalidTokenError(Exception):
    """Raised when a bearer token fails signature, issuer, audience or expiry checks."""


@dataclass
class TokenClaims:
    """Claims carried by an issued bearer token."""

    user_id: str
    name: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str = "User"


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(
    claims: TokenClaims,
    settings: Settings | None = None,
    now: datetime | None = None,
) -> str:
    """Issue a signed HS256 token for the given claims."""
    settings = settings or get_settings()
    issued_at = now or datetime.now(tz=timezone.utc)

    payload = {
        "sub": claims.user_id,
        "userId": claims.user_id,
        "name": claims.name,
        "email": claims.email,
        "firstName": claims.first_name,
        "lastName": claims.last_name,
        "role": claims.role,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.jwt_expiration_hours),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm="HS256")


def decode_access_token(token: str, settings: Settings | None = None) -> TokenClaims:
    """Verify a token and return its claims.

    Raises:
        InvalidTokenError: If the signature, issuer, audience or expiry check fails.
    """
    settings = settings or get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iss", "aud", "sub"]},
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    return TokenClaims(
        user_id=payload["sub"],
        name=payload.get("name", ""),
        email=payload.get("email", ""),
        first_name=payload.get("firstName", ""),
        last_name=payload.get("lastName", ""),
        role=payload.get("role", "User"),
    )
