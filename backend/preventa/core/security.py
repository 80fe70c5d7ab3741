"""Security utilities for password hashing and JWT authentication."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from preventa.config import get_settings
from preventa.core.exceptions import AuthenticationError

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenData(BaseModel):
    """Identity extracted from a JWT token.

    ``uid`` is the stable user identifier threaded through every service call.
    """
    uid: str
    username: Optional[str] = None


class Token(BaseModel):
    """Token response model."""
    access_token: str
    token_type: str = "bearer"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


def create_access_token(
    uid: str,
    username: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token for a user.

    Args:
        uid: User identifier, stored as the token subject.
        username: Optional display claim.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.jwt_expire_hours)
    )
    to_encode = {"sub": uid, "exp": expire}
    if username:
        to_encode["username"] = username

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> TokenData:
    """Decode and validate a JWT token.

    Raises:
        AuthenticationError: If token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {str(e)}")

    uid = payload.get("sub")
    if not uid:
        raise AuthenticationError("Invalid token: missing subject")
    return TokenData(uid=uid, username=payload.get("username"))
