"""API dependencies for dependency injection."""

from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from preventa.core.exceptions import AuthenticationError
from preventa.core.security import TokenData, decode_token
from preventa.database import SessionFactory, get_db, get_session_factory
from preventa.models import User
from preventa.services.health import HealthService
from preventa.services.tracking import TrackingService
from preventa.services.users import UserService

# OAuth2 scheme for token extraction
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/login",
    auto_error=False,  # Don't auto-raise, we handle it manually
)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
) -> TokenData:
    """Get the current authenticated user from JWT token.

    Raises:
        AuthenticationError: If not authenticated or token invalid.
    """
    if not token:
        raise AuthenticationError("Not authenticated")

    return decode_token(token)


def get_health_service(
    session_factory: SessionFactory = Depends(get_session_factory),
) -> HealthService:
    return HealthService(session_factory)


def get_user_service(
    db: Session = Depends(get_db),
    health_service: HealthService = Depends(get_health_service),
) -> UserService:
    return UserService(db, health_service)


def get_tracking_service(
    db: Session = Depends(get_db),
    health_service: HealthService = Depends(get_health_service),
) -> TrackingService:
    return TrackingService(db, health_service)


def get_current_account(
    current_user: TokenData = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> User:
    """Resolve the token subject to a stored user.

    A token for a deleted account is treated as unauthenticated.
    """
    user = users.db.query(User).filter(User.uid == current_user.uid).first()
    if user is None:
        raise AuthenticationError("User no longer exists")
    return user


def get_current_uid(account: User = Depends(get_current_account)) -> str:
    return account.uid
