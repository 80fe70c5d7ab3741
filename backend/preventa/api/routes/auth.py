"""Authentication endpoints."""

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from preventa.api.deps import get_current_account, get_current_user, get_user_service
from preventa.core.logging import get_logger
from preventa.core.security import Token, TokenData, create_access_token
from preventa.models import User
from preventa.schemas.user import LoginRequest, ProfileResponse, RegisterRequest
from preventa.services.users import UserService

router = APIRouter()
logger = get_logger(__name__)


def _issue_token(user: User) -> Token:
    access_token = create_access_token(uid=user.uid, username=user.username)
    logger.info("login_success", uid=user.uid, username=user.username)
    return Token(access_token=access_token)


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    users: UserService = Depends(get_user_service),
) -> ProfileResponse:
    """
    Create an account.

    Raises:
        ConflictError: If the username is already taken.
    """
    user = users.register(request)
    return users.to_profile(user)


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: UserService = Depends(get_user_service),
) -> Token:
    """
    Authenticate user and return JWT token.

    Uses OAuth2 password flow (form data with username/password).
    """
    user = users.authenticate(form_data.username, form_data.password)
    return _issue_token(user)


@router.post("/login/json", response_model=Token)
async def login_json(
    request: LoginRequest,
    users: UserService = Depends(get_user_service),
) -> Token:
    """Authenticate user via JSON body and return JWT token."""
    user = users.authenticate(request.username, request.password)
    return _issue_token(user)


@router.get("/me")
async def get_me(account: User = Depends(get_current_account)):
    """Get current authenticated user information."""
    return {
        "uid": account.uid,
        "username": account.username,
        "authenticated": True,
    }


@router.post("/verify")
async def verify_token(current_user: TokenData = Depends(get_current_user)):
    """Verify that the current token is valid."""
    return {
        "valid": True,
        "uid": current_user.uid,
        "username": current_user.username,
    }
