"""User accounts and profile."""

from typing import Optional

from sqlalchemy.orm import Session

from preventa.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from preventa.core.logging import get_logger
from preventa.core.security import get_password_hash, verify_password
from preventa.models import User
from preventa.schemas.user import ProfileResponse, ProfileUpdate, RegisterRequest
from preventa.services.health import HealthService, clamp_water_goal

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session, health_service: HealthService):
        self.db = db
        self.health_service = health_service

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def get(self, uid: str) -> User:
        user = self.db.query(User).filter(User.uid == uid).first()
        if user is None:
            raise NotFoundError("User", uid)
        return user

    def register(self, data: RegisterRequest) -> User:
        if self.get_by_username(data.username) is not None:
            raise ConflictError("User", data.username)

        user = User(
            username=data.username,
            password_hash=get_password_hash(data.password),
            display_name=data.display_name or data.username,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("user_registered", uid=user.uid, username=user.username)
        return user

    def authenticate(self, username: str, password: str) -> User:
        """Return the user for valid credentials.

        Raises:
            AuthenticationError: If the username is unknown or the password is wrong.
        """
        user = self.get_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("login_failed", username=username, reason="invalid_credentials")
            raise AuthenticationError("Invalid username or password")
        return user

    def update_profile(self, uid: str, data: ProfileUpdate) -> User:
        user = self.get(uid)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "water_goal_oz" in changes:
            changes["water_goal_oz"] = clamp_water_goal(changes["water_goal_oz"])
        for field, value in changes.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)

        # Body measurements are also kept as samples so the latest reading wins
        if "weight_lbs" in changes:
            self.health_service.record_sample(uid, "weight", changes["weight_lbs"], unit="lb", source="profile")
        if "height_inches" in changes:
            self.health_service.record_sample(uid, "height", changes["height_inches"], unit="in", source="profile")

        logger.info("profile_updated", uid=uid, fields=sorted(changes))
        return user

    def to_profile(self, user: User) -> ProfileResponse:
        steps_goal, water_goal = self.health_service.get_goals(user)
        return ProfileResponse(
            uid=user.uid,
            username=user.username,
            display_name=user.display_name,
            height_inches=user.height_inches,
            weight_lbs=user.weight_lbs,
            steps_goal=steps_goal,
            water_goal_oz=water_goal,
            created_at=user.created_at,
        )
