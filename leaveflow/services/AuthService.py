"""Authentication service: credential checks, token issuance and profile lookup."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from leaveflow.constants.constants import INVALID_CREDENTIALS_MESSAGE
from leaveflow.core.exceptions import InvalidCredentials, Unauthenticated, ValidationError
from leaveflow.core.security import create_jwt_token, principal_from_token, verify_password
from leaveflow.models.user import User

logger = logging.getLogger(__name__)


def user_profile(user: User) -> dict:
    """Redacted view of a user: never includes the password hash or salt."""
    return {
        "userId": user.user_id,
        "firstname": user.firstname,
        "surname": user.surname,
        "email": user.email,
        "department": user.department,
        "annualLeaveBalance": user.annual_leave_balance,
        "role": {
            "roleId": user.role.role_id,
            "name": user.role.name.value,
        },
    }


class AuthService:
    """Verifies credentials and resolves bearer tokens back to users."""

    def __init__(self, db: Session):
        self.db = db

    def login(self, email: Optional[str], password: Optional[str]) -> str:
        if not email or not password:
            raise ValidationError("Missing email or password")

        user = self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if not user:
            raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)

        if not verify_password(password, user.salt, user.password):
            raise InvalidCredentials(INVALID_CREDENTIALS_MESSAGE)

        token = create_jwt_token({
            "userId": user.user_id,
            "role": user.role.name.value,
        })
        logger.info(f"User {user.user_id} logged in")
        return token

    def get_current_user(self, token: Optional[str]) -> dict:
        principal = principal_from_token(token)
        return self.get_profile(principal.user_id)

    def get_profile(self, user_id: int) -> dict:
        user = self.db.get(User, user_id)
        if not user:
            raise Unauthenticated("User not found")
        return user_profile(user)
