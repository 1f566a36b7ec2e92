"""Admin writes to users and manager assignments."""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leaveflow.constants.constants import RoleName
from leaveflow.core.config import settings
from leaveflow.core.exceptions import NotFound, ValidationError
from leaveflow.core.security import hash_password
from leaveflow.models.management import ManagerLink
from leaveflow.models.user import Role, User

logger = logging.getLogger(__name__)


def _required_text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


class UserManagementService:
    """Admin operations on user accounts, roles, balances and manager links."""

    def __init__(self, db: Session):
        self.db = db

    def _get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    def _get_role(self, role_id: int) -> Role:
        role = self.db.get(Role, role_id)
        if not role:
            raise ValidationError(f"Invalid roleId: {role_id}")
        return role

    def list_users(self) -> List[User]:
        return list(self.db.execute(select(User).order_by(User.user_id)).unique().scalars().all())

    def list_roles(self) -> List[Role]:
        return list(self.db.execute(select(Role).order_by(Role.role_id)).scalars().all())

    def add_user(
        self,
        firstname: str,
        surname: str,
        email: str,
        password: str,
        role_id: int,
        department: str,
        annual_leave_balance: Optional[int] = None,
    ) -> User:
        firstname = _required_text(firstname, "firstname")
        surname = _required_text(surname, "surname")
        email = _required_text(email, "email")
        department = _required_text(department, "department")
        if not password:
            raise ValidationError("password is required")
        if annual_leave_balance is None:
            annual_leave_balance = settings.DEFAULT_ANNUAL_LEAVE
        if annual_leave_balance < 0:
            raise ValidationError("annualLeaveBalance must be >= 0")

        role = self._get_role(role_id)
        if self.db.execute(select(User.user_id).where(User.email == email)).first():
            raise ValidationError("Email already in use")

        password_hash, salt = hash_password(password)
        user = User(
            firstname=firstname,
            surname=surname,
            email=email,
            password=password_hash,
            salt=salt,
            department=department,
            annual_leave_balance=annual_leave_balance,
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError("Email already in use")
        self.db.refresh(user)
        logger.info(f"Created user {user.user_id} ({role.name.value})")
        return user

    def assign_manager(self, employee_id: int, manager_id: int, start_date: Optional[date] = None) -> ManagerLink:
        if employee_id == manager_id:
            raise ValidationError("An employee cannot be their own manager")
        self._get_user(employee_id)
        manager = self._get_user(manager_id)
        if manager.role_name != RoleName.manager:
            raise ValidationError("Assigned manager must have the manager role")

        link = ManagerLink(
            employee_id=employee_id,
            manager_id=manager_id,
            start_date=start_date or date.today(),
        )
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)
        logger.info(f"Assigned manager {manager_id} to employee {employee_id} from {link.start_date}")
        return link

    def update_role(self, user_id: int, role_id: int) -> User:
        user = self._get_user(user_id)
        user.role = self._get_role(role_id)
        self.db.commit()
        logger.info(f"Updated role of user {user_id} to {user.role.name.value}")
        return user

    def update_department(self, user_id: int, department: str) -> User:
        user = self._get_user(user_id)
        user.department = _required_text(department, "department")
        self.db.commit()
        logger.info(f"Updated department of user {user_id}")
        return user

    def update_balance(self, user_id: int, balance: int) -> User:
        if balance is None or balance < 0:
            raise ValidationError("annualLeaveBalance must be >= 0")
        user = self._get_user(user_id)
        user.annual_leave_balance = balance
        self.db.commit()
        logger.info(f"Updated leave balance of user {user_id} to {balance}")
        return user
