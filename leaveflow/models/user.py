"""User and role models for the Leaveflow system."""

from sqlalchemy import Column, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from leaveflow.constants.constants import RoleName
from leaveflow.core.config import settings
from leaveflow.models.base import Base, TimestampMixin


class Role(Base):
    """Reference data: one row per ``RoleName``."""

    __tablename__ = "roles"
    role_id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(Enum(RoleName), unique=True, nullable=False)

    users = relationship("User", back_populates="role")


class User(Base, TimestampMixin):
    __tablename__ = "users"
    user_id = Column(Integer, primary_key=True, index=True)
    firstname = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    department = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(128), nullable=False)
    salt = Column(String(64), nullable=False)
    annual_leave_balance = Column(Integer, nullable=False, default=settings.DEFAULT_ANNUAL_LEAVE)
    role_id = Column(Integer, ForeignKey("roles.role_id"), nullable=False)

    # Relationships
    role = relationship("Role", back_populates="users", lazy="joined")
    leave_requests = relationship("LeaveRequest", back_populates="user")

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.surname}"

    @property
    def role_name(self) -> RoleName:
        return self.role.name

    @property
    def role_label(self) -> str:
        return self.role.name.label
