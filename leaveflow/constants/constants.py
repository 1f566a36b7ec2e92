"""Constants for user roles, leave types, leave statuses and shared messages."""

from enum import Enum


class RoleName(str, Enum):
    """Enumeration of user roles within the organization."""

    employee = "employee"
    manager = "manager"
    admin = "admin"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Reference role ids, seeded on startup.
ROLE_IDS = {
    RoleName.employee: 1,
    RoleName.manager: 2,
    RoleName.admin: 3,
}


class LeaveType(str, Enum):
    """Enumeration of leave types."""

    annual = "Annual Leave"
    sick = "Sick Leave"


class LeaveStatus(str, Enum):
    """Enumeration of leave request statuses."""

    pending = "Pending"
    approved = "Approved"
    rejected = "Rejected"
    cancelled = "Cancelled"


# Statuses that still hold a claim on the requester's calendar.
ACTIVE_STATUSES = (LeaveStatus.pending, LeaveStatus.approved)

TERMINAL_STATUSES = (LeaveStatus.rejected, LeaveStatus.cancelled)

ALLOWED_TRANSITIONS = {
    LeaveStatus.pending: {LeaveStatus.approved, LeaveStatus.rejected, LeaveStatus.cancelled},
    LeaveStatus.approved: {LeaveStatus.cancelled},
    **{terminal: set() for terminal in TERMINAL_STATUSES},
}

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
RATE_LIMIT_MESSAGE = "Too many requests from this IP. Please try again later."
