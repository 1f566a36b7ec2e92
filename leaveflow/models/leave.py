"""Leave request model for users of the Leaveflow system."""

from sqlalchemy import Column, Date, Enum, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from leaveflow.constants.constants import LeaveStatus, LeaveType
from leaveflow.models.base import Base, TimestampMixin
from leaveflow.utils.dates import inclusive_days


class LeaveRequest(Base, TimestampMixin):
    """Model representing leave requests submitted by users."""

    __tablename__ = "leave_requests"
    request_id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    leave_type = Column(
        Enum(LeaveType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LeaveType.annual,
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(
        Enum(LeaveStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=LeaveStatus.pending,
        index=True,
    )
    reason = Column(Text, nullable=True)

    user = relationship("User", back_populates="leave_requests", lazy="joined")

    @property
    def days(self) -> int:
        return inclusive_days(self.start_date, self.end_date)

    @property
    def requester_name(self) -> str:
        return self.user.full_name
