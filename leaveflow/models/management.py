"""Manager assignment model: which employee reports to which manager."""

from datetime import date

from sqlalchemy import Column, Date, ForeignKey, Integer
from sqlalchemy.orm import relationship

from leaveflow.models.base import Base, TimestampMixin


class ManagerLink(Base, TimestampMixin):
    """Model representing a manager assignment effective from ``start_date``.

    Rows are kept as history. For any given day the active link of an
    employee is the one with the latest ``start_date`` on or before that day.
    """

    __tablename__ = "user_management"
    link_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False, default=date.today)

    employee = relationship("User", foreign_keys=[employee_id], backref="manager_links")
    manager = relationship("User", foreign_keys=[manager_id], backref="managed_links")
