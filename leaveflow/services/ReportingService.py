"""Read-only leave usage reports, recomputed from the store on every call."""

from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from leaveflow.constants.constants import LeaveStatus
from leaveflow.core.config import settings
from leaveflow.models.leave import LeaveRequest
from leaveflow.models.user import User
from leaveflow.utils.team_scope import team_member_ids


class ReportingService:
    """Aggregates approved and pending leave for admin and manager reports."""

    def __init__(self, db: Session):
        self.db = db

    def _approved_requests(self, user_ids=None) -> List[LeaveRequest]:
        query = select(LeaveRequest).where(LeaveRequest.status == LeaveStatus.approved)
        if user_ids is not None:
            query = query.where(LeaveRequest.user_id.in_(user_ids))
        return list(self.db.execute(query).unique().scalars().all())

    def department_usage(self) -> Dict[str, int]:
        """Approved days summed per requester department."""
        usage = defaultdict(int)
        for leave in self._approved_requests():
            usage[leave.user.department] += leave.days
        return dict(sorted(usage.items()))

    def company_summary(self) -> dict:
        approved = self._approved_requests()

        department_usage = defaultdict(int)
        user_usage = {}
        for leave in approved:
            department_usage[leave.user.department] += leave.days
            entry = user_usage.setdefault(leave.user_id, {"name": leave.user.full_name, "days": 0})
            entry["days"] += leave.days

        return {
            "departmentUsage": dict(sorted(department_usage.items())),
            "userUsage": dict(sorted(user_usage.items())),
            "totalApprovedRequests": len(approved),
        }

    def pending_summary(self, manager_id: int) -> List[dict]:
        """Pending request count for every member of the manager's team."""
        member_ids = team_member_ids(self.db, manager_id)
        if not member_ids:
            return []

        members = self.db.execute(
            select(User).where(User.user_id.in_(member_ids)).order_by(User.user_id)
        ).unique().scalars().all()
        counts = dict(
            self.db.execute(
                select(LeaveRequest.user_id, func.count(LeaveRequest.request_id))
                .where(
                    LeaveRequest.user_id.in_(member_ids),
                    LeaveRequest.status == LeaveStatus.pending,
                )
                .group_by(LeaveRequest.user_id)
            ).all()
        )
        return [
            {
                "userId": member.user_id,
                "name": member.full_name,
                "pendingRequests": counts.get(member.user_id, 0),
            }
            for member in members
        ]

    def upcoming_leaves(self, manager_id: int, today: Optional[date] = None) -> List[dict]:
        """Approved team leave starting within the upcoming window."""
        today = today or date.today()
        horizon = today + timedelta(days=settings.UPCOMING_LEAVE_WINDOW_DAYS)
        member_ids = team_member_ids(self.db, manager_id, on=today)
        if not member_ids:
            return []

        leaves = self.db.execute(
            select(LeaveRequest)
            .where(
                LeaveRequest.user_id.in_(member_ids),
                LeaveRequest.status == LeaveStatus.approved,
                LeaveRequest.start_date >= today,
                LeaveRequest.start_date <= horizon,
            )
            .order_by(LeaveRequest.start_date, LeaveRequest.request_id)
        ).unique().scalars().all()
        return [
            {
                "requestId": leave.request_id,
                "userId": leave.user_id,
                "name": leave.requester_name,
                "startDate": leave.start_date.isoformat(),
                "endDate": leave.end_date.isoformat(),
                "days": leave.days,
            }
            for leave in leaves
        ]
