"""Leave request lifecycle: submission, review, cancellation and caller-scoped reads.

State machine per request::

    Pending  -> Approved | Rejected | Cancelled
    Approved -> Cancelled

Rejected and Cancelled are terminal. Balance is only committed on approval and
given back when an approved request is cancelled.

Mutations lock the requester's user row (and the request row, where there is
one) inside a single transaction so that concurrent approvals, cancellations
and submissions for the same user are serialised by the database.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from leaveflow.constants.constants import (
    ACTIVE_STATUSES,
    ALLOWED_TRANSITIONS,
    LeaveStatus,
    LeaveType,
    RoleName,
)
from leaveflow.core.exceptions import (
    Forbidden,
    InsufficientBalance,
    InvalidRange,
    InvalidTransition,
    NotFound,
    Overlap,
)
from leaveflow.core.security import Principal
from leaveflow.models.leave import LeaveRequest
from leaveflow.models.user import User
from leaveflow.utils.dates import inclusive_days
from leaveflow.utils.team_scope import is_team_member, team_member_ids

logger = logging.getLogger(__name__)


class LeaveRequestService:
    """Enforces the leave request rules against the store handle it is given."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------
    # Loading helpers
    # ------------------------------
    def _get_user(self, user_id: int, lock: bool = False) -> User:
        query = select(User).where(User.user_id == user_id)
        if lock:
            query = query.with_for_update(of=User).execution_options(populate_existing=True)
        user = self.db.execute(query).unique().scalar_one_or_none()
        if not user:
            raise NotFound("User not found")
        return user

    def _get_request(self, request_id: int, lock: bool = False) -> LeaveRequest:
        query = select(LeaveRequest).where(LeaveRequest.request_id == request_id)
        if lock:
            query = query.with_for_update(of=LeaveRequest).execution_options(populate_existing=True)
        leave = self.db.execute(query).unique().scalar_one_or_none()
        if not leave:
            raise NotFound("Leave request not found")
        return leave

    @staticmethod
    def _ensure_transition(leave: LeaveRequest, target: LeaveStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[leave.status]:
            raise InvalidTransition(
                f"Cannot move leave request {leave.request_id} from {leave.status.value} to {target.value}"
            )

    def _ensure_can_review(self, leave: LeaveRequest, actor: Principal) -> None:
        if actor.role == RoleName.admin:
            return
        if actor.role == RoleName.manager:
            if not is_team_member(self.db, actor.user_id, leave.user_id):
                raise Forbidden("You can only review leave requests from your team")
            return
        raise Forbidden("Only managers and admins can review leave requests")

    # ------------------------------
    # Mutations
    # ------------------------------
    def submit(
        self,
        requester_id: int,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        leave_type: LeaveType = LeaveType.annual,
    ) -> LeaveRequest:
        if end_date < start_date:
            raise InvalidRange("End date cannot be before start date")
        days = inclusive_days(start_date, end_date)

        requester = self._get_user(requester_id, lock=True)

        clash = self.db.execute(
            select(LeaveRequest.request_id).where(
                LeaveRequest.user_id == requester_id,
                LeaveRequest.status.in_(ACTIVE_STATUSES),
                LeaveRequest.start_date <= end_date,
                LeaveRequest.end_date >= start_date,
            ).limit(1)
        ).scalar_one_or_none()
        if clash is not None:
            raise Overlap(f"Leave request overlaps existing request {clash}")

        # Advisory only: the balance is committed at approval time.
        if days > requester.annual_leave_balance:
            raise InsufficientBalance(
                f"Requested {days} days but only {requester.annual_leave_balance} remaining"
            )

        leave = LeaveRequest(
            user_id=requester_id,
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=LeaveStatus.pending,
            reason=reason,
        )
        self.db.add(leave)
        self.db.commit()
        self.db.refresh(leave)
        logger.info(f"User {requester_id} submitted leave request {leave.request_id} for {days} days")
        return leave

    def approve(self, request_id: int, actor: Principal) -> LeaveRequest:
        leave = self._get_request(request_id, lock=True)
        self._ensure_transition(leave, LeaveStatus.approved)
        self._ensure_can_review(leave, actor)

        requester = self._get_user(leave.user_id, lock=True)
        days = leave.days
        if requester.annual_leave_balance < days:
            raise InsufficientBalance(
                f"Requested {days} days but only {requester.annual_leave_balance} remaining"
            )

        requester.annual_leave_balance -= days
        leave.status = LeaveStatus.approved
        self.db.commit()
        logger.info(
            f"User {actor.user_id} approved leave request {request_id}; "
            f"balance of user {requester.user_id} is now {requester.annual_leave_balance}"
        )
        return leave

    def reject(self, request_id: int, actor: Principal, reason: Optional[str] = None) -> LeaveRequest:
        leave = self._get_request(request_id, lock=True)
        self._ensure_transition(leave, LeaveStatus.rejected)
        self._ensure_can_review(leave, actor)

        leave.status = LeaveStatus.rejected
        leave.reason = reason
        self.db.commit()
        logger.info(f"User {actor.user_id} rejected leave request {request_id}")
        return leave

    def cancel(self, request_id: int, actor_user_id: int, reason: Optional[str] = None) -> LeaveRequest:
        leave = self._get_request(request_id, lock=True)
        if leave.user_id != actor_user_id:
            raise Forbidden("You can only cancel your own leave requests")
        self._ensure_transition(leave, LeaveStatus.cancelled)

        if leave.status == LeaveStatus.approved:
            requester = self._get_user(leave.user_id, lock=True)
            requester.annual_leave_balance += leave.days

        leave.status = LeaveStatus.cancelled
        if reason:
            leave.reason = reason
        self.db.commit()
        logger.info(f"User {actor_user_id} cancelled leave request {request_id}")
        return leave

    # ------------------------------
    # Reads
    # ------------------------------
    def list_for_caller(
        self,
        actor: Principal,
        employee_id: Optional[int] = None,
        manager_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> List[LeaveRequest]:
        """
        Leave requests visible to ``actor``.
        - employee: own requests only
        - manager: requests of their team, optionally narrowed to one employee
        - admin: everything, optionally narrowed by employee and/or manager
        """
        if actor.role == RoleName.employee:
            if employee_id is not None and employee_id != actor.user_id:
                raise Forbidden("Employees can only view their own leave requests")
            user_ids = [actor.user_id]
        elif actor.role == RoleName.manager:
            if manager_id is not None and manager_id != actor.user_id:
                raise Forbidden("Managers can only view their own team")
            user_ids = team_member_ids(self.db, actor.user_id)
            if employee_id is not None:
                if employee_id not in user_ids:
                    raise Forbidden("Employee is not in your team")
                user_ids = [employee_id]
        else:
            user_ids = None
            if manager_id is not None:
                user_ids = team_member_ids(self.db, manager_id)
            if employee_id is not None:
                user_ids = [employee_id] if user_ids is None or employee_id in user_ids else []

        query = select(LeaveRequest)
        if user_ids is not None:
            if not user_ids:
                return []
            query = query.where(LeaveRequest.user_id.in_(user_ids))
        if status is not None:
            query = query.where(LeaveRequest.status == status)
        query = query.order_by(LeaveRequest.start_date, LeaveRequest.request_id)
        return list(self.db.execute(query).unique().scalars().all())

    def remaining_balance(self, target_user_id: int, actor: Principal) -> User:
        if actor.role == RoleName.employee and target_user_id != actor.user_id:
            raise Forbidden("Employees can only view their own balance")
        if (
            actor.role == RoleName.manager
            and target_user_id != actor.user_id
            and not is_team_member(self.db, actor.user_id, target_user_id)
        ):
            raise Forbidden("Employee is not in your team")
        return self._get_user(target_user_id)

    def managed_users(self, manager_id: int) -> List[User]:
        ids = team_member_ids(self.db, manager_id)
        if not ids:
            return []
        return list(
            self.db.execute(
                select(User).where(User.user_id.in_(ids)).order_by(User.surname, User.firstname)
            ).unique().scalars().all()
        )
