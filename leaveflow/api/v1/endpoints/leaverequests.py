"""Leave request router: employee submissions, manager review and team reports."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from leaveflow.constants.constants import LeaveStatus
from leaveflow.core.database import get_db
from leaveflow.core.security import (
    Principal,
    authenticated,
    employee_only,
    manager_only,
    manager_or_admin,
)
from leaveflow.schemas.leaveSchema import (
    LeaveRequestActionRequest,
    LeaveRequestCreateRequest,
    serialize_leave_request,
    serialize_team_member,
)
from leaveflow.services.LeaveRequestService import LeaveRequestService
from leaveflow.services.ReportingService import ReportingService

router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"]
)


def _balance_payload(user) -> dict:
    return {
        "userId": user.user_id,
        "firstname": user.firstname,
        "surname": user.surname,
        "days remaining": user.annual_leave_balance,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    payload: LeaveRequestCreateRequest,
    principal: Principal = Depends(employee_only),
    db: Session = Depends(get_db)
):
    """
    Submit a new leave request. It starts as Pending; the balance is only
    deducted once the request is approved.
    """
    leave = LeaveRequestService(db).submit(
        principal.user_id,
        payload.start_date,
        payload.end_date,
        reason=payload.reason,
        leave_type=payload.leave_type,
    )
    return {"message": "Leave request submitted", "data": serialize_leave_request(leave)}


@router.delete("")
def cancel_leave_request(
    payload: LeaveRequestActionRequest,
    principal: Principal = Depends(employee_only),
    db: Session = Depends(get_db)
):
    """Cancel one of the caller's own Pending or Approved requests."""
    leave = LeaveRequestService(db).cancel(payload.leave_request_id, principal.user_id, reason=payload.reason)
    return {"message": "Leave request cancelled", "data": serialize_leave_request(leave)}


@router.get("/status")
def get_own_leave_requests(
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    principal: Principal = Depends(employee_only),
    db: Session = Depends(get_db)
):
    leaves = LeaveRequestService(db).list_for_caller(principal, status=status_filter)
    return {
        "message": "Leave requests retrieved",
        "data": [serialize_leave_request(leave) for leave in leaves],
    }


@router.get("/remaining")
def get_own_remaining_leave(
    principal: Principal = Depends(authenticated),
    db: Session = Depends(get_db)
):
    user = LeaveRequestService(db).remaining_balance(principal.user_id, principal)
    return {"message": "Remaining leave retrieved", "data": _balance_payload(user)}


@router.get("/remaining/{user_id}")
def get_remaining_leave(
    user_id: int,
    principal: Principal = Depends(authenticated),
    db: Session = Depends(get_db)
):
    """
    Remaining balance of ``user_id``.
    Employees may only ask about themselves, managers about their team,
    admins about anyone.
    """
    user = LeaveRequestService(db).remaining_balance(user_id, principal)
    return {"message": "Remaining leave retrieved", "data": _balance_payload(user)}


@router.patch("/approve")
def approve_leave_request(
    payload: LeaveRequestActionRequest,
    principal: Principal = Depends(manager_or_admin),
    db: Session = Depends(get_db)
):
    leave = LeaveRequestService(db).approve(payload.leave_request_id, principal)
    return {"message": "Leave request approved", "data": serialize_leave_request(leave)}


@router.patch("/reject")
def reject_leave_request(
    payload: LeaveRequestActionRequest,
    principal: Principal = Depends(manager_or_admin),
    db: Session = Depends(get_db)
):
    leave = LeaveRequestService(db).reject(payload.leave_request_id, principal, reason=payload.reason)
    return {"message": "Leave request rejected", "data": serialize_leave_request(leave)}


@router.get("/pending")
def get_team_pending_requests(
    employee_id: Optional[int] = Query(None, alias="employeeId"),
    principal: Principal = Depends(manager_only),
    db: Session = Depends(get_db)
):
    """Pending requests from the manager's team, optionally for one employee."""
    leaves = LeaveRequestService(db).list_for_caller(
        principal, employee_id=employee_id, status=LeaveStatus.pending
    )
    return {
        "message": "Pending leave requests retrieved",
        "data": [serialize_leave_request(leave) for leave in leaves],
    }


@router.get("/managed-users")
def get_managed_users(
    principal: Principal = Depends(manager_only),
    db: Session = Depends(get_db)
):
    users = LeaveRequestService(db).managed_users(principal.user_id)
    return {
        "message": "Managed users retrieved",
        "data": [serialize_team_member(user) for user in users],
    }


@router.get("/reports/pending-summary")
def get_pending_summary(
    principal: Principal = Depends(manager_only),
    db: Session = Depends(get_db)
):
    return {
        "message": "Pending summary retrieved",
        "data": ReportingService(db).pending_summary(principal.user_id),
    }


@router.get("/reports/upcoming-leaves")
def get_upcoming_leaves(
    principal: Principal = Depends(manager_only),
    db: Session = Depends(get_db)
):
    return {
        "message": "Upcoming leaves retrieved",
        "data": ReportingService(db).upcoming_leaves(principal.user_id),
    }
