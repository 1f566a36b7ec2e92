"""Admin endpoints for user management, leave oversight and company reports."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from leaveflow.constants.constants import LeaveStatus
from leaveflow.core.database import get_db
from leaveflow.core.security import Principal, admin_only
from leaveflow.schemas.adminSchema import (
    AddUserRequest,
    AssignManagerRequest,
    UpdateBalanceRequest,
    UpdateDepartmentRequest,
    UpdateRoleRequest,
    serialize_manager_link,
    serialize_user,
)
from leaveflow.schemas.leaveSchema import RejectReasonRequest, serialize_leave_request
from leaveflow.services.LeaveRequestService import LeaveRequestService
from leaveflow.services.ReportingService import ReportingService
from leaveflow.services.UserManagementService import UserManagementService

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
)


@router.get("/all-users")
def get_all_users(
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    users = UserManagementService(db).list_users()
    return {"message": "Users retrieved", "data": [serialize_user(user) for user in users]}


@router.get("/roles")
def get_roles(
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    roles = UserManagementService(db).list_roles()
    return {
        "message": "Roles retrieved",
        "data": [{"roleId": role.role_id, "name": role.name.value} for role in roles],
    }


@router.post("/add-user", status_code=status.HTTP_201_CREATED)
def add_user(
    payload: AddUserRequest,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """
    Create a user account. The balance defaults to the annual allowance.
    """
    user = UserManagementService(db).add_user(
        firstname=payload.firstname,
        surname=payload.surname,
        email=payload.email,
        password=payload.password,
        role_id=payload.role_id,
        department=payload.department,
        annual_leave_balance=payload.annual_leave_balance,
    )
    return {"message": "User created", "data": serialize_user(user)}


@router.post("/assign-manager", status_code=status.HTTP_201_CREATED)
def assign_manager(
    payload: AssignManagerRequest,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """
    Link an employee to a manager from ``startDate`` (today when omitted).
    A newer assignment supersedes older ones once it takes effect.
    """
    link = UserManagementService(db).assign_manager(
        payload.employee_id, payload.manager_id, payload.start_date
    )
    return {"message": "Manager assigned", "data": serialize_manager_link(link)}


@router.get("/all-leave-requests")
def get_all_leave_requests(
    user_id: Optional[int] = Query(None, alias="userId"),
    manager_id: Optional[int] = Query(None, alias="managerId"),
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    leaves = LeaveRequestService(db).list_for_caller(
        principal, employee_id=user_id, manager_id=manager_id, status=status_filter
    )
    return {
        "message": "Leave requests retrieved",
        "data": [serialize_leave_request(leave) for leave in leaves],
    }


@router.patch("/approve/{request_id}")
def approve_leave_request(
    request_id: int,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    leave = LeaveRequestService(db).approve(request_id, principal)
    return {"message": "Leave request approved", "data": serialize_leave_request(leave)}


@router.patch("/reject/{request_id}")
def reject_leave_request(
    request_id: int,
    payload: Optional[RejectReasonRequest] = Body(None),
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    reason = payload.reason if payload else None
    leave = LeaveRequestService(db).reject(request_id, principal, reason=reason)
    return {"message": "Leave request rejected", "data": serialize_leave_request(leave)}


@router.patch("/update-role/{user_id}")
def update_role(
    user_id: int,
    payload: UpdateRoleRequest,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    user = UserManagementService(db).update_role(user_id, payload.role_id)
    return {"message": "Role updated", "data": serialize_user(user)}


@router.patch("/update-department/{user_id}")
def update_department(
    user_id: int,
    payload: UpdateDepartmentRequest,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    user = UserManagementService(db).update_department(user_id, payload.department)
    return {"message": "Department updated", "data": serialize_user(user)}


@router.patch("/update-leave-balance/{user_id}")
def update_leave_balance(
    user_id: int,
    payload: UpdateBalanceRequest,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    user = UserManagementService(db).update_balance(user_id, payload.annual_leave_balance)
    return {"message": "Leave balance updated", "data": serialize_user(user)}


@router.get("/reports/department-usage")
def get_department_usage(
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return {
        "message": "Department usage retrieved",
        "data": ReportingService(db).department_usage(),
    }


@router.get("/reports/company-summary")
def get_company_summary(
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return {
        "message": "Company summary retrieved",
        "data": ReportingService(db).company_summary(),
    }
