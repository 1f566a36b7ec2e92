from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AddUserRequest(BaseModel):
    """Request schema for creating a user."""
    model_config = ConfigDict(populate_by_name=True)

    firstname: str = Field(..., max_length=100)
    surname: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1)
    role_id: int = Field(..., alias="roleId")
    department: str = Field(..., max_length=100)
    annual_leave_balance: Optional[int] = Field(None, alias="annualLeaveBalance", ge=0)


class AssignManagerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    employee_id: int = Field(..., alias="employeeId")
    manager_id: int = Field(..., alias="managerId")
    start_date: Optional[date] = Field(None, alias="startDate")


class UpdateRoleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    role_id: int = Field(..., alias="roleId")


class UpdateDepartmentRequest(BaseModel):
    department: str = Field(..., max_length=100)


class UpdateBalanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    annual_leave_balance: int = Field(..., alias="annualLeaveBalance", ge=0)


class UserResponse(BaseModel):
    """Admin listing row; the role is shown by its display label."""
    model_config = ConfigDict(from_attributes=True)

    user_id: int = Field(serialization_alias="userId")
    firstname: str
    surname: str
    email: str
    department: str
    role_label: str = Field(serialization_alias="role")
    role_id: int = Field(serialization_alias="roleId")
    annual_leave_balance: int = Field(serialization_alias="annualLeaveBalance")


class ManagerLinkResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    link_id: int = Field(serialization_alias="linkId")
    employee_id: int = Field(serialization_alias="employeeId")
    manager_id: int = Field(serialization_alias="managerId")
    start_date: date = Field(serialization_alias="startDate")


def serialize_user(user) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")


def serialize_manager_link(link) -> dict:
    return ManagerLinkResponse.model_validate(link).model_dump(by_alias=True, mode="json")
