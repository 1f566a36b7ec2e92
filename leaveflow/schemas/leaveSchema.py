from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from leaveflow.constants.constants import LeaveStatus, LeaveType


class LeaveRequestCreateRequest(BaseModel):
    """Request schema for submitting a leave request."""
    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    leave_type: LeaveType = Field(LeaveType.annual, alias="leaveType")
    reason: Optional[str] = Field(None, max_length=500)


class LeaveRequestActionRequest(BaseModel):
    """Request schema for approve, reject and cancel actions."""
    model_config = ConfigDict(populate_by_name=True)

    leave_request_id: int = Field(..., alias="leaveRequestId", gt=0)
    reason: Optional[str] = Field(None, max_length=500)


class RejectReasonRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_id: int = Field(serialization_alias="requestId")
    user_id: int = Field(serialization_alias="userId")
    requester_name: str = Field(serialization_alias="name")
    start_date: date = Field(serialization_alias="startDate")
    end_date: date = Field(serialization_alias="endDate")
    days: int
    leave_type: LeaveType = Field(serialization_alias="leaveType")
    status: LeaveStatus
    reason: Optional[str] = None


class TeamMemberResponse(BaseModel):
    """Response schema for a managed employee."""
    model_config = ConfigDict(from_attributes=True)

    user_id: int = Field(serialization_alias="userId")
    firstname: str
    surname: str
    email: str
    department: str
    annual_leave_balance: int = Field(serialization_alias="annualLeaveBalance")


def serialize_leave_request(leave) -> dict:
    return LeaveRequestResponse.model_validate(leave).model_dump(by_alias=True, mode="json")


def serialize_team_member(user) -> dict:
    return TeamMemberResponse.model_validate(user).model_dump(by_alias=True, mode="json")
