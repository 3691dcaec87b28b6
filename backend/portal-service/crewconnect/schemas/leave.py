from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from crewconnect.models.employee import LeaveRequest, LeaveStatus, LeaveType


class LeaveRequestCreate(BaseModel):
    """POST /leave-requests 요청 바디"""
    userID: str = Field(..., min_length=1)
    leaveType: LeaveType
    fromDate: date
    toDate: date
    reason: str = Field(..., min_length=1)


class LeaveRequestRead(BaseModel):
    index: int
    requestId: str
    leaveType: LeaveType
    fromDate: date
    toDate: date
    reason: str
    status: LeaveStatus
    requestedDays: int
    completedLeave: int
    LOP: int
    createdAt: datetime
    processedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, index: int, leave_request: LeaveRequest) -> "LeaveRequestRead":
        return cls(index=index, **leave_request.model_dump())


class LeaveSubmissionResponse(BaseModel):
    message: str
    leaveRequest: LeaveRequestRead


class ProcessActionResponse(BaseModel):
    success: bool
    message: str
    newStatus: Optional[LeaveStatus] = None
    updatedAt: Optional[datetime] = None
    alreadyProcessed: bool = False


class EmployeeLeaveSummary(BaseModel):
    """GET /leave-requests/employee/{id} 응답"""
    leaveRequests: List[LeaveRequestRead]
    availableLeave: int
    totalLeave: int
    LOP: int
