from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field


class LeaveType(str, Enum):
    CASUAL = "Casual"
    SICK = "Sick"
    EARNED = "Earned"
    MATERNITY = "Maternity"
    PATERNITY = "Paternity"
    BEREAVEMENT = "Bereavement"
    OTHER = "Other"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class LeaveRequest(BaseModel):
    """
    직원 문서에 내장되는 연차 신청 한 건.
    leaveRequests 배열에서의 위치(index)가 링크 식별자, requestId는 불변 식별자.
    """
    model_config = ConfigDict(extra="ignore")

    requestId: str
    leaveType: LeaveType
    fromDate: date
    toDate: date
    reason: str
    status: LeaveStatus = LeaveStatus.PENDING
    requestedDays: int
    completedLeave: int = 0
    LOP: int = 0
    createdAt: datetime
    processedAt: Optional[datetime] = None


class Employee(BaseModel):
    """
    users 컬렉션의 직원 문서. 연차 원장(totalLeave / availableLeave / LOP)과
    신청 목록을 함께 들고 있는 aggregate root.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    email: str
    role: str = "User"
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    status: str = "Active"
    totalLeave: int = 25
    availableLeave: int = 25
    LOP: int = 0
    leaveRequests: List[LeaveRequest] = Field(default_factory=list)
    version: int = 0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, raw: dict) -> "Employee":
        """MongoDB Document(dict) -> 모델. _id는 문자열 id로 바꾼다."""
        data = raw.copy()
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_document(self) -> dict:
        """모델 -> MongoDB Document. 날짜는 ISO 문자열로 저장."""
        data = self.model_dump(mode="json", exclude={"id"})
        data["_id"] = ObjectId(self.id)
        return data
