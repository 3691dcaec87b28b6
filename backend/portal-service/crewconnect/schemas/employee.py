from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from crewconnect.models.employee import Employee as EmployeeModel


class EmployeeBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: str = Field("User", pattern="^(Admin|User|Manager|HR)$")
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)


class EmployeeCreate(EmployeeBase):
    """POST /employees 요청 바디"""
    totalLeave: Optional[int] = Field(None, ge=0)  # 없으면 DEFAULT_TOTAL_LEAVE


class EmployeeUpdate(BaseModel):
    """PUT /employees/{id} 요청 바디

    연차 원장 필드(totalLeave, availableLeave, LOP, leaveRequests)가 들어오면 에러가 나야 함.
    """
    model_config = ConfigDict(extra="forbid")  # 정의되지 않은 필드가 들어오면 400 에러

    username: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, pattern="^(Admin|User|Manager|HR)$")
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    status: Optional[str] = Field(None, pattern="^(Active|Relieved|On Notice Period)$")


class Employee(BaseModel):
    """응답용 스키마. 신청 목록은 /leave-requests 쪽에서 조회한다."""
    id: str
    username: str
    email: str
    role: str
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    status: str
    totalLeave: int
    availableLeave: int
    LOP: int
    version: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, employee: EmployeeModel) -> "Employee":
        return cls.model_validate(employee.model_dump(exclude={"leaveRequests"}))


def envelope(status: int, message: str, data: Any = None) -> dict:
    """{status, message, data} 형태의 공통 응답"""
    body: dict = {"status": status, "message": message}
    if data is not None:
        body["data"] = data
    return body
