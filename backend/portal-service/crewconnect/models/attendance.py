from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AttendanceStatus(str, Enum):
    CHECK_IN = "Check-in"
    CHECK_OUT = "Check-out"
    BREAK = "Break"
    ACTIVE = "Active"
    PRESENT = "Present"
    DAY_OFF = "Day Off"


class WorkCategory(str, Enum):
    WFH = "WFH"
    WFO = "WFO"
    DAY_OFF = "Day Off"


# 전날 기록이 이 상태로 남아 있으면 다음 출근 때 Present로 마감
OPEN_STATUSES = (
    AttendanceStatus.CHECK_IN.value,
    AttendanceStatus.CHECK_OUT.value,
    AttendanceStatus.BREAK.value,
)


class AttendanceRecord(BaseModel):
    """attendances 컬렉션 문서. 직원당 하루 한 건 (userId + date)."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    userId: str
    userName: Optional[str] = None
    date: str  # YYYY-MM-DD (APP_TIMEZONE 기준)
    checkInTime: Optional[str] = None  # HH:MM
    checkOutTime: Optional[str] = None
    status: Optional[AttendanceStatus] = None
    category: Optional[WorkCategory] = None
    workMinutes: Optional[int] = None

    @classmethod
    def from_document(cls, raw: dict) -> "AttendanceRecord":
        data = raw.copy()
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)
