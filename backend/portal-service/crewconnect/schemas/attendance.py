from pydantic import BaseModel, Field

from crewconnect.models.attendance import AttendanceRecord, WorkCategory


class AttendanceStatusUpdate(BaseModel):
    userId: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    userName: str | None = None


class AttendanceCategoryUpdate(BaseModel):
    userId: str = Field(..., min_length=1)
    category: WorkCategory
    userName: str = Field(..., min_length=1)


class AttendanceUpdateResponse(BaseModel):
    message: str
    record: AttendanceRecord
