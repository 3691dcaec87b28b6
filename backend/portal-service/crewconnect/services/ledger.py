"""
연차 원장 계산.

신청 시 차감, 반려 시 복원. DB 접근 없이 Employee 모델만 변경한다.
"""

from dataclasses import dataclass
from datetime import datetime

from crewconnect.models.employee import Employee, LeaveRequest, LeaveStatus


@dataclass(frozen=True)
class LeaveSplit:
    completed: int  # availableLeave에서 차감되는 일수
    lop: int  # 잔여 연차를 넘어선 무급(loss of pay) 일수


def split_requested_days(requested_days: int, available_leave: int) -> LeaveSplit:
    completed = max(0, min(requested_days, available_leave))
    return LeaveSplit(completed=completed, lop=requested_days - completed)


def apply_submission(employee: Employee, requested_days: int) -> LeaveSplit:
    split = split_requested_days(requested_days, employee.availableLeave)
    employee.availableLeave -= split.completed
    employee.LOP += split.lop
    return split


def reverse_submission(employee: Employee, leave_request: LeaveRequest) -> None:
    # 신청 당시 나눈 만큼만 정확히 되돌린다 (requestedDays 전체가 아님)
    employee.availableLeave += leave_request.completedLeave
    employee.LOP = max(0, employee.LOP - leave_request.LOP)


def transition(
    employee: Employee,
    index: int,
    target: LeaveStatus,
    now: datetime,
) -> LeaveRequest:
    """
    Pending -> Approved / Rejected.
    이미 종료된 신청은 호출 전에 걸러야 한다.
    """
    leave_request = employee.leaveRequests[index]
    if leave_request.status.is_terminal:
        raise ValueError(f"leave request {index} is already {leave_request.status.value}")
    if not target.is_terminal:
        raise ValueError("target status must be Approved or Rejected")

    leave_request.status = target
    leave_request.processedAt = now
    if target is LeaveStatus.REJECTED:
        reverse_submission(employee, leave_request)
    return leave_request
