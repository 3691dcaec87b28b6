from datetime import date, datetime, timezone

import pytest

from crewconnect.models.employee import Employee, LeaveRequest, LeaveStatus, LeaveType
from crewconnect.services import ledger


def _employee(available: int = 25, lop: int = 0) -> Employee:
    return Employee(
        id="65a000000000000000000001",
        username="Priya Raman",
        email="priya@crewconnect.test",
        totalLeave=25,
        availableLeave=available,
        LOP=lop,
    )


def _pending(requested: int, split: ledger.LeaveSplit) -> LeaveRequest:
    return LeaveRequest(
        requestId="req-1",
        leaveType=LeaveType.CASUAL,
        fromDate=date(2024, 1, 1),
        toDate=date(2024, 1, 10),
        reason="Family trip",
        requestedDays=requested,
        completedLeave=split.completed,
        LOP=split.lop,
        createdAt=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize(
    "requested, available, completed, lop",
    [
        (3, 10, 3, 0),
        (10, 10, 10, 0),
        (8, 5, 5, 3),
        (4, 0, 0, 4),
        (0, 5, 0, 0),
    ],
)
def test_split_requested_days(requested, available, completed, lop):
    split = ledger.split_requested_days(requested, available)
    assert (split.completed, split.lop) == (completed, lop)
    assert split.completed + split.lop == requested
    assert split.completed <= available


def test_apply_submission_never_drives_balance_negative():
    employee = _employee(available=2, lop=1)

    split = ledger.apply_submission(employee, 5)

    assert split == ledger.LeaveSplit(completed=2, lop=3)
    assert employee.availableLeave == 0
    assert employee.LOP == 4


def test_rejection_restores_the_submission_split_exactly():
    employee = _employee(available=5)
    split = ledger.apply_submission(employee, 8)
    employee.leaveRequests.append(_pending(8, split))
    assert (employee.availableLeave, employee.LOP) == (0, 3)

    now = datetime(2024, 1, 2, tzinfo=timezone.utc)
    leave_request = ledger.transition(employee, 0, LeaveStatus.REJECTED, now)

    assert leave_request.status is LeaveStatus.REJECTED
    assert leave_request.processedAt == now
    assert (employee.availableLeave, employee.LOP) == (5, 0)


def test_approval_keeps_the_deduction():
    employee = _employee(available=5)
    split = ledger.apply_submission(employee, 3)
    employee.leaveRequests.append(_pending(3, split))

    ledger.transition(employee, 0, LeaveStatus.APPROVED, datetime.now(timezone.utc))

    assert employee.leaveRequests[0].status is LeaveStatus.APPROVED
    assert (employee.availableLeave, employee.LOP) == (2, 0)


def test_terminal_request_cannot_transition_again():
    employee = _employee(available=5)
    split = ledger.apply_submission(employee, 3)
    employee.leaveRequests.append(_pending(3, split))
    ledger.transition(employee, 0, LeaveStatus.APPROVED, datetime.now(timezone.utc))

    with pytest.raises(ValueError):
        ledger.transition(employee, 0, LeaveStatus.REJECTED, datetime.now(timezone.utc))
    assert employee.availableLeave == 2


def test_reverse_clamps_lop_for_legacy_ledgers():
    employee = _employee(available=0, lop=1)
    leave_request = _pending(4, ledger.LeaveSplit(completed=0, lop=4))

    ledger.reverse_submission(employee, leave_request)

    assert employee.LOP == 0
