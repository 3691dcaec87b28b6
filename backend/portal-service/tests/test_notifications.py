from datetime import date, datetime, timezone
from urllib.parse import parse_qs, urlparse

from crewconnect.models.employee import Employee, LeaveRequest, LeaveStatus, LeaveType
from crewconnect.services import notifications


def _employee() -> Employee:
    return Employee(id="65a000000000000000000001", username="Priya & Co", email="priya@crewconnect.test")


def _leave_request(status: LeaveStatus = LeaveStatus.PENDING) -> LeaveRequest:
    return LeaveRequest(
        requestId="req-1",
        leaveType=LeaveType.SICK,
        fromDate=date(2024, 1, 1),
        toDate=date(2024, 1, 10),
        reason="Flu",
        status=status,
        requestedDays=8,
        completedLeave=5,
        LOP=3,
        createdAt=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_action_link_encodes_query():
    link = notifications.action_link(
        "http://portal.test/", "65a000000000000000000001", 2, LeaveStatus.REJECTED, "a.b+c"
    )

    parsed = urlparse(link)
    assert parsed.path == "/leave/action"
    query = parse_qs(parsed.query)
    assert query == {
        "employeeId": ["65a000000000000000000001"],
        "requestIndex": ["2"],
        "status": ["Rejected"],
        "token": ["a.b+c"],
    }


def test_approval_request_escapes_user_text():
    email = notifications.approval_request(
        _employee(),
        _leave_request(),
        approver_email="approver@crewconnect.test",
        approve_link="http://portal.test/leave/action?a=1&b=2",
        reject_link="http://portal.test/leave/action?a=1&b=3",
        ttl_days=7,
    )

    assert email.to == "approver@crewconnect.test"
    assert "Priya &amp; Co" in email.html
    assert 'href="http://portal.test/leave/action?a=1&amp;b=2"' in email.html
    assert "8 (5 completed, 3 LOP)" in email.text
    assert "expire in 7 days" in email.text


def test_resolution_notice_mentions_returned_days_on_rejection():
    rejected = notifications.resolution_notice(_employee(), _leave_request(LeaveStatus.REJECTED))
    approved = notifications.resolution_notice(_employee(), _leave_request(LeaveStatus.APPROVED))

    assert rejected.subject == "Leave Request Rejected"
    assert "5 day(s) were returned" in rejected.text
    assert approved.subject == "Leave Request Approved"
    assert "returned" not in approved.text
    assert "has been approved" in approved.text
