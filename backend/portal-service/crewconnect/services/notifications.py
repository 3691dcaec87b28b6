from html import escape
from urllib.parse import urlencode

from crewconnect.core.mail import OutgoingEmail
from crewconnect.models.employee import Employee, LeaveRequest, LeaveStatus


def _fmt(value) -> str:
    return value.strftime("%d %b %Y")


def action_link(
    frontend_url: str,
    employee_id: str,
    request_index: int,
    status: LeaveStatus,
    token: str,
) -> str:
    query = urlencode(
        {
            "employeeId": employee_id,
            "requestIndex": request_index,
            "status": status.value,
            "token": token,
        }
    )
    return f"{frontend_url.rstrip('/')}/leave/action?{query}"


def submission_receipt(employee: Employee, leave_request: LeaveRequest) -> OutgoingEmail:
    return OutgoingEmail(
        to=employee.email,
        subject="Leave Request Submitted",
        text=(
            f"Your leave request from {_fmt(leave_request.fromDate)} "
            f"to {_fmt(leave_request.toDate)} has been submitted."
        ),
    )


def approval_request(
    employee: Employee,
    leave_request: LeaveRequest,
    approver_email: str,
    approve_link: str,
    reject_link: str,
    ttl_days: int,
) -> OutgoingEmail:
    dates = f"{_fmt(leave_request.fromDate)} - {_fmt(leave_request.toDate)}"
    days = (
        f"{leave_request.requestedDays} ({leave_request.completedLeave} completed, "
        f"{leave_request.LOP} LOP)"
    )
    text = (
        f"Employee: {employee.username}\n"
        f"Type: {leave_request.leaveType.value}\n"
        f"Dates: {dates}\n"
        f"Days: {days}\n"
        f"Reason: {leave_request.reason}\n\n"
        f"Approve: {approve_link}\n"
        f"Reject: {reject_link}\n\n"
        f"These links expire in {ttl_days} days."
    )
    html = f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #333;">New Leave Request Approval</h2>
        <p><strong>Employee:</strong> {escape(employee.username)}</p>
        <p><strong>Type:</strong> {escape(leave_request.leaveType.value)}</p>
        <p><strong>Dates:</strong> {dates}</p>
        <p><strong>Days:</strong> {days}</p>
        <p><strong>Reason:</strong> {escape(leave_request.reason)}</p>
        <div style="margin: 25px 0; text-align: center;">
          <a href="{escape(approve_link)}" style="display: inline-block; padding: 12px 24px; background-color: #28a745; color: white; text-decoration: none; border-radius: 4px; margin-right: 15px; font-weight: bold;">Approve</a>
          <a href="{escape(reject_link)}" style="display: inline-block; padding: 12px 24px; background-color: #dc3545; color: white; text-decoration: none; border-radius: 4px; font-weight: bold;">Reject</a>
        </div>
        <p style="font-size: 12px; color: #777; border-top: 1px solid #eee; padding-top: 10px;">
          This link will expire in {ttl_days} days. If not processed, the request will remain pending.
        </p>
      </div>
    """
    return OutgoingEmail(
        to=approver_email,
        subject="Leave Request Approval Needed",
        text=text,
        html=html,
    )


def resolution_notice(employee: Employee, leave_request: LeaveRequest) -> OutgoingEmail:
    status = leave_request.status.value.lower()
    text = (
        f"Your {leave_request.leaveType.value} leave request from "
        f"{_fmt(leave_request.fromDate)} to {_fmt(leave_request.toDate)} has been {status}."
    )
    if leave_request.status is LeaveStatus.REJECTED:
        text += f" {leave_request.completedLeave} day(s) were returned to your balance."
    return OutgoingEmail(
        to=employee.email,
        subject=f"Leave Request {leave_request.status.value}",
        text=text,
    )
