import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from crewconnect.core.deps import get_leave_service, get_notifier
from crewconnect.core.errors import PortalError, ServerError, TokenError
from crewconnect.core.mail import Notifier
from crewconnect.schemas.leave import (
    EmployeeLeaveSummary,
    LeaveRequestCreate,
    LeaveRequestRead,
    LeaveSubmissionResponse,
    ProcessActionResponse,
)
from crewconnect.services.leave_requests import LeaveRequestService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/leave-requests",
    tags=["leave-requests"],
)


@router.post(
    "",
    response_model=LeaveSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_leave_request(
    payload: LeaveRequestCreate,
    background_tasks: BackgroundTasks,
    service: LeaveRequestService = Depends(get_leave_service),
    notifier: Notifier = Depends(get_notifier),
):
    """
    연차 신청
    1) 평일 기준 신청 일수 계산, 잔여 연차에서 차감 (초과분은 LOP)
    2) Pending 상태로 직원 문서에 추가 후 저장
    3) 신청자 확인 메일 + 결재자 승인/반려 링크 메일 (응답 후 백그라운드 발송)
    """
    submission = await service.submit(
        employee_id=payload.userID,
        leave_type=payload.leaveType,
        from_date=payload.fromDate,
        to_date=payload.toDate,
        reason=payload.reason,
    )

    # 저장이 끝난 뒤에만 예약. 발송 실패는 Notifier가 로그로 처리
    background_tasks.add_task(notifier.deliver, submission.notifications)

    return LeaveSubmissionResponse(
        message="Leave request submitted successfully",
        leaveRequest=LeaveRequestRead.from_model(submission.index, submission.leave_request),
    )


@router.get(
    "/process-action",
    response_model=ProcessActionResponse,
)
async def process_action(
    background_tasks: BackgroundTasks,
    employee_id: Optional[str] = Query(None, alias="employeeId"),
    request_index: Optional[str] = Query(None, alias="requestIndex"),
    action_status: Optional[str] = Query(None, alias="status"),
    token: Optional[str] = Query(None),
    service: LeaveRequestService = Depends(get_leave_service),
    notifier: Notifier = Depends(get_notifier),
):
    """
    결재 메일 링크에서 호출하는 승인/반려 처리.
    GET /leave-requests/process-action?employeeId=...&requestIndex=0&status=Approved&token=...
    """
    try:
        resolution = await service.resolve(employee_id, request_index, action_status, token)
    except PortalError as exc:
        # 결재 페이지는 항상 {success, message} 형태를 받는다 (409 충돌 포함)
        body = {"success": False, "message": exc.message}
        if isinstance(exc, TokenError) and exc.token_expired:
            body["tokenExpired"] = True
        return JSONResponse(status_code=exc.status_code, content=body)
    except PyMongoError:
        logger.exception("Database error while processing leave action: employee=%s", employee_id)
        return JSONResponse(
            status_code=ServerError.status_code,
            content={"success": False, "message": "Database error"},
        )

    leave_request = resolution.leave_request
    if resolution.already_processed:
        return ProcessActionResponse(
            success=True,
            message=f"Request already {leave_request.status.value.lower()}",
            newStatus=leave_request.status,
            updatedAt=leave_request.processedAt,
            alreadyProcessed=True,
        )

    background_tasks.add_task(notifier.deliver, resolution.notifications)

    return ProcessActionResponse(
        success=True,
        message=f"Leave request {leave_request.status.value.lower()} successfully",
        newStatus=leave_request.status,
        updatedAt=leave_request.processedAt,
    )


@router.get(
    "/employee/{employee_id}",
    response_model=EmployeeLeaveSummary,
)
async def get_employee_leave_requests(
    employee_id: str,
    service: LeaveRequestService = Depends(get_leave_service),
):
    """
    특정 직원의 연차 신청 목록 + 잔여 연차 조회. (읽기 전용이라 잠금 없음)
    """
    employee = await service.get_employee(employee_id)
    return EmployeeLeaveSummary(
        leaveRequests=[
            LeaveRequestRead.from_model(index, item)
            for index, item in enumerate(employee.leaveRequests)
        ],
        availableLeave=employee.availableLeave,
        totalLeave=employee.totalLeave,
        LOP=employee.LOP,
    )
