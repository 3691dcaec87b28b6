"""
연차 신청 라이프사이클.

흐름:
1) submit: 평일 수 계산 -> 원장 차감 -> Pending 신청 추가 -> 저장 -> 알림 메일 준비
2) resolve: 결재 링크 토큰 검증 -> Pending -> Approved / Rejected (반려 시 원장 복원)

직원 문서 하나가 동시성 단위. 모든 쓰기는 version 필드로 조건부 update를 하고,
다른 요청과 충돌하면 다시 읽어서 재시도한다 (optimistic concurrency).
메일은 여기서 보내지 않고 OutgoingEmail 목록만 만들어 돌려준다.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection

from crewconnect.core.config import Settings
from crewconnect.core.errors import (
    ConcurrentModification,
    InvalidInput,
    NotFound,
    TokenMismatch,
)
from crewconnect.core.mail import OutgoingEmail
from crewconnect.core.security import ApprovalTokenSigner
from crewconnect.core.workdays import count_weekdays
from crewconnect.models.employee import Employee, LeaveRequest, LeaveStatus, LeaveType
from crewconnect.services import ledger, notifications

logger = logging.getLogger(__name__)

Mutation = Callable[[Employee], Tuple[Any, Optional[dict]]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_employee_id(employee_id: str) -> ObjectId:
    try:
        return ObjectId(employee_id)
    except (InvalidId, TypeError) as exc:
        raise InvalidInput("Invalid employee ID") from exc


@dataclass
class Submission:
    employee: Employee
    leave_request: LeaveRequest
    index: int
    notifications: List[OutgoingEmail] = field(default_factory=list)


@dataclass
class Resolution:
    employee: Employee
    leave_request: LeaveRequest
    index: int
    already_processed: bool
    notifications: List[OutgoingEmail] = field(default_factory=list)

    @property
    def status(self) -> LeaveStatus:
        return self.leave_request.status


class LeaveRequestService:
    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        signer: ApprovalTokenSigner,
        settings: Settings,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.collection = collection
        self.signer = signer
        self.settings = settings
        self.clock = clock

    async def get_employee(self, employee_id: str) -> Employee:
        oid = parse_employee_id(employee_id)
        raw = await self.collection.find_one({"_id": oid})
        if raw is None:
            raise NotFound("Employee not found")
        return Employee.from_document(raw)

    async def _mutate(self, oid: ObjectId, mutation: Mutation) -> Any:
        """
        직원 문서를 읽고 mutation을 적용한 뒤 version 조건부로 저장.
        mutation은 (결과, update 문서)를 반환한다. update가 None이면 쓰지 않는다.
        update에는 바뀐 필드만 담는다 ($push / 위치 지정 $set). 배열 전체를 덮어쓰지 않으므로
        이전 버전이 남긴 신청 필드는 그대로 남는다.
        """
        attempts = max(1, self.settings.MAX_WRITE_RETRIES)
        for attempt in range(1, attempts + 1):
            raw = await self.collection.find_one({"_id": oid})
            if raw is None:
                raise NotFound("Employee not found")

            employee = Employee.from_document(raw)
            result, update = mutation(employee)
            if update is None:
                return result

            if "version" in raw:
                version_filter: Any = employee.version
            else:
                # version 필드가 생기기 전에 저장된 문서
                version_filter = {"$exists": False}

            update.setdefault("$set", {})["updatedAt"] = self.clock().isoformat()
            update["$inc"] = {"version": 1}
            written = await self.collection.update_one(
                {"_id": oid, "version": version_filter}, update
            )
            if written.matched_count == 1:
                employee.version += 1
                return result

            logger.warning(
                "Concurrent update on employee %s (attempt %d/%d), retrying",
                oid,
                attempt,
                attempts,
            )

        raise ConcurrentModification()

    async def submit(
        self,
        employee_id: str,
        leave_type: LeaveType | str,
        from_date: date,
        to_date: date,
        reason: str,
    ) -> Submission:
        if not employee_id or not leave_type or from_date is None or to_date is None:
            raise InvalidInput("Missing required fields")
        if not reason or not reason.strip():
            raise InvalidInput("Missing required fields")
        try:
            leave_type = LeaveType(leave_type)
        except ValueError as exc:
            raise InvalidInput(f"Invalid leave type: {leave_type}") from exc
        if to_date < from_date:
            raise InvalidInput("toDate must be on or after fromDate")

        oid = parse_employee_id(employee_id)
        requested_days = count_weekdays(from_date, to_date)
        request_id = uuid.uuid4().hex
        now = self.clock()

        def mutation(employee: Employee) -> Tuple[Any, Optional[dict]]:
            split = ledger.apply_submission(employee, requested_days)
            leave_request = LeaveRequest(
                requestId=request_id,
                leaveType=leave_type,
                fromDate=from_date,
                toDate=to_date,
                reason=reason.strip(),
                status=LeaveStatus.PENDING,
                requestedDays=requested_days,
                completedLeave=split.completed,
                LOP=split.lop,
                createdAt=now,
            )
            employee.leaveRequests.append(leave_request)
            update = {
                "$set": {"availableLeave": employee.availableLeave, "LOP": employee.LOP},
                "$push": {"leaveRequests": leave_request.model_dump(mode="json")},
            }
            return (employee, leave_request, len(employee.leaveRequests) - 1), update

        employee, leave_request, index = await self._mutate(oid, mutation)
        logger.info(
            "Leave request submitted: employee=%s, index=%d, requestId=%s, days=%d "
            "(completed=%d, LOP=%d)",
            employee.id,
            index,
            leave_request.requestId,
            leave_request.requestedDays,
            leave_request.completedLeave,
            leave_request.LOP,
        )

        return Submission(
            employee=employee,
            leave_request=leave_request,
            index=index,
            notifications=self._submission_notifications(employee, leave_request, index, now),
        )

    def _submission_notifications(
        self,
        employee: Employee,
        leave_request: LeaveRequest,
        index: int,
        now: datetime,
    ) -> List[OutgoingEmail]:
        links = {}
        for action in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            token = self.signer.issue(
                employee_id=employee.id,
                request_index=index,
                request_id=leave_request.requestId,
                action=action.value,
                now=now,
            )
            links[action] = notifications.action_link(
                self.settings.FRONTEND_URL, employee.id, index, action, token
            )

        return [
            notifications.submission_receipt(employee, leave_request),
            notifications.approval_request(
                employee,
                leave_request,
                approver_email=self.settings.LEAVE_APPROVER_EMAIL,
                approve_link=links[LeaveStatus.APPROVED],
                reject_link=links[LeaveStatus.REJECTED],
                ttl_days=self.signer.ttl.days,
            ),
        ]

    async def resolve(
        self,
        employee_id: str | None,
        request_index: str | int | None,
        status: str | None,
        token: str | None,
    ) -> Resolution:
        """
        메일 링크로 들어온 승인/반려 처리.

        검증 순서: 파라미터 누락 -> 토큰 서명/만료 -> 토큰 대상 일치 -> 직원/신청 존재.
        이미 처리된 신청이면 상태를 바꾸지 않고 현재 상태를 그대로 돌려준다 (중복 클릭, 재시도).
        """
        if not employee_id or request_index is None or request_index == "" or not status or not token:
            raise InvalidInput("Missing required parameters")

        try:
            target = LeaveStatus(status)
        except ValueError as exc:
            raise InvalidInput(f"Invalid status: {status}") from exc
        if not target.is_terminal:
            raise InvalidInput("status must be Approved or Rejected")

        try:
            index = int(request_index)
        except (TypeError, ValueError) as exc:
            raise InvalidInput("requestIndex must be an integer") from exc
        if index < 0:
            raise InvalidInput("requestIndex must be an integer")

        claims = self.signer.verify(token)
        if (
            claims.employee_id != employee_id
            or claims.request_index != index
            or claims.action != target.value
        ):
            logger.warning(
                "Approval token mismatch: employee=%s, index=%d, status=%s",
                employee_id,
                index,
                target.value,
            )
            raise TokenMismatch()

        oid = parse_employee_id(employee_id)
        now = self.clock()

        def mutation(employee: Employee) -> Tuple[Any, Optional[dict]]:
            if index >= len(employee.leaveRequests):
                raise NotFound("Leave request not found")
            leave_request = employee.leaveRequests[index]
            if leave_request.requestId != claims.request_id:
                raise TokenMismatch()
            if leave_request.status.is_terminal:
                return Resolution(employee, leave_request, index, already_processed=True), None

            ledger.transition(employee, index, target, now)
            # 해당 신청의 status / processedAt만 바꾼다
            changed = leave_request.model_dump(mode="json", include={"status", "processedAt"})
            update = {
                "$set": {
                    f"leaveRequests.{index}.status": changed["status"],
                    f"leaveRequests.{index}.processedAt": changed["processedAt"],
                    "availableLeave": employee.availableLeave,
                    "LOP": employee.LOP,
                }
            }
            return Resolution(employee, leave_request, index, already_processed=False), update

        resolution = await self._mutate(oid, mutation)
        if resolution.already_processed:
            logger.info(
                "Leave request already %s: employee=%s, index=%d",
                resolution.status.value,
                employee_id,
                index,
            )
            return resolution

        logger.info(
            "Leave request %s: employee=%s, index=%d, availableLeave=%d, LOP=%d",
            resolution.status.value.lower(),
            employee_id,
            index,
            resolution.employee.availableLeave,
            resolution.employee.LOP,
        )
        resolution.notifications.append(
            notifications.resolution_notice(resolution.employee, resolution.leave_request)
        )
        return resolution
