import logging
import uuid
from typing import AsyncGenerator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING

from crewconnect.core.config import settings

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None


def get_client() -> AsyncIOMotorClient:
    """
    싱글톤 패턴으로 MongoDB 클라이언트 생성.
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _client


def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def get_collection(name: str) -> AsyncIOMotorCollection:
    client = get_client()
    db = client[settings.MONGODB_DB_NAME]
    return db[name]


async def get_employees_collection() -> AsyncGenerator[AsyncIOMotorCollection, None]:
    """
    FastAPI 의존성 주입용. 직원 문서(연차 원장 + 신청 목록 포함).
    """
    yield get_collection(settings.EMPLOYEES_COLLECTION)


async def get_attendance_collection() -> AsyncGenerator[AsyncIOMotorCollection, None]:
    yield get_collection(settings.ATTENDANCE_COLLECTION)


async def init_db() -> None:
    """
    애플리케이션 시작 시 한 번 호출해서 필요한 인덱스를 생성.
    이미 있으면 아무 일도 안 함.
    """
    employees = get_collection(settings.EMPLOYEES_COLLECTION)
    attendance = get_collection(settings.ATTENDANCE_COLLECTION)

    await employees.create_index([("email", ASCENDING)], unique=True)
    await attendance.create_index([("userId", ASCENDING), ("date", ASCENDING)])
    logger.info(
        "MongoDB indexes ensured: db=%s, collections=%s,%s",
        settings.MONGODB_DB_NAME,
        settings.EMPLOYEES_COLLECTION,
        settings.ATTENDANCE_COLLECTION,
    )


def upgrade_legacy_employee(doc: dict, default_total_leave: int = 25) -> dict:
    """
    이전 버전이 저장한 직원 문서를 현재 스키마로 맞추기 위한 $set 내용을 계산한다.

    - version 필드가 없으면 0
    - 연차 원장 필드 기본값 (totalLeave, availableLeave, LOP)
    - 각 leaveRequests 항목에 requestId, completedLeave, LOP 기본값

    변경할 것이 없으면 빈 dict를 반환한다. 신청 목록의 순서는 그대로 유지.
    """
    updates: dict = {}

    if "version" not in doc:
        updates["version"] = 0

    total_leave = doc.get("totalLeave")
    if total_leave is None:
        total_leave = default_total_leave
        updates["totalLeave"] = total_leave
    if doc.get("availableLeave") is None:
        updates["availableLeave"] = total_leave
    if doc.get("LOP") is None:
        updates["LOP"] = 0

    leave_requests = doc.get("leaveRequests") or []
    upgraded = []
    changed = False
    for item in leave_requests:
        item = dict(item)
        if not item.get("requestId"):
            item["requestId"] = uuid.uuid4().hex
            changed = True
        for field in ("completedLeave", "LOP"):
            if item.get(field) is None:
                item[field] = 0
                changed = True
        upgraded.append(item)

    if changed:
        updates["leaveRequests"] = upgraded
    if "leaveRequests" not in doc:
        updates["leaveRequests"] = []

    return updates
