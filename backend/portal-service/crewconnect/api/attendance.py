from datetime import datetime, timedelta
from typing import List
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorCollection

from crewconnect.core.config import Settings, get_settings
from crewconnect.core.db import get_attendance_collection
from crewconnect.core.errors import InvalidInput
from crewconnect.models.attendance import OPEN_STATUSES, AttendanceRecord, AttendanceStatus
from crewconnect.schemas.attendance import (
    AttendanceCategoryUpdate,
    AttendanceStatusUpdate,
    AttendanceUpdateResponse,
)

router = APIRouter(
    prefix="/api/attendance",
    tags=["attendance"],
)


def _local_now(tz_name: str) -> datetime:
    return datetime.now(ZoneInfo(tz_name))


def _minutes_between(start_hhmm: str, end_hhmm: str) -> int:
    start = datetime.strptime(start_hhmm, "%H:%M")
    end = datetime.strptime(end_hhmm, "%H:%M")
    return max(0, int((end - start).total_seconds() // 60))


async def _save(
    collection: AsyncIOMotorCollection,
    existing: dict | None,
    user_id: str,
    day: str,
    changes: dict,
) -> AttendanceRecord:
    if existing is None:
        doc = {"userId": user_id, "date": day, **changes}
        await collection.insert_one(doc)
    else:
        await collection.update_one({"_id": existing["_id"]}, {"$set": changes})
        doc = {**existing, **changes}
    return AttendanceRecord.from_document(doc)


@router.get(
    "",
    response_model=List[AttendanceRecord],
)
async def list_today(
    collection: AsyncIOMotorCollection = Depends(get_attendance_collection),
    settings: Settings = Depends(get_settings),
):
    """오늘(APP_TIMEZONE 기준) 전체 직원 근태 기록"""
    today = _local_now(settings.APP_TIMEZONE).date().isoformat()
    docs = await collection.find({"date": today}).to_list(length=None)
    return [AttendanceRecord.from_document(doc) for doc in docs]


@router.get(
    "/{user_id}",
    response_model=List[AttendanceRecord],
)
async def list_for_user(
    user_id: str,
    collection: AsyncIOMotorCollection = Depends(get_attendance_collection),
):
    docs = await collection.find({"userId": user_id}).sort("date", -1).to_list(length=None)
    return [AttendanceRecord.from_document(doc) for doc in docs]


@router.post(
    "/update-category",
    response_model=AttendanceUpdateResponse,
)
async def update_category(
    payload: AttendanceCategoryUpdate,
    collection: AsyncIOMotorCollection = Depends(get_attendance_collection),
    settings: Settings = Depends(get_settings),
):
    """
    근무 형태(WFH / WFO / Day Off) 지정. 하루에 한 번만 가능.
    """
    today = _local_now(settings.APP_TIMEZONE).date().isoformat()
    existing = await collection.find_one({"userId": payload.userId, "date": today})
    if existing and existing.get("category"):
        raise InvalidInput("Category can be updated only once per day!")

    record = await _save(
        collection,
        existing,
        payload.userId,
        today,
        {"category": payload.category.value, "userName": payload.userName},
    )
    return AttendanceUpdateResponse(message="Category updated successfully", record=record)


@router.post(
    "/update-status",
    response_model=AttendanceUpdateResponse,
)
async def update_status(
    payload: AttendanceStatusUpdate,
    collection: AsyncIOMotorCollection = Depends(get_attendance_collection),
    settings: Settings = Depends(get_settings),
):
    """
    출근 / 퇴근 / 휴식 처리:
    - Check-in: 오늘 이미 출근했으면 400. 전날 열린 기록은 Present로 마감
    - Check-out: 출근 기록이 없거나 이미 퇴근했으면 400. workMinutes 계산
    - Break: Break <-> Active 토글
    """
    actions = (AttendanceStatus.CHECK_IN, AttendanceStatus.CHECK_OUT, AttendanceStatus.BREAK)
    try:
        action = AttendanceStatus(payload.status)
    except ValueError:
        action = None
    if action not in actions:
        raise InvalidInput("Invalid status provided.")

    now = _local_now(settings.APP_TIMEZONE)
    today = now.date().isoformat()
    current_time = now.strftime("%H:%M")

    if action is AttendanceStatus.CHECK_IN:
        previous_day = (now.date() - timedelta(days=1)).isoformat()
        await collection.update_one(
            {"userId": payload.userId, "date": previous_day, "status": {"$in": list(OPEN_STATUSES)}},
            {"$set": {"status": AttendanceStatus.PRESENT.value}},
        )

    existing = await collection.find_one({"userId": payload.userId, "date": today})
    current = existing or {}
    changes: dict = {}

    if action is AttendanceStatus.CHECK_IN:
        if current.get("checkInTime"):
            raise InvalidInput("Already checked in today!")
        changes["checkInTime"] = current_time
        changes["status"] = AttendanceStatus.CHECK_IN.value
    elif action is AttendanceStatus.CHECK_OUT:
        if not current.get("checkInTime"):
            raise InvalidInput("Cannot check out without checking in first!")
        if current.get("checkOutTime"):
            raise InvalidInput("Already checked out today!")
        changes["checkOutTime"] = current_time
        changes["status"] = AttendanceStatus.CHECK_OUT.value
        changes["workMinutes"] = _minutes_between(current["checkInTime"], current_time)
    else:
        on_break = current.get("status") == AttendanceStatus.BREAK.value
        changes["status"] = (AttendanceStatus.ACTIVE if on_break else AttendanceStatus.BREAK).value

    if payload.userName:
        changes["userName"] = payload.userName

    record = await _save(collection, existing, payload.userId, today, changes)
    return AttendanceUpdateResponse(message="Status updated successfully", record=record)
