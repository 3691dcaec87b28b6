import logging
import re
from datetime import datetime, timezone

from bson import ObjectId
from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from crewconnect.core.config import Settings, get_settings
from crewconnect.core.db import get_employees_collection
from crewconnect.core.errors import Conflict, InvalidInput, NotFound
from crewconnect.models.employee import Employee as EmployeeModel
from crewconnect.schemas.employee import (
    Employee as EmployeeSchema,
    EmployeeCreate,
    EmployeeUpdate,
    envelope,
)
from crewconnect.services.leave_requests import parse_employee_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/employees",
    tags=["employees"],
)


def _serialize(raw: dict) -> dict:
    return EmployeeSchema.from_model(EmployeeModel.from_document(raw)).model_dump(mode="json")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
)
async def create_employee(
    payload: EmployeeCreate,
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
    settings: Settings = Depends(get_settings),
):
    """
    직원 생성. 연차 원장은 totalLeave(없으면 DEFAULT_TOTAL_LEAVE) 기준으로 초기화 (availableLeave = totalLeave, LOP = 0).
    """
    email = payload.email.lower()
    if await collection.find_one({"email": email}):
        raise Conflict("User with this email already exists")

    total_leave = payload.totalLeave
    if total_leave is None:
        total_leave = settings.DEFAULT_TOTAL_LEAVE

    now = datetime.now(timezone.utc)
    employee = EmployeeModel(
        id=str(ObjectId()),
        username=payload.username.strip(),
        email=email,
        role=payload.role,
        department=payload.department,
        position=payload.position,
        phone=payload.phone,
        totalLeave=total_leave,
        availableLeave=total_leave,
        LOP=0,
        leaveRequests=[],
        version=0,
        createdAt=now,
        updatedAt=now,
    )
    doc = employee.to_document()
    try:
        await collection.insert_one(doc)
    except DuplicateKeyError as exc:
        # find_one 이후 다른 요청이 같은 이메일로 먼저 저장한 경우
        raise Conflict("User with this email already exists") from exc

    logger.info("Employee created: id=%s, email=%s", employee.id, email)
    return envelope(
        status.HTTP_201_CREATED,
        "User successfully created",
        EmployeeSchema.from_model(employee).model_dump(mode="json"),
    )


@router.get("")
async def list_employees(
    department: str | None = None,
    position: str | None = None,
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
):
    query: dict = {}
    if department:
        query["department"] = department
    if position:
        query["position"] = position

    cursor = collection.find(query)
    docs = await cursor.to_list(length=1000)
    return envelope(
        status.HTTP_200_OK,
        "Users retrieved successfully",
        [_serialize(doc) for doc in docs],
    )


@router.get("/search")
async def search_employees(
    query: str = "",
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
):
    """username / email 부분 일치 검색 (대소문자 무시)"""
    if len(query) < 3:
        raise InvalidInput("Search query must be at least 3 characters")

    pattern = re.escape(query)
    cursor = collection.find(
        {
            "$or": [
                {"username": {"$regex": pattern, "$options": "i"}},
                {"email": {"$regex": pattern, "$options": "i"}},
            ]
        }
    )
    docs = await cursor.to_list(length=1000)
    return envelope(status.HTTP_200_OK, "Search results", [_serialize(doc) for doc in docs])


@router.get("/{employee_id}")
async def get_employee(
    employee_id: str,
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
):
    oid = parse_employee_id(employee_id)
    doc = await collection.find_one({"_id": oid})
    if doc is None:
        raise NotFound("Employee not found")

    return envelope(status.HTTP_200_OK, "User retrieved successfully", _serialize(doc))


@router.put("/{employee_id}")
async def update_employee(
    employee_id: str,
    payload: EmployeeUpdate,
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
):
    """
    프로필 필드만 수정. 연차 원장은 연차 신청/결재 흐름에서만 바뀐다.
    version을 올려서 진행 중인 원장 쓰기가 충돌을 감지하게 한다.
    """
    oid = parse_employee_id(employee_id)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidInput("No data provided for update")

    changes["updatedAt"] = datetime.now(timezone.utc).isoformat()
    doc = await collection.find_one_and_update(
        {"_id": oid},
        {"$set": changes, "$inc": {"version": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise NotFound("User not found")

    return envelope(status.HTTP_200_OK, "User updated successfully", _serialize(doc))


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: str,
    collection: AsyncIOMotorCollection = Depends(get_employees_collection),
):
    oid = parse_employee_id(employee_id)
    result = await collection.delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise NotFound("User not found")

    logger.info("Employee deleted: id=%s", employee_id)
    return envelope(status.HTTP_200_OK, "User deleted successfully")
