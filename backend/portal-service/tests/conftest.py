from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncIterator, List

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from crewconnect.core.config import Settings, get_settings
from crewconnect.core.db import get_attendance_collection, get_employees_collection
from crewconnect.core.deps import get_notifier
from crewconnect.core.mail import Notifier, OutgoingEmail
from crewconnect.core.security import ApprovalTokenSigner
from crewconnect.main import app
from crewconnect.services.leave_requests import LeaveRequestService

TEST_SECRET = "test-secret"
APPROVER_EMAIL = "approver@crewconnect.test"


class RecordingMailer:
    def __init__(self) -> None:
        self.sent: List[OutgoingEmail] = []
        self.fail = False

    def send(self, message: OutgoingEmail) -> None:
        if self.fail:
            raise ConnectionRefusedError("smtp down")
        self.sent.append(message)


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        JWT_SECRET=TEST_SECRET,
        LEAVE_APPROVER_EMAIL=APPROVER_EMAIL,
        FRONTEND_URL="http://portal.test",
        MAIL_BACKEND="console",
        APP_TIMEZONE="UTC",
        MAX_WRITE_RETRIES=3,
    )


@pytest.fixture()
def mongo_db():
    return AsyncMongoMockClient()["portal_test"]


@pytest.fixture()
def employees(mongo_db):
    return mongo_db["users"]


@pytest.fixture()
def attendance(mongo_db):
    return mongo_db["attendances"]


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def signer() -> ApprovalTokenSigner:
    return ApprovalTokenSigner(TEST_SECRET)


@pytest.fixture()
def leave_service(employees, signer, test_settings) -> LeaveRequestService:
    return LeaveRequestService(employees, signer, test_settings)


@pytest.fixture()
async def client(test_settings, employees, attendance, mailer) -> AsyncIterator[AsyncClient]:
    async def _employees():
        yield employees

    async def _attendance():
        yield attendance

    notifier = Notifier(mailer)
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_employees_collection] = _employees
    app.dependency_overrides[get_attendance_collection] = _attendance
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def make_employee(employees):
    async def _make(
        available_leave: int = 25,
        total_leave: int = 25,
        lop: int = 0,
        email: str | None = None,
        **extra,
    ) -> str:
        oid = ObjectId()
        now = datetime.now(timezone.utc).isoformat()
        doc = {
            "_id": oid,
            "username": "Priya Raman",
            "email": email or f"{oid}@crewconnect.test",
            "role": "User",
            "department": "Engineering",
            "totalLeave": total_leave,
            "availableLeave": available_leave,
            "LOP": lop,
            "leaveRequests": [],
            "version": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        doc.update(extra)
        await employees.insert_one(doc)
        return str(oid)

    return _make
