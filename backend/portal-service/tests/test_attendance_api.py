from datetime import datetime, timedelta, timezone

import pytest

from crewconnect.api import attendance as attendance_api

NOW = datetime(2024, 3, 5, 9, 15, tzinfo=timezone.utc)


@pytest.fixture()
def clock(monkeypatch):
    state = {"now": NOW}
    monkeypatch.setattr(attendance_api, "_local_now", lambda tz_name: state["now"])
    return state


async def _status(client, status, user_id="u1"):
    return await client.post(
        "/api/attendance/update-status",
        json={"userId": user_id, "status": status, "userName": "Arun"},
    )


async def test_check_in_then_check_out_records_work_minutes(client, clock):
    check_in = await _status(client, "Check-in")
    clock["now"] = NOW + timedelta(hours=8, minutes=30)
    check_out = await _status(client, "Check-out")

    assert check_in.status_code == 200
    assert check_in.json()["record"]["checkInTime"] == "09:15"
    record = check_out.json()["record"]
    assert record["status"] == "Check-out"
    assert record["checkOutTime"] == "17:45"
    assert record["workMinutes"] == 510
    assert record["date"] == "2024-03-05"


async def test_double_check_in_is_rejected(client, clock):
    await _status(client, "Check-in")

    resp = await _status(client, "Check-in")

    assert resp.status_code == 400
    assert resp.json() == {"error": "Already checked in today!"}


async def test_check_out_requires_check_in_and_only_once(client, clock):
    early = await _status(client, "Check-out")
    await _status(client, "Check-in")
    await _status(client, "Check-out")
    again = await _status(client, "Check-out")

    assert early.json() == {"error": "Cannot check out without checking in first!"}
    assert again.json() == {"error": "Already checked out today!"}


async def test_break_toggles(client, clock):
    await _status(client, "Check-in")

    first = await _status(client, "Break")
    second = await _status(client, "Break")

    assert first.json()["record"]["status"] == "Break"
    assert second.json()["record"]["status"] == "Active"


async def test_unknown_status_is_rejected(client, clock):
    resp = await _status(client, "Present")

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid status provided."}


async def test_check_in_closes_previous_day(client, clock, attendance):
    await _status(client, "Check-in")
    clock["now"] = NOW + timedelta(days=1)

    await _status(client, "Check-in")

    previous = await attendance.find_one({"userId": "u1", "date": "2024-03-05"})
    assert previous["status"] == "Present"


async def test_category_can_be_set_once_per_day(client, clock):
    body = {"userId": "u1", "category": "WFH", "userName": "Arun"}

    first = await client.post("/api/attendance/update-category", json=body)
    second = await client.post("/api/attendance/update-category", json={**body, "category": "WFO"})

    assert first.status_code == 200
    assert first.json()["record"]["category"] == "WFH"
    assert second.status_code == 400
    assert second.json() == {"error": "Category can be updated only once per day!"}


async def test_list_today_and_per_user(client, clock):
    await _status(client, "Check-in", user_id="u1")
    await _status(client, "Check-in", user_id="u2")
    clock["now"] = NOW + timedelta(days=1)
    await _status(client, "Check-in", user_id="u1")

    today = await client.get("/api/attendance")
    history = await client.get("/api/attendance/u1")

    assert [r["userId"] for r in today.json()] == ["u1"]
    assert [r["date"] for r in history.json()] == ["2024-03-06", "2024-03-05"]
