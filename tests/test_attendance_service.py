import asyncio
import json
import os

import pytest
from bson.objectid import ObjectId
from fastapi import HTTPException
from pymongo.errors import PyMongoError

from models.attendance_model import AttendanceCreate, AttendanceFilterParams, AttendanceUpdate, DailyAttendance
from services import attendance_service
from utils.errors import InvalidArgumentError


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def employee(fake_db, employee_doc):
    fake_db["employees"].documents.append(employee_doc)
    return employee_doc


def _create(employee, month=4, year=2023, records=None):
    request = AttendanceCreate(
        employee_id=str(employee["_id"]),
        month=month,
        year=year,
        records=records or [],
    )
    return run(attendance_service.create_attendance_record(request))


def test_create_attendance_record_copies_employee_number(fake_db, employee):
    result = _create(employee, records=[DailyAttendance(date=2, status="present"), DailyAttendance(date=1, status="absent")])

    stored = fake_db["attendance"].documents[0]
    assert result["success"] is True
    assert stored["employee_number"] == "EMP001"
    assert [r["date"] for r in stored["records"]] == [1, 2]


def test_create_attendance_record_rejects_duplicate_month(fake_db, employee):
    _create(employee)
    with pytest.raises(HTTPException) as exc:
        _create(employee)
    assert exc.value.status_code == 409


def test_create_attendance_record_rejects_missing_day(fake_db, employee):
    with pytest.raises(HTTPException) as exc:
        _create(employee, month=2, year=2023, records=[DailyAttendance(date=30, status="present")])
    assert exc.value.status_code == 400


def test_create_attendance_for_unknown_employee(fake_db):
    request = AttendanceCreate(employee_id=str(ObjectId()), month=1, year=2024)
    with pytest.raises(HTTPException) as exc:
        run(attendance_service.create_attendance_record(request))
    assert exc.value.status_code == 404


def test_update_day_upserts_monthly_document(fake_db, employee):
    update = AttendanceUpdate(employee_id=str(employee["_id"]), date=3, status="sick-leave", month=5, year=2024)
    run(attendance_service.update_attendance_record(update))

    stored = fake_db["attendance"].documents[0]
    assert stored["month"] == 5
    assert stored["records"] == [{"date": 3, "status": "sick-leave"}]


def test_update_day_replaces_existing_entry(fake_db, employee):
    _create(employee, month=5, year=2024, records=[DailyAttendance(date=3, status="present")])
    update = AttendanceUpdate(employee_id=str(employee["_id"]), date=3, status="half-day", notes="doctor", month=5, year=2024)

    run(attendance_service.update_attendance_record(update))

    records = fake_db["attendance"].documents[0]["records"]
    assert records == [{"date": 3, "status": "half-day", "notes": "doctor"}]


def test_update_day_outside_month(fake_db, employee):
    update = AttendanceUpdate(employee_id=str(employee["_id"]), date=31, status="present", month=4, year=2024)
    with pytest.raises(HTTPException) as exc:
        run(attendance_service.update_attendance_record(update))
    assert exc.value.status_code == 400


def test_get_attendance_records_filters_by_month(fake_db, employee):
    _create(employee, month=4)
    _create(employee, month=5)

    result = run(attendance_service.get_attendance_records(AttendanceFilterParams(month=5)))

    assert len(result["data"]) == 1
    assert result["data"][0]["month"] == 5


def test_delete_attendance_record(fake_db, employee):
    created = _create(employee)
    run(attendance_service.delete_attendance_record(created["data"]["_id"]))
    assert fake_db["attendance"].documents == []

    with pytest.raises(HTTPException) as exc:
        run(attendance_service.delete_attendance_record(created["data"]["_id"]))
    assert exc.value.status_code == 404


def test_monthly_summary_for_all_employees(fake_db, employee):
    records = [DailyAttendance(date=d, status="present") for d in range(1, 6)]
    records += [
        DailyAttendance(date=6, status="half-day"),
        DailyAttendance(date=7, status="half-day"),
        DailyAttendance(date=8, status="absent"),
        DailyAttendance(date=9, status="sick-leave"),
        DailyAttendance(date=10, status="casual-leave"),
    ]
    _create(employee, records=records)
    # Attendance left behind by a deleted employee is skipped
    fake_db["attendance"].documents.append({"employee_id": str(ObjectId()), "month": 4, "year": 2023, "records": []})

    result = run(attendance_service.get_monthly_summary(4, 2023))

    assert len(result["data"]) == 1
    summary = result["data"][0]
    assert summary["employee_number"] == "EMP001"
    assert summary["full_name"] == "Nimal Perera"
    assert summary["total_working_days"] == 30
    assert summary["leave_breakdown"] == {"sick-leave": 1, "casual-leave": 1}
    assert summary["attendance_percentage"] == pytest.approx(20.0)


def test_monthly_summary_rejects_bad_month(fake_db):
    with pytest.raises(InvalidArgumentError):
        run(attendance_service.get_monthly_summary(13, 2024))


def test_employee_summary_without_records(fake_db, employee):
    result = run(attendance_service.get_employee_monthly_summary(str(employee["_id"]), 2, 2024))
    assert result["data"]["total_working_days"] == 29
    assert result["data"]["attendance_percentage"] == 0.0


def test_leave_balance(fake_db, employee):
    _create(employee, month=1, year=2024, records=[
        DailyAttendance(date=1, status="leave"),
        DailyAttendance(date=2, status="annual-leave"),
        DailyAttendance(date=3, status="present"),
    ])
    _create(employee, month=2, year=2024, records=[DailyAttendance(date=1, status="sick-leave")])

    result = run(attendance_service.get_leave_balance(str(employee["_id"]), 2024))

    assert result["data"]["leaves_taken"] == 3
    assert result["data"]["balance"] == 39


def test_backup_and_clear_month(fake_db, employee, tmp_path):
    _create(employee, month=3, year=2024)
    _create(employee, month=4, year=2024)
    fake_db["leaves"].documents.append({"_id": ObjectId(), "start_date": "10-03-2024", "status": "pending"})
    fake_db["leaves"].documents.append({"_id": ObjectId(), "start_date": "10-04-2024", "status": "pending"})

    result = run(attendance_service.backup_monthly_data(3, 2024, output_dir=str(tmp_path)))

    backup_dir = result["file_path"]
    assert backup_dir == os.path.join(str(tmp_path), "backup_2024_3")
    with open(os.path.join(backup_dir, "attendance.json")) as f:
        assert len(json.load(f)) == 1
    with open(os.path.join(backup_dir, "leaves.json")) as f:
        assert len(json.load(f)) == 1

    result = run(attendance_service.clear_monthly_data(3, 2024))
    assert result["message"] == "Cleared 1 attendance records for 3/2024"
    assert [d["month"] for d in fake_db["attendance"].documents] == [4]


def test_concurrent_day_updates_keep_both_days(fake_db, employee):
    async def mark_two_days():
        await asyncio.gather(
            attendance_service.update_attendance_record(
                AttendanceUpdate(employee_id=str(employee["_id"]), date=1, status="present", month=4, year=2024)
            ),
            attendance_service.update_attendance_record(
                AttendanceUpdate(employee_id=str(employee["_id"]), date=2, status="absent", month=4, year=2024)
            ),
        )

    run(mark_two_days())

    assert len(fake_db["attendance"].documents) == 1
    records = fake_db["attendance"].documents[0]["records"]
    assert [(r["date"], r["status"]) for r in records] == [(1, "present"), (2, "absent")]


def test_concurrent_updates_of_same_day_leave_one_entry(fake_db, employee):
    async def mark_same_day():
        await asyncio.gather(*[
            attendance_service.update_attendance_record(
                AttendanceUpdate(employee_id=str(employee["_id"]), date=5, status=status, month=4, year=2024)
            )
            for status in ("present", "absent")
        ])

    run(mark_same_day())

    records = fake_db["attendance"].documents[0]["records"]
    assert [r["date"] for r in records] == [5]


def test_monthly_summary_with_unknown_stored_status(fake_db, employee):
    fake_db["attendance"].documents.append({
        "_id": ObjectId(),
        "employee_id": str(employee["_id"]),
        "month": 4,
        "year": 2023,
        "records": [{"date": 1, "status": "holiday"}],
    })

    with pytest.raises(HTTPException) as exc:
        run(attendance_service.get_monthly_summary(4, 2023))
    assert exc.value.status_code == 500
    assert "invalid data" in exc.value.detail


def test_backup_reports_database_errors(fake_db, tmp_path, monkeypatch):
    def failing_find(query=None):
        raise PyMongoError("connection reset")

    monkeypatch.setattr(fake_db["leaves"], "find", failing_find)

    with pytest.raises(HTTPException) as exc:
        run(attendance_service.backup_monthly_data(3, 2024, output_dir=str(tmp_path)))
    assert exc.value.status_code == 500
