# services/attendance_service.py
import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError, PyMongoError

from config import MAX_LEAVE_PER_YEAR, REPORT_OUTPUT_DIR
from database import get_attendance_collection, get_employee_collection, get_leave_collection
from models.attendance_model import (
    AttendanceCreate,
    AttendanceUpdate,
    AttendanceFilterParams,
    AttendanceStatus,
    EmployeeMonthlySummary,
)
from services.attendance_summary import summarize, LEAVE_LABELS
from services.employee_service import find_employee
from utils.date_utils import days_in_month
from utils.errors import InvalidArgumentError, validate_month_year
from utils.query_utils import build_attendance_query_filters, parse_object_id, serialize_document

logger = logging.getLogger(__name__)

LEAVE_STATUSES = {AttendanceStatus.LEAVE.value} | {status.value for status in LEAVE_LABELS}

# Passes of the replace-or-append loop in update_attendance_record
DAY_WRITE_ATTEMPTS = 3


async def get_attendance_records(filters: Optional[AttendanceFilterParams] = None):
    """Get attendance records with optional filtering"""
    query = build_attendance_query_filters(filters)

    try:
        records = await get_attendance_collection().find(query).to_list(length=None)
    except PyMongoError as e:
        logger.exception("Failed to query attendance records")
        raise HTTPException(status_code=500, detail=f"Failed to find attendance records: {e}")

    return {"success": True, "data": [serialize_document(r) for r in records]}


async def create_attendance_record(attendance_data: AttendanceCreate):
    """Create the attendance document for one employee and month"""
    employee = await find_employee(attendance_data.employee_id)
    collection = get_attendance_collection()

    existing = await collection.find_one({
        "employee_id": attendance_data.employee_id,
        "month": attendance_data.month,
        "year": attendance_data.year,
    })
    if existing:
        raise HTTPException(status_code=409, detail="Attendance record already exists for this month")

    # Keep one entry per day, the last one given wins
    by_day = {}
    for entry in attendance_data.records:
        if entry.date > days_in_month(attendance_data.month, attendance_data.year):
            raise HTTPException(status_code=400, detail=f"Day {entry.date} does not exist in {attendance_data.month}/{attendance_data.year}")
        by_day[entry.date] = entry.model_dump(mode="json", exclude_none=True)

    now = datetime.now(timezone.utc)
    record = {
        "employee_id": attendance_data.employee_id,
        "employee_number": employee.get("employee_number", ""),
        "month": attendance_data.month,
        "year": attendance_data.year,
        "records": [by_day[day] for day in sorted(by_day)],
        "created_at": now,
        "updated_at": now,
    }

    try:
        result = await collection.insert_one(record)
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="Attendance record already exists for this month")
    except PyMongoError as e:
        logger.exception("Failed to create attendance record")
        raise HTTPException(status_code=500, detail=f"Failed to create attendance record: {e}")

    record["_id"] = result.inserted_id
    logger.info(
        "Created attendance for employee %s %s/%s",
        attendance_data.employee_id, attendance_data.month, attendance_data.year,
        extra={"record_id": str(result.inserted_id)},
    )
    return {
        "success": True,
        "data": serialize_document(record),
        "message": "Attendance record created successfully",
    }


async def update_attendance_record(update_data: AttendanceUpdate):
    """Set one day's status in an employee's monthly document, creating it if needed"""
    now = datetime.now(timezone.utc)
    month = update_data.month or now.month
    year = update_data.year or now.year

    if update_data.date > days_in_month(month, year):
        raise HTTPException(status_code=400, detail=f"Day {update_data.date} does not exist in {month}/{year}")

    employee = await find_employee(update_data.employee_id)
    collection = get_attendance_collection()
    query = {"employee_id": update_data.employee_id, "month": month, "year": year}

    daily = {"date": update_data.date, "status": update_data.status.value}
    if update_data.notes is not None:
        daily["notes"] = update_data.notes

    # Records are only changed through single-document updates on `query`,
    # never read, rebuilt and written back
    try:
        await collection.update_one(
            query,
            {
                "$set": {"updated_at": now, "employee_number": employee.get("employee_number", "")},
                "$setOnInsert": {"created_at": now, "records": []},
            },
            upsert=True,
        )
        for _ in range(DAY_WRITE_ATTEMPTS):
            replaced = await collection.update_one(
                {**query, "records.date": update_data.date},
                {"$set": {"records.$": daily}},
            )
            if replaced.matched_count:
                break
            added = await collection.update_one(
                {**query, "records.date": {"$ne": update_data.date}},
                {"$push": {"records": {"$each": [daily], "$sort": {"date": 1}}}},
            )
            if added.matched_count:
                break
            # The day was added by another request in between; replace it on the next pass
        else:
            raise HTTPException(status_code=409, detail="Attendance record changed while updating, please retry")
    except PyMongoError as e:
        logger.exception("Failed to update attendance for employee %s", update_data.employee_id)
        raise HTTPException(status_code=500, detail=f"Failed to update attendance: {e}")

    logger.info("Set attendance for employee %s on %s/%s/%s", update_data.employee_id, update_data.date, month, year)
    return {"success": True, "message": "Attendance updated successfully"}


async def delete_attendance_record(record_id: str):
    """Delete an attendance record"""
    object_id = parse_object_id(record_id, "record")

    try:
        result = await get_attendance_collection().delete_one({"_id": object_id})
    except PyMongoError as e:
        logger.exception("Failed to delete attendance record %s", record_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete attendance record: {e}")

    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Attendance record not found")

    logger.info("Deleted attendance record %s", record_id)
    return {"success": True, "message": "Attendance record deleted successfully"}


def build_employee_summary(employee: dict, record: Optional[dict], month: int, year: int) -> EmployeeMonthlySummary:
    entries = record.get("records", []) if record else []
    try:
        summary = summarize(entries, month, year)
    except InvalidArgumentError:
        raise
    except ValueError as e:
        # A stored day carries a status outside AttendanceStatus
        logger.error("Attendance record %s has invalid data: %s", record.get("_id"), e)
        raise HTTPException(status_code=500, detail=f"Attendance record for employee {employee.get('employee_number', '')} has invalid data: {e}")
    return EmployeeMonthlySummary(
        employee_id=str(employee["_id"]),
        employee_number=employee.get("employee_number", ""),
        full_name=employee.get("full_name", ""),
        month=month,
        year=year,
        **summary.model_dump(),
    )


async def collect_monthly_summaries(month: int, year: int):
    """Summaries for every employee holding an attendance document for the month"""
    validate_month_year(month, year)

    records = await get_attendance_collection().find({"month": month, "year": year}).to_list(length=None)
    summaries = []
    for record in records:
        try:
            employee_oid = parse_object_id(record["employee_id"], "employee")
        except HTTPException:
            logger.warning("Skipping attendance record %s with invalid employee id", record.get("_id"))
            continue
        employee = await get_employee_collection().find_one({"_id": employee_oid})
        if not employee:
            # Employee removed since the attendance was recorded
            continue
        summaries.append(build_employee_summary(employee, record, month, year))
    return summaries


async def get_monthly_summary(month: int, year: int):
    """Get monthly attendance summary for all employees"""
    try:
        summaries = await collect_monthly_summaries(month, year)
    except PyMongoError as e:
        logger.exception("Failed to build monthly summary for %s/%s", month, year)
        raise HTTPException(status_code=500, detail=f"Failed to find attendance records: {e}")

    return {"success": True, "data": [s.model_dump() for s in summaries]}


async def get_employee_monthly_summary(employee_id: str, month: int, year: int):
    """Get monthly attendance summary for one employee"""
    validate_month_year(month, year)
    employee = await find_employee(employee_id)

    try:
        record = await get_attendance_collection().find_one({
            "employee_id": employee_id,
            "month": month,
            "year": year,
        })
    except PyMongoError as e:
        logger.exception("Failed to load attendance for employee %s", employee_id)
        raise HTTPException(status_code=500, detail=f"Failed to find attendance records: {e}")

    return {"success": True, "data": build_employee_summary(employee, record, month, year).model_dump()}


async def get_leave_balance(employee_id: str, year: int):
    """Remaining annual leave: allowance minus leave days recorded in the year"""
    if year <= 0:
        raise HTTPException(status_code=400, detail="year must be a positive integer")
    await find_employee(employee_id)

    try:
        records = await get_attendance_collection().find({"employee_id": employee_id, "year": year}).to_list(length=None)
    except PyMongoError as e:
        logger.exception("Failed to load attendance for employee %s", employee_id)
        raise HTTPException(status_code=500, detail=f"Failed to find attendance records: {e}")
    leaves_taken = sum(
        1
        for record in records
        for day in record.get("records", [])
        if day.get("status") in LEAVE_STATUSES
    )

    return {
        "success": True,
        "data": {
            "employee_id": employee_id,
            "year": year,
            "allowance": MAX_LEAVE_PER_YEAR,
            "leaves_taken": leaves_taken,
            "balance": max(0, MAX_LEAVE_PER_YEAR - leaves_taken),
        },
    }


async def backup_monthly_data(month: int, year: int, output_dir: Optional[str] = None):
    """Write the month's attendance and leave documents to JSON files"""
    validate_month_year(month, year)

    backup_dir = os.path.join(output_dir or REPORT_OUTPUT_DIR, f"backup_{year}_{month}")

    try:
        attendance = await get_attendance_collection().find({"month": month, "year": year}).to_list(length=None)
        # Leave dates are stored dd-MM-yyyy, so match on the "-MM-yyyy" suffix
        leaves = await get_leave_collection().find(
            {"start_date": {"$regex": f"-{month:02d}-{year}$"}}
        ).to_list(length=None)
    except PyMongoError as e:
        logger.exception("Failed to load data for backup of %s/%s", month, year)
        raise HTTPException(status_code=500, detail=f"Failed to read data for backup: {e}")

    try:
        os.makedirs(backup_dir, exist_ok=True)
        for name, documents in (("attendance.json", attendance), ("leaves.json", leaves)):
            with open(os.path.join(backup_dir, name), "w", encoding="utf-8") as f:
                json.dump([serialize_document(d) for d in documents], f, indent=2, default=str)
    except OSError as e:
        logger.exception("Failed to write backup for %s/%s", month, year)
        raise HTTPException(status_code=500, detail=f"Failed to write backup: {e}")

    logger.info("Backed up %d attendance and %d leave records for %s/%s", len(attendance), len(leaves), month, year)
    return {
        "success": True,
        "file_path": backup_dir,
        "message": "Monthly data backed up successfully",
    }


async def clear_monthly_data(month: int, year: int):
    """Delete the month's attendance documents"""
    validate_month_year(month, year)

    try:
        result = await get_attendance_collection().delete_many({"month": month, "year": year})
    except PyMongoError as e:
        logger.exception("Failed to clear attendance for %s/%s", month, year)
        raise HTTPException(status_code=500, detail=f"Failed to delete attendance records: {e}")

    logger.info("Cleared %d attendance records for %s/%s", result.deleted_count, month, year)
    return {
        "success": True,
        "file_path": None,
        "message": f"Cleared {result.deleted_count} attendance records for {month}/{year}",
    }
