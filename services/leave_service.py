# services/leave_service.py
import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import HTTPException
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from database import get_leave_collection
from models.leave import LeaveApplicationCreate, LeaveApplicationUpdate, LeaveStatus
from services.employee_service import find_employee
from utils.date_utils import parse_date, date_range_in_days, format_date
from utils.query_utils import build_leave_query_filters, parse_object_id, serialize_document

logger = logging.getLogger(__name__)


def calculate_leave_days(start_date: str, end_date: str, is_half_day: bool = False) -> float:
    """
    Inclusive number of leave days between two dd-MM-yyyy dates,
    halved for half-day applications.
    """
    start = parse_date(start_date)
    if start is None:
        raise HTTPException(status_code=400, detail="Please enter a valid start date.")
    end = parse_date(end_date)
    if end is None:
        raise HTTPException(status_code=400, detail="Please enter a valid end date.")
    if end < start:
        raise HTTPException(status_code=400, detail="End date must be after start date.")

    days = date_range_in_days(start, end)
    return days * 0.5 if is_half_day else float(days)


async def _find_application(application_id: str) -> dict:
    application = await get_leave_collection().find_one({"_id": parse_object_id(application_id, "leave application")})
    if not application:
        raise HTTPException(status_code=404, detail="Leave application not found")
    return application


def _ensure_pending(application: dict):
    if application.get("status") != LeaveStatus.PENDING.value:
        raise HTTPException(
            status_code=409,
            detail=f"Leave application is already {application.get('status')}",
        )


async def get_leave_applications(employee_id: Optional[str] = None, status: Optional[LeaveStatus] = None):
    query = build_leave_query_filters(employee_id, status)

    try:
        cursor = get_leave_collection().find(query).sort("created_at", DESCENDING)
        applications = await cursor.to_list(length=None)
    except PyMongoError as e:
        logger.exception("Failed to query leave applications")
        raise HTTPException(status_code=500, detail=f"Failed to fetch leave applications: {e}")

    return {"success": True, "data": [serialize_document(a) for a in applications]}


async def create_leave_application(leave_data: LeaveApplicationCreate):
    employee = await find_employee(leave_data.employee_id)
    total_days = calculate_leave_days(leave_data.start_date, leave_data.end_date, leave_data.is_half_day)

    now = datetime.now(timezone.utc)
    application = leave_data.model_dump(mode="json")
    application.update({
        "start_date": format_date(parse_date(leave_data.start_date)),
        "end_date": format_date(parse_date(leave_data.end_date)),
        "employee_number": employee.get("employee_number", ""),
        "total_days": total_days,
        "status": LeaveStatus.PENDING.value,
        "applied_date": format_date(date.today()),
        "created_at": now,
        "updated_at": now,
    })

    try:
        result = await get_leave_collection().insert_one(application)
    except PyMongoError as e:
        logger.exception("Failed to create leave application for %s", leave_data.employee_id)
        raise HTTPException(status_code=500, detail=f"Failed to create leave application: {e}")

    application["_id"] = result.inserted_id
    logger.info("Leave application submitted for employee %s", leave_data.employee_id, extra={"record_id": str(result.inserted_id)})
    return {
        "success": True,
        "data": serialize_document(application),
        "message": "Leave application submitted successfully",
    }


async def _apply_changes(application: dict, changes: dict, message: str):
    """Write changes only if the application is still pending when the update runs"""
    changes["updated_at"] = datetime.now(timezone.utc)
    try:
        result = await get_leave_collection().update_one(
            {"_id": application["_id"], "status": LeaveStatus.PENDING.value},
            {"$set": changes},
        )
    except PyMongoError as e:
        logger.exception("Failed to update leave application %s", application["_id"])
        raise HTTPException(status_code=500, detail=f"Failed to update leave application: {e}")

    if result.matched_count == 0:
        raise HTTPException(status_code=409, detail="Leave application is no longer pending")

    application.update(changes)
    logger.info(message, extra={"record_id": str(application["_id"])})
    return {"success": True, "data": serialize_document(application), "message": message}


async def update_leave_application(application_id: str, update_data: LeaveApplicationUpdate):
    application = await _find_application(application_id)
    _ensure_pending(application)

    changes = update_data.model_dump(mode="json", exclude_none=True)
    if {"start_date", "end_date", "is_half_day"} & changes.keys():
        start_date = changes.get("start_date", application["start_date"])
        end_date = changes.get("end_date", application["end_date"])
        is_half_day = changes.get("is_half_day", application.get("is_half_day", False))
        changes["total_days"] = calculate_leave_days(start_date, end_date, is_half_day)
        changes["start_date"] = format_date(parse_date(start_date))
        changes["end_date"] = format_date(parse_date(end_date))

    return await _apply_changes(application, changes, "Leave application updated successfully")


async def approve_leave_application(application_id: str, approved_by: str):
    application = await _find_application(application_id)
    _ensure_pending(application)

    changes = {
        "status": LeaveStatus.APPROVED.value,
        "approved_by": approved_by,
        "approved_date": format_date(date.today()),
    }
    return await _apply_changes(application, changes, "Leave application approved")


async def reject_leave_application(application_id: str, reason: str):
    application = await _find_application(application_id)
    _ensure_pending(application)

    changes = {
        "status": LeaveStatus.REJECTED.value,
        "rejected_reason": reason,
    }
    return await _apply_changes(application, changes, "Leave application rejected")
