# routers/attendance_router.py
from fastapi import APIRouter, Body
from services.attendance_service import (
    get_attendance_records,
    create_attendance_record,
    update_attendance_record,
    delete_attendance_record,
    get_monthly_summary,
    get_employee_monthly_summary,
    get_leave_balance,
    backup_monthly_data,
    clear_monthly_data,
)
from models.attendance_model import AttendanceCreate, AttendanceUpdate, AttendanceFilterParams
from typing import Optional

router = APIRouter(tags=["attendance"])

@router.post("/attendance/query")
async def api_get_attendance_records(filters: Optional[AttendanceFilterParams] = Body(None)):
    return await get_attendance_records(filters)

@router.post("/attendance")
async def api_create_attendance_record(attendance: AttendanceCreate):
    return await create_attendance_record(attendance)

@router.put("/attendance/day")
async def api_update_attendance_record(update_data: AttendanceUpdate):
    return await update_attendance_record(update_data)

@router.delete("/attendance/{record_id}")
async def api_delete_attendance_record(record_id: str):
    return await delete_attendance_record(record_id)

@router.get("/attendance/summary/{year}/{month}")
async def api_get_monthly_summary(year: int, month: int):
    return await get_monthly_summary(month, year)

@router.get("/attendance/{employee_id}/summary/{year}/{month}")
async def api_get_employee_monthly_summary(employee_id: str, year: int, month: int):
    return await get_employee_monthly_summary(employee_id, month, year)

@router.get("/attendance/{employee_id}/leave_balance/{year}")
async def api_get_leave_balance(employee_id: str, year: int):
    return await get_leave_balance(employee_id, year)

@router.post("/attendance/backup/{year}/{month}")
async def api_backup_monthly_data(year: int, month: int):
    return await backup_monthly_data(month, year)

@router.delete("/attendance/clear/{year}/{month}")
async def api_clear_monthly_data(year: int, month: int):
    return await clear_monthly_data(month, year)
