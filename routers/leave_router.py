# routers/leave_router.py
from fastapi import APIRouter
from services.leave_service import (
    get_leave_applications,
    create_leave_application,
    update_leave_application,
    approve_leave_application,
    reject_leave_application,
)
from models.leave import LeaveApplicationCreate, LeaveApplicationUpdate, LeaveApproval, LeaveRejection, LeaveStatus
from typing import Optional

router = APIRouter(tags=["leaves"])

@router.get("/leaves")
async def api_get_leave_applications(employee_id: Optional[str] = None, status: Optional[LeaveStatus] = None):
    return await get_leave_applications(employee_id, status)

@router.post("/leaves")
async def api_create_leave_application(application: LeaveApplicationCreate):
    return await create_leave_application(application)

@router.put("/leaves/{application_id}")
async def api_update_leave_application(application_id: str, update_data: LeaveApplicationUpdate):
    return await update_leave_application(application_id, update_data)

@router.post("/leaves/{application_id}/approve")
async def api_approve_leave_application(application_id: str, approval: LeaveApproval):
    return await approve_leave_application(application_id, approval.approved_by)

@router.post("/leaves/{application_id}/reject")
async def api_reject_leave_application(application_id: str, rejection: LeaveRejection):
    return await reject_leave_application(application_id, rejection.reason)
