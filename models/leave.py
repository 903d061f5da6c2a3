# models/leave.py
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

class LeaveType(str, Enum):
    SICK_LEAVE = "sick-leave"
    CASUAL_LEAVE = "casual-leave"
    ANNUAL_LEAVE = "annual-leave"
    EMERGENCY_LEAVE = "emergency-leave"
    MATERNITY_LEAVE = "maternity-leave"
    PATERNITY_LEAVE = "paternity-leave"

class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class LeaveApplicationCreate(BaseModel):
    employee_id: str
    leave_type: LeaveType
    start_date: str  # dd-MM-yyyy
    end_date: str  # dd-MM-yyyy
    is_half_day: bool = False
    reason: str = Field(..., min_length=1)

class LeaveApplicationUpdate(BaseModel):
    leave_type: Optional[LeaveType] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_half_day: Optional[bool] = None
    reason: Optional[str] = None

class LeaveApproval(BaseModel):
    approved_by: str = Field(..., min_length=1)

class LeaveRejection(BaseModel):
    reason: str = Field(..., min_length=1)
