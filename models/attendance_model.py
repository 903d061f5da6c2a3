# models/attendance_model.py
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from enum import Enum

class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"
    SICK_LEAVE = "sick-leave"
    CASUAL_LEAVE = "casual-leave"
    ANNUAL_LEAVE = "annual-leave"
    EMERGENCY_LEAVE = "emergency-leave"

class DailyAttendance(BaseModel):
    date: int = Field(..., ge=1, le=31)  # day of month
    status: AttendanceStatus
    notes: Optional[str] = None

class AttendanceCreate(BaseModel):
    employee_id: str
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., gt=0)
    records: List[DailyAttendance] = []

class AttendanceUpdate(BaseModel):
    employee_id: str
    date: int = Field(..., ge=1, le=31)
    status: AttendanceStatus
    notes: Optional[str] = None
    # Defaults to the current month when omitted
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, gt=0)

class AttendanceFilterParams(BaseModel):
    employee_number: Optional[str] = None
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = None
    status: Optional[AttendanceStatus] = None

class MonthlySummary(BaseModel):
    total_working_days: int
    total_present: int = 0
    total_absent: int = 0
    total_half_days: int = 0
    total_leaves: int = 0
    leave_breakdown: Dict[str, int] = {}
    attendance_percentage: float = 0.0

class EmployeeMonthlySummary(MonthlySummary):
    employee_id: str
    employee_number: str
    full_name: str
    month: int
    year: int
