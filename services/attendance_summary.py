# services/attendance_summary.py
from typing import Dict, Iterable, Union

from models.attendance_model import AttendanceStatus, DailyAttendance, MonthlySummary
from utils.date_utils import days_in_month
from utils.errors import validate_month_year

# Breakdown key for each leave subtype. Generic "leave" has no subtype and is
# therefore absent from this table.
LEAVE_LABELS: Dict[AttendanceStatus, str] = {
    AttendanceStatus.SICK_LEAVE: "sick-leave",
    AttendanceStatus.CASUAL_LEAVE: "casual-leave",
    AttendanceStatus.ANNUAL_LEAVE: "annual-leave",
    AttendanceStatus.EMERGENCY_LEAVE: "emergency-leave",
}

Entry = Union[DailyAttendance, dict]


def _entry_status(entry: Entry) -> AttendanceStatus:
    # Entries come either as models or as raw documents from the attendance collection
    raw = entry.get("status") if isinstance(entry, dict) else entry.status
    return AttendanceStatus(raw)


def summarize(entries: Iterable[Entry], month: int, year: int) -> MonthlySummary:
    """
    Aggregate one employee's daily entries for a month into a MonthlySummary.

    Args:
        entries: Daily attendance entries (models or stored documents)
        month: Month number, 1-12
        year: Positive year

    Returns:
        MonthlySummary with per-status counts, leave breakdown and attendance percentage

    Raises:
        InvalidArgumentError: month or year does not name a real month
        ValueError: an entry carries an unknown status
    """
    validate_month_year(month, year)

    total_working_days = days_in_month(month, year)
    total_present = 0
    total_absent = 0
    total_half_days = 0
    total_leaves = 0
    leave_breakdown: Dict[str, int] = {}

    for entry in entries:
        status = _entry_status(entry)
        if status is AttendanceStatus.PRESENT:
            total_present += 1
        elif status is AttendanceStatus.ABSENT:
            total_absent += 1
        elif status is AttendanceStatus.HALF_DAY:
            total_half_days += 1
        elif status is AttendanceStatus.LEAVE:
            total_leaves += 1
        elif status in LEAVE_LABELS:
            total_leaves += 1
            label = LEAVE_LABELS[status]
            leave_breakdown[label] = leave_breakdown.get(label, 0) + 1
        else:
            raise ValueError(f"Unhandled attendance status: {status!r}")

    if total_working_days > 0:
        attendance_percentage = ((total_present + total_half_days * 0.5) / total_working_days) * 100.0
    else:
        attendance_percentage = 0.0

    return MonthlySummary(
        total_working_days=total_working_days,
        total_present=total_present,
        total_absent=total_absent,
        total_half_days=total_half_days,
        total_leaves=total_leaves,
        leave_breakdown=leave_breakdown,
        attendance_percentage=attendance_percentage,
    )
