# services/report_service.py
import logging
import os
from datetime import datetime
from html import escape
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pymongo.errors import PyMongoError

from config import APP_NAME, REPORT_OUTPUT_DIR
from database import get_employee_collection
from models.report import PrintOptions, ExportOptions
from services.attendance_service import collect_monthly_summaries
from services.employee_service import find_employee
from utils.date_utils import month_name
from utils.excel_utils import create_csv_from_rows, create_excel_from_rows
from utils.query_utils import parse_object_id

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 15px; font-size: 11px; }}
        .header {{ text-align: center; margin-bottom: 20px; border-bottom: 2px solid #dc2626; padding-bottom: 10px; }}
        table {{ width: 100%; border-collapse: collapse; }}
        th, td {{ border: 1px solid #cbd5e1; padding: 4px; text-align: left; }}
        th {{ background-color: #f8fafc; font-weight: bold; }}
        tr:nth-child(even) {{ background-color: #f8fafc; }}
        .employee-photo {{ width: 120px; height: 90px; object-fit: cover; border: 1px solid #cbd5e1; }}
        @media print {{ .no-print {{ display: none; }} body {{ margin: 0; }} }}
        @page {{ size: {orientation}; margin: 10mm; }}
    </style>
</head>
<body>
    <div class="header">
        <h1>{app_name}</h1>
        <h2>{title}</h2>
        <p>{subtitle}</p>
    </div>
{body}
    <div class="no-print" style="text-align: center; margin-top: 20px;">
        <button onclick="window.print()">Print Report</button>
    </div>
</body>
</html>
"""

EMPLOYEE_FIELDS = [
    ("Employee Number", "employee_number"),
    ("Full Name", "full_name"),
    ("Designation", "designation"),
    ("Ministry", "ministry"),
    ("Gender", "gender"),
    ("Mobile Number", "mobile_number"),
    ("Email Address", "email_address"),
    ("NIC Number", "nic_number"),
    ("Date of Birth", "date_of_birth"),
    ("Age", "age"),
    ("First Appointment Date", "first_appointment_date"),
    ("Appointment Letter No", "appointment_letter_no"),
    ("Increment Date", "increment_date"),
    ("WOP Number", "wop_number"),
    ("Educational Qualification", "educational_qualification"),
    ("Central/Provincial", "central_provincial"),
    ("Date of Arrival VDS", "date_of_arrival_vds"),
    ("Status", "status"),
    ("Date of Transfer", "date_of_transfer"),
    ("EB Pass", "eb_pass"),
    ("Service Confirmed", "service_confirmed"),
    ("Second Language Passed", "second_language_passed"),
    ("Retired Date", "retired_date"),
    ("Marital Status", "marital_status"),
    ("Salary Code", "salary_code"),
]

BULK_COLUMNS = [
    ("Employee #", "employee_number"),
    ("Full Name", "full_name"),
    ("Designation", "designation"),
    ("Ministry", "ministry"),
    ("Gender", "gender"),
    ("Mobile", "mobile_number"),
    ("NIC", "nic_number"),
    ("DOB", "date_of_birth"),
    ("Age", "age"),
    ("Salary Code", "salary_code"),
    ("Central/Provincial", "central_provincial"),
    ("Service Confirmed", "service_confirmed"),
]

LEAVE_COLUMNS = ["sick-leave", "casual-leave", "annual-leave", "emergency-leave"]


def display_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, dict):
        return ", ".join(display_value(v) for v in value.values() if v)
    return str(value)


def _cell(value: Any) -> str:
    return f"<td>{escape(display_value(value))}</td>"


def _table(headers: List[str], rows: List[List[Any]]) -> str:
    head = "".join(f"<th>{escape(h)}</th>" for h in headers)
    body = "\n".join("<tr>" + "".join(_cell(v) for v in row) + "</tr>" for row in rows)
    return f"    <table>\n<thead><tr>{head}</tr></thead>\n<tbody>\n{body}\n</tbody>\n    </table>\n"


def render_page(title: str, subtitle: str, body: str, orientation: str = "portrait") -> str:
    return PAGE_TEMPLATE.format(
        title=escape(title),
        subtitle=escape(subtitle),
        body=body,
        orientation="landscape" if orientation == "landscape" else "portrait",
        app_name=escape(APP_NAME),
    )


def render_employee_report(employee: Dict[str, Any], include_image: bool = True, orientation: str = "portrait") -> str:
    parts = []
    image = employee.get("image")
    if include_image and image:
        src = image if image.startswith("data:") else f"data:image/jpeg;base64,{image}"
        parts.append(f"    <img src=\"{escape(src)}\" alt=\"{escape(display_value(employee.get('full_name')))}\" class=\"employee-photo\" />\n")

    rows = [[label, employee.get(key)] for label, key in EMPLOYEE_FIELDS]
    rows.append(["Personal Address", employee.get("personal_address")])
    grades = employee.get("grade_appointment_date") or {}
    for label, key in (("Grade III", "grade_iii"), ("Grade II", "grade_ii"), ("Grade I", "grade_i"), ("Grade Supra", "grade_supra")):
        if grades.get(key):
            rows.append([f"{label} Appointment", grades[key]])
    parts.append(_table(["Field", "Value"], rows))

    subtitle = f"Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
    return render_page("Employee Report", subtitle, "".join(parts), orientation)


def render_bulk_report(employees: List[Dict[str, Any]]) -> str:
    headers = [label for label, _ in BULK_COLUMNS]
    rows = [[emp.get(key) for _, key in BULK_COLUMNS] for emp in employees]
    subtitle = f"Total Employees: {len(employees)} | Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
    return render_page("Employee List Report", subtitle, _table(headers, rows), "landscape")


def render_attendance_report(summaries: List[Dict[str, Any]], month: int, year: int, orientation: str = "landscape") -> str:
    headers = [
        "Employee #", "Full Name", "Working Days", "Present", "Absent", "Half Days", "Leaves",
        "Sick", "Casual", "Annual", "Emergency", "Attendance %",
    ]
    rows = []
    for s in summaries:
        breakdown = s.get("leave_breakdown", {})
        rows.append(
            [s["employee_number"], s["full_name"], s["total_working_days"], s["total_present"],
             s["total_absent"], s["total_half_days"], s["total_leaves"]]
            + [breakdown.get(label, 0) for label in LEAVE_COLUMNS]
            + [f"{s['attendance_percentage']:.1f}"]
        )
    subtitle = f"{month_name(month)} {year} | Employees: {len(summaries)}"
    return render_page("Monthly Attendance Report", subtitle, _table(headers, rows), orientation)


def _output_path(filename: str, default_ext: str, output_dir: Optional[str] = None) -> str:
    directory = output_dir or REPORT_OUTPUT_DIR
    name = os.path.basename(filename or "")
    if not name:
        raise HTTPException(status_code=400, detail="A filename is required")
    if not os.path.splitext(name)[1]:
        name += default_ext
    os.makedirs(directory, exist_ok=True)
    return os.path.join(directory, name)


def _write_file(path: str, content, binary: bool = False) -> None:
    try:
        if binary:
            with open(path, "wb") as f:
                f.write(content)
        else:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
    except OSError as e:
        logger.exception("Failed to write %s", path)
        raise HTTPException(status_code=500, detail=f"Failed to write file: {e}")


def _check_report_format(fmt: str):
    if fmt.lower() == "pdf":
        raise HTTPException(status_code=400, detail="PDF generation not supported")
    if fmt.lower() != "html":
        raise HTTPException(status_code=400, detail=f"Unsupported report format: {fmt}")


async def generate_employee_report(employee_id: str, options: PrintOptions, output_dir: Optional[str] = None):
    """Generate an HTML profile report for one employee"""
    _check_report_format(options.format)
    employee = await find_employee(employee_id)

    path = _output_path(options.filename, ".html", output_dir)
    _write_file(path, render_employee_report(employee, options.include_image, options.orientation))

    logger.info("Generated employee report for %s", employee_id)
    return {"success": True, "file_path": path, "message": "HTML report generated successfully"}


async def generate_bulk_report(employee_ids: List[str], options: PrintOptions, output_dir: Optional[str] = None):
    """Generate an HTML table report for several employees"""
    _check_report_format(options.format)
    object_ids = [parse_object_id(employee_id, "employee") for employee_id in employee_ids]

    try:
        employees = await get_employee_collection().find({"_id": {"$in": object_ids}}).to_list(length=None)
    except PyMongoError as e:
        logger.exception("Failed to load employees for bulk report")
        raise HTTPException(status_code=500, detail=f"Failed to find employees: {e}")

    path = _output_path(options.filename, ".html", output_dir)
    _write_file(path, render_bulk_report(employees))

    logger.info("Generated bulk report for %d employees", len(employees))
    return {"success": True, "file_path": path, "message": "Bulk HTML report generated successfully"}


async def generate_attendance_report(month: int, year: int, options: PrintOptions, output_dir: Optional[str] = None):
    """Generate an HTML monthly attendance report for all employees"""
    _check_report_format(options.format)

    try:
        summaries = await collect_monthly_summaries(month, year)
    except PyMongoError as e:
        logger.exception("Failed to load attendance for %s/%s", month, year)
        raise HTTPException(status_code=500, detail=f"Failed to find attendance records: {e}")

    path = _output_path(options.filename, ".html", output_dir)
    _write_file(path, render_attendance_report([s.model_dump() for s in summaries], month, year, options.orientation))

    logger.info("Generated attendance report for %s/%s", month, year)
    return {"success": True, "file_path": path, "message": "Attendance HTML report generated successfully"}


def _check_export_format(fmt: Optional[str], accepted):
    if fmt is not None and fmt.lower() not in accepted:
        raise HTTPException(status_code=400, detail=f"Unsupported export format for this endpoint: {fmt}")


def export_to_csv(data: List[Dict[str, Any]], options: ExportOptions, output_dir: Optional[str] = None):
    _check_export_format(options.format, {"csv"})
    path = _output_path(options.filename, ".csv", output_dir)
    _write_file(path, create_csv_from_rows(data, options.headers))

    logger.info("Exported %d rows to %s", len(data), path)
    return {"success": True, "file_path": path, "message": "CSV file exported successfully"}


def export_to_excel(data: List[Dict[str, Any]], options: ExportOptions, output_dir: Optional[str] = None):
    _check_export_format(options.format, {"excel", "xlsx"})
    path = _output_path(options.filename, ".xlsx", output_dir)
    _write_file(path, create_excel_from_rows(data, options.headers).getvalue(), binary=True)

    logger.info("Exported %d rows to %s", len(data), path)
    return {"success": True, "file_path": path, "message": "Excel file exported successfully"}
