# routers/report_router.py
from fastapi import APIRouter
from services.report_service import (
    generate_employee_report,
    generate_bulk_report,
    generate_attendance_report,
    export_to_csv,
    export_to_excel,
)
from models.report import PrintOptions, BulkReportRequest, ExportRequest

router = APIRouter(tags=["reports"])

@router.post("/reports/employee/{employee_id}")
async def api_generate_employee_report(employee_id: str, options: PrintOptions):
    return await generate_employee_report(employee_id, options)

@router.post("/reports/bulk")
async def api_generate_bulk_report(request: BulkReportRequest):
    return await generate_bulk_report(request.employee_ids, request.options)

@router.post("/reports/attendance/{year}/{month}")
async def api_generate_attendance_report(year: int, month: int, options: PrintOptions):
    return await generate_attendance_report(month, year, options)

@router.post("/exports/csv")
def api_export_to_csv(request: ExportRequest):
    return export_to_csv(request.data, request.options)

@router.post("/exports/excel")
def api_export_to_excel(request: ExportRequest):
    return export_to_excel(request.data, request.options)
