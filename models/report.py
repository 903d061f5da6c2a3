# models/report.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

class PrintOptions(BaseModel):
    format: str = "html"  # "html" or "pdf"
    orientation: str = "portrait"  # "portrait" or "landscape"
    include_image: bool = True
    filename: str

class ExportOptions(BaseModel):
    # Optional; when given it must match the export endpoint
    format: Optional[str] = None
    filename: str
    headers: List[str]

class BulkReportRequest(BaseModel):
    employee_ids: List[str]
    options: PrintOptions

class ExportRequest(BaseModel):
    data: List[Dict[str, Any]]
    options: ExportOptions
