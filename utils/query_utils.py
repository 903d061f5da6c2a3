# utils/query_utils.py

import math
import re
from typing import Any, Dict, List, Optional

from bson.errors import InvalidId
from bson.objectid import ObjectId
from fastapi import HTTPException

EMPLOYEE_SEARCH_FIELDS = [
    "employee_number",
    "full_name",
    "designation",
    "ministry",
    "nic_number",
    "email_address",
]


def parse_object_id(value: str, label: str = "record") -> ObjectId:
    """Convert a hex string id into an ObjectId, failing with a 400 on bad input."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID: {value}")


def _contains(value: str) -> Dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def build_employee_query_filters(filters) -> Dict[str, Any]:
    """
    Builds MongoDB query filters for the employee listing.
    Text fields use case-insensitive "contains" matching, closed-set fields
    match exactly and the age range becomes a $gte/$lte bound.
    """
    mongo_filters: Dict[str, Any] = {}
    if filters is None:
        return mongo_filters

    # Handle contains matching
    for field in ("employee_number", "full_name", "ministry", "nic_number"):
        value = getattr(filters, field, None)
        if value:
            mongo_filters[field] = _contains(value)

    # Handle exact match
    for field in ("designation", "gender", "salary_code"):
        value = getattr(filters, field, None)
        if value is not None:
            mongo_filters[field] = _enum_value(value)

    age_range = getattr(filters, "age_range", None)
    if age_range is not None:
        mongo_filters["age"] = {"$gte": age_range.min, "$lte": age_range.max}

    return mongo_filters


def build_search_filter(query: Optional[str], fields: List[str] = None, case_sensitive: bool = False) -> Dict[str, Any]:
    """
    Builds an $or filter matching the query against each field.
    An empty query matches everything.
    """
    fields = EMPLOYEE_SEARCH_FIELDS if fields is None else fields
    if not query or not fields:
        return {}

    regex = {"$regex": re.escape(query)}
    if not case_sensitive:
        regex["$options"] = "i"

    return {"$or": [{field: dict(regex)} for field in fields]}


def build_attendance_query_filters(filters) -> Dict[str, Any]:
    """
    Builds MongoDB query filters for monthly attendance documents.
    """
    mongo_filters: Dict[str, Any] = {}
    if filters is None:
        return mongo_filters

    if filters.employee_number:
        mongo_filters["employee_number"] = filters.employee_number

    if filters.month is not None:
        mongo_filters["month"] = filters.month

    if filters.year is not None:
        mongo_filters["year"] = filters.year

    # A day-level status filter matches documents holding at least one such day
    if filters.status is not None:
        mongo_filters["records.status"] = _enum_value(filters.status)

    return mongo_filters


def build_leave_query_filters(employee_id: Optional[str] = None, status: Optional[Any] = None) -> Dict[str, Any]:
    mongo_filters: Dict[str, Any] = {}
    if employee_id:
        mongo_filters["employee_id"] = employee_id
    if status is not None:
        mongo_filters["status"] = _enum_value(status)
    return mongo_filters


class PaginationOptions:
    def __init__(self, page: int = 1, limit: int = 25, sort_by: Optional[str] = None, sort_order: int = 1):
        self.page = max(page, 1)
        self.limit = max(limit, 1)
        self.sort_by = sort_by
        self.sort_order = -1 if sort_order == -1 else 1

    @classmethod
    def from_params(cls, params) -> "PaginationOptions":
        if params is None:
            return cls()
        return cls(params.page, params.limit, params.sort_by, params.sort_order)

    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def sort_fields(self):
        if self.sort_by:
            return [(self.sort_by, self.sort_order)]
        return [("_id", 1)]


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


def serialize_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert ObjectId values to strings so the document is JSON serializable."""
    return {
        key: str(value) if isinstance(value, ObjectId) else value
        for key, value in document.items()
    }
