# services/employee_service.py

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from pymongo.errors import PyMongoError

from database import get_employee_collection
from models.employee import EmployeeCreate, EmployeeUpdate, EmployeeFilterParams, PaginationParams
from utils.date_utils import parse_date, format_date, calculate_age, calculate_retirement_date
from utils.nic_utils import parse_nic
from utils.query_utils import (
    PaginationOptions,
    build_employee_query_filters,
    build_search_filter,
    parse_object_id,
    serialize_document,
    total_pages,
)

logger = logging.getLogger(__name__)


def prepare_employee_document(employee_data: EmployeeCreate) -> dict:
    """
    Turn a validated request into the stored employee document.

    The NIC must decode; date of birth falls back to the one encoded in the
    NIC, and age / retired date are derived from the date of birth.
    """
    employee_doc = employee_data.model_dump(mode="json")

    nic_info = parse_nic(employee_doc["nic_number"])
    if nic_info is None:
        raise HTTPException(status_code=400, detail="Valid NIC number is required")

    birth_date = parse_date(employee_doc["date_of_birth"]) or nic_info["date_of_birth"]
    employee_doc["date_of_birth"] = format_date(birth_date)
    employee_doc["age"] = calculate_age(birth_date)

    if not employee_doc.get("retired_date"):
        employee_doc["retired_date"] = format_date(calculate_retirement_date(birth_date))

    return employee_doc


async def _paginated_find(query: dict, pagination: PaginationOptions):
    collection = get_employee_collection()
    try:
        total = await collection.count_documents(query)
        cursor = (
            collection.find(query)
            .sort(pagination.sort_fields())
            .skip(pagination.skip())
            .limit(pagination.limit)
        )
        employees = await cursor.to_list(length=pagination.limit)
    except PyMongoError as e:
        logger.exception("Failed to query employees")
        raise HTTPException(status_code=500, detail=f"Failed to find employees: {e}")

    return {
        "success": True,
        "data": [serialize_document(emp) for emp in employees],
        "total": total,
        "page": pagination.page,
        "limit": pagination.limit,
        "total_pages": total_pages(total, pagination.limit),
    }


async def get_employees(filters: Optional[EmployeeFilterParams] = None, pagination: Optional[PaginationParams] = None):
    query = build_employee_query_filters(filters)
    return await _paginated_find(query, PaginationOptions.from_params(pagination))


async def search_employees(query: str, pagination: Optional[PaginationParams] = None):
    search_filter = build_search_filter(query)
    return await _paginated_find(search_filter, PaginationOptions.from_params(pagination))


async def find_employee(employee_id: str) -> dict:
    """Fetch a raw employee document or raise 404."""
    employee = await get_employee_collection().find_one({"_id": parse_object_id(employee_id, "employee")})
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


async def get_employee(employee_id: str):
    employee = await find_employee(employee_id)
    return {"success": True, "data": serialize_document(employee)}


async def create_employee(employee_data: EmployeeCreate):
    collection = get_employee_collection()

    existing = await collection.find_one({"employee_number": employee_data.employee_number})
    if existing:
        raise HTTPException(status_code=409, detail="Employee number already exists")

    employee_doc = prepare_employee_document(employee_data)
    now = datetime.now(timezone.utc)
    employee_doc["created_at"] = now
    employee_doc["updated_at"] = now

    try:
        result = await collection.insert_one(employee_doc)
    except PyMongoError as e:
        logger.exception("Failed to create employee %s", employee_data.employee_number)
        raise HTTPException(status_code=500, detail=f"Failed to create employee: {e}")

    employee_doc["_id"] = result.inserted_id
    logger.info("Created employee %s", employee_data.employee_number, extra={"record_id": str(result.inserted_id)})
    return {
        "success": True,
        "data": serialize_document(employee_doc),
        "message": "Employee created successfully",
    }


async def update_employee(employee_id: str, employee_data: EmployeeUpdate):
    object_id = parse_object_id(employee_id, "employee")
    collection = get_employee_collection()

    duplicate = await collection.find_one({
        "employee_number": employee_data.employee_number,
        "_id": {"$ne": object_id},
    })
    if duplicate:
        raise HTTPException(status_code=409, detail="Employee number already exists")

    employee_doc = prepare_employee_document(employee_data)
    employee_doc["updated_at"] = datetime.now(timezone.utc)

    try:
        result = await collection.update_one({"_id": object_id}, {"$set": employee_doc}, upsert=False)
    except PyMongoError as e:
        logger.exception("Failed to update employee %s", employee_id)
        raise HTTPException(status_code=500, detail=f"Failed to update employee: {e}")

    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Employee not found")

    employee_doc["_id"] = object_id
    logger.info("Updated employee %s", employee_id)
    return {
        "success": True,
        "data": serialize_document(employee_doc),
        "message": "Employee updated successfully",
    }


async def delete_employee(employee_id: str):
    object_id = parse_object_id(employee_id, "employee")

    try:
        result = await get_employee_collection().delete_one({"_id": object_id})
    except PyMongoError as e:
        logger.exception("Failed to delete employee %s", employee_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete employee: {e}")

    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Employee not found")

    logger.info("Deleted employee %s", employee_id)
    return {"success": True, "message": "Employee deleted successfully"}
