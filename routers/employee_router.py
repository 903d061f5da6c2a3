# routers/employee_router.py
from fastapi import APIRouter, Query
from services.employee_service import (
    get_employees,
    get_employee,
    create_employee,
    update_employee,
    delete_employee,
    search_employees,
)
from models.employee import EmployeeCreate, EmployeeUpdate, EmployeeQuery, PaginationParams
from typing import Optional

router = APIRouter(tags=["employees"])

@router.post("/employees/query")
async def api_get_employees(query: EmployeeQuery):
    return await get_employees(query.filter, query.pagination)

@router.get("/employees/search")
async def api_search_employees(
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1),
    sort_by: Optional[str] = None,
    sort_order: int = 1
):
    pagination = PaginationParams(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return await search_employees(q or "", pagination)

@router.get("/employees/{employee_id}")
async def api_get_employee(employee_id: str):
    return await get_employee(employee_id)

@router.post("/employees")
async def api_create_employee(employee: EmployeeCreate):
    return await create_employee(employee)

@router.put("/employees/{employee_id}")
async def api_update_employee(employee_id: str, employee_data: EmployeeUpdate):
    return await update_employee(employee_id, employee_data)

@router.delete("/employees/{employee_id}")
async def api_delete_employee(employee_id: str):
    return await delete_employee(employee_id)
