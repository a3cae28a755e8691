"""Employee endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from employee_registry.dependencies import (
    get_actor,
    get_employee_search,
    get_employee_service,
    get_pagination,
)
from employee_registry.schemas import (
    ApiResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeSearchRequest,
    EmployeeUpdate,
    PaginatedResult,
    PaginationRequest,
)
from employee_registry.services import EmployeeService

router = APIRouter(prefix="/employees", tags=["Employees"])

ERROR_RESPONSES = {
    400: {"model": ApiResponse[None], "description": "Validation failed"},
    500: {"model": ApiResponse[None], "description": "Unexpected error"},
}


@router.get(
    "",
    response_model=ApiResponse[PaginatedResult[EmployeeResponse]],
    summary="List Employees",
    description="Get a paginated, sorted list of active employees.",
    responses=ERROR_RESPONSES,
)
def list_employees(
    pagination: PaginationRequest = Depends(get_pagination),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.list_employees(pagination)


@router.get(
    "/search",
    response_model=ApiResponse[PaginatedResult[EmployeeResponse]],
    summary="Search Employees",
    description=(
        "Search active employees. Text criteria are case-insensitive substring "
        "matches, date ranges are inclusive, and all criteria are combined with AND. "
        "At least one criterion is required."
    ),
    responses=ERROR_RESPONSES,
)
def search_employees(
    request: EmployeeSearchRequest = Depends(get_employee_search),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.search_employees(request)


@router.get(
    "/deleted",
    response_model=ApiResponse[list[EmployeeResponse]],
    summary="List Deleted Employees",
    description="Get every soft-deleted employee, most recently deleted first.",
    responses=ERROR_RESPONSES,
)
def list_deleted_employees(service: EmployeeService = Depends(get_employee_service)):
    return service.list_deleted_employees()


@router.get(
    "/{employee_id}",
    response_model=ApiResponse[EmployeeResponse],
    summary="Get Employee",
    description="Get a single active employee by ID.",
    responses={**ERROR_RESPONSES, 404: {"model": ApiResponse[None], "description": "Employee not found"}},
)
def get_employee(
    employee_id: UUID,
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_employee(str(employee_id))


@router.post(
    "",
    response_model=ApiResponse[EmployeeResponse],
    status_code=201,
    summary="Create Employee",
    description="Create a new employee record.",
    responses={
        **ERROR_RESPONSES,
        404: {"model": ApiResponse[None], "description": "Department not found"},
        409: {"model": ApiResponse[None], "description": "Email already exists"},
    },
)
def create_employee(
    employee: EmployeeCreate,
    actor: str = Depends(get_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.create_employee(employee, actor)


@router.put(
    "/{employee_id}",
    response_model=ApiResponse[EmployeeResponse],
    summary="Update Employee",
    description="Replace an employee's fields. Send `version` to reject stale writes.",
    responses={
        **ERROR_RESPONSES,
        404: {"model": ApiResponse[None], "description": "Employee or department not found"},
        409: {"model": ApiResponse[None], "description": "Email already exists or stale version"},
    },
)
def update_employee(
    employee_id: UUID,
    updates: EmployeeUpdate,
    actor: str = Depends(get_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.update_employee(str(employee_id), updates, actor)


@router.delete(
    "/{employee_id}",
    response_model=ApiResponse[bool],
    summary="Delete Employee",
    description="Soft delete an employee. The record stays restorable.",
    responses={**ERROR_RESPONSES, 404: {"model": ApiResponse[None], "description": "Employee not found"}},
)
def delete_employee(
    employee_id: UUID,
    actor: str = Depends(get_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.delete_employee(str(employee_id), actor)


@router.post(
    "/{employee_id}/restore",
    response_model=ApiResponse[bool],
    summary="Restore Employee",
    description="Restore a soft-deleted employee.",
    responses={
        **ERROR_RESPONSES,
        404: {"model": ApiResponse[None], "description": "Employee not found or not deleted"},
        409: {"model": ApiResponse[None], "description": "Department deleted or email taken"},
    },
)
def restore_employee(
    employee_id: UUID,
    actor: str = Depends(get_actor),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.restore_employee(str(employee_id), actor)
