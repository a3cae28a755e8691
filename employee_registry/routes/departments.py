"""Department endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from employee_registry.dependencies import (
    get_actor,
    get_department_search,
    get_department_service,
    get_pagination,
)
from employee_registry.schemas import (
    ApiResponse,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentSearchRequest,
    DepartmentUpdate,
    PaginatedResult,
    PaginationRequest,
)
from employee_registry.services import DepartmentService

router = APIRouter(prefix="/departments", tags=["Departments"])

ERROR_RESPONSES = {
    400: {"model": ApiResponse[None], "description": "Validation failed"},
    500: {"model": ApiResponse[None], "description": "Unexpected error"},
}


@router.get(
    "",
    response_model=ApiResponse[PaginatedResult[DepartmentResponse]],
    summary="List Departments",
    description="Get a paginated list of active departments with their active employee count.",
    responses=ERROR_RESPONSES,
)
def list_departments(
    pagination: PaginationRequest = Depends(get_pagination),
    service: DepartmentService = Depends(get_department_service),
):
    return service.list_departments(pagination)


@router.get(
    "/search",
    response_model=ApiResponse[PaginatedResult[DepartmentResponse]],
    summary="Search Departments",
    description=(
        "Search active departments by name, description or creation date. "
        "At least one criterion is required."
    ),
    responses=ERROR_RESPONSES,
)
def search_departments(
    request: DepartmentSearchRequest = Depends(get_department_search),
    service: DepartmentService = Depends(get_department_service),
):
    return service.search_departments(request)


@router.get(
    "/deleted",
    response_model=ApiResponse[list[DepartmentResponse]],
    summary="List Deleted Departments",
    description="Get every soft-deleted department, most recently deleted first.",
    responses=ERROR_RESPONSES,
)
def list_deleted_departments(service: DepartmentService = Depends(get_department_service)):
    return service.list_deleted_departments()


@router.get(
    "/{department_id}",
    response_model=ApiResponse[DepartmentResponse],
    summary="Get Department",
    responses={**ERROR_RESPONSES, 404: {"model": ApiResponse[None], "description": "Department not found"}},
)
def get_department(
    department_id: UUID,
    service: DepartmentService = Depends(get_department_service),
):
    return service.get_department(str(department_id))


@router.post(
    "",
    response_model=ApiResponse[DepartmentResponse],
    status_code=201,
    summary="Create Department",
    responses={**ERROR_RESPONSES, 409: {"model": ApiResponse[None], "description": "Name already exists"}},
)
def create_department(
    department: DepartmentCreate,
    actor: str = Depends(get_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return service.create_department(department, actor)


@router.put(
    "/{department_id}",
    response_model=ApiResponse[DepartmentResponse],
    summary="Update Department",
    description="Replace a department's fields. Send `version` to reject stale writes.",
    responses={
        **ERROR_RESPONSES,
        404: {"model": ApiResponse[None], "description": "Department not found"},
        409: {"model": ApiResponse[None], "description": "Name already exists or stale version"},
    },
)
def update_department(
    department_id: UUID,
    updates: DepartmentUpdate,
    actor: str = Depends(get_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return service.update_department(str(department_id), updates, actor)


@router.delete(
    "/{department_id}",
    response_model=ApiResponse[bool],
    summary="Delete Department",
    description="Soft delete a department. Refused while it still has active employees.",
    responses={
        **ERROR_RESPONSES,
        404: {"model": ApiResponse[None], "description": "Department not found"},
        409: {"model": ApiResponse[None], "description": "Department has active employees"},
    },
)
def delete_department(
    department_id: UUID,
    actor: str = Depends(get_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return service.delete_department(str(department_id), actor)


@router.post(
    "/{department_id}/restore",
    response_model=ApiResponse[bool],
    summary="Restore Department",
    responses={
        **ERROR_RESPONSES,
        404: {"model": ApiResponse[None], "description": "Department not found or not deleted"},
        409: {"model": ApiResponse[None], "description": "Name taken by an active department"},
    },
)
def restore_department(
    department_id: UUID,
    actor: str = Depends(get_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return service.restore_department(str(department_id), actor)
