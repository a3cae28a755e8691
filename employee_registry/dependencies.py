"""Request-scoped dependencies shared by the routers."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Query
from sqlalchemy.orm import Session

from employee_registry.config import settings
from employee_registry.database import get_db
from employee_registry.schemas import DepartmentSearchRequest, EmployeeSearchRequest, PaginationRequest
from employee_registry.services import DepartmentService, EmployeeService


def get_actor(x_actor: Optional[str] = Header(None, max_length=100)) -> str:
    """
    Who is performing a mutation.

    Read from the ``X-Actor`` header, set by the authenticating proxy in
    front of the API; falls back to the configured default actor.
    """
    if x_actor and x_actor.strip():
        return x_actor.strip()
    return settings.DEFAULT_ACTOR


def get_employee_service(db: Session = Depends(get_db)) -> EmployeeService:
    return EmployeeService(db)


def get_department_service(db: Session = Depends(get_db)) -> DepartmentService:
    return DepartmentService(db)


def get_pagination(
    page_number: int = Query(1, alias="pageNumber", ge=1, description="Page number"),
    page_size: int = Query(
        settings.DEFAULT_PAGE_SIZE,
        alias="pageSize",
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    ),
    sort_by: Optional[str] = Query("name", alias="sortBy", description="Field to sort by"),
    sort_order: Optional[str] = Query("asc", alias="sortOrder", description="asc or desc"),
) -> PaginationRequest:
    return PaginationRequest(
        page_number=page_number,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )


def get_employee_search(
    pagination: PaginationRequest = Depends(get_pagination),
    search_term: Optional[str] = Query(None, alias="searchTerm", max_length=100),
    name: Optional[str] = Query(None, description="Name contains"),
    email: Optional[str] = Query(None, description="Email contains"),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
    date_of_birth_from: Optional[date] = Query(None, alias="dateOfBirthFrom"),
    date_of_birth_to: Optional[date] = Query(None, alias="dateOfBirthTo"),
    created_at_from: Optional[datetime] = Query(None, alias="createdAtFrom"),
    created_at_to: Optional[datetime] = Query(None, alias="createdAtTo"),
) -> EmployeeSearchRequest:
    return EmployeeSearchRequest(
        **pagination.model_dump(),
        search_term=search_term,
        name=name,
        email=email,
        department_id=department_id,
        date_of_birth_from=date_of_birth_from,
        date_of_birth_to=date_of_birth_to,
        created_at_from=created_at_from,
        created_at_to=created_at_to,
    )


def get_department_search(
    pagination: PaginationRequest = Depends(get_pagination),
    search_term: Optional[str] = Query(None, alias="searchTerm", max_length=100),
    name: Optional[str] = Query(None, description="Name contains"),
    description: Optional[str] = Query(None, description="Description contains"),
    created_at_from: Optional[datetime] = Query(None, alias="createdAtFrom"),
    created_at_to: Optional[datetime] = Query(None, alias="createdAtTo"),
) -> DepartmentSearchRequest:
    return DepartmentSearchRequest(
        **pagination.model_dump(),
        search_term=search_term,
        name=name,
        description=description,
        created_at_from=created_at_from,
        created_at_to=created_at_to,
    )
