"""
Filter and sort composition for list/search queries.

Sort keys arrive as free-form strings from the query string. They are parsed
into closed enums here and mapped through fixed tables to column expressions,
so no caller-provided string ever reaches SQL. Unknown keys and directions
fall back to the defaults (name, ascending).

Every text criterion is a case-insensitive substring match. Date ranges are
inclusive on both ends; an inverted range simply matches nothing.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from employee_registry.models import Department, Employee
from employee_registry.schemas import DepartmentSearchRequest, EmployeeSearchRequest


def _normalize_key(value: Optional[str]) -> str:
    if not value:
        return ""
    return "".join(ch for ch in value.lower() if ch not in "_- ")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        key = _normalize_key(value)
        if key in ("desc", "descending"):
            return cls.DESC
        return cls.ASC


class EmployeeSortKey(str, Enum):
    NAME = "name"
    EMAIL = "email"
    CREATED_AT = "created_at"
    DATE_OF_BIRTH = "date_of_birth"
    DEPARTMENT = "department"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EmployeeSortKey":
        return _EMPLOYEE_SORT_ALIASES.get(_normalize_key(value), cls.NAME)


class DepartmentSortKey(str, Enum):
    NAME = "name"
    DESCRIPTION = "description"
    CREATED_AT = "created_at"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DepartmentSortKey":
        return _DEPARTMENT_SORT_ALIASES.get(_normalize_key(value), cls.NAME)


_EMPLOYEE_SORT_ALIASES = {
    "name": EmployeeSortKey.NAME,
    "email": EmployeeSortKey.EMAIL,
    "createdat": EmployeeSortKey.CREATED_AT,
    "dateofbirth": EmployeeSortKey.DATE_OF_BIRTH,
    "dob": EmployeeSortKey.DATE_OF_BIRTH,
    "department": EmployeeSortKey.DEPARTMENT,
    "departmentname": EmployeeSortKey.DEPARTMENT,
}

_DEPARTMENT_SORT_ALIASES = {
    "name": DepartmentSortKey.NAME,
    "description": DepartmentSortKey.DESCRIPTION,
    "createdat": DepartmentSortKey.CREATED_AT,
}

EMPLOYEE_SORT_COLUMNS = {
    EmployeeSortKey.NAME: Employee.name,
    EmployeeSortKey.EMAIL: Employee.email,
    EmployeeSortKey.CREATED_AT: Employee.created_at,
    EmployeeSortKey.DATE_OF_BIRTH: Employee.date_of_birth,
    EmployeeSortKey.DEPARTMENT: Department.name,
}

DEPARTMENT_SORT_COLUMNS = {
    DepartmentSortKey.NAME: Department.name,
    DepartmentSortKey.DESCRIPTION: Department.description,
    DepartmentSortKey.CREATED_AT: Department.created_at,
}


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column, term: str) -> ColumnElement[bool]:
    """Case-insensitive substring match, folded on the database side."""
    pattern = f"%{escape_like(term)}%"
    return column.ilike(pattern, escape="\\")


def _ordered(stmt: Select, column, direction: SortDirection, tie_breaker) -> Select:
    if direction is SortDirection.DESC:
        return stmt.order_by(column.desc(), tie_breaker.desc())
    return stmt.order_by(column.asc(), tie_breaker.asc())


# --- Employees ---

def employee_base_query(include_deleted: bool = False) -> Select:
    """Employees joined to their department, active only unless asked otherwise."""
    stmt = (
        select(Employee)
        .join(Employee.department)
        .options(selectinload(Employee.department))
    )
    if not include_deleted:
        stmt = stmt.where(Employee.is_deleted.is_(False))
    return stmt


def employee_filters(request: EmployeeSearchRequest) -> list[ColumnElement[bool]]:
    criteria: list[ColumnElement[bool]] = []
    if request.search_term:
        criteria.append(or_(
            contains(Employee.name, request.search_term),
            contains(Employee.email, request.search_term),
        ))
    if request.name:
        criteria.append(contains(Employee.name, request.name))
    if request.email:
        criteria.append(contains(Employee.email, request.email))
    if request.department_id is not None:
        criteria.append(Employee.department_id == str(request.department_id))
    if request.date_of_birth_from is not None:
        criteria.append(Employee.date_of_birth >= request.date_of_birth_from)
    if request.date_of_birth_to is not None:
        criteria.append(Employee.date_of_birth <= request.date_of_birth_to)
    if request.created_at_from is not None:
        criteria.append(Employee.created_at >= to_utc(request.created_at_from))
    if request.created_at_to is not None:
        criteria.append(Employee.created_at <= to_utc(request.created_at_to))
    return criteria


def apply_employee_sorting(stmt: Select, sort_by: Optional[str], sort_order: Optional[str]) -> Select:
    column = EMPLOYEE_SORT_COLUMNS[EmployeeSortKey.parse(sort_by)]
    return _ordered(stmt, column, SortDirection.parse(sort_order), Employee.id)


def build_employee_search(request: EmployeeSearchRequest) -> Select:
    stmt = employee_base_query()
    criteria = employee_filters(request)
    if criteria:
        stmt = stmt.where(and_(*criteria))
    return apply_employee_sorting(stmt, request.sort_by, request.sort_order)


# --- Departments ---

def department_base_query(include_deleted: bool = False) -> Select:
    stmt = select(Department)
    if not include_deleted:
        stmt = stmt.where(Department.is_deleted.is_(False))
    return stmt


def department_filters(request: DepartmentSearchRequest) -> list[ColumnElement[bool]]:
    criteria: list[ColumnElement[bool]] = []
    if request.search_term:
        criteria.append(or_(
            contains(Department.name, request.search_term),
            contains(Department.description, request.search_term),
        ))
    if request.name:
        criteria.append(contains(Department.name, request.name))
    if request.description:
        criteria.append(contains(Department.description, request.description))
    if request.created_at_from is not None:
        criteria.append(Department.created_at >= to_utc(request.created_at_from))
    if request.created_at_to is not None:
        criteria.append(Department.created_at <= to_utc(request.created_at_to))
    return criteria


def apply_department_sorting(stmt: Select, sort_by: Optional[str], sort_order: Optional[str]) -> Select:
    column = DEPARTMENT_SORT_COLUMNS[DepartmentSortKey.parse(sort_by)]
    return _ordered(stmt, column, SortDirection.parse(sort_order), Department.id)


def build_department_search(request: DepartmentSearchRequest) -> Select:
    stmt = department_base_query()
    criteria = department_filters(request)
    if criteria:
        stmt = stmt.where(and_(*criteria))
    return apply_department_sorting(stmt, request.sort_by, request.sort_order)
