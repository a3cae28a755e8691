"""Pydantic models for request/response validation."""

from datetime import UTC, date, datetime
from typing import Generic, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from employee_registry.config import settings
from employee_registry.messages import GeneralMessages

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class AuditFields(CamelModel):
    """Audit trail shared by every response."""
    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    is_deleted: bool = False
    version: int

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def _ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


# --- Employee Models ---

class EmployeeBase(CamelModel):
    """Base employee fields."""
    name: str = Field(..., min_length=2, max_length=100, examples=["Ann Lee"])
    email: EmailStr = Field(..., examples=["ann.lee@company.com"])
    date_of_birth: date = Field(..., examples=["1990-01-01"])
    department_id: UUID = Field(..., examples=["5f0c7c4e-8a55-4b8f-9d0e-3c1f2f6b9a10"])

    @field_validator("email")
    @classmethod
    def _email_length(cls, value: str) -> str:
        if len(value) > 255:
            raise ValueError("Email address cannot exceed 255 characters")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def _born_in_the_past(cls, value: date) -> date:
        if value >= datetime.now(UTC).date():
            raise ValueError("Date of birth must be in the past")
        return value


class EmployeeCreate(EmployeeBase):
    """Schema for creating an employee."""
    pass


class EmployeeUpdate(EmployeeBase):
    """Schema for a full employee update. ``version`` enables stale-write detection."""
    version: Optional[int] = Field(None, ge=1)


class EmployeeResponse(AuditFields):
    """Schema for employee response."""
    id: str
    name: str
    email: str
    date_of_birth: date
    department_id: str
    department_name: Optional[str] = None


# --- Department Models ---

class DepartmentBase(CamelModel):
    """Base department fields."""
    name: str = Field(..., min_length=2, max_length=100, examples=["Engineering"])
    description: Optional[str] = Field(None, max_length=500, examples=["Software development"])


class DepartmentCreate(DepartmentBase):
    """Schema for creating a department."""
    pass


class DepartmentUpdate(DepartmentBase):
    """Schema for a full department update."""
    version: Optional[int] = Field(None, ge=1)


class DepartmentResponse(AuditFields):
    """Schema for department response."""
    id: str
    name: str
    description: Optional[str] = None
    employee_count: int = 0


# --- List / Search Requests ---

class PaginationRequest(CamelModel):
    """Paging and ordering shared by list and search requests."""
    page_number: int = Field(1, ge=1)
    page_size: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    sort_by: Optional[str] = "name"
    sort_order: Optional[str] = "asc"


class EmployeeSearchRequest(PaginationRequest):
    """Employee search criteria. All criteria are combined with AND."""
    search_term: Optional[str] = Field(None, max_length=100)
    name: Optional[str] = None
    email: Optional[str] = None
    department_id: Optional[UUID] = None
    date_of_birth_from: Optional[date] = None
    date_of_birth_to: Optional[date] = None
    created_at_from: Optional[datetime] = None
    created_at_to: Optional[datetime] = None

    def has_criteria(self) -> bool:
        return any((
            self.search_term,
            self.name,
            self.email,
            self.department_id is not None,
            self.date_of_birth_from is not None,
            self.date_of_birth_to is not None,
            self.created_at_from is not None,
            self.created_at_to is not None,
        ))


class DepartmentSearchRequest(PaginationRequest):
    """Department search criteria. All criteria are combined with AND."""
    search_term: Optional[str] = Field(None, max_length=100)
    name: Optional[str] = None
    description: Optional[str] = None
    created_at_from: Optional[datetime] = None
    created_at_to: Optional[datetime] = None

    def has_criteria(self) -> bool:
        return any((
            self.search_term,
            self.name,
            self.description,
            self.created_at_from is not None,
            self.created_at_to is not None,
        ))


# --- Envelope ---

class PaginatedResult(CamelModel, Generic[T]):
    """One page of results plus page metadata."""
    items: list[T]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool


class ApiResponse(CamelModel, Generic[T]):
    """Uniform envelope returned by every endpoint."""
    is_success: bool
    message: str
    data: Optional[T] = None
    errors: list[str] = Field(default_factory=list)
    status_code: int

    @classmethod
    def success(cls, data: T, message: Optional[str] = None, status_code: int = 200) -> "ApiResponse[T]":
        return cls(
            is_success=True,
            message=message or GeneralMessages.SUCCESS,
            data=data,
            status_code=status_code,
        )

    @classmethod
    def created(cls, data: T, message: str) -> "ApiResponse[T]":
        return cls.success(data, message, status_code=201)

    @classmethod
    def failure(cls, message: str, status_code: int, errors: Optional[list[str]] = None) -> "ApiResponse[T]":
        return cls(
            is_success=False,
            message=message,
            data=None,
            errors=errors or [],
            status_code=status_code,
        )


# --- Health Check ---

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    database: str = "ok"
    timestamp: datetime
