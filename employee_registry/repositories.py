"""
Data access for employees and departments.

Every read takes an explicit ``include_deleted`` flag; soft-deleted rows are
excluded unless a caller asks for them. Repositories never commit, the
service owning the unit of work does.
"""

from typing import Generic, Optional, Sequence, TypeVar

from sqlalchemy import Select, func, literal, select
from sqlalchemy.orm import Session, selectinload

from employee_registry import query_builder
from employee_registry.models import Department, Employee
from employee_registry.pagination import Page, paginate
from employee_registry.schemas import (
    DepartmentSearchRequest,
    EmployeeSearchRequest,
    PaginationRequest,
)

ModelT = TypeVar("ModelT", Department, Employee)


class BaseRepository(Generic[ModelT]):
    """Common lookups shared by both entity repositories."""

    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def _by_id_query(self, entity_id: str) -> Select:
        return select(self.model).where(self.model.id == entity_id)

    def get_by_id(
        self,
        entity_id: str,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> Optional[ModelT]:
        """
        Fetch a single record.

        ``for_update`` takes a row lock on dialects that support it so a
        check-then-write sequence cannot interleave with another writer.
        """
        stmt = self._by_id_query(entity_id)
        if not include_deleted:
            stmt = stmt.where(self.model.is_deleted.is_(False))
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.scalar(stmt)

    def get_deleted(self, entity_id: str, for_update: bool = False) -> Optional[ModelT]:
        stmt = self._by_id_query(entity_id).where(self.model.is_deleted.is_(True))
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.scalar(stmt)

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.flush()
        return entity


class EmployeeRepository(BaseRepository[Employee]):
    model = Employee

    def _by_id_query(self, entity_id: str) -> Select:
        return super()._by_id_query(entity_id).options(selectinload(Employee.department))

    def list_page(self, request: PaginationRequest) -> Page:
        stmt = query_builder.apply_employee_sorting(
            query_builder.employee_base_query(),
            request.sort_by,
            request.sort_order,
        )
        return paginate(self.db, stmt, request.page_number, request.page_size)

    def search_page(self, request: EmployeeSearchRequest) -> Page:
        stmt = query_builder.build_employee_search(request)
        return paginate(self.db, stmt, request.page_number, request.page_size)

    def list_deleted(self) -> Sequence[Employee]:
        stmt = (
            select(Employee)
            .options(selectinload(Employee.department))
            .where(Employee.is_deleted.is_(True))
            .order_by(Employee.deleted_at.desc(), Employee.id)
        )
        return self.db.scalars(stmt).all()

    def email_exists(self, email: str, exclude_id: Optional[str] = None) -> bool:
        """Whether an active employee already uses ``email`` (case-insensitive)."""
        stmt = (
            select(func.count())
            .select_from(Employee)
            .where(
                func.lower(Employee.email) == func.lower(literal(email)),
                Employee.is_deleted.is_(False),
            )
        )
        if exclude_id is not None:
            stmt = stmt.where(Employee.id != exclude_id)
        return bool(self.db.scalar(stmt))

    def count_active_in_department(self, department_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Employee)
            .where(
                Employee.department_id == department_id,
                Employee.is_deleted.is_(False),
            )
        )
        return self.db.scalar(stmt) or 0


class DepartmentRepository(BaseRepository[Department]):
    model = Department

    def get_for_reference(self, department_id: str) -> Optional[Department]:
        """Active department, share-locked while an employee is pointed at it."""
        stmt = (
            select(Department)
            .where(Department.id == department_id, Department.is_deleted.is_(False))
            .with_for_update(read=True)
        )
        return self.db.scalar(stmt)

    def list_page(self, request: PaginationRequest) -> Page:
        stmt = query_builder.apply_department_sorting(
            query_builder.department_base_query(),
            request.sort_by,
            request.sort_order,
        )
        return paginate(self.db, stmt, request.page_number, request.page_size)

    def search_page(self, request: DepartmentSearchRequest) -> Page:
        stmt = query_builder.build_department_search(request)
        return paginate(self.db, stmt, request.page_number, request.page_size)

    def list_deleted(self) -> Sequence[Department]:
        stmt = (
            select(Department)
            .where(Department.is_deleted.is_(True))
            .order_by(Department.deleted_at.desc(), Department.id)
        )
        return self.db.scalars(stmt).all()

    def name_exists(self, name: str, exclude_id: Optional[str] = None) -> bool:
        """Whether an active department already uses ``name`` (case-insensitive)."""
        stmt = (
            select(func.count())
            .select_from(Department)
            .where(
                func.lower(Department.name) == func.lower(literal(name)),
                Department.is_deleted.is_(False),
            )
        )
        if exclude_id is not None:
            stmt = stmt.where(Department.id != exclude_id)
        return bool(self.db.scalar(stmt))
