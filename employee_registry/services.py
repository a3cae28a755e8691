"""
Business operations for employees and departments.

Each public method is one unit of work: every check it performs and the
write that depends on it share a single transaction, committed at the end or
rolled back on any failure. Expected failures are raised as
``RegistryError`` subclasses and rendered by the API layer.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from employee_registry.errors import ConflictError, NotFoundError, RequestValidationFailed
from employee_registry.messages import DepartmentMessages, EmployeeMessages, GeneralMessages
from employee_registry.models import Department, Employee
from employee_registry.pagination import Page
from employee_registry.repositories import DepartmentRepository, EmployeeRepository
from employee_registry.schemas import (
    ApiResponse,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentSearchRequest,
    DepartmentUpdate,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeSearchRequest,
    EmployeeUpdate,
    PaginatedResult,
    PaginationRequest,
)

logger = logging.getLogger(__name__)


class BaseService:
    stale_message: str

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self, conflict_message: Optional[str] = None) -> Generator[None, None, None]:
        """
        Commit on success, roll back on failure.

        A version mismatch detected at flush time and a unique index
        violation both surface as ``ConflictError``.
        """
        try:
            yield
            self.db.commit()
        except StaleDataError as exc:
            self.db.rollback()
            logger.warning("Concurrent modification rejected: %s", exc)
            raise ConflictError(self.stale_message) from exc
        except IntegrityError as exc:
            self.db.rollback()
            if conflict_message is None:
                raise
            logger.warning("Integrity violation rejected: %s", exc.orig)
            raise ConflictError(conflict_message) from exc
        except Exception:
            self.db.rollback()
            raise

    def flush_or_conflict(self, conflict_message: str) -> None:
        """Flush pending changes, reporting a unique index violation as a conflict."""
        try:
            self.db.flush()
        except IntegrityError as exc:
            logger.warning("Integrity violation rejected: %s", exc.orig)
            raise ConflictError(conflict_message) from exc

    def check_version(self, entity, expected: Optional[int]) -> None:
        if expected is not None and expected != entity.version:
            logger.warning(
                "Stale write on %s %s (expected version %s, current %s)",
                type(entity).__name__,
                entity.id,
                expected,
                entity.version,
            )
            raise ConflictError(self.stale_message)

    @staticmethod
    def page_result(page: Page, schema) -> PaginatedResult:
        return PaginatedResult[schema](
            items=[schema.model_validate(item) for item in page.items],
            **page.window.metadata(),
        )


class EmployeeService(BaseService):
    stale_message = EmployeeMessages.STALE_VERSION

    def __init__(self, db: Session):
        super().__init__(db)
        self.employees = EmployeeRepository(db)
        self.departments = DepartmentRepository(db)

    def list_employees(self, request: PaginationRequest) -> ApiResponse[PaginatedResult[EmployeeResponse]]:
        page = self.employees.list_page(request)
        return ApiResponse[PaginatedResult[EmployeeResponse]].success(
            self.page_result(page, EmployeeResponse)
        )

    def search_employees(self, request: EmployeeSearchRequest) -> ApiResponse[PaginatedResult[EmployeeResponse]]:
        if not request.has_criteria():
            raise RequestValidationFailed([GeneralMessages.SEARCH_CRITERIA_REQUIRED])
        page = self.employees.search_page(request)
        return ApiResponse[PaginatedResult[EmployeeResponse]].success(
            self.page_result(page, EmployeeResponse)
        )

    def get_employee(self, employee_id: str) -> ApiResponse[EmployeeResponse]:
        employee = self.employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(EmployeeMessages.NOT_FOUND.format(employee_id))
        return ApiResponse[EmployeeResponse].success(EmployeeResponse.model_validate(employee))

    def list_deleted_employees(self) -> ApiResponse[list[EmployeeResponse]]:
        employees = self.employees.list_deleted()
        return ApiResponse[list[EmployeeResponse]].success(
            [EmployeeResponse.model_validate(emp) for emp in employees]
        )

    def _active_department(self, department_id: str) -> Department:
        department = self.departments.get_for_reference(department_id)
        if department is None:
            raise NotFoundError(DepartmentMessages.NOT_FOUND.format(department_id))
        return department

    def create_employee(self, data: EmployeeCreate, actor: str) -> ApiResponse[EmployeeResponse]:
        conflict = EmployeeMessages.EMAIL_ALREADY_EXISTS.format(data.email)
        with self.transaction(conflict_message=conflict):
            if self.employees.email_exists(data.email):
                logger.warning("Duplicate employee email rejected")
                raise ConflictError(conflict)
            department = self._active_department(str(data.department_id))
            employee = Employee(
                name=data.name,
                email=data.email,
                date_of_birth=data.date_of_birth,
                department=department,
            )
            employee.mark_created(actor)
            self.employees.add(employee)

        self.db.refresh(employee)
        logger.info("Employee %s created by %s", employee.id, actor)
        return ApiResponse[EmployeeResponse].created(
            EmployeeResponse.model_validate(employee), EmployeeMessages.CREATED
        )

    def update_employee(self, employee_id: str, data: EmployeeUpdate, actor: str) -> ApiResponse[EmployeeResponse]:
        conflict = EmployeeMessages.EMAIL_ALREADY_EXISTS.format(data.email)
        with self.transaction(conflict_message=conflict):
            employee = self.employees.get_by_id(employee_id, for_update=True)
            if employee is None:
                raise NotFoundError(EmployeeMessages.NOT_FOUND.format(employee_id))
            self.check_version(employee, data.version)
            if self.employees.email_exists(data.email, exclude_id=employee_id):
                logger.warning("Duplicate employee email rejected on update of %s", employee_id)
                raise ConflictError(conflict)
            department = self._active_department(str(data.department_id))

            employee.name = data.name
            employee.email = data.email
            employee.date_of_birth = data.date_of_birth
            employee.department = department
            employee.touch(actor)
            self.db.flush()

        self.db.refresh(employee)
        logger.info("Employee %s updated by %s", employee_id, actor)
        return ApiResponse[EmployeeResponse].success(
            EmployeeResponse.model_validate(employee), EmployeeMessages.UPDATED
        )

    def delete_employee(self, employee_id: str, actor: str) -> ApiResponse[bool]:
        with self.transaction():
            employee = self.employees.get_by_id(employee_id, for_update=True)
            if employee is None:
                raise NotFoundError(EmployeeMessages.NOT_FOUND.format(employee_id))
            employee.mark_deleted(actor)
            self.db.flush()

        logger.info("Employee %s soft deleted by %s", employee_id, actor)
        return ApiResponse[bool].success(True, EmployeeMessages.DELETED)

    def restore_employee(self, employee_id: str, actor: str) -> ApiResponse[bool]:
        with self.transaction():
            employee = self.employees.get_deleted(employee_id, for_update=True)
            if employee is None:
                raise NotFoundError(EmployeeMessages.NOT_FOUND_OR_NOT_DELETED.format(employee_id))
            if self.departments.get_for_reference(employee.department_id) is None:
                raise ConflictError(EmployeeMessages.DEPARTMENT_DELETED.format(employee.department_id))
            if self.employees.email_exists(employee.email, exclude_id=employee_id):
                raise ConflictError(EmployeeMessages.EMAIL_ALREADY_EXISTS.format(employee.email))
            employee.mark_restored(actor)
            self.flush_or_conflict(EmployeeMessages.EMAIL_ALREADY_EXISTS.format(employee.email))

        logger.info("Employee %s restored by %s", employee_id, actor)
        return ApiResponse[bool].success(True, EmployeeMessages.RESTORED)


class DepartmentService(BaseService):
    stale_message = DepartmentMessages.STALE_VERSION

    def __init__(self, db: Session):
        super().__init__(db)
        self.departments = DepartmentRepository(db)
        self.employees = EmployeeRepository(db)

    def list_departments(self, request: PaginationRequest) -> ApiResponse[PaginatedResult[DepartmentResponse]]:
        page = self.departments.list_page(request)
        return ApiResponse[PaginatedResult[DepartmentResponse]].success(
            self.page_result(page, DepartmentResponse)
        )

    def search_departments(self, request: DepartmentSearchRequest) -> ApiResponse[PaginatedResult[DepartmentResponse]]:
        if not request.has_criteria():
            raise RequestValidationFailed([GeneralMessages.SEARCH_CRITERIA_REQUIRED])
        page = self.departments.search_page(request)
        return ApiResponse[PaginatedResult[DepartmentResponse]].success(
            self.page_result(page, DepartmentResponse)
        )

    def get_department(self, department_id: str) -> ApiResponse[DepartmentResponse]:
        department = self.departments.get_by_id(department_id)
        if department is None:
            raise NotFoundError(DepartmentMessages.NOT_FOUND.format(department_id))
        return ApiResponse[DepartmentResponse].success(DepartmentResponse.model_validate(department))

    def list_deleted_departments(self) -> ApiResponse[list[DepartmentResponse]]:
        departments = self.departments.list_deleted()
        return ApiResponse[list[DepartmentResponse]].success(
            [DepartmentResponse.model_validate(dept) for dept in departments]
        )

    def create_department(self, data: DepartmentCreate, actor: str) -> ApiResponse[DepartmentResponse]:
        conflict = DepartmentMessages.NAME_ALREADY_EXISTS.format(data.name)
        with self.transaction(conflict_message=conflict):
            if self.departments.name_exists(data.name):
                logger.warning("Duplicate department name %r rejected", data.name)
                raise ConflictError(conflict)
            department = Department(name=data.name, description=data.description)
            department.mark_created(actor)
            self.departments.add(department)

        self.db.refresh(department)
        logger.info("Department %s created by %s", department.id, actor)
        return ApiResponse[DepartmentResponse].created(
            DepartmentResponse.model_validate(department), DepartmentMessages.CREATED
        )

    def update_department(
        self, department_id: str, data: DepartmentUpdate, actor: str
    ) -> ApiResponse[DepartmentResponse]:
        conflict = DepartmentMessages.NAME_ALREADY_EXISTS.format(data.name)
        with self.transaction(conflict_message=conflict):
            department = self.departments.get_by_id(department_id, for_update=True)
            if department is None:
                raise NotFoundError(DepartmentMessages.NOT_FOUND.format(department_id))
            self.check_version(department, data.version)
            if self.departments.name_exists(data.name, exclude_id=department_id):
                logger.warning("Duplicate department name %r rejected on update", data.name)
                raise ConflictError(conflict)
            department.name = data.name
            department.description = data.description
            department.touch(actor)
            self.db.flush()

        self.db.refresh(department)
        logger.info("Department %s updated by %s", department_id, actor)
        return ApiResponse[DepartmentResponse].success(
            DepartmentResponse.model_validate(department), DepartmentMessages.UPDATED
        )

    def delete_department(self, department_id: str, actor: str) -> ApiResponse[bool]:
        with self.transaction():
            department = self.departments.get_by_id(department_id, for_update=True)
            if department is None:
                raise NotFoundError(DepartmentMessages.NOT_FOUND.format(department_id))
            active = self.employees.count_active_in_department(department_id)
            if active:
                logger.warning(
                    "Delete of department %s blocked by %d active employees", department_id, active
                )
                raise ConflictError(DepartmentMessages.HAS_ACTIVE_EMPLOYEES)
            department.mark_deleted(actor)
            self.db.flush()

        logger.info("Department %s soft deleted by %s", department_id, actor)
        return ApiResponse[bool].success(True, DepartmentMessages.DELETED)

    def restore_department(self, department_id: str, actor: str) -> ApiResponse[bool]:
        with self.transaction():
            department = self.departments.get_deleted(department_id, for_update=True)
            if department is None:
                raise NotFoundError(DepartmentMessages.NOT_FOUND_OR_NOT_DELETED.format(department_id))
            if self.departments.name_exists(department.name, exclude_id=department_id):
                raise ConflictError(DepartmentMessages.NAME_ALREADY_EXISTS.format(department.name))
            department.mark_restored(actor)
            self.flush_or_conflict(DepartmentMessages.NAME_ALREADY_EXISTS.format(department.name))

        logger.info("Department %s restored by %s", department_id, actor)
        return ApiResponse[bool].success(True, DepartmentMessages.RESTORED)
