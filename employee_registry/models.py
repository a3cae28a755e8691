"""SQLAlchemy database models."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, func, select, text
from sqlalchemy.orm import DeclarativeBase, column_property, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


def active_unique_index(name: str, column) -> Index:
    """
    Case-insensitive unique index restricted to active rows.

    Only emitted where partial indexes exist; elsewhere the service-level
    check is the only guard.
    """
    return Index(
        name,
        func.lower(column),
        unique=True,
        postgresql_where=text("is_deleted = false"),
        sqlite_where=text("is_deleted = 0"),
    ).ddl_if(dialect=("postgresql", "sqlite"))


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class AuditMixin:
    """
    Audit trail and soft delete columns shared by every entity.

    A record is either active (``is_deleted`` false) or deleted. Deleting only
    flips the flag and stamps ``deleted_at``/``deleted_by``; restoring clears
    them again. Rows are never removed.
    """

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_by = Column(String(100), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    updated_by = Column(String(100), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    deleted_by = Column(String(100), nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, index=True)

    def mark_created(self, actor: str) -> None:
        self.created_at = utcnow()
        self.created_by = actor
        self.is_deleted = False

    def touch(self, actor: str) -> None:
        self.updated_at = utcnow()
        self.updated_by = actor

    def mark_deleted(self, actor: str) -> None:
        now = utcnow()
        self.is_deleted = True
        self.deleted_at = now
        self.deleted_by = actor
        self.updated_at = now
        self.updated_by = actor

    def mark_restored(self, actor: str) -> None:
        self.is_deleted = False
        self.deleted_at = None
        self.deleted_by = None
        self.touch(actor)


class Department(AuditMixin, Base):
    """Department model."""
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    version = Column(Integer, nullable=False)

    employees = relationship("Employee", back_populates="department")

    __table_args__ = (active_unique_index("uq_departments_active_name", name),)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        state = "deleted" if self.is_deleted else "active"
        return f"<Department(id={self.id}, name={self.name!r}, {state})>"


class Employee(AuditMixin, Base):
    """Employee model."""
    __tablename__ = "employees"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    date_of_birth = Column(Date, nullable=False)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=False, index=True)
    version = Column(Integer, nullable=False)

    department = relationship("Department", back_populates="employees")

    __table_args__ = (active_unique_index("uq_employees_active_email", email),)

    __mapper_args__ = {"version_id_col": version}

    @property
    def department_name(self) -> str | None:
        return self.department.name if self.department is not None else None

    def __repr__(self) -> str:
        state = "deleted" if self.is_deleted else "active"
        return f"<Employee(id={self.id}, email={self.email!r}, {state})>"


# Number of active employees, computed in SQL alongside each department row
Department.employee_count = column_property(
    select(func.count(Employee.id))
    .where(Employee.department_id == Department.id, Employee.is_deleted.is_(False))
    .correlate_except(Employee)
    .scalar_subquery()
)
