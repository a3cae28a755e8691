"""User-facing response messages. None of them carry technical details."""


class EmployeeMessages:
    NOT_FOUND = "Employee with ID {0} not found"
    NOT_FOUND_OR_NOT_DELETED = "Employee with ID {0} not found or not deleted"
    EMAIL_ALREADY_EXISTS = "Employee with email '{0}' already exists"
    DEPARTMENT_DELETED = "Cannot restore employee while department {0} is deleted"
    STALE_VERSION = "Employee was modified by another user"
    CREATED = "Employee created successfully"
    UPDATED = "Employee updated successfully"
    DELETED = "Employee soft deleted successfully"
    RESTORED = "Employee restored successfully"


class DepartmentMessages:
    NOT_FOUND = "Department with ID {0} not found"
    NOT_FOUND_OR_NOT_DELETED = "Department with ID {0} not found or not deleted"
    NAME_ALREADY_EXISTS = "Department name '{0}' already exists"
    HAS_ACTIVE_EMPLOYEES = "Cannot delete department with active employees"
    STALE_VERSION = "Department was modified by another user"
    CREATED = "Department created successfully"
    UPDATED = "Department updated successfully"
    DELETED = "Department soft deleted successfully"
    RESTORED = "Department restored successfully"


class GeneralMessages:
    SUCCESS = "Operation completed successfully"
    VALIDATION_FAILED = "Validation failed"
    SEARCH_CRITERIA_REQUIRED = "At least one search criteria must be provided"
    INTERNAL_ERROR = "An unexpected error occurred. Please try again later"
    RESOURCE_NOT_FOUND = "The requested resource was not found"
