"""Employees module — Employee and LeaveBalance models, schemas and services."""

from leave_portal.employees.models import Employee, LeaveBalance

__all__ = ["Employee", "LeaveBalance"]
