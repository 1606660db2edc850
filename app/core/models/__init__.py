from app.core.models.department import Department, Service
from app.core.models.employee import Employee
from app.core.models.leave_request import LeaveRequest
from app.core.models.leave_decision import LeaveDecision
from app.core.models.leave_blackout import LeaveBlackout

__all__ = [
    "Department",
    "Employee",
    "LeaveBlackout",
    "LeaveDecision",
    "LeaveRequest",
    "Service",
]
