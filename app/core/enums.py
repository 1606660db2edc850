from enum import Enum


class EmployeeRole(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    ACCOUNTANT = "ACCOUNTANT"
    DEPT_HEAD = "DEPT_HEAD"
    SERVICE_HEAD = "SERVICE_HEAD"
    CEO = "CEO"


class EmployeeStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"


class EmployeeGender(str, Enum):
    FEMALE = "FEMALE"
    MALE = "MALE"


class DepartmentType(str, Enum):
    DSI = "DSI"
    DAF = "DAF"
    OPERATIONS = "OPERATIONS"
    OTHERS = "OTHERS"


class LeaveStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class DecisionType(str, Enum):
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    ESCALATE = "ESCALATE"
    CANCEL = "CANCEL"


class BalanceAdjustmentAction(str, Enum):
    RESET = "RESET"
    INCREASE = "INCREASE"
    SET = "SET"


IN_FLIGHT_STATUSES = (LeaveStatus.SUBMITTED.value, LeaveStatus.PENDING.value)
FINAL_STATUSES = (
    LeaveStatus.APPROVED.value,
    LeaveStatus.REJECTED.value,
    LeaveStatus.CANCELLED.value,
)
# Statuses whose paid days count against the yearly entitlement.
CONSUMING_STATUSES = IN_FLIGHT_STATUSES + (LeaveStatus.APPROVED.value,)

MANAGER_ROLES = (EmployeeRole.DEPT_HEAD.value, EmployeeRole.SERVICE_HEAD.value)


def is_final_status(status: str) -> bool:
    return status in FINAL_STATUSES
