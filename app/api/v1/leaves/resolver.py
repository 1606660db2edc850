"""
Resolve the assignee of a leave request by the role of whoever acts on it.

Submission (requester role -> first assignee):
    EMPLOYEE -> ACCOUNTANT
    DEPT_HEAD / SERVICE_HEAD -> ACCOUNTANT, and the CEO is stamped as reached
    ACCOUNTANT -> CEO
    CEO -> forbidden

Escalation (acting assignee role -> allowed destinations, first one is the default):
    ACCOUNTANT, manager requester -> CEO
    ACCOUNTANT, EMPLOYEE requester -> DEPT_HEAD of the requester's department, CEO
    DEPT_HEAD -> CEO, SERVICE_HEAD of the requester's department
    SERVICE_HEAD -> CEO
"""

from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import MANAGER_ROLES, EmployeeRole, EmployeeStatus
from app.core.exceptions import Conflict, PermissionDenied, ValidationFailed
from app.core.models import Employee

NO_ELIGIBLE_ASSIGNEE = "no_eligible_assignee"

# Roles whose holder is looked up inside the requester's department.
DEPARTMENT_SCOPED_ROLES = (EmployeeRole.DEPT_HEAD, EmployeeRole.SERVICE_HEAD)

_INITIAL_ASSIGNEE_ROLE: Dict[EmployeeRole, EmployeeRole] = {
    EmployeeRole.EMPLOYEE: EmployeeRole.ACCOUNTANT,
    EmployeeRole.DEPT_HEAD: EmployeeRole.ACCOUNTANT,
    EmployeeRole.SERVICE_HEAD: EmployeeRole.ACCOUNTANT,
    EmployeeRole.ACCOUNTANT: EmployeeRole.CEO,
}


@dataclass(frozen=True)
class DirectoryEntry:
    id: UUID
    role: str
    department_id: Optional[UUID] = None


class EmployeeDirectory(Protocol):
    async def first_active(
        self,
        role: EmployeeRole,
        department_id: Optional[UUID] = None,
    ) -> Optional[DirectoryEntry]:
        ...


class SqlEmployeeDirectory:
    """Directory lookups against the employees table (oldest account first)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def first_active(
        self,
        role: EmployeeRole,
        department_id: Optional[UUID] = None,
    ) -> Optional[DirectoryEntry]:
        q = select(Employee.id, Employee.role, Employee.department_id).where(
            Employee.role == role.value,
            Employee.status == EmployeeStatus.ACTIVE.value,
        )
        if department_id is not None:
            q = q.where(Employee.department_id == department_id)
        q = q.order_by(Employee.created_at, Employee.id).limit(1)
        row = (await self.db.execute(q)).first()
        if not row:
            return None
        return DirectoryEntry(id=row.id, role=row.role, department_id=row.department_id)


@dataclass(frozen=True)
class InitialRoute:
    assignee: DirectoryEntry
    # Set for manager requesters when an active CEO exists: visible to the CEO from the start.
    ceo: Optional[DirectoryEntry] = None


def _parse_role(value: object) -> Optional[EmployeeRole]:
    if isinstance(value, EmployeeRole):
        return value
    try:
        return EmployeeRole(str(value).strip().upper())
    except ValueError:
        return None


def _no_assignee(role: EmployeeRole) -> Conflict:
    return Conflict(f"No active {role.value} available", code=NO_ELIGIBLE_ASSIGNEE)


async def resolve_initial_assignee(
    directory: EmployeeDirectory,
    requester_role: str,
) -> InitialRoute:
    """First assignee of a new request. Raises instead of returning a partial route."""
    role = _parse_role(requester_role)
    if role is EmployeeRole.CEO:
        raise PermissionDenied("The CEO cannot submit leave requests")
    target_role = _INITIAL_ASSIGNEE_ROLE.get(role) if role else None
    if target_role is None:
        raise PermissionDenied()

    assignee = await directory.first_active(target_role)
    if assignee is None:
        raise _no_assignee(target_role)

    ceo = None
    if role.value in MANAGER_ROLES:
        ceo = await directory.first_active(EmployeeRole.CEO)
    return InitialRoute(assignee=assignee, ceo=ceo)


def allowed_escalation_roles(actor_role: str, requester_role: str) -> Tuple[EmployeeRole, ...]:
    """Destinations the acting assignee may escalate to; the first one is the default."""
    actor = _parse_role(actor_role)
    if actor is EmployeeRole.ACCOUNTANT:
        if str(requester_role) in MANAGER_ROLES:
            return (EmployeeRole.CEO,)
        return (EmployeeRole.DEPT_HEAD, EmployeeRole.CEO)
    if actor is EmployeeRole.DEPT_HEAD:
        return (EmployeeRole.CEO, EmployeeRole.SERVICE_HEAD)
    if actor is EmployeeRole.SERVICE_HEAD:
        return (EmployeeRole.CEO,)
    return ()


async def resolve_escalation_target(
    directory: EmployeeDirectory,
    *,
    actor_role: str,
    requester_role: str,
    requester_department_id: Optional[UUID],
    to_role: Optional[str] = None,
) -> DirectoryEntry:
    """
    Next assignee when the current assignee escalates.

    Raises PermissionDenied when the actor's role cannot escalate, ValidationFailed
    for a destination outside the allowed set, Conflict when nobody holds the role.
    """
    allowed = allowed_escalation_roles(actor_role, requester_role)
    if not allowed:
        raise PermissionDenied()

    if to_role:
        target_role = _parse_role(to_role)
        if target_role not in allowed:
            raise ValidationFailed(
                "Invalid to_role (allowed: %s)" % ", ".join(r.value for r in allowed)
            )
    else:
        target_role = allowed[0]

    if target_role in DEPARTMENT_SCOPED_ROLES:
        if requester_department_id is None:
            raise _no_assignee(target_role)
        target = await directory.first_active(target_role, requester_department_id)
    else:
        target = await directory.first_active(target_role)

    if target is None:
        raise _no_assignee(target_role)
    return target
