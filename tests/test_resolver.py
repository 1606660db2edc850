import uuid
from typing import List, Optional

import pytest

from app.api.v1.leaves.resolver import (
    DirectoryEntry,
    allowed_escalation_roles,
    resolve_escalation_target,
    resolve_initial_assignee,
)
from app.core.enums import EmployeeRole
from app.core.exceptions import Conflict, PermissionDenied, ValidationFailed

DEPT_A = uuid.uuid4()
DEPT_B = uuid.uuid4()


class FakeDirectory:
    """In-memory directory: first matching entry wins, like the SQL one."""

    def __init__(self, *entries: DirectoryEntry) -> None:
        self.entries: List[DirectoryEntry] = list(entries)
        self.calls = []

    async def first_active(self, role: EmployeeRole, department_id: Optional[uuid.UUID] = None):
        self.calls.append((role, department_id))
        for entry in self.entries:
            if entry.role != role.value:
                continue
            if department_id is not None and entry.department_id != department_id:
                continue
            return entry
        return None


def _entry(role: EmployeeRole, department_id: Optional[uuid.UUID] = None) -> DirectoryEntry:
    return DirectoryEntry(id=uuid.uuid4(), role=role.value, department_id=department_id)


ACCOUNTANT = _entry(EmployeeRole.ACCOUNTANT)
CEO = _entry(EmployeeRole.CEO)
HEAD_A = _entry(EmployeeRole.DEPT_HEAD, DEPT_A)
HEAD_B = _entry(EmployeeRole.DEPT_HEAD, DEPT_B)
SERVICE_HEAD_A = _entry(EmployeeRole.SERVICE_HEAD, DEPT_A)


def full_directory() -> FakeDirectory:
    return FakeDirectory(ACCOUNTANT, CEO, HEAD_B, HEAD_A, SERVICE_HEAD_A)


async def test_employee_goes_to_accountant() -> None:
    route = await resolve_initial_assignee(full_directory(), "EMPLOYEE")
    assert route.assignee == ACCOUNTANT
    assert route.ceo is None


@pytest.mark.parametrize("role", ["DEPT_HEAD", "SERVICE_HEAD"])
async def test_manager_goes_to_accountant_and_reaches_ceo(role: str) -> None:
    route = await resolve_initial_assignee(full_directory(), role)
    assert route.assignee == ACCOUNTANT
    assert route.ceo == CEO


async def test_manager_without_ceo_still_routes_to_accountant() -> None:
    route = await resolve_initial_assignee(FakeDirectory(ACCOUNTANT), "DEPT_HEAD")
    assert route.assignee == ACCOUNTANT
    assert route.ceo is None


async def test_accountant_goes_to_ceo() -> None:
    route = await resolve_initial_assignee(full_directory(), "ACCOUNTANT")
    assert route.assignee == CEO


async def test_ceo_cannot_submit() -> None:
    directory = full_directory()
    with pytest.raises(PermissionDenied):
        await resolve_initial_assignee(directory, "CEO")
    assert directory.calls == []


async def test_missing_accountant_is_a_conflict() -> None:
    with pytest.raises(Conflict) as exc:
        await resolve_initial_assignee(FakeDirectory(CEO), "EMPLOYEE")
    assert exc.value.code == "no_eligible_assignee"
    assert exc.value.status_code == 409


def test_escalation_table() -> None:
    assert allowed_escalation_roles("ACCOUNTANT", "EMPLOYEE") == (EmployeeRole.DEPT_HEAD, EmployeeRole.CEO)
    assert allowed_escalation_roles("ACCOUNTANT", "DEPT_HEAD") == (EmployeeRole.CEO,)
    assert allowed_escalation_roles("ACCOUNTANT", "SERVICE_HEAD") == (EmployeeRole.CEO,)
    assert allowed_escalation_roles("DEPT_HEAD", "EMPLOYEE") == (EmployeeRole.CEO, EmployeeRole.SERVICE_HEAD)
    assert allowed_escalation_roles("SERVICE_HEAD", "EMPLOYEE") == (EmployeeRole.CEO,)
    assert allowed_escalation_roles("EMPLOYEE", "EMPLOYEE") == ()
    assert allowed_escalation_roles("CEO", "EMPLOYEE") == ()


async def test_accountant_default_is_requesters_dept_head() -> None:
    target = await resolve_escalation_target(
        full_directory(),
        actor_role="ACCOUNTANT",
        requester_role="EMPLOYEE",
        requester_department_id=DEPT_A,
    )
    assert target == HEAD_A


async def test_accountant_may_go_straight_to_ceo() -> None:
    target = await resolve_escalation_target(
        full_directory(),
        actor_role="ACCOUNTANT",
        requester_role="EMPLOYEE",
        requester_department_id=DEPT_A,
        to_role="ceo",
    )
    assert target == CEO


async def test_manager_request_cannot_go_to_dept_head() -> None:
    with pytest.raises(ValidationFailed):
        await resolve_escalation_target(
            full_directory(),
            actor_role="ACCOUNTANT",
            requester_role="SERVICE_HEAD",
            requester_department_id=DEPT_A,
            to_role="DEPT_HEAD",
        )


async def test_dept_head_to_service_head_of_same_department() -> None:
    target = await resolve_escalation_target(
        full_directory(),
        actor_role="DEPT_HEAD",
        requester_role="EMPLOYEE",
        requester_department_id=DEPT_A,
        to_role="SERVICE_HEAD",
    )
    assert target == SERVICE_HEAD_A

    with pytest.raises(Conflict):
        await resolve_escalation_target(
            full_directory(),
            actor_role="DEPT_HEAD",
            requester_role="EMPLOYEE",
            requester_department_id=DEPT_B,
            to_role="SERVICE_HEAD",
        )


async def test_dept_head_defaults_to_ceo() -> None:
    target = await resolve_escalation_target(
        full_directory(),
        actor_role="DEPT_HEAD",
        requester_role="EMPLOYEE",
        requester_department_id=DEPT_A,
    )
    assert target == CEO


async def test_service_head_only_to_ceo() -> None:
    with pytest.raises(ValidationFailed):
        await resolve_escalation_target(
            full_directory(),
            actor_role="SERVICE_HEAD",
            requester_role="EMPLOYEE",
            requester_department_id=DEPT_A,
            to_role="DEPT_HEAD",
        )


async def test_unknown_to_role_is_a_validation_error() -> None:
    with pytest.raises(ValidationFailed):
        await resolve_escalation_target(
            full_directory(),
            actor_role="DEPT_HEAD",
            requester_role="EMPLOYEE",
            requester_department_id=DEPT_A,
            to_role="JANITOR",
        )


@pytest.mark.parametrize("role", ["EMPLOYEE", "CEO"])
async def test_roles_without_escalation_rights(role: str) -> None:
    with pytest.raises(PermissionDenied):
        await resolve_escalation_target(
            full_directory(),
            actor_role=role,
            requester_role="EMPLOYEE",
            requester_department_id=DEPT_A,
        )


async def test_requester_without_department_has_no_dept_head() -> None:
    directory = full_directory()
    with pytest.raises(Conflict) as exc:
        await resolve_escalation_target(
            directory,
            actor_role="ACCOUNTANT",
            requester_role="EMPLOYEE",
            requester_department_id=None,
        )
    assert exc.value.code == "no_eligible_assignee"
    assert directory.calls == []
