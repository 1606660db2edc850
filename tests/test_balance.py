import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.leaves.balance import (
    compute_availability,
    consumed_days_for_year,
    consumed_days_from_leaves,
    entitlement_for_year,
    overlap_days_in_year,
    requested_leave_days,
    round_one_decimal,
    seniority_bonus_days,
    sync_balance,
    sync_all_active_balances,
    years_between,
)
from app.core.enums import EmployeeRole, EmployeeStatus, LeaveStatus
from app.core.models import Employee, LeaveRequest

from conftest import TestingSessionLocal


@dataclass
class _Emp:
    hire_date: Optional[date] = None
    company_entry_date: Optional[date] = None
    leave_balance_adjustment: Optional[float] = 0.0


@dataclass
class _Span:
    start_date: date
    end_date: date
    status: str = LeaveStatus.APPROVED.value
    type: str = "ANNUAL_PAID"


def test_hired_2020_has_one_bonus_day_in_2025() -> None:
    ent = entitlement_for_year(_Emp(hire_date=date(2020, 1, 1)), 2025)
    assert ent.seniority_years == 5
    assert ent.bonus_days == 1
    assert ent.entitlement == 26.0


@pytest.mark.parametrize(
    "years, bonus",
    [(0, 0), (4, 0), (5, 1), (9, 1), (10, 2), (15, 3), (20, 5), (24, 5), (25, 7), (30, 8), (42, 8)],
)
def test_seniority_bonus_tiers(years: int, bonus: int) -> None:
    assert seniority_bonus_days(years) == bonus


def test_seniority_is_evaluated_at_year_end() -> None:
    # Five years are completed on 2025-12-01, before Dec 31.
    assert entitlement_for_year(_Emp(hire_date=date(2020, 12, 1)), 2025).bonus_days == 1
    assert years_between(date(2020, 12, 1), date(2025, 11, 30)) == 4


def test_company_entry_date_wins_over_hire_date() -> None:
    emp = _Emp(hire_date=date(1990, 1, 1), company_entry_date=date(2024, 6, 1))
    ent = entitlement_for_year(emp, 2025)
    assert ent.effective_hire_date == date(2024, 6, 1)
    assert ent.bonus_days == 0


def test_no_hire_date_means_always_employed() -> None:
    ent = entitlement_for_year(_Emp(leave_balance_adjustment=2.5), 2025)
    assert ent.entitlement == 27.5
    assert ent.effective_hire_date is None


def test_hired_after_year_end_has_nothing() -> None:
    ent = entitlement_for_year(_Emp(hire_date=date(2026, 1, 1), leave_balance_adjustment=10), 2025)
    assert ent.entitlement == 0.0
    assert ent.months_worked == 0


def test_negative_adjustment_is_floored_at_zero() -> None:
    assert entitlement_for_year(_Emp(leave_balance_adjustment=-40), 2025).entitlement == 0.0


def test_round_one_decimal_is_half_up() -> None:
    assert round_one_decimal(25.25) == 25.3
    assert round_one_decimal(25.24) == 25.2


def test_requested_days_are_inclusive() -> None:
    assert requested_leave_days(date(2025, 3, 3), date(2025, 3, 7)) == 5
    assert requested_leave_days(date(2025, 3, 3), date(2025, 3, 3)) == 1
    assert requested_leave_days(date(2025, 3, 7), date(2025, 3, 3)) == 0
    assert requested_leave_days(None, date(2025, 3, 3)) == 0


def test_span_over_new_year_is_split_between_years() -> None:
    start, end = date(2024, 12, 28), date(2025, 1, 3)
    assert overlap_days_in_year(start, end, 2024) == 4
    assert overlap_days_in_year(start, end, 2025) == 3
    assert overlap_days_in_year(start, end, 2026) == 0


def test_invalid_ranges_count_as_zero_overlap() -> None:
    assert overlap_days_in_year(date(2025, 5, 2), date(2025, 5, 1), 2025) == 0
    assert overlap_days_in_year("not-a-date", date(2025, 5, 1), 2025) == 0


def test_only_paid_in_flight_or_approved_leaves_consume() -> None:
    leaves = [
        _Span(date(2025, 2, 3), date(2025, 2, 7)),
        _Span(date(2025, 3, 3), date(2025, 3, 4), status=LeaveStatus.PENDING.value),
        _Span(date(2025, 4, 1), date(2025, 4, 10), status=LeaveStatus.REJECTED.value),
        _Span(date(2025, 5, 1), date(2025, 5, 10), status=LeaveStatus.CANCELLED.value),
        _Span(date(2025, 6, 1), date(2025, 6, 10), type="SICKNESS"),
        _Span(date(2025, 7, 1), date(2025, 7, 2), type="ANNUAL"),
    ]
    assert consumed_days_from_leaves(leaves, 2025) == 5 + 2 + 2


def test_availability_borrows_against_next_year() -> None:
    avail = compute_availability(20, 18, 25)
    assert avail.available_current_year == 2
    assert avail.available_with_advance == 27
    assert avail.allows(5)
    assert not compute_availability(20, 18, 0).allows(5)
    assert compute_availability(20, 0, 0).allows(5)


def _leave(employee: Employee, start: date, end: date, status: LeaveStatus, type_: str = "ANNUAL_PAID") -> LeaveRequest:
    return LeaveRequest(
        employee_id=employee.id,
        type=type_,
        start_date=start,
        end_date=end,
        status=status.value,
    )


async def test_consumed_days_boundary_and_monotonicity(db_session: AsyncSession, make_employee) -> None:
    emp = await make_employee(EmployeeRole.EMPLOYEE)
    db_session.add(_leave(emp, date(2024, 12, 28), date(2025, 1, 3), LeaveStatus.APPROVED))
    await db_session.commit()

    assert await consumed_days_for_year(db_session, emp.id, 2024) == 4
    assert await consumed_days_for_year(db_session, emp.id, 2025) == 3

    previous = await consumed_days_for_year(db_session, emp.id, 2025)
    for start, end, status in [
        (date(2025, 2, 3), date(2025, 2, 4), LeaveStatus.SUBMITTED),
        (date(2025, 3, 3), date(2025, 3, 3), LeaveStatus.PENDING),
        (date(2025, 4, 7), date(2025, 4, 11), LeaveStatus.APPROVED),
    ]:
        db_session.add(_leave(emp, start, end, status))
        await db_session.commit()
        current = await consumed_days_for_year(db_session, emp.id, 2025)
        assert current >= previous
        previous = current
    assert previous == 3 + 2 + 1 + 5

    db_session.add(_leave(emp, date(2025, 5, 5), date(2025, 5, 9), LeaveStatus.PENDING, type_="UNPAID"))
    await db_session.commit()
    assert await consumed_days_for_year(db_session, emp.id, 2025) == previous


async def test_sync_balance_carries_previous_year_debt(db_session: AsyncSession, make_employee) -> None:
    emp = await make_employee(EmployeeRole.EMPLOYEE)
    # 30 paid days in 2024 against 25 entitled
    db_session.add(_leave(emp, date(2024, 6, 1), date(2024, 6, 30), LeaveStatus.APPROVED))
    await db_session.commit()

    snapshot = await sync_balance(db_session, emp.id, datetime(2025, 2, 1, tzinfo=timezone.utc))
    await db_session.commit()
    assert snapshot.previous_year_consumed == 30
    assert snapshot.debt_from_previous_year == 5
    assert snapshot.effective_entitlement == 20
    assert emp.leave_balance == 20


async def test_sync_balance_is_idempotent(db_session: AsyncSession, make_employee) -> None:
    emp = await make_employee(EmployeeRole.EMPLOYEE, hire_date=date(2010, 5, 1))
    as_of = datetime(2025, 2, 1, tzinfo=timezone.utc)

    await sync_balance(db_session, emp.id, as_of)
    await db_session.commit()
    first = emp.leave_balance
    await sync_balance(db_session, emp.id, as_of)
    await db_session.commit()

    assert first == 28.0
    assert emp.leave_balance == first
    assert not db_session.dirty


async def test_sync_balance_unknown_employee(db_session: AsyncSession) -> None:
    assert await sync_balance(db_session, uuid.uuid4()) is None


async def test_sync_all_active_balances_skips_inactive(db_session: AsyncSession, make_employee) -> None:
    active = await make_employee(EmployeeRole.EMPLOYEE)
    pending = await make_employee(EmployeeRole.EMPLOYEE, status=EmployeeStatus.PENDING)

    count = await sync_all_active_balances(db_session, datetime(2025, 2, 1, tzinfo=timezone.utc))

    assert count == 1
    assert active.leave_balance == 25.0
    assert pending.leave_balance == 0.0


async def test_locked_sync_sees_concurrent_adjustment(db_session: AsyncSession, make_employee) -> None:
    emp = await make_employee(EmployeeRole.EMPLOYEE)
    async with TestingSessionLocal() as other_session:
        row = await other_session.get(Employee, emp.id)
        row.leave_balance_adjustment = 4.0
        await other_session.commit()

    snapshot = await sync_balance(db_session, emp.id, datetime(2025, 2, 1, tzinfo=timezone.utc), lock=True)
    await db_session.commit()

    assert snapshot.employee is emp
    assert emp.leave_balance == 29.0
