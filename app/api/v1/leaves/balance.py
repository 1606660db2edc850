"""
Paid-leave balance engine.

Entitlement for a calendar year = 25 base days + seniority bonus + manual adjustment
(floored at 0, one decimal). Seniority is counted in completed years at December 31
of that year. Employee.leave_balance is only a cache of the current-year entitlement
minus any overconsumption carried from the previous year; the source of truth is the
hire dates, the adjustment and the leave requests themselves.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import CONSUMING_STATUSES, EmployeeStatus
from app.core.leave_types import PAID_LEAVE_VALUES, is_paid_leave_type
from app.core.models import Employee, LeaveRequest

logger = logging.getLogger(__name__)

BASE_ANNUAL_DAYS = 25
BALANCE_EPSILON = 0.0001

# (minimum completed years, bonus days), highest tier first
SENIORITY_BONUS_TIERS = (
    (30, 8),
    (25, 7),
    (20, 5),
    (15, 3),
    (10, 2),
    (5, 1),
)


class BalanceSource(Protocol):
    hire_date: Optional[date]
    company_entry_date: Optional[date]
    leave_balance_adjustment: Optional[float]


class LeaveSpan(Protocol):
    start_date: Optional[date]
    end_date: Optional[date]
    status: str
    type: str


@dataclass(frozen=True)
class Entitlement:
    entitlement: float
    monthly_accrued: float
    bonus_days: int
    seniority_years: int
    months_worked: int
    effective_hire_date: Optional[date]
    base_annual_days: int


@dataclass(frozen=True)
class Availability:
    cached_balance: float
    consumed_current_year: int
    available_current_year: float
    next_year_entitlement: float

    @property
    def available_with_advance(self) -> float:
        return max(0.0, self.available_current_year + self.next_year_entitlement)

    def allows(self, requested_days: int) -> bool:
        return requested_days <= self.available_with_advance


@dataclass
class BalanceSnapshot:
    employee: Employee
    current: Entitlement
    previous: Entitlement
    previous_year_consumed: int
    debt_from_previous_year: float
    effective_entitlement: float


def round_one_decimal(value: float) -> float:
    # Half-up, so 25.25 -> 25.3 regardless of float banker's rounding.
    return math.floor(value * 10 + 0.5) / 10


def _as_date(value: object) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    return None


def years_between(start: date, as_of: date) -> int:
    """Completed 12-month periods between start and as_of (never negative)."""
    years = as_of.year - start.year
    if (as_of.month, as_of.day) < (start.month, start.day):
        years -= 1
    return max(0, years)


def seniority_bonus_days(seniority_years: int) -> int:
    for min_years, bonus in SENIORITY_BONUS_TIERS:
        if seniority_years >= min_years:
            return bonus
    return 0


def resolve_hire_date(employee: BalanceSource) -> Optional[date]:
    return _as_date(employee.company_entry_date) or _as_date(employee.hire_date)


def _months_worked_in_year(hire_date: date, year: int) -> int:
    # Accrual is granted for the full year as soon as the employee is hired on or before Dec 31.
    if hire_date > date(year, 12, 31):
        return 0
    return 12


def entitlement_for_year(employee: BalanceSource, year: int) -> Entitlement:
    """Paid-leave days the employee is entitled to for the given calendar year."""
    adjustment = float(employee.leave_balance_adjustment or 0)
    hire_date = resolve_hire_date(employee)
    if hire_date is None:
        return Entitlement(
            entitlement=round_one_decimal(max(0.0, BASE_ANNUAL_DAYS + adjustment)),
            monthly_accrued=BASE_ANNUAL_DAYS,
            bonus_days=0,
            seniority_years=0,
            months_worked=12,
            effective_hire_date=None,
            base_annual_days=BASE_ANNUAL_DAYS,
        )

    months_worked = _months_worked_in_year(hire_date, year)
    if months_worked == 0:
        return Entitlement(
            entitlement=0.0,
            monthly_accrued=0,
            bonus_days=0,
            seniority_years=0,
            months_worked=0,
            effective_hire_date=hire_date,
            base_annual_days=0,
        )

    seniority_years = years_between(hire_date, date(year, 12, 31))
    bonus_days = seniority_bonus_days(seniority_years)
    return Entitlement(
        entitlement=round_one_decimal(max(0.0, BASE_ANNUAL_DAYS + bonus_days + adjustment)),
        monthly_accrued=BASE_ANNUAL_DAYS,
        bonus_days=bonus_days,
        seniority_years=seniority_years,
        months_worked=months_worked,
        effective_hire_date=hire_date,
        base_annual_days=BASE_ANNUAL_DAYS,
    )


def requested_leave_days(start_date: object, end_date: object) -> int:
    """Inclusive number of calendar days between two dates; 0 when the range is invalid."""
    start = _as_date(start_date)
    end = _as_date(end_date)
    if start is None or end is None or end < start:
        return 0
    return (end - start).days + 1


def overlap_days_in_year(start_date: object, end_date: object, year: int) -> int:
    """Inclusive days of [start_date, end_date] that fall inside the calendar year."""
    start = _as_date(start_date)
    end = _as_date(end_date)
    if start is None or end is None or end < start:
        return 0
    clipped_start = max(start, date(year, 1, 1))
    clipped_end = min(end, date(year, 12, 31))
    if clipped_start > clipped_end:
        return 0
    return (clipped_end - clipped_start).days + 1


def consumed_days_from_leaves(leaves: Iterable[LeaveSpan], year: int) -> int:
    """Same count as consumed_days_for_year, over requests already loaded in memory."""
    total = 0
    for leave in leaves:
        if leave.status not in CONSUMING_STATUSES:
            continue
        if not is_paid_leave_type(leave.type):
            continue
        total += overlap_days_in_year(leave.start_date, leave.end_date, year)
    return total


def compute_availability(
    cached_balance: float,
    consumed_current_year: int,
    next_year_entitlement: float,
) -> Availability:
    return Availability(
        cached_balance=float(cached_balance or 0),
        consumed_current_year=consumed_current_year,
        available_current_year=max(0.0, float(cached_balance or 0) - consumed_current_year),
        next_year_entitlement=float(next_year_entitlement or 0),
    )


async def consumed_days_for_year(db: AsyncSession, employee_id: UUID, year: int) -> int:
    """Paid days of SUBMITTED / PENDING / APPROVED requests that fall inside the year."""
    result = await db.execute(
        select(LeaveRequest.start_date, LeaveRequest.end_date).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.status.in_(CONSUMING_STATUSES),
            LeaveRequest.type.in_(PAID_LEAVE_VALUES),
            LeaveRequest.start_date <= date(year, 12, 31),
            LeaveRequest.end_date >= date(year, 1, 1),
        )
    )
    return sum(overlap_days_in_year(start, end, year) for start, end in result.all())


async def _load_employee(db: AsyncSession, employee_id: UUID, lock: bool) -> Optional[Employee]:
    if not lock:
        return await db.get(Employee, employee_id)
    result = await db.execute(
        select(Employee)
        .where(Employee.id == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def sync_balance(
    db: AsyncSession,
    employee_id: UUID,
    as_of: Optional[datetime] = None,
    *,
    lock: bool = False,
) -> Optional[BalanceSnapshot]:
    """
    Recompute the employee's effective entitlement for the current year and refresh
    the cached leave_balance when it drifted. Returns None if the employee does not exist.

    Overconsumption of the previous year is carried over as debt. The write is skipped
    when the cache is already within BALANCE_EPSILON, so calling this on every read is
    safe. The caller owns the transaction (flushes here, never commits).
    """
    as_of = as_of or datetime.now(timezone.utc)
    employee = await _load_employee(db, employee_id, lock)
    if employee is None:
        return None

    current_year = as_of.year
    current = entitlement_for_year(employee, current_year)
    previous = entitlement_for_year(employee, current_year - 1)
    previous_consumed = await consumed_days_for_year(db, employee_id, current_year - 1)
    debt = max(0.0, round_one_decimal(previous_consumed - previous.entitlement))
    effective = round_one_decimal(max(0.0, current.entitlement - debt))

    if abs(float(employee.leave_balance or 0) - effective) >= BALANCE_EPSILON:
        logger.debug(
            "Leave balance of employee %s refreshed: %s -> %s",
            employee_id,
            employee.leave_balance,
            effective,
        )
        employee.leave_balance = effective
        await db.flush()

    return BalanceSnapshot(
        employee=employee,
        current=current,
        previous=previous,
        previous_year_consumed=previous_consumed,
        debt_from_previous_year=debt,
        effective_entitlement=effective,
    )


async def available_for_submission(
    db: AsyncSession,
    employee: Employee,
    as_of: Optional[datetime] = None,
) -> Availability:
    """Days the employee may still request, borrowing against next year's entitlement."""
    as_of = as_of or datetime.now(timezone.utc)
    year = as_of.year
    consumed = await consumed_days_for_year(db, employee.id, year)
    next_year = entitlement_for_year(employee, year + 1)
    return compute_availability(employee.leave_balance, consumed, next_year.entitlement)


async def sync_all_active_balances(db: AsyncSession, as_of: Optional[datetime] = None) -> int:
    """Reconcile every ACTIVE employee and commit. Returns the number processed."""
    result = await db.execute(
        select(Employee.id).where(Employee.status == EmployeeStatus.ACTIVE.value)
    )
    employee_ids = list(result.scalars().all())
    for employee_id in employee_ids:
        await sync_balance(db, employee_id, as_of)
    await db.commit()
    logger.info("Reconciled leave balance of %d active employees", len(employee_ids))
    return len(employee_ids)
