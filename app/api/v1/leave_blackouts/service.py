"""Blackout windows: CRUD for the CEO and the date filter applied at submission."""

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFound, ValidationFailed
from app.core.models import Department, Employee, LeaveBlackout

from .schemas import BlackoutTargetEmployee, LeaveBlackoutCreate, LeaveBlackoutResponse

logger = logging.getLogger(__name__)


def _target_ids(blackout: LeaveBlackout) -> List[str]:
    return [str(v) for v in (blackout.employee_ids or [])]


def applies_to(
    blackout: LeaveBlackout,
    employee_id: UUID,
    department_id: Optional[UUID],
    *,
    untargeted_applies_to_all: Optional[bool] = None,
) -> bool:
    """
    True when the blackout concerns the employee: explicitly targeted, same department,
    or (policy flag) a blackout with neither department nor targets.
    """
    if untargeted_applies_to_all is None:
        untargeted_applies_to_all = settings.blackout_untargeted_applies_to_all

    targets = _target_ids(blackout)
    if str(employee_id) in targets:
        return True
    if blackout.department_id and department_id and blackout.department_id == department_id:
        return True
    if not blackout.department_id and not targets:
        return untargeted_applies_to_all
    return False


async def list_overlapping(db: AsyncSession, start_date: date, end_date: date) -> Sequence[LeaveBlackout]:
    result = await db.execute(
        select(LeaveBlackout).where(
            LeaveBlackout.start_date <= end_date,
            LeaveBlackout.end_date >= start_date,
        )
    )
    return result.scalars().all()


async def has_blocked_range(
    db: AsyncSession,
    employee_id: UUID,
    department_id: Optional[UUID],
    start_date: date,
    end_date: date,
) -> bool:
    """True if any blackout overlapping [start_date, end_date] applies to the employee."""
    blackouts = await list_overlapping(db, start_date, end_date)
    return any(applies_to(b, employee_id, department_id) for b in blackouts)


async def list_applicable_blackouts(
    db: AsyncSession,
    employee_id: UUID,
    department_id: Optional[UUID],
) -> List[LeaveBlackout]:
    result = await db.execute(select(LeaveBlackout).order_by(LeaveBlackout.start_date))
    return [b for b in result.scalars().all() if applies_to(b, employee_id, department_id)]


def _to_response(
    blackout: LeaveBlackout,
    employees_by_id: Optional[dict] = None,
) -> LeaveBlackoutResponse:
    employees_by_id = employees_by_id or {}
    targets = [
        BlackoutTargetEmployee.model_validate(employees_by_id[t])
        for t in _target_ids(blackout)
        if t in employees_by_id
    ]
    return LeaveBlackoutResponse(
        id=blackout.id,
        title=blackout.title,
        reason=blackout.reason,
        start_date=blackout.start_date,
        end_date=blackout.end_date,
        department_id=blackout.department_id,
        employee_ids=[UUID(t) for t in _target_ids(blackout)],
        created_by_id=blackout.created_by_id,
        created_at=blackout.created_at,
        target_employees=targets,
    )


async def _employees_by_id(db: AsyncSession, ids: Iterable[str]) -> dict:
    uuids = {UUID(i) for i in ids}
    if not uuids:
        return {}
    result = await db.execute(select(Employee).where(Employee.id.in_(uuids)))
    return {str(e.id): e for e in result.scalars().all()}


async def list_blackouts(db: AsyncSession) -> List[LeaveBlackoutResponse]:
    result = await db.execute(select(LeaveBlackout).order_by(LeaveBlackout.start_date.desc()))
    rows = result.scalars().all()
    employees = await _employees_by_id(db, {t for b in rows for t in _target_ids(b)})
    return [_to_response(b, employees) for b in rows]


async def create_blackout(
    db: AsyncSession,
    created_by_id: UUID,
    payload: LeaveBlackoutCreate,
) -> LeaveBlackoutResponse:
    if payload.start_date > payload.end_date:
        raise ValidationFailed("start_date must be on or before end_date")
    if payload.department_id and payload.employee_ids:
        raise ValidationFailed("Choose either a department or target employees, not both")

    if payload.department_id:
        dept = await db.get(Department, payload.department_id)
        if not dept:
            raise ValidationFailed("Invalid department")

    target_ids = list(dict.fromkeys(str(e) for e in payload.employee_ids))
    if target_ids:
        count = (
            await db.execute(
                select(func.count(Employee.id)).where(Employee.id.in_([UUID(t) for t in target_ids]))
            )
        ).scalar_one()
        if count != len(target_ids):
            raise ValidationFailed("Invalid employee list")

    blackout = LeaveBlackout(
        title=payload.title.strip() if payload.title else None,
        reason=payload.reason.strip() if payload.reason else None,
        start_date=payload.start_date,
        end_date=payload.end_date,
        department_id=payload.department_id,
        employee_ids=target_ids,
        created_by_id=created_by_id,
    )
    db.add(blackout)
    await db.commit()
    await db.refresh(blackout)
    logger.info(
        "Blackout %s created by %s (%s -> %s)",
        blackout.id,
        created_by_id,
        blackout.start_date,
        blackout.end_date,
    )
    employees = await _employees_by_id(db, target_ids)
    return _to_response(blackout, employees)


async def delete_blackout(db: AsyncSession, blackout_id: UUID) -> None:
    blackout = await db.get(LeaveBlackout, blackout_id)
    if not blackout:
        raise NotFound("Blackout not found")
    await db.delete(blackout)
    await db.commit()
    logger.info("Blackout %s deleted", blackout_id)
