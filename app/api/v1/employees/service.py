"""Per-employee leave balance: read (self or CEO) and manual adjustment (CEO)."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.leaves.service import balance_summary_for
from app.auth.schemas import CurrentUser
from app.core.enums import BalanceAdjustmentAction, EmployeeRole
from app.core.exceptions import NotFound, PermissionDenied, ValidationFailed
from app.core.models import Employee

from .schemas import EmployeeLeaveBalanceResponse, LeaveBalanceAdjust

logger = logging.getLogger(__name__)


async def _balance_response(
    db: AsyncSession,
    employee_id: UUID,
    as_of: Optional[datetime],
) -> EmployeeLeaveBalanceResponse:
    summary = await balance_summary_for(db, employee_id, as_of)
    employee = await db.get(Employee, employee_id)
    return EmployeeLeaveBalanceResponse(
        employee_id=employee.id,
        leave_balance=float(employee.leave_balance or 0),
        leave_balance_adjustment=float(employee.leave_balance_adjustment or 0),
        balance=summary,
    )


async def get_leave_balance(
    db: AsyncSession,
    employee_id: UUID,
    actor: CurrentUser,
    *,
    now: Optional[datetime] = None,
) -> EmployeeLeaveBalanceResponse:
    if actor.id != employee_id and actor.role != EmployeeRole.CEO.value:
        raise PermissionDenied()
    response = await _balance_response(db, employee_id, now)
    await db.commit()
    return response


def _next_adjustment(current: float, action: BalanceAdjustmentAction, amount: Optional[float]) -> float:
    if action is BalanceAdjustmentAction.RESET:
        return 0.0
    if amount is None or amount <= 0:
        raise ValidationFailed("amount must be greater than 0")
    if action is BalanceAdjustmentAction.INCREASE:
        return current + amount
    return amount


async def adjust_leave_balance(
    db: AsyncSession,
    employee_id: UUID,
    payload: LeaveBalanceAdjust,
    *,
    now: Optional[datetime] = None,
) -> EmployeeLeaveBalanceResponse:
    """Change the manual adjustment and reconcile the cached balance in the same commit."""
    try:
        action = BalanceAdjustmentAction(payload.action.strip().upper())
    except ValueError:
        raise ValidationFailed("Invalid action (RESET|INCREASE|SET)")

    # The actor may already be in the identity map; re-read the row once it is locked
    result = await db.execute(
        select(Employee)
        .where(Employee.id == employee_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    employee = result.scalar_one_or_none()
    if not employee:
        raise NotFound("Employee not found")

    previous = float(employee.leave_balance_adjustment or 0)
    employee.leave_balance_adjustment = _next_adjustment(previous, action, payload.amount)
    await db.flush()

    response = await _balance_response(db, employee_id, now)
    await db.commit()
    logger.info(
        "Leave balance adjustment of employee %s: %s %s -> %s",
        employee_id,
        action.value,
        previous,
        employee.leave_balance_adjustment,
    )
    return response
