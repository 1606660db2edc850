from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import EmployeeRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import EmployeeLeaveBalanceResponse, LeaveBalanceAdjust
from . import service

router = APIRouter(prefix="/api/v1/employees", tags=["employees"])


@router.get("/{employee_id}/leave-balance", response_model=EmployeeLeaveBalanceResponse)
async def get_leave_balance(
    employee_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> EmployeeLeaveBalanceResponse:
    """Reconciled leave balance of an employee. The employee themself or the CEO."""
    try:
        return await service.get_leave_balance(db, employee_id, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/{employee_id}/leave-balance", response_model=EmployeeLeaveBalanceResponse)
async def adjust_leave_balance(
    employee_id: UUID,
    payload: LeaveBalanceAdjust,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(EmployeeRole.CEO)),
) -> EmployeeLeaveBalanceResponse:
    """Manual balance correction (RESET, INCREASE or SET). CEO only."""
    try:
        return await service.adjust_leave_balance(db, employee_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
