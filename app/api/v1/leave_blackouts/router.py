from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import EmployeeRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import LeaveBlackoutCreate, LeaveBlackoutResponse
from . import service

router = APIRouter(prefix="/api/v1/leave-blackouts", tags=["leave-blackouts"])

require_ceo = require_roles(EmployeeRole.CEO)


@router.get("", response_model=List[LeaveBlackoutResponse])
async def list_blackouts(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_ceo),
) -> List[LeaveBlackoutResponse]:
    """All blackout windows with their target employees. CEO only."""
    return await service.list_blackouts(db)


@router.post("", response_model=LeaveBlackoutResponse, status_code=status.HTTP_201_CREATED)
async def create_blackout(
    payload: LeaveBlackoutCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_ceo),
) -> LeaveBlackoutResponse:
    """Create a blackout for the whole company, one department, or a list of employees."""
    try:
        return await service.create_blackout(db, current_user.id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.delete("/{blackout_id}")
async def delete_blackout(
    blackout_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_ceo),
) -> dict:
    try:
        await service.delete_blackout(db, blackout_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    return {"success": True}
