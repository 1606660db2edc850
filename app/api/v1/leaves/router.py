from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_roles
from app.auth.schemas import CurrentUser
from app.core.enums import EmployeeRole
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    CalendarResponse,
    CeoMetricsResponse,
    DecisionPage,
    DepartmentVacationCount,
    LeaveDecisionInput,
    LeaveDecisionResponse,
    LeaveEscalateInput,
    LeavePage,
    LeaveRequestResponse,
    LeaveSubmit,
    LeaveTypeOptionResponse,
    MyLeavesResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/leaves", tags=["leaves"])

require_ceo = require_roles(EmployeeRole.CEO)


@router.get("/types", response_model=List[LeaveTypeOptionResponse])
async def list_leave_types(
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LeaveTypeOptionResponse]:
    """Leave types the current employee may submit (legacy and gender-restricted ones filtered out)."""
    return service.list_leave_types(current_user.gender)


@router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: LeaveSubmit,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    """Submit a leave request. The first approver is resolved from the requester's role."""
    try:
        return await service.submit_leave(db, current_user, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/my", response_model=MyLeavesResponse)
async def list_my_leaves(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> MyLeavesResponse:
    """Requests of the current employee with a freshly reconciled balance summary."""
    try:
        return await service.list_my_leaves(db, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/pending", response_model=LeavePage)
async def list_pending_leaves(
    page: int = Query(1),
    take: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeavePage:
    """In-flight requests waiting on the current user. Overdue manager requests are auto-approved first."""
    return await service.list_pending_leaves(db, current_user, page, take)


@router.get("/history", response_model=Union[LeavePage, DecisionPage])
async def list_history(
    scope: Optional[str] = Query(None, description="mine | actor | all | all-decisions"),
    year: Optional[int] = Query(None),
    past: bool = Query(False),
    page: int = Query(1),
    take: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Union[LeavePage, DecisionPage]:
    try:
        return await service.list_history(db, current_user, scope, year, past, page, take)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/calendar", response_model=CalendarResponse)
async def leave_calendar(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CalendarResponse:
    return await service.leave_calendar(db, current_user)


@router.get("/ceo-metrics", response_model=CeoMetricsResponse)
async def ceo_metrics(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_ceo),
) -> CeoMetricsResponse:
    """Escalated backlog and decision delay for the current month. CEO only."""
    return await service.ceo_metrics(db)


@router.get("/vacation-counts", response_model=List[DepartmentVacationCount])
async def vacation_counts(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_ceo),
) -> List[DepartmentVacationCount]:
    return await service.vacation_counts(db)


@router.get("/{leave_id}/decisions", response_model=List[LeaveDecisionResponse])
async def list_request_decisions(
    leave_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LeaveDecisionResponse]:
    try:
        return await service.list_request_decisions(db, leave_id, current_user)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/{leave_id}/approve", response_model=LeaveRequestResponse)
async def approve_leave(
    leave_id: UUID,
    payload: Optional[LeaveDecisionInput] = None,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    """Approve a leave request. Current assignee, or the CEO once the request reached them."""
    try:
        return await service.approve_leave(db, leave_id, current_user, payload.comment if payload else None)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/{leave_id}/reject", response_model=LeaveRequestResponse)
async def reject_leave(
    leave_id: UUID,
    payload: Optional[LeaveDecisionInput] = None,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    try:
        return await service.reject_leave(db, leave_id, current_user, payload.comment if payload else None)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/{leave_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave(
    leave_id: UUID,
    payload: Optional[LeaveDecisionInput] = None,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    """Cancel one's own in-flight request."""
    try:
        return await service.cancel_leave(db, leave_id, current_user, payload.comment if payload else None)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)


@router.post("/{leave_id}/escalate", response_model=LeaveRequestResponse)
async def escalate_leave(
    leave_id: UUID,
    payload: Optional[LeaveEscalateInput] = None,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> LeaveRequestResponse:
    """Forward the request to the next approver (to_role, or the role's default destination)."""
    payload = payload or LeaveEscalateInput()
    try:
        return await service.escalate_leave(
            db,
            leave_id,
            current_user,
            to_role=payload.to_role,
            comment=payload.comment,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
