"""Append-only decision ledger. Rows are added inside the caller's transaction, never updated."""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import DecisionType
from app.core.models import LeaveDecision, LeaveRequest

# Transition -> status the request must be in right after it.
STATUS_AFTER_DECISION = {
    DecisionType.SUBMIT.value: ("SUBMITTED", "PENDING"),
    DecisionType.APPROVE.value: ("APPROVED",),
    DecisionType.REJECT.value: ("REJECTED",),
    DecisionType.CANCEL.value: ("CANCELLED",),
    DecisionType.ESCALATE.value: ("PENDING",),
}


async def _next_position(db: AsyncSession, leave_request_id: UUID) -> int:
    # Autoflush makes decisions added earlier in this transaction visible here
    result = await db.execute(
        select(func.coalesce(func.max(LeaveDecision.position), 0)).where(
            LeaveDecision.leave_request_id == leave_request_id
        )
    )
    return result.scalar_one() + 1


async def record_decision(
    db: AsyncSession,
    leave_request_id: UUID,
    actor_id: Optional[UUID],
    decision_type: DecisionType,
    *,
    comment: Optional[str] = None,
    to_employee_id: Optional[UUID] = None,
    created_at: Optional[datetime] = None,
) -> LeaveDecision:
    """Append a decision after the request's last one. Callers hold the request row lock."""
    decision = LeaveDecision(
        leave_request_id=leave_request_id,
        position=await _next_position(db, leave_request_id),
        actor_id=actor_id,
        type=decision_type.value,
        comment=comment,
        to_employee_id=to_employee_id if decision_type is DecisionType.ESCALATE else None,
    )
    if created_at is not None:
        decision.created_at = created_at
    db.add(decision)
    return decision


async def decisions_for_request(db: AsyncSession, leave_request_id: UUID) -> Sequence[LeaveDecision]:
    result = await db.execute(
        select(LeaveDecision)
        .where(LeaveDecision.leave_request_id == leave_request_id)
        .order_by(LeaveDecision.position)
    )
    return result.scalars().all()


def _decision_page_query(
    actor_id: Optional[UUID],
    year: Optional[int],
    exclude_submit: bool,
):
    q = select(LeaveDecision)
    if actor_id is not None:
        q = q.where(LeaveDecision.actor_id == actor_id)
    if exclude_submit:
        q = q.where(LeaveDecision.type != DecisionType.SUBMIT.value)
    if year is not None:
        q = q.where(extract("year", LeaveDecision.created_at) == year)
    return q


async def list_decisions(
    db: AsyncSession,
    *,
    actor_id: Optional[UUID] = None,
    year: Optional[int] = None,
    exclude_submit: bool = True,
    skip: int = 0,
    take: int = 100,
) -> Tuple[List[LeaveDecision], int]:
    """Decisions newest first with their request and employee loaded, plus the total count."""
    base = _decision_page_query(actor_id, year, exclude_submit)
    total = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar_one()
    result = await db.execute(
        base.options(
            selectinload(LeaveDecision.leave_request).selectinload(LeaveRequest.employee),
            selectinload(LeaveDecision.leave_request).selectinload(LeaveRequest.current_assignee),
        )
        .order_by(
            LeaveDecision.created_at.desc(),
            LeaveDecision.leave_request_id,
            LeaveDecision.position.desc(),
        )
        .offset(skip)
        .limit(take)
    )
    return list(result.scalars().all()), total


async def count_submit_decisions(db: AsyncSession, leave_request_id: UUID) -> int:
    result = await db.execute(
        select(func.count(LeaveDecision.id)).where(
            LeaveDecision.leave_request_id == leave_request_id,
            LeaveDecision.type == DecisionType.SUBMIT.value,
        )
    )
    return result.scalar_one()
