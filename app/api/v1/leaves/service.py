"""Leave request lifecycle: submit, approve, reject, cancel, escalate, overdue auto-approval, read views."""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.v1.leave_blackouts.service import has_blocked_range, list_applicable_blackouts
from app.auth.schemas import CurrentUser
from app.core.config import settings
from app.core.enums import (
    FINAL_STATUSES,
    IN_FLIGHT_STATUSES,
    MANAGER_ROLES,
    DecisionType,
    EmployeeRole,
    LeaveStatus,
    is_final_status,
)
from app.core.exceptions import Conflict, NotFound, PermissionDenied, ValidationFailed
from app.core.leave_types import (
    get_option,
    is_allowed_for_gender,
    is_paid_leave_type,
    leave_category,
    options_for_gender,
    parse_leave_type,
)
from app.core.models import Department, Employee, LeaveBlackout, LeaveDecision, LeaveRequest

from .balance import available_for_submission, requested_leave_days, sync_balance
from .ledger import decisions_for_request, list_decisions, record_decision
from .resolver import (
    NO_ELIGIBLE_ASSIGNEE,
    EmployeeDirectory,
    SqlEmployeeDirectory,
    resolve_escalation_target,
    resolve_initial_assignee,
)
from .schemas import (
    BalanceSummary,
    CalendarBlackout,
    CalendarResponse,
    CeoMetricsResponse,
    DecisionPage,
    DepartmentVacationCount,
    LeaveDecisionResponse,
    LeaveHistoryDecision,
    LeavePage,
    LeaveRequestResponse,
    LeaveSubmit,
    LeaveTypeOptionResponse,
    MyLeavesResponse,
)

logger = logging.getLogger(__name__)

ALREADY_FINAL = "already_final"
BALANCE_EXCEEDED = "balance_exceeded"
BLACKOUT_OVERLAP = "blackout_overlap"

AUTO_APPROVE_COMMENT = "Auto-approval after DEPT_HEAD/SERVICE_HEAD validation delay"
AUTO_CEO_ESCALATION_COMMENT = "Automatic CEO escalation (DEPT_HEAD/SERVICE_HEAD request)"

PENDING_TAKE_DEFAULT = 100
PENDING_TAKE_MAX = 300
HISTORY_TAKE_MAX = 500
HISTORY_TAKE_DEFAULTS = {"actor": 120, "all": 100, "all-decisions": 100}
HISTORY_TAKE_FALLBACK = 150
HISTORY_SCOPES = ("mine", "actor", "all", "all-decisions")
MIN_YEAR, MAX_YEAR = 2000, 3000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _page_params(page: Optional[int], take: Optional[int], default: int, maximum: int) -> Tuple[int, int, int]:
    page = page if page and page > 0 else 1
    take = take if take and take > 0 else default
    take = min(take, maximum)
    return page, take, (page - 1) * take


def _with_people(query):
    return query.options(
        selectinload(LeaveRequest.employee),
        selectinload(LeaveRequest.current_assignee),
    )


def _to_response(leave: LeaveRequest) -> LeaveRequestResponse:
    return LeaveRequestResponse.model_validate(leave)


async def _load_request(db: AsyncSession, leave_id: UUID, *, lock: bool = False) -> LeaveRequest:
    q = select(LeaveRequest).where(LeaveRequest.id == leave_id)
    if lock:
        q = q.with_for_update().execution_options(populate_existing=True)
    leave = (await db.execute(q)).scalar_one_or_none()
    if not leave:
        raise NotFound("Leave request not found")
    return leave


async def _reload(db: AsyncSession, leave_id: UUID) -> LeaveRequestResponse:
    result = await db.execute(
        _with_people(select(LeaveRequest).where(LeaveRequest.id == leave_id)).execution_options(
            populate_existing=True
        )
    )
    return _to_response(result.scalar_one())


def _ensure_in_flight(leave: LeaveRequest) -> None:
    if is_final_status(leave.status):
        raise Conflict("Leave request already processed", code=ALREADY_FINAL)


def _may_decide(leave: LeaveRequest, actor: CurrentUser) -> bool:
    """Current assignee, or the CEO once the request has reached them."""
    if leave.current_assignee_id == actor.id:
        return True
    return actor.role == EmployeeRole.CEO.value and leave.reached_ceo_at is not None


def _close(leave: LeaveRequest, status: LeaveStatus, now: datetime) -> None:
    leave.status = status.value
    leave.current_assignee_id = None
    leave.dept_head_assigned_at = None
    leave.updated_at = now


# ----- Leave types -----
def list_leave_types(gender: Optional[str]) -> List[LeaveTypeOptionResponse]:
    return [
        LeaveTypeOptionResponse(
            value=opt.value.value,
            label=opt.label,
            category=leave_category(opt.value).value,
        )
        for opt in options_for_gender(gender)
    ]


# ----- Submit -----
async def submit_leave(
    db: AsyncSession,
    current_user: CurrentUser,
    payload: LeaveSubmit,
    *,
    now: Optional[datetime] = None,
    directory: Optional[EmployeeDirectory] = None,
) -> LeaveRequestResponse:
    """
    Create a request for the authenticated employee.

    Checks run in order and stop at the first failure, before anything is written:
    requester role, leave type and dates, balance (paid types only), blackouts,
    assignee. The request and its SUBMIT decision are committed together.
    """
    now = now or _utcnow()
    if current_user.role == EmployeeRole.CEO.value:
        raise PermissionDenied("The CEO cannot submit leave requests")

    leave_type = parse_leave_type(payload.type)
    if leave_type is None or get_option(leave_type).hidden:
        raise ValidationFailed("Unknown leave type")
    if payload.start_date > payload.end_date:
        raise ValidationFailed("start_date must be on or before end_date")

    snapshot = await sync_balance(db, current_user.id, now, lock=True)
    if snapshot is None:
        raise NotFound("Employee not found")
    employee = snapshot.employee

    if not is_allowed_for_gender(leave_type, employee.gender):
        raise PermissionDenied("This leave type is not available for this employee")

    requested = requested_leave_days(payload.start_date, payload.end_date)
    if is_paid_leave_type(leave_type):
        availability = await available_for_submission(db, employee, now)
        if not availability.allows(requested):
            raise Conflict(
                "Request exceeds the available leave balance",
                code=BALANCE_EXCEEDED,
                extra={
                    "requested": requested,
                    "available": availability.available_with_advance,
                    "available_current_year": availability.available_current_year,
                    "next_year_advance": availability.next_year_entitlement,
                    "consumed": availability.consumed_current_year,
                    "entitlement": availability.cached_balance,
                },
            )

    if await has_blocked_range(db, employee.id, current_user.department_id, payload.start_date, payload.end_date):
        raise Conflict("Requested dates fall inside a blackout period", code=BLACKOUT_OVERLAP)

    directory = directory or SqlEmployeeDirectory(db)
    route = await resolve_initial_assignee(directory, current_user.role)
    assignee = route.assignee

    reached_ceo = assignee.role == EmployeeRole.CEO.value or route.ceo is not None
    leave = LeaveRequest(
        employee_id=employee.id,
        type=leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason.strip() if payload.reason and payload.reason.strip() else None,
        # The automatic CEO escalation is a decision of its own, hence PENDING
        status=(LeaveStatus.PENDING if route.ceo is not None else LeaveStatus.SUBMITTED).value,
        current_assignee_id=assignee.id,
        dept_head_assigned_at=now if assignee.role in MANAGER_ROLES else None,
        reached_ceo_at=now if reached_ceo else None,
        created_at=now,
        updated_at=now,
    )
    db.add(leave)
    await db.flush()

    await record_decision(db, leave.id, employee.id, DecisionType.SUBMIT, created_at=now)
    if route.ceo is not None:
        await record_decision(
            db,
            leave.id,
            employee.id,
            DecisionType.ESCALATE,
            comment=AUTO_CEO_ESCALATION_COMMENT,
            to_employee_id=route.ceo.id,
            created_at=now,
        )
    await db.commit()
    logger.info(
        "Leave request %s submitted by %s (%s, %d days) assigned to %s",
        leave.id,
        employee.id,
        leave.type,
        requested,
        assignee.id,
    )
    return await _reload(db, leave.id)


# ----- Decisions -----
async def _decide(
    db: AsyncSession,
    leave_id: UUID,
    actor: CurrentUser,
    decision_type: DecisionType,
    final_status: LeaveStatus,
    comment: Optional[str],
    now: Optional[datetime],
) -> LeaveRequestResponse:
    now = now or _utcnow()
    leave = await _load_request(db, leave_id, lock=True)
    _ensure_in_flight(leave)
    if not _may_decide(leave, actor):
        raise PermissionDenied()
    if leave.employee_id == actor.id:
        raise PermissionDenied("You cannot act on your own request")

    _close(leave, final_status, now)
    await record_decision(db, leave.id, actor.id, decision_type, comment=comment, created_at=now)
    await db.commit()
    logger.info("Leave request %s %s by %s", leave.id, final_status.value.lower(), actor.id)
    return await _reload(db, leave.id)


async def approve_leave(
    db: AsyncSession,
    leave_id: UUID,
    actor: CurrentUser,
    comment: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> LeaveRequestResponse:
    return await _decide(db, leave_id, actor, DecisionType.APPROVE, LeaveStatus.APPROVED, comment, now)


async def reject_leave(
    db: AsyncSession,
    leave_id: UUID,
    actor: CurrentUser,
    comment: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> LeaveRequestResponse:
    return await _decide(db, leave_id, actor, DecisionType.REJECT, LeaveStatus.REJECTED, comment, now)


async def cancel_leave(
    db: AsyncSession,
    leave_id: UUID,
    actor: CurrentUser,
    comment: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> LeaveRequestResponse:
    """Only the requester may cancel, and only while the request is in flight."""
    now = now or _utcnow()
    leave = await _load_request(db, leave_id, lock=True)
    if leave.employee_id != actor.id:
        raise PermissionDenied()
    _ensure_in_flight(leave)

    _close(leave, LeaveStatus.CANCELLED, now)
    await record_decision(db, leave.id, actor.id, DecisionType.CANCEL, comment=comment, created_at=now)
    await db.commit()
    logger.info("Leave request %s cancelled by its requester", leave.id)
    return await _reload(db, leave.id)


async def escalate_leave(
    db: AsyncSession,
    leave_id: UUID,
    actor: CurrentUser,
    to_role: Optional[str] = None,
    comment: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    directory: Optional[EmployeeDirectory] = None,
) -> LeaveRequestResponse:
    """Hand the request to the next approver; it stays PENDING."""
    now = now or _utcnow()
    leave = await _load_request(db, leave_id, lock=True)
    _ensure_in_flight(leave)
    if leave.current_assignee_id != actor.id:
        raise PermissionDenied()
    if leave.employee_id == actor.id:
        raise PermissionDenied("You cannot act on your own request")

    requester = await db.get(Employee, leave.employee_id)
    directory = directory or SqlEmployeeDirectory(db)
    target = await resolve_escalation_target(
        directory,
        actor_role=actor.role,
        requester_role=requester.role if requester else EmployeeRole.EMPLOYEE.value,
        requester_department_id=requester.department_id if requester else None,
        to_role=to_role,
    )
    if target.id == actor.id:
        raise PermissionDenied("You cannot escalate a request to yourself")
    if target.id == leave.employee_id:
        raise Conflict("The only eligible assignee is the requester", code=NO_ELIGIBLE_ASSIGNEE)

    leave.status = LeaveStatus.PENDING.value
    leave.current_assignee_id = target.id
    leave.dept_head_assigned_at = now if target.role in MANAGER_ROLES else None
    if target.role == EmployeeRole.CEO.value and leave.reached_ceo_at is None:
        leave.reached_ceo_at = now
    leave.updated_at = now
    await record_decision(
        db,
        leave.id,
        actor.id,
        DecisionType.ESCALATE,
        comment=comment,
        to_employee_id=target.id,
        created_at=now,
    )
    await db.commit()
    logger.info("Leave request %s escalated by %s to %s (%s)", leave.id, actor.id, target.id, target.role)
    return await _reload(db, leave.id)


# ----- Overdue auto-approval -----
async def _approve_overdue(db: AsyncSession, assignee_id: UUID, cutoff: datetime, now: datetime) -> int:
    result = await db.execute(
        select(LeaveRequest)
        .where(
            LeaveRequest.current_assignee_id == assignee_id,
            LeaveRequest.status.in_(IN_FLIGHT_STATUSES),
            LeaveRequest.dept_head_assigned_at.isnot(None),
            LeaveRequest.dept_head_assigned_at < cutoff,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    overdue = result.scalars().all()
    for leave in overdue:
        _close(leave, LeaveStatus.APPROVED, now)
        await record_decision(
            db,
            leave.id,
            assignee_id,
            DecisionType.APPROVE,
            comment=AUTO_APPROVE_COMMENT,
            created_at=now,
        )
    return len(overdue)


async def reconcile_overdue(
    db: AsyncSession,
    assignee_id: UUID,
    delay_days: Optional[float] = None,
    *,
    now: Optional[datetime] = None,
) -> int:
    """
    Approve every in-flight request held by this DEPT_HEAD / SERVICE_HEAD for longer than
    delay_days. Idempotent: approved requests no longer match. Returns the number approved.
    """
    if delay_days is None:
        delay_days = settings.dept_head_validation_days
    if delay_days <= 0:
        return 0
    now = now or _utcnow()
    count = await _approve_overdue(db, assignee_id, now - timedelta(days=delay_days), now)
    if count:
        await db.commit()
        logger.info("Auto-approved %d overdue leave request(s) held by %s", count, assignee_id)
    return count


async def reconcile_all_overdue(
    db: AsyncSession,
    delay_days: Optional[float] = None,
    *,
    now: Optional[datetime] = None,
) -> int:
    """Overdue sweep across every DEPT_HEAD / SERVICE_HEAD assignee, in one transaction."""
    if delay_days is None:
        delay_days = settings.dept_head_validation_days
    if delay_days <= 0:
        return 0
    now = now or _utcnow()
    cutoff = now - timedelta(days=delay_days)
    result = await db.execute(
        select(LeaveRequest.current_assignee_id)
        .join(Employee, Employee.id == LeaveRequest.current_assignee_id)
        .where(
            Employee.role.in_(MANAGER_ROLES),
            LeaveRequest.status.in_(IN_FLIGHT_STATUSES),
            LeaveRequest.dept_head_assigned_at < cutoff,
        )
        .distinct()
    )
    total = 0
    for assignee_id in result.scalars().all():
        total += await _approve_overdue(db, assignee_id, cutoff, now)
    await db.commit()
    logger.info("Overdue sweep approved %d leave request(s)", total)
    return total


# ----- Read views -----
async def balance_summary_for(
    db: AsyncSession,
    employee_id: UUID,
    as_of: Optional[datetime] = None,
) -> BalanceSummary:
    """Reconcile the cached balance and describe it. Caller commits."""
    as_of = as_of or _utcnow()
    snapshot = await sync_balance(db, employee_id, as_of)
    if snapshot is None:
        raise NotFound("Employee not found")
    availability = await available_for_submission(db, snapshot.employee, as_of)
    return BalanceSummary(
        year=as_of.year,
        annual_leave_balance=availability.cached_balance,
        consumed_current_year=availability.consumed_current_year,
        remaining_current_year=availability.available_current_year,
        next_year_entitlement=availability.next_year_entitlement,
        available_with_advance=availability.available_with_advance,
        seniority_years=snapshot.current.seniority_years,
        seniority_bonus_days=snapshot.current.bonus_days,
        base_annual_days=snapshot.current.base_annual_days,
        leave_balance_adjustment=float(snapshot.employee.leave_balance_adjustment or 0),
        debt_from_previous_year=snapshot.debt_from_previous_year,
    )


async def list_my_leaves(
    db: AsyncSession,
    actor: CurrentUser,
    *,
    now: Optional[datetime] = None,
) -> MyLeavesResponse:
    summary = await balance_summary_for(db, actor.id, now)
    await db.commit()
    result = await db.execute(
        _with_people(select(LeaveRequest))
        .where(LeaveRequest.employee_id == actor.id)
        .order_by(LeaveRequest.created_at.desc())
    )
    return MyLeavesResponse(leaves=[_to_response(r) for r in result.scalars().all()], balance=summary)


async def list_pending_leaves(
    db: AsyncSession,
    actor: CurrentUser,
    page: Optional[int] = None,
    take: Optional[int] = None,
    *,
    now: Optional[datetime] = None,
) -> LeavePage:
    """
    The actor's work queue. Managers first get their overdue requests auto-approved;
    the CEO also sees every in-flight request that has reached them.
    """
    page, take, skip = _page_params(page, take, PENDING_TAKE_DEFAULT, PENDING_TAKE_MAX)
    if actor.role in MANAGER_ROLES:
        await reconcile_overdue(db, actor.id, now=now)

    q = select(LeaveRequest).where(LeaveRequest.status.in_(IN_FLIGHT_STATUSES))
    if actor.role == EmployeeRole.CEO.value:
        q = q.where(
            (LeaveRequest.current_assignee_id == actor.id) | LeaveRequest.reached_ceo_at.isnot(None)
        )
    else:
        q = q.where(LeaveRequest.current_assignee_id == actor.id)

    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        _with_people(q).order_by(LeaveRequest.created_at.desc()).offset(skip).limit(take)
    )
    return LeavePage(
        leaves=[_to_response(r) for r in result.scalars().all()],
        page=page,
        take=take,
        total=total,
    )


async def _terminal_leaves_page(
    db: AsyncSession,
    employee_id: Optional[UUID],
    year: Optional[int],
    past: bool,
    page: int,
    take: int,
    skip: int,
    now: datetime,
) -> LeavePage:
    q = select(LeaveRequest).where(LeaveRequest.status.in_(FINAL_STATUSES))
    if employee_id is not None:
        q = q.where(LeaveRequest.employee_id == employee_id)
    if past:
        q = q.where(LeaveRequest.start_date < date(now.year, 1, 1))
    if year is not None:
        q = q.where(LeaveRequest.start_date >= date(year, 1, 1), LeaveRequest.start_date < date(year + 1, 1, 1))

    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        _with_people(q).order_by(LeaveRequest.created_at.desc()).offset(skip).limit(take)
    )
    return LeavePage(
        leaves=[_to_response(r) for r in result.scalars().all()],
        page=page,
        take=take,
        total=total,
    )


async def list_history(
    db: AsyncSession,
    actor: CurrentUser,
    scope: Optional[str] = None,
    year: Optional[int] = None,
    past: bool = False,
    page: Optional[int] = None,
    take: Optional[int] = None,
    *,
    now: Optional[datetime] = None,
) -> Union[LeavePage, DecisionPage]:
    """
    mine: the actor's own terminal requests (the only scope for DEPT_HEAD / SERVICE_HEAD).
    actor: decisions taken by the actor. all / all-decisions: CEO only.
    """
    now = now or _utcnow()
    if year is not None and not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationFailed("Invalid year")
    scope = scope or "mine"
    if scope not in HISTORY_SCOPES:
        raise ValidationFailed("Invalid scope (allowed: %s)" % ", ".join(HISTORY_SCOPES))
    if actor.role in MANAGER_ROLES:
        scope = "mine"
    if scope in ("all", "all-decisions") and actor.role != EmployeeRole.CEO.value:
        raise PermissionDenied()

    page, take, skip = _page_params(
        page, take, HISTORY_TAKE_DEFAULTS.get(scope, HISTORY_TAKE_FALLBACK), HISTORY_TAKE_MAX
    )
    if scope == "mine":
        return await _terminal_leaves_page(db, actor.id, year, past, page, take, skip, now)
    if scope == "all":
        return await _terminal_leaves_page(db, None, year, past, page, take, skip, now)

    decisions, total = await list_decisions(
        db,
        actor_id=actor.id if scope == "actor" else None,
        year=year,
        skip=skip,
        take=take,
    )
    return DecisionPage(
        decisions=[LeaveHistoryDecision.model_validate(d) for d in decisions],
        page=page,
        take=take,
        total=total,
    )


async def list_request_decisions(
    db: AsyncSession,
    leave_id: UUID,
    actor: CurrentUser,
) -> List[LeaveDecisionResponse]:
    """Ledger of one request, visible to its requester, its assignee, past actors and the CEO."""
    leave = await _load_request(db, leave_id)
    decisions = await decisions_for_request(db, leave.id)
    allowed = (
        actor.role == EmployeeRole.CEO.value
        or leave.employee_id == actor.id
        or leave.current_assignee_id == actor.id
        or any(d.actor_id == actor.id for d in decisions)
    )
    if not allowed:
        raise PermissionDenied()
    return [LeaveDecisionResponse.model_validate(d) for d in decisions]


async def leave_calendar(db: AsyncSession, actor: CurrentUser) -> CalendarResponse:
    """Blackouts concerning the actor; the CEO sees every blackout and every approved leave."""
    if actor.role != EmployeeRole.CEO.value:
        blackouts = await list_applicable_blackouts(db, actor.id, actor.department_id)
        return CalendarResponse(
            leaves=[],
            blackouts=[CalendarBlackout.model_validate(b) for b in blackouts],
        )

    result = await db.execute(select(LeaveBlackout).order_by(LeaveBlackout.start_date))
    blackouts = result.scalars().all()
    result = await db.execute(
        _with_people(select(LeaveRequest))
        .where(LeaveRequest.status == LeaveStatus.APPROVED.value)
        .order_by(LeaveRequest.start_date)
    )
    return CalendarResponse(
        leaves=[_to_response(r) for r in result.scalars().all()],
        blackouts=[CalendarBlackout.model_validate(b) for b in blackouts],
    )


def _month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


async def ceo_metrics(db: AsyncSession, *, now: Optional[datetime] = None) -> CeoMetricsResponse:
    now = _as_utc(now or _utcnow())
    month_start, month_end = _month_bounds(now)

    escalated_pending = (
        await db.execute(
            select(func.count(LeaveRequest.id)).where(
                LeaveRequest.reached_ceo_at.isnot(None),
                LeaveRequest.status.in_(IN_FLIGHT_STATUSES),
            )
        )
    ).scalar_one()

    result = await db.execute(
        select(LeaveDecision.created_at, LeaveRequest.reached_ceo_at)
        .select_from(LeaveDecision)
        .join(LeaveRequest, LeaveRequest.id == LeaveDecision.leave_request_id)
        .where(
            LeaveDecision.type.in_((DecisionType.APPROVE.value, DecisionType.REJECT.value)),
            LeaveDecision.created_at >= month_start,
            LeaveDecision.created_at < month_end,
        )
    )
    rows = result.all()
    delays = []
    for decided_at, reached_at in rows:
        if reached_at is None:
            continue
        delta = (_as_utc(decided_at) - _as_utc(reached_at)).total_seconds()
        if delta >= 0:
            delays.append(delta / 86400)

    return CeoMetricsResponse(
        escalated_pending=escalated_pending,
        decisions_this_month=len(rows),
        avg_decision_delay_days=sum(delays) / len(delays) if delays else None,
    )


async def vacation_counts(db: AsyncSession, *, now: Optional[datetime] = None) -> List[DepartmentVacationCount]:
    """Approved leaves covering today, per department."""
    today = (now or _utcnow()).date()
    result = await db.execute(
        select(Employee.department_id, func.count(LeaveRequest.id))
        .select_from(LeaveRequest)
        .join(Employee, Employee.id == LeaveRequest.employee_id)
        .where(
            LeaveRequest.status == LeaveStatus.APPROVED.value,
            LeaveRequest.start_date <= today,
            LeaveRequest.end_date >= today,
        )
        .group_by(Employee.department_id)
    )
    counts: Dict[Optional[UUID], int] = {dept_id: n for dept_id, n in result.all()}

    departments = (await db.execute(select(Department).order_by(Department.type))).scalars().all()
    return [
        DepartmentVacationCount(
            department_id=d.id,
            department_type=d.type,
            department_name=d.name,
            count=counts.get(d.id, 0),
        )
        for d in departments
    ]
