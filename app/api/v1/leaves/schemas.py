from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.leave_types import DEFAULT_LEAVE_TYPE


# ----- Leave types -----
class LeaveTypeOptionResponse(BaseModel):
    value: str
    label: str
    category: str


# ----- Submit -----
class LeaveSubmit(BaseModel):
    """Submit a leave request. The requester is always the authenticated employee."""

    type: str = Field(DEFAULT_LEAVE_TYPE.value, max_length=30)
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=2000)


class LeaveDecisionInput(BaseModel):
    comment: Optional[str] = Field(None, max_length=2000)


class LeaveEscalateInput(LeaveDecisionInput):
    to_role: Optional[str] = Field(None, max_length=20, description="Omit for the role's default destination")


# ----- Responses -----
class EmployeeSummary(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    role: str
    department_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class LeaveRequestResponse(BaseModel):
    id: UUID
    employee_id: UUID
    type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None
    status: str
    current_assignee_id: Optional[UUID] = None
    dept_head_assigned_at: Optional[datetime] = None
    reached_ceo_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    employee: Optional[EmployeeSummary] = None
    current_assignee: Optional[EmployeeSummary] = None

    class Config:
        from_attributes = True


class LeaveDecisionResponse(BaseModel):
    id: UUID
    leave_request_id: UUID
    position: int
    actor_id: Optional[UUID] = None
    type: str
    comment: Optional[str] = None
    to_employee_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LeaveHistoryDecision(LeaveDecisionResponse):
    leave_request: Optional[LeaveRequestResponse] = None


class BalanceSummary(BaseModel):
    year: int
    annual_leave_balance: float
    consumed_current_year: int
    remaining_current_year: float
    next_year_entitlement: float
    available_with_advance: float
    seniority_years: int
    seniority_bonus_days: int
    base_annual_days: int
    leave_balance_adjustment: float
    debt_from_previous_year: float


class MyLeavesResponse(BaseModel):
    leaves: List[LeaveRequestResponse]
    balance: BalanceSummary


class LeavePage(BaseModel):
    leaves: List[LeaveRequestResponse] = Field(default_factory=list)
    page: int
    take: int
    total: int = 0


class DecisionPage(BaseModel):
    decisions: List[LeaveHistoryDecision] = Field(default_factory=list)
    page: int
    take: int
    total: int = 0


class CalendarBlackout(BaseModel):
    id: UUID
    title: Optional[str] = None
    start_date: date
    end_date: date
    department_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class CalendarResponse(BaseModel):
    leaves: List[LeaveRequestResponse] = Field(default_factory=list)
    blackouts: List[CalendarBlackout] = Field(default_factory=list)


class CeoMetricsResponse(BaseModel):
    escalated_pending: int
    decisions_this_month: int
    avg_decision_delay_days: Optional[float] = None


class DepartmentVacationCount(BaseModel):
    department_id: UUID
    department_type: str
    department_name: str
    count: int
