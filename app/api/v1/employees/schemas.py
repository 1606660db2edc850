from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.leaves.schemas import BalanceSummary


class LeaveBalanceAdjust(BaseModel):
    """RESET clears the manual adjustment; INCREASE adds amount to it; SET replaces it."""

    action: str = Field(..., max_length=20, description="RESET | INCREASE | SET")
    amount: Optional[float] = None


class EmployeeLeaveBalanceResponse(BaseModel):
    employee_id: UUID
    leave_balance: float
    leave_balance_adjustment: float
    balance: BalanceSummary
