from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LeaveBlackoutCreate(BaseModel):
    """Target either a department or a list of employees, or neither (company-wide)."""

    title: Optional[str] = Field(None, max_length=200)
    reason: Optional[str] = Field(None, max_length=2000)
    start_date: date
    end_date: date
    department_id: Optional[UUID] = None
    employee_ids: List[UUID] = Field(default_factory=list)


class BlackoutTargetEmployee(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    department_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class LeaveBlackoutResponse(BaseModel):
    id: UUID
    title: Optional[str] = None
    reason: Optional[str] = None
    start_date: date
    end_date: date
    department_id: Optional[UUID] = None
    employee_ids: List[UUID] = Field(default_factory=list)
    created_by_id: Optional[UUID] = None
    created_at: datetime
    target_employees: List[BlackoutTargetEmployee] = Field(default_factory=list)

    class Config:
        from_attributes = True
