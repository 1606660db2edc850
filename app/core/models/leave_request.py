"""A single time-off application moving through the approval chain."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.core.enums import LeaveStatus
from app.db.session import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        Index("ix_leave_requests_employee_dates", "employee_id", "start_date", "end_date"),
        Index("ix_leave_requests_assignee_status", "current_assignee_id", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employee_id = Column(Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    # Inclusive UTC calendar days
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=LeaveStatus.SUBMITTED.value)
    # Non-null only while SUBMITTED / PENDING
    current_assignee_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    # Set while a DEPT_HEAD / SERVICE_HEAD holds the request; starts the auto-approval timer
    dept_head_assigned_at = Column(DateTime(timezone=True), nullable=True)
    # First arrival at the CEO; never cleared
    reached_ceo_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    employee = relationship("Employee", foreign_keys=[employee_id])
    current_assignee = relationship("Employee", foreign_keys=[current_assignee_id])
    decisions = relationship(
        "LeaveDecision",
        back_populates="leave_request",
        order_by="LeaveDecision.position",
        cascade="all, delete-orphan",
    )
