"""Append-only ledger of leave request transitions: SUBMIT, APPROVE, REJECT, ESCALATE, CANCEL."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class LeaveDecision(Base):
    __tablename__ = "leave_decisions"
    __table_args__ = (UniqueConstraint("leave_request_id", "position", name="uq_leave_decisions_request_position"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    leave_request_id = Column(
        Uuid,
        ForeignKey("leave_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # 1-based order within the request
    position = Column(Integer, nullable=False)
    actor_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True)
    type = Column(String(20), nullable=False)
    comment = Column(Text, nullable=True)
    # New assignee; ESCALATE only
    to_employee_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True)

    leave_request = relationship("LeaveRequest", back_populates="decisions", foreign_keys=[leave_request_id])
    actor = relationship("Employee", foreign_keys=[actor_id])
    to_employee = relationship("Employee", foreign_keys=[to_employee_id])
