"""Administratively forbidden date windows (company, department or targeted employees)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.session import Base


class LeaveBlackout(Base):
    __tablename__ = "leave_blackouts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=True)
    reason = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    # department_id and employee_ids are mutually exclusive at creation
    department_id = Column(Uuid, ForeignKey("departments.id", ondelete="CASCADE"), nullable=True)
    # List of employee id strings
    employee_ids = Column(JSON, nullable=False, default=list)
    created_by_id = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    department = relationship("Department", foreign_keys=[department_id])
