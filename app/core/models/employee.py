"""Employee: identity, organizational placement and cached leave balance."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.core.enums import EmployeeRole, EmployeeStatus
from app.db.session import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    # EMPLOYEE, ACCOUNTANT, DEPT_HEAD, SERVICE_HEAD, CEO
    role = Column(String(20), nullable=False, default=EmployeeRole.EMPLOYEE.value, index=True)
    # PENDING at registration; ACTIVE only after admin approval (handled outside this service)
    status = Column(String(20), nullable=False, default=EmployeeStatus.PENDING.value, index=True)
    department_id = Column(Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)
    service_id = Column(Uuid, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    gender = Column(String(10), nullable=True)
    hire_date = Column(Date, nullable=True)
    company_entry_date = Column(Date, nullable=True)
    # Cache of the current-year entitlement; only written by balance reconciliation.
    leave_balance = Column(Float, nullable=False, default=0.0)
    # Manual correction, signed.
    leave_balance_adjustment = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    department = relationship("Department", foreign_keys=[department_id])
    service = relationship("Service", foreign_keys=[service_id])

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
