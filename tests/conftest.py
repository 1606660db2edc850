import os
import sys
from datetime import date
from typing import AsyncGenerator, Dict, Optional

import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["CORS_ORIGINS"] = '["*"]'

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.auth.schemas import CurrentUser
from app.auth.security import create_access_token
from app.core.enums import DepartmentType, EmployeeRole, EmployeeStatus
from app.core.models import Department, Employee
from app.db.session import Base, get_db
from app.main import app


test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_db() -> AsyncGenerator[None, None]:
    """Fresh schema for every test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
async def departments(db_session: AsyncSession) -> Dict[str, Department]:
    depts = {t.value: Department(type=t.value, name=t.value.title()) for t in DepartmentType}
    db_session.add_all(depts.values())
    await db_session.commit()
    return depts


@pytest.fixture
def make_employee(db_session: AsyncSession):
    """Factory creating ACTIVE employees; emails are unique per call."""
    counter = {"n": 0}

    async def _make(
        role: EmployeeRole = EmployeeRole.EMPLOYEE,
        *,
        department: Optional[Department] = None,
        gender: Optional[str] = "FEMALE",
        hire_date: Optional[date] = None,
        leave_balance: float = 0.0,
        status: EmployeeStatus = EmployeeStatus.ACTIVE,
        **kwargs,
    ) -> Employee:
        counter["n"] += 1
        employee = Employee(
            first_name=role.value.title(),
            last_name=str(counter["n"]),
            email=f"{role.value.lower()}{counter['n']}@example.com",
            role=role.value,
            status=status.value,
            department_id=department.id if department else None,
            gender=gender,
            hire_date=hire_date,
            leave_balance=leave_balance,
            **kwargs,
        )
        db_session.add(employee)
        await db_session.commit()
        return employee

    return _make


def as_user(employee: Employee) -> CurrentUser:
    return CurrentUser(
        id=employee.id,
        role=employee.role,
        department_id=employee.department_id,
        gender=employee.gender,
    )


def auth_headers(employee: Employee) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(employee.id)})
    return {"Authorization": f"Bearer {token}"}
