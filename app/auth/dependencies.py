from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import CurrentUser
from app.auth.security import decode_access_token
from app.core.enums import EmployeeStatus
from app.core.models import Employee
from app.db.session import get_db


# Tokens are issued by the identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated employee from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    employee_id_str = payload.get("sub")
    if not employee_id_str:
        raise credentials_exception
    try:
        employee_id = UUID(str(employee_id_str))
    except ValueError:
        raise credentials_exception

    # Role and department come from the directory, not from the token, so that a
    # role change takes effect without re-issuing tokens.
    employee = await db.get(Employee, employee_id)
    if not employee or employee.status != EmployeeStatus.ACTIVE.value:
        raise credentials_exception

    return CurrentUser(
        id=employee.id,
        role=employee.role,
        department_id=employee.department_id,
        gender=employee.gender,
    )
