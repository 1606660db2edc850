from fastapi import Depends, HTTPException, status

from app.auth.dependencies import get_current_user
from app.auth.schemas import CurrentUser
from app.core.enums import EmployeeRole


def require_roles(*roles: EmployeeRole):
    """
    Dependency factory restricting a route to the given roles.

    Example:
        Depends(require_roles(EmployeeRole.CEO))
    """
    allowed = {r.value for r in roles}

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"code": "permission_denied", "message": "Access denied"},
            )
        return current_user

    return _checker
