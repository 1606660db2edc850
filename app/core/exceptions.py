import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "internal_error"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        *,
        code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        if code is not None:
            self.code = code
        self.extra = extra or {}

    @property
    def detail(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.extra}


class ValidationFailed(ServiceError):
    """Malformed or missing input; nothing was written."""

    code = "validation_error"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST, **kwargs)


class PermissionDenied(ServiceError):
    code = "permission_denied"

    def __init__(self, message: str = "Access denied", **kwargs: Any) -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN, **kwargs)


class NotFound(ServiceError):
    code = "not_found"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND, **kwargs)


class Conflict(ServiceError):
    """State does not allow the operation right now (may succeed later)."""

    code = "conflict"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT, **kwargs)


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": {"code": "conflict", "message": "Database constraint violation"}},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": "internal_error", "message": "Internal database error"}},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": "internal_error", "message": "Internal server error"}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach persistence and fallback handlers so stack traces never reach clients."""
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
