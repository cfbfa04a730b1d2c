# app/api/error_handlers.py
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from common.api_error import AppError, DatabaseError
from common.logger import get_app_logger

logger = get_app_logger(__name__)


def _error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "timestamp": datetime.now().isoformat(),
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    # 4xx are expected user errors; 5xx mean the store let us down
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Domain Error: {exc.code}",
        path=request.url.path,
        error_code=exc.code,
        message=exc.message,
    )
    return _error_response(exc)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures no service translated, e.g. a failed commit."""
    error = DatabaseError(str(getattr(exc, "orig", None) or exc))
    logger.error(
        "Unhandled database error",
        path=request.url.path,
        error_code=error.code,
        error_type=type(exc).__name__,
        message=error.message,
    )
    return _error_response(error)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]


__all__ = ["register_error_handlers", "app_error_handler", "database_error_handler"]
