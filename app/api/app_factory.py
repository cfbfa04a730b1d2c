# app/api/app_factory.py
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from app.db import DbManager
from common.config import AppConfig, Environment, is_configured
from common.logger import get_app_logger
from common.logger.logger_middleware import RequestLoggingMiddleware
from .error_handlers import register_error_handlers
from .v1 import (
    appointment_router,
    doctor_router,
    patient_router,
    schedule_router,
    service_router,
)

logger = get_app_logger(name=__name__, track_timing=True)


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Current system health status")
    timestamp: datetime = Field(..., description="Server time in ISO 8601 format")
    version: str = Field(..., description="Application version")
    logging_configured: bool = Field(..., description="Logging configuration status")
    log_level: str = Field(..., description="Application log level")
    database: dict[str, Any] = Field(..., description="Database ping and pool status")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error message describing the failure")
    timestamp: datetime = Field(..., description="Server time when the error occurred")


def create_app(config: AppConfig) -> FastAPI:
    """
    Build the clinic API for a validated configuration.

    The lifespan owns the DbManager: it is created and verified on startup,
    published on ``app.state.db_manager`` and disposed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db_config = config.database
        if not db_config:
            raise RuntimeError("Database configuration required")

        logger.info("Starting", environment=config.environment, database=db_config.to_dict_safe())

        db_manager = DbManager.from_config(db_config)
        await db_manager.verify_connection()

        app.state.db_manager = db_manager
        yield
        logger.info("shutting down")
        await db_manager.dispose()

    app = FastAPI(
        title=config.app_title,
        version=config.app_version,
        description=f"Running in {config.environment} environment",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        RequestLoggingMiddleware,
        expose_performance_headers=config.environment != Environment.PRODUCTION.value,
        slow_sql_threshold=(
            config.database.slow_query_threshold if config.database else 500.0
        ),
        log_query_params=False,  # booking queries carry patient ids
    )
    register_error_handlers(app)

    for router in (
        appointment_router,
        doctor_router,
        schedule_router,
        service_router,
        patient_router,
    ):
        app.include_router(router)

    @app.get(
        "/health",
        response_model=HealthCheckResponse,
        tags=["Health"],
        responses={
            200: {"description": "System is healthy", "model": HealthCheckResponse},
            503: {"description": "System is unhealthy", "model": ErrorResponse},
        },
    )
    async def check_health(request: Request) -> HealthCheckResponse:
        db_health = await request.app.state.db_manager.health_check()
        if not db_health["healthy"]:
            logger.error("Health check failed", endpoint="/health", error=db_health.get("error"))
            err = ErrorResponse(
                error=f"database unavailable: {db_health.get('error')}",
                timestamp=datetime.now(),
            )
            raise HTTPException(status_code=503, detail=err.model_dump(mode="json"))

        logger.debug("Health check passed", version=config.app_version, endpoint="/health")
        return HealthCheckResponse(
            status="Healthy",
            timestamp=datetime.now(),
            version=config.app_version,
            logging_configured=is_configured(),
            log_level=config.logging.level_value,
            database=db_health,
        )

    return app


__all__ = ["create_app", "HealthCheckResponse"]
