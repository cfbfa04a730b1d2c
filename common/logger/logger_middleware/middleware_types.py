# common/logger/logger_middleware/middleware_types.py
"""
Type definitions for request logging middleware.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, Field, computed_field

# A booking with one code retry stays under HIGH_QUERY_COUNT
HIGH_QUERY_COUNT = 12
N_PLUS_ONE_QUERY_COUNT = 25


class PerformanceBreakdown(BaseModel):
    """Breakdown of where time was spent during the request."""

    total_ms: float
    app_logic_ms: float
    db_session_total_ms: float
    sql_execution_total_ms: float
    query_count: int = Field(0, description="Number of SQL statements executed")

    @property
    def db_overhead_ms(self) -> float:
        """Time spent in DB session management (pooling, commits) NOT executing SQL."""
        return round(self.db_session_total_ms - self.sql_execution_total_ms, 2)


class RequestMetadata(BaseModel):
    """
    Core request metadata - always captured.
    """

    method: str = Field(..., description="HTTP method (GET, POST, etc.)")
    path: str = Field(..., description="Request path without query params")
    status_code: int = Field(..., ge=100, le=599, description="HTTP status code")
    duration_ms: float = Field(..., ge=0, description="Request duration in milliseconds")

    model_config = {"frozen": True}


class RequestDetails(BaseModel):
    """
    Extended request details - optional, configurable.
    """

    request_id: Optional[str] = Field(None, description="Unique request ID")
    actor_role: Optional[str] = Field(None, description="X-User-Role of the caller")
    client_host: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="User-Agent header")
    query_params: Optional[Dict[str, Any]] = Field(None, description="Query parameters")
    path_params: Optional[Dict[str, Any]] = Field(None, description="Path parameters")
    content_length: Optional[int] = Field(None, ge=0, description="Response size in bytes")

    model_config = {"frozen": True}


class RequestLogEntry(BaseModel):
    """
    Complete request log entry combining metadata and optional details.
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: RequestMetadata
    details: Optional[RequestDetails] = None
    performance: Optional[PerformanceBreakdown] = None
    slow_request_ms: float = Field(1000.0, exclude=True)
    slow_sql_ms: float = Field(500.0, exclude=True)

    model_config = {"frozen": True}

    @computed_field
    def is_slow(self) -> bool:
        return self.metadata.duration_ms > self.slow_request_ms

    @computed_field
    def is_error(self) -> bool:
        """Flag error responses (5xx)."""
        return self.metadata.status_code >= 500

    @computed_field
    def optimization_warnings(self) -> list[str]:
        """
        Warnings that account for both absolute time and query counts.

        A booking issues about seven statements (patient, doctor, service,
        day check, slot check, sequence, insert); well beyond that usually
        means a lazy relationship load.
        """
        warns: list[str] = []
        if not self.performance:
            return warns

        sql_time = self.performance.sql_execution_total_ms
        query_count = self.performance.query_count
        total_time = self.metadata.duration_ms

        if query_count > N_PLUS_ONE_QUERY_COUNT:
            warns.append(
                f"N+1_QUERY_SUSPECTED: {query_count} queries (likely missing eager loading)"
            )
        elif query_count > HIGH_QUERY_COUNT:
            warns.append(
                f"HIGH_QUERY_COUNT: {query_count} queries (consider selectinload/joinedload)"
            )

        if sql_time > self.slow_sql_ms:
            warns.append(f"SLOW_SQL: query execution took {sql_time:.0f}ms")

        db_overhead = self.performance.db_overhead_ms
        if db_overhead > self.slow_sql_ms / 2 and db_overhead > total_time * 0.3:
            warns.append(
                f"HIGH_CONNECTION_OVERHEAD: {db_overhead:.0f}ms in connection management"
            )

        return warns


__all__ = [
    "RequestMetadata",
    "RequestDetails",
    "RequestLogEntry",
    "PerformanceBreakdown",
]
