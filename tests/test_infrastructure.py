import pytest
from sqlalchemy import select, text

from app.db import DbManager
from app.db.models import Doctor
from app.services.v1 import (
    Actor,
    ActorRole,
    format_appointment_code,
    parse_appointment_code,
    require_role,
)
from common import request_timer_context_var
from common.api_error import AuthorizationError
from common.config import DatabaseConfig, DbDriver
from common.logger import get_app_logger
from common.logger.logger_middleware import RequestTimer
from common.logger.logger_middleware.middleware_types import (
    PerformanceBreakdown,
    RequestLogEntry,
    RequestMetadata,
)
from tests.clinic_data import DOCTOR_ID


class TestAppointmentCodes:
    @pytest.mark.parametrize(
        "number, code",
        [(1, "SC-001"), (42, "SC-042"), (999, "SC-999"), (1000, "SC-1000")],
    )
    def test_format(self, number, code):
        assert format_appointment_code(number) == code
        assert parse_appointment_code(code) == number

    @pytest.mark.parametrize("code", ["SC-1", "XX-001", "SC-00A", ""])
    def test_parse_rejects_malformed(self, code):
        with pytest.raises(ValueError):
            parse_appointment_code(code)

    def test_format_rejects_non_positive(self):
        with pytest.raises(ValueError):
            format_appointment_code(0)


class TestRequireRole:
    def test_allowed(self):
        require_role(Actor("u1", ActorRole.STAFF), ActorRole.ADMIN, ActorRole.STAFF)

    def test_refused(self):
        with pytest.raises(AuthorizationError) as exc_info:
            require_role(Actor("u1", ActorRole.CLIENT), ActorRole.ADMIN)

        assert exc_info.value.code == "FORBIDDEN"


def log_entry(query_count: int, sql_ms: float = 5.0) -> RequestLogEntry:
    return RequestLogEntry(
        metadata=RequestMetadata(method="POST", path="/appointments", status_code=201, duration_ms=40.0),
        performance=PerformanceBreakdown(
            total_ms=40.0,
            app_logic_ms=20.0,
            db_session_total_ms=15.0,
            sql_execution_total_ms=sql_ms,
            query_count=query_count,
        ),
    )


class TestOptimizationWarnings:
    def test_booking_sized_request_is_quiet(self):
        """A booking, even with one code retry, logs no query-count warning."""
        assert log_entry(7).optimization_warnings == []
        assert log_entry(11).optimization_warnings == []

    def test_many_statements_are_flagged(self):
        assert log_entry(13).optimization_warnings[0].startswith("HIGH_QUERY_COUNT")
        assert log_entry(30).optimization_warnings[0].startswith("N+1_QUERY_SUSPECTED")

    def test_slow_sql_is_flagged(self):
        assert log_entry(3, sql_ms=750.0).optimization_warnings == ["SLOW_SQL: query execution took 750ms"]


class TestRequestTimer:
    def test_capture_and_queries_accumulate(self):
        timer = RequestTimer()

        with timer.capture("db"):
            pass
        timer.record_query(2.5)
        timer.record_query(1.5)

        assert timer.query_count == 2
        assert timer.timings["sql"] == pytest.approx(4.0)
        assert "db;dur=" in timer.format_server_timing()


class TestAppLogger:
    def test_bind_shares_timing_stats(self):
        logger = get_app_logger("tests", track_timing=True)

        logger.bind(appointment_code="SC-001").info("bound event")
        logger.info("plain event")

        assert logger.get_timing_stats()["total_calls"] == 2


class TestDbManager:
    def test_rejects_unknown_url(self):
        with pytest.raises(ValueError):
            DbManager("mysql://localhost/clinic")

    async def test_from_sqlite_config(self, tmp_path):
        manager = DbManager.from_config(
            DatabaseConfig(driver=DbDriver.AIOSQLITE, name=str(tmp_path / "cfg.db"))
        )
        try:
            await manager.verify_connection()
            health = await manager.health_check()
        finally:
            await manager.dispose()

        assert health["healthy"] is True
        assert manager.get_config_snapshot()["url"].startswith("sqlite+aiosqlite:///")

    async def test_session_rolls_back_on_error(self, db_manager):
        with pytest.raises(RuntimeError):
            async with db_manager.session() as session:
                doctor = await session.get(Doctor, DOCTOR_ID)
                doctor.name = "Renamed"
                await session.flush()
                raise RuntimeError("boom")

        async with db_manager.session() as session:
            doctor = await session.get(Doctor, DOCTOR_ID)
            assert doctor.name == "Dr. Sarah Johnson"

    async def test_sql_time_is_reported_to_request_timer(self, db_manager):
        timer = RequestTimer()
        token = request_timer_context_var.set(timer)
        try:
            async with db_manager.session() as session:
                await session.execute(select(Doctor))
                await session.execute(text("SELECT 1"))
        finally:
            request_timer_context_var.reset(token)

        assert timer.query_count >= 2
        assert "sql" in timer.timings
        assert "db" in timer.timings

    async def test_without_timer_queries_are_not_tracked(self, db_manager):
        async with db_manager.session() as session:
            await session.execute(text("SELECT 1"))

        assert request_timer_context_var.get() is None
