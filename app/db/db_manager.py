# app/db/db_manager.py
"""
Database manager focused on connection management and session handling.

Design principles:
- Single responsibility: Connection/session management only
- Fail fast: Invalid configuration crashes on startup
- Explicit over implicit: schema creation is an explicit call (seed CLI, tests)
"""

import time
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
)
from sqlalchemy import event, text
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Any, Optional, Union
from common import DatabaseConfig, logger, request_timer_context_var
from .models import DbBaseModel


class DbManager:
    """
    Database connection and session manager.

    Responsibilities:
    - Async engine/connection pool management
    - Session lifecycle management (commit on success, rollback on error)
    - Per-request SQL timing for RequestLoggingMiddleware
    - Health checks

    Usage:
        # Startup
        db_manager = DbManager.from_config(config.database)
        await db_manager.verify_connection()

        # Runtime
        async with db_manager.session() as session:
            result = await session.execute(...)

        # Shutdown
        await db_manager.dispose()
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True,
        echo: bool = False,
        connect_args: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize database manager.

        Args:
            url: Database URL (postgresql+asyncpg://, postgresql+psycopg:// or sqlite+aiosqlite://)
            pool_size: Number of persistent connections (server databases only)
            max_overflow: Additional connections beyond pool_size
            pool_timeout: Seconds to wait for connection from pool
            pool_recycle: Recycle connections after N seconds
            pool_pre_ping: Test connections before using
            echo: Log all SQL statements (use for debugging)
            connect_args: Driver-specific connection arguments (SSL, etc.)
        """
        self._validate_url(url)
        self._is_sqlite = url.startswith("sqlite")

        self._config: dict[str, Union[str, int]] = {
            "url": url.split("@")[-1],
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_timeout": pool_timeout,
            "pool_recycle": pool_recycle,
        }

        engine_kwargs: dict[str, Any] = {
            "echo": echo,
            "pool_pre_ping": pool_pre_ping,
            "connect_args": connect_args or {},
        }
        if not self._is_sqlite:
            # SQLite picks its own pool class; sizing arguments do not apply
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self._install_query_timing()

        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        self._verified = False

        logger.info(
            "DbManager initialized",
            backend="sqlite" if self._is_sqlite else "postgresql",
            pool_size=None if self._is_sqlite else pool_size,
            pre_ping=pool_pre_ping,
        )

    @classmethod
    def from_config(cls, config: DatabaseConfig, **kwargs: Any) -> "DbManager":
        """
        Create DbManager from DatabaseConfig with SSL support.

        Example:
            db_manager = DbManager.from_config(config.database)
        """
        connect_args = kwargs.pop("connect_args", {})

        if config.ssl_mode and config.driver.value == "asyncpg":
            import ssl as ssl_module

            if config.ssl_mode.value == "disable":
                connect_args["ssl"] = False
            elif config.requires_ssl():
                ssl_context = ssl_module.create_default_context()
                if config.ssl_ca_path:
                    ssl_context.load_verify_locations(cafile=str(config.ssl_ca_path))
                if config.ssl_cert_path and config.ssl_key_path:
                    ssl_context.load_cert_chain(
                        certfile=str(config.ssl_cert_path),
                        keyfile=str(config.ssl_key_path),
                    )
                if config.ssl_mode.value == "verify-full":
                    ssl_context.check_hostname = True
                    ssl_context.verify_mode = ssl_module.CERT_REQUIRED
                else:
                    # require / verify-ca do not check the host name
                    ssl_context.check_hostname = False
                connect_args["ssl"] = ssl_context

        return cls(
            url=config.get_connection_url(include_password=True),
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            connect_args=connect_args,
            **kwargs,
        )

    @staticmethod
    def _validate_url(url: str) -> None:
        if not url or not url.startswith(
            ("postgresql+asyncpg://", "postgresql+psycopg://", "sqlite+aiosqlite://")
        ):
            raise ValueError(
                "Invalid database URL. Expected postgresql+asyncpg://, "
                f"postgresql+psycopg:// or sqlite+aiosqlite://, got: {url[:20]}..."
            )

    def _install_query_timing(self) -> None:
        """Feed SQL execution time and statement count into the request timer."""
        sync_engine = self.engine.sync_engine

        @event.listens_for(sync_engine, "before_cursor_execute")
        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # type: ignore[no-untyped-def]
            conn.info.setdefault("query_start", []).append(time.perf_counter())

        @event.listens_for(sync_engine, "after_cursor_execute")
        def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):  # type: ignore[no-untyped-def]
            started = conn.info.get("query_start")
            if not started:
                return
            elapsed_ms = (time.perf_counter() - started.pop()) * 1000
            timer = request_timer_context_var.get()
            if timer is not None:
                timer.record_query(elapsed_ms)

    async def verify_connection(self) -> None:
        """
        Verify database connection on startup.
        Fails fast if connection cannot be established.

        Raises:
            ConnectionError: If connection fails
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self._verified = True
            logger.info("Database connection verified")
        except Exception as e:
            logger.error("Database connection failed", error=str(e))
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    async def create_schema(self) -> None:
        """Create all clinic tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(DbBaseModel.metadata.create_all)
        logger.info(
            "Database schema ensured",
            tables=sorted(DbBaseModel.metadata.tables.keys()),
        )

    async def drop_schema(self) -> None:
        """Drop all clinic tables. Used by tests and local resets."""
        async with self.engine.begin() as conn:
            await conn.run_sync(DbBaseModel.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a transactional database session.

        Automatically commits on success, rolls back on exception.

        Usage:
            async with db_manager.session() as session:
                doctor = await session.get(Doctor, doctor_id)
                doctor.is_active = False
                # Commits automatically on exit
        """
        timer = request_timer_context_var.get()
        started = time.perf_counter()
        session = self.session_maker()
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.warning("Session error, rolled back", error=str(e))
            raise
        finally:
            await session.close()
            if timer is not None:
                timer.add("db", (time.perf_counter() - started) * 1000)

    async def health_check(self) -> dict[str, Any]:
        """
        Health check with basic pool metrics.

        Example:
            {"healthy": True, "response_time_ms": 5.2, "pool_status": "..."}
        """
        start = time.perf_counter()

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            return {
                "healthy": True,
                "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
                "pool_status": self.engine.pool.status(),
            }

        except Exception as e:
            return {
                "healthy": False,
                "error": str(e),
            }

    async def dispose(self) -> None:
        """
        Dispose of all connections and cleanup resources.
        Call this on application shutdown.
        """
        await self.engine.dispose()
        logger.info("Database connections disposed")

    def get_config_snapshot(self) -> dict[str, Any]:
        """Get current configuration without credentials (for monitoring/debugging)."""
        return self._config.copy()


__all__ = ["DbManager"]
