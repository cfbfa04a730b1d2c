# common/config/app_config.py
"""
Complete application configuration with validation.
Database configuration with SSL support, plus the booking policy knobs.
"""

from typing import Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator, SecretStr
from .config_types import EnvLogLevel, DbDriver, SslMode, Environment
from .env_config import require_env, get_env, get_env_number
from .logging_config import LoggingConfig
from pathlib import Path


class DatabaseConfig(BaseModel):
    """
    Database configuration with SSL/TLS support.

    PostgreSQL (asyncpg/psycopg) needs host and port; SQLite (aiosqlite)
    only needs ``name``, which is the database file path.
    """

    driver: DbDriver = Field(...)
    name: str = Field(..., min_length=1, description="Database name or SQLite file")
    host: Optional[str] = Field(default=None, min_length=1)
    port: Optional[int] = Field(default=None, gt=0, le=65535)
    slow_query_threshold: float = Field(
        default=500.0, gt=0, description="SQL time (ms) above which a request is flagged"
    )

    # Authentication (keep separate from URL for security)
    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[SecretStr] = Field(default=None)  # Pydantic hides this in logs

    # Connection pooling (ignored for SQLite)
    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=20, ge=0, le=100)
    pool_timeout: int = Field(default=30, ge=1, le=300)
    pool_recycle: int = Field(default=3600, ge=300)  # Min 5 minutes

    # SSL/TLS Configuration
    ssl_mode: Optional[SslMode] = Field(default=None)
    ssl_cert_path: Optional[Path] = Field(default=None)
    ssl_key_path: Optional[Path] = Field(default=None)
    ssl_ca_path: Optional[Path] = Field(default=None)

    model_config = {"frozen": True}

    @field_validator("ssl_cert_path", "ssl_key_path", "ssl_ca_path")
    @classmethod
    def validate_ssl_paths(cls, v: Optional[Path]) -> Optional[Path]:
        """Validate SSL certificate paths exist."""
        if v is not None and not v.exists():
            raise ValueError(f"SSL file not found: {v}")
        return v

    @model_validator(mode="after")
    def validate_server_fields(self) -> "DatabaseConfig":
        if not self.driver.is_sqlite and (self.host is None or self.port is None):
            raise ValueError(f"host and port are required for driver {self.driver.value}")
        return self

    def get_connection_url(self, include_password: bool = False) -> str:
        """
        Build SQLAlchemy connection URL.

        Args:
            include_password: If True, include password in URL (use for actual connections)
                            If False, mask it (use for logging)
        """
        if self.driver.is_sqlite:
            return f"sqlite+aiosqlite:///{self.name}"

        if self.username:
            if include_password and self.password:
                auth = f"{self.username}:{self.password.get_secret_value()}"
            else:
                auth = f"{self.username}:****"
            return f"postgresql+{self.driver.value}://{auth}@{self.host}:{self.port}/{self.name}"

        return f"postgresql+{self.driver.value}://{self.host}:{self.port}/{self.name}"

    def requires_ssl(self) -> bool:
        """Check if SSL is required based on configuration."""
        return self.ssl_mode in [
            SslMode.REQUIRE,
            SslMode.VERIFY_CA,
            SslMode.VERIFY_FULL,
        ]

    def to_dict_safe(self) -> dict[str, Any]:
        """Convert to dict with sensitive data masked (safe for logging)."""
        data = self.model_dump()
        if data.get("password"):
            data["password"] = "****"
        return data


class BookingConfig(BaseModel):
    """
    Booking policy.

    ``default_slot_minutes`` only applies while no clinic settings row exists.
    """

    cancellation_notice_hours: float = Field(default=2.0, ge=0)
    default_slot_minutes: int = Field(default=30, gt=0, le=24 * 60)
    default_service_id: Optional[str] = Field(default=None, min_length=1)
    max_code_attempts: int = Field(default=3, ge=1, le=20)

    model_config = {"frozen": True}


class AppConfig(BaseModel):
    """
    Complete application configuration.

    All configuration is loaded from environment variables and validated
    at startup. Invalid configuration will fail fast with clear error messages.
    """

    app_title: str = Field(..., min_length=1)
    app_version: str = Field(..., pattern=r"^\d+\.\d+\.\d+$")  # Semantic versioning
    environment: str = Field(..., pattern="^(development|staging|production)$")

    logging: LoggingConfig
    database: Optional[DatabaseConfig] = None
    booking: BookingConfig = Field(default_factory=BookingConfig)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_production_settings(self) -> "AppConfig":
        if self.environment == "production":
            if self.database is None:
                raise ValueError("Database config required in production")
            if self.database.driver.is_sqlite:
                raise ValueError("SQLite is not supported in production")
            if self.logging.log_level == EnvLogLevel.DEBUG:
                raise ValueError("DEBUG log level not allowed in production")
        return self


def load_database_config(environment: Environment) -> Optional[DatabaseConfig]:
    """
    Load database configuration from environment.

    Environment variables:
    Always:
    - DB_DRIVER: asyncpg, psycopg or aiosqlite
    - DB_NAME: Database name (file path for aiosqlite)

    Server drivers only:
    - DB_HOST, DB_PORT
    - DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE
    - DB_USER, DB_PASSWORD, DB_SSL_MODE (required in production)
    - DB_SSL_CERT, DB_SSL_KEY, DB_SSL_CA (optional)

    Optional:
    - SLOW_QUERY_THRESHOLD: milliseconds (default 500)

    Returns None when neither DB_DRIVER nor DB_HOST is set.
    """
    driver_str = get_env("DB_DRIVER")
    host = get_env("DB_HOST")
    if not driver_str and not host:
        return None

    driver_str = require_env("DB_DRIVER")
    try:
        driver = DbDriver(driver_str)
    except ValueError:
        valid_drivers = [d.value for d in DbDriver]
        raise ValueError(
            f"Invalid DB_DRIVER: {driver_str}. Must be one of: {valid_drivers}"
        )

    name = require_env("DB_NAME")
    slow_query_threshold = get_env_number("SLOW_QUERY_THRESHOLD", 500.0)

    if driver.is_sqlite:
        return DatabaseConfig(
            driver=driver,
            name=name,
            slow_query_threshold=slow_query_threshold,
        )

    # Required fields (no defaults!)
    port_str = require_env("DB_PORT")
    pool_size_str = require_env("DB_POOL_SIZE")
    max_overflow_str = require_env("DB_MAX_OVERFLOW")
    pool_timeout_str = require_env("DB_POOL_TIMEOUT")
    pool_recycle_str = require_env("DB_POOL_RECYCLE")

    if environment.is_production:
        username: Optional[str] = require_env("DB_USER")
        password_str: Optional[str] = require_env("DB_PASSWORD")
        ssl_mode_str: Optional[str] = require_env("DB_SSL_MODE")
    else:
        username = get_env("DB_USER")
        password_str = get_env("DB_PASSWORD")
        ssl_mode_str = get_env("DB_SSL_MODE")

    ssl_mode: Optional[SslMode] = None
    if ssl_mode_str:
        try:
            ssl_mode = SslMode(ssl_mode_str)
        except ValueError:
            valid_modes = [m.value for m in SslMode]
            raise ValueError(
                f"Invalid DB_SSL_MODE: {ssl_mode_str}. Must be one of: {valid_modes}"
            )

    ssl_cert = get_env("DB_SSL_CERT")
    ssl_key = get_env("DB_SSL_KEY")
    ssl_ca = get_env("DB_SSL_CA")

    return DatabaseConfig(
        driver=driver,
        host=require_env("DB_HOST"),
        port=int(port_str),
        name=name,
        username=username,
        password=SecretStr(password_str) if password_str else None,
        pool_size=int(pool_size_str),
        max_overflow=int(max_overflow_str),
        pool_timeout=int(pool_timeout_str),
        pool_recycle=int(pool_recycle_str),
        ssl_mode=ssl_mode,
        ssl_cert_path=Path(ssl_cert) if ssl_cert else None,
        ssl_key_path=Path(ssl_key) if ssl_key else None,
        ssl_ca_path=Path(ssl_ca) if ssl_ca else None,
        slow_query_threshold=slow_query_threshold,
    )


def load_booking_config() -> BookingConfig:
    """
    Load booking policy from environment. Every variable is optional.

    - BOOKING_CANCELLATION_NOTICE_HOURS (default 2)
    - BOOKING_DEFAULT_SLOT_MINUTES (default 30)
    - BOOKING_DEFAULT_SERVICE_ID (default: earliest active service)
    - BOOKING_MAX_CODE_ATTEMPTS (default 3)
    """
    return BookingConfig(
        cancellation_notice_hours=get_env_number("BOOKING_CANCELLATION_NOTICE_HOURS", 2.0),
        default_slot_minutes=int(get_env_number("BOOKING_DEFAULT_SLOT_MINUTES", 30)),
        default_service_id=get_env("BOOKING_DEFAULT_SERVICE_ID") or None,
        max_code_attempts=int(get_env_number("BOOKING_MAX_CODE_ATTEMPTS", 3)),
    )


def load_app_config() -> AppConfig:
    """
    Load complete application configuration.

    Raises:
        ValidationError: If configuration is invalid
        ConfigurationError: If required env vars are missing
    """
    from .logging_config import load_logging_config

    env_str = require_env("ENVIRONMENT")

    try:
        environment = Environment(env_str)
    except ValueError:
        valid_envs = [e.value for e in Environment]
        raise ValueError(
            f"Invalid ENVIRONMENT: {env_str}. Must be one of: {valid_envs}"
        )

    return AppConfig(
        app_title=require_env("APP_TITLE"),
        app_version=require_env("APP_VERSION"),
        environment=env_str,
        logging=load_logging_config(),
        database=load_database_config(environment),
        booking=load_booking_config(),
    )


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "BookingConfig",
    "load_app_config",
    "load_database_config",
    "load_booking_config",
]
