# common/config/logging_config.py
from dataclasses import dataclass
from .env_config import require_env, get_env
from .config_types import EnvLogLevel, EnvLogFormat
from common.api_error import ConfigurationError

_default_log_level_env_key = "LOG_LEVEL"
_default_log_format_env_key = "LOG_FORMAT"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    log_level: EnvLogLevel
    log_format: EnvLogFormat = EnvLogFormat.CONSOLE

    @property
    def level_value(self) -> str:
        """Get string value of log level."""
        return self.log_level.value

    @property
    def level_int(self) -> int:
        """Get numeric log level."""
        return self.log_level.level

    @property
    def json_logs(self) -> bool:
        return self.log_format == EnvLogFormat.JSON


def load_logging_config(
    log_level_env_key: str = _default_log_level_env_key,
    log_format_env_key: str = _default_log_format_env_key,
) -> LoggingConfig:
    """
    Load logging configuration from environment.

    LOG_LEVEL is required; LOG_FORMAT defaults to ``console``.

    Raises:
        ConfigurationError: If LOG_LEVEL is missing or either value is invalid
    """
    try:
        log_level_val = require_env(log_level_env_key).upper()
        log_format_val = (get_env(log_format_env_key) or "console").lower()

        return LoggingConfig(
            log_level=EnvLogLevel(log_level_val),
            log_format=EnvLogFormat(log_format_val),
        )

    except ValueError as exc:
        valid_levels = ", ".join(level.value for level in EnvLogLevel)
        valid_formats = ", ".join(fmt.value for fmt in EnvLogFormat)

        raise ConfigurationError(
            f"Invalid logging configuration. "
            f"{log_level_env_key} must be one of [{valid_levels}], "
            f"{log_format_env_key} must be one of [{valid_formats}]"
        ) from exc


__all__ = [
    "LoggingConfig",
    "load_logging_config",
]
