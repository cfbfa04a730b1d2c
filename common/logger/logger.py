# common/logger/logger.py
"""
Application logger with explicit initialization, bound context and timing.

Usage:
    from common.logger import get_app_logger

    logger = get_app_logger(__name__)
    logger.info("Appointment booked", appointment_code="SC-001")

    # Carry context through a workflow
    booking_log = logger.bind(patient_id=patient_id, doctor_id=doctor_id)
    booking_log.warning("Slot already taken")
"""

import time
from typing import Any, Dict, Optional
import structlog

from common.config.structlog_config import get_logger as _get_structlog_logger


class TimingStats:
    """Track timing statistics for logger performance."""

    def __init__(self) -> None:
        self.reset()

    def record(self, elapsed: float) -> None:
        self.total_calls += 1
        self.total_time += elapsed
        self.max_time = max(self.max_time, elapsed)
        self.min_time = min(self.min_time, elapsed)

    def get_stats(self) -> Dict[str, Any]:
        avg = self.total_time / self.total_calls if self.total_calls > 0 else 0
        return {
            "total_calls": self.total_calls,
            "avg_time_ms": avg * 1000,
            "max_time_ms": self.max_time * 1000,
            "min_time_ms": self.min_time * 1000 if self.total_calls else 0,
        }

    def reset(self) -> None:
        self.total_calls = 0
        self.total_time = 0.0
        self.max_time = 0.0
        self.min_time = float("inf")


class AppLogger:
    """
    Application logger wrapper.

    Provides a type-safe interface to structlog with:
    - Lazy binding, so modules can create loggers before configuration
    - Keyword context carried by ``bind()``
    - Optional call timing
    """

    def __init__(
        self,
        name: str = "app",
        track_timing: bool = False,
        context: Optional[Dict[str, Any]] = None,
        timing_stats: Optional[TimingStats] = None,
    ) -> None:
        self._name = name
        self._track_timing = track_timing
        self._context: Dict[str, Any] = dict(context or {})
        self._logger_instance: Optional[structlog.BoundLogger] = None
        self._timing_stats: Optional[TimingStats] = timing_stats or (
            TimingStats() if track_timing else None
        )

    @property
    def _logger(self) -> structlog.BoundLogger:
        """
        Lazy-load logger instance.
        This ensures structlog is configured before first use.
        """
        if self._logger_instance is None:
            self._logger_instance = _get_structlog_logger(self._name).bind(
                **self._context
            )
        return self._logger_instance

    def bind(self, **kwargs: Any) -> "AppLogger":
        """Return a logger that adds ``kwargs`` to every event. Timing stats are shared."""
        return AppLogger(
            name=self._name,
            track_timing=self._track_timing,
            context={**self._context, **kwargs},
            timing_stats=self._timing_stats,
        )

    def _log(self, level: str, msg: str, **kwargs: Any) -> None:
        start_time = time.perf_counter() if self._timing_stats is not None else None
        try:
            getattr(self._logger, level)(msg, **kwargs)
        finally:
            if start_time is not None and self._timing_stats is not None:
                self._timing_stats.record(time.perf_counter() - start_time)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log("debug", msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log("info", msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log("warning", msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log("error", msg, **kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self._log("critical", msg, **kwargs)

    def get_timing_stats(self) -> Dict[str, Any]:
        if self._timing_stats is None:
            return {"error": "Timing tracking not enabled"}
        return self._timing_stats.get_stats()

    def reset_timing_stats(self) -> None:
        if self._timing_stats is not None:
            self._timing_stats.reset()


def get_app_logger(name: str = "app", track_timing: bool = False) -> AppLogger:
    """
    Get application logger instance.

    Example:
        >>> logger = get_app_logger(__name__, track_timing=True)
        >>> logger.info("Schedule created", doctor_id="...")
        >>> logger.get_timing_stats()["total_calls"]
        1
    """
    return AppLogger(name=name, track_timing=track_timing)


# Convenience instance for simple usage
logger = get_app_logger()

__all__ = ["logger", "AppLogger", "TimingStats", "get_app_logger"]
