# common/context_vars.py
from contextvars import ContextVar
from typing import Optional, Any

# Unique to each async task (each request); read by DbManager's query hooks
request_timer_context_var: ContextVar[Optional[Any]] = ContextVar(
    "request_timer",
    default=None,
)

__all__ = ["request_timer_context_var"]
