# common/api_error/config_error.py
class ConfigurationError(RuntimeError):
    """
    Raised when the environment does not describe a runnable clinic service.

    Startup code treats this as fatal.
    """


__all__ = ["ConfigurationError"]
