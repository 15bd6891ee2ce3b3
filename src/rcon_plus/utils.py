import inspect
import logging
from functools import wraps

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging for the console entry point"""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def get_caller_logger() -> logging.Logger:
    """Get logger for the calling module"""
    frame = inspect.currentframe()
    try:
        caller_frame = frame.f_back.f_back
        module_name = caller_frame.f_globals.get("__name__", "unknown")
        return logging.getLogger(module_name)
    finally:
        del frame


def log_debug(operation: str, message: str) -> None:
    logger = get_caller_logger()
    logger.debug(f"{operation}: {message}")


def log_info(operation: str, message: str) -> None:
    """Standardized info logging"""
    logger = get_caller_logger()
    logger.info(f"{operation}: {message}")


def log_warning(operation: str, message: str) -> None:
    """Standardized warning logging"""
    logger = get_caller_logger()
    logger.warning(f"{operation}: {message}")


def log_error(operation: str, error: Exception | str) -> None:
    """Standardized error logging"""
    logger = get_caller_logger()
    logger.error(f"{operation} error: {error}")


def safe_sync(operation_name: str, default_return=None):
    """Decorator for best-effort sync operations: log the error, return a default"""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logging.getLogger(func.__module__).debug(f"{operation_name} error: {e}")
                return default_return

        return wrapper

    return decorator
