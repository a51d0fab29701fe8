from .cache import get_cache, invalidate_schedule_cache
from .config import settings
from .exceptions import (
    AppError,
    InvalidStateError,
    InvalidViewError,
    NotFoundError,
    PermissionDeniedError,
)
from .logging_config import configure_logging

__all__ = [
    "AppError",
    "InvalidStateError",
    "InvalidViewError",
    "NotFoundError",
    "PermissionDeniedError",
    "configure_logging",
    "get_cache",
    "invalidate_schedule_cache",
    "settings",
]
