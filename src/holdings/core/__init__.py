"""Core utilities and shared functionality."""

from holdings.core.timezone import (
    now_eastern,
    to_eastern,
    to_naive_eastern,
    from_naive_eastern,
    parse_since,
    EASTERN_TZ,
)
from holdings.core.locks import OwnerLockRegistry, get_lock_registry
from holdings.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    DuplicateSymbolError,
    ApplyError,
)

__all__ = [
    "now_eastern",
    "to_eastern",
    "to_naive_eastern",
    "from_naive_eastern",
    "parse_since",
    "EASTERN_TZ",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "DuplicateSymbolError",
    "ApplyError",
    "OwnerLockRegistry",
    "get_lock_registry",
]
