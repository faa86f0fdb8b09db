"""Database helpers."""

from .errors import (
    ConstraintIdentity,
    ConstraintKind,
    ConstraintViolation,
    classify_integrity_error,
    is_foreign_key_violation,
    is_unique_violation,
)
from .session import configure_sqlite_engine, create_engine, get_engine, get_session, get_session_maker

__all__ = [
    "ConstraintIdentity",
    "ConstraintKind",
    "ConstraintViolation",
    "classify_integrity_error",
    "configure_sqlite_engine",
    "create_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    "is_foreign_key_violation",
    "is_unique_violation",
]
