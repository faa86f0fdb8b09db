"""Exceptions raised by database validations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .errors import RecordErrors


class DatabaseValidationsError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(DatabaseValidationsError):
    """Raised when a model's validator declarations cannot be honoured."""


class AmbiguousConstraintError(ConfigurationError):
    """Two validators on one model resolve to the same physical constraint."""

    def __init__(self, model: type, first: Any, second: Any) -> None:
        super().__init__(
            f"{model.__name__} declares {first!r} and {second!r} which resolve to "
            "the same database constraint; give one of them an explicit index_name"
        )
        self.model = model
        self.first = first
        self.second = second


class IndexNotFoundError(ConfigurationError):
    """No unique index or foreign key in the table metadata backs a validator."""

    def __init__(self, model: type, validator: Any, columns: frozenset[str]) -> None:
        super().__init__(
            f"No matching constraint on {model.__name__} for columns "
            f"{sorted(columns)} required by {validator!r}; expression indexes "
            "such as lower(column) are only found through an explicit index_name"
        )
        self.model = model
        self.validator = validator
        self.columns = columns


class RecordInvalid(DatabaseValidationsError):
    """Raised when a record fails validation, in memory or in the database."""

    def __init__(self, record: Any, errors: "RecordErrors") -> None:
        messages = ", ".join(errors.full_messages())
        super().__init__(f"Validation failed: {messages}")
        self.record = record
        self.errors = errors


__all__ = [
    "DatabaseValidationsError",
    "ConfigurationError",
    "AmbiguousConstraintError",
    "IndexNotFoundError",
    "RecordInvalid",
]
