"""Database-backed validations."""

from .entries import (
    DEFAULT_FOREIGN_KEY_MESSAGE,
    DEFAULT_UNIQUENESS_MESSAGE,
    DbForeignKey,
    DbUniqueness,
    PresenceValidator,
    RecordValidator,
    db_belongs_to,
    validates_db_uniqueness_of,
)
from .errors import RecordErrors, ValidationFailure
from .exceptions import (
    AmbiguousConstraintError,
    ConfigurationError,
    DatabaseValidationsError,
    IndexNotFoundError,
    RecordInvalid,
)
from .metadata import (
    declares_db_uniqueness,
    describe_uniqueness,
    foreign_key_options,
    uniqueness_options,
    validators_for,
)
from .persister import RecordPersister, WriteResult, WriteStatus
from .registry import ValidatorRegistry
from .rescuer import Rescuer
from .resolver import ConstraintResolver, ConstraintSignature

__all__ = [
    "DEFAULT_FOREIGN_KEY_MESSAGE",
    "DEFAULT_UNIQUENESS_MESSAGE",
    "AmbiguousConstraintError",
    "ConfigurationError",
    "ConstraintResolver",
    "ConstraintSignature",
    "DatabaseValidationsError",
    "DbForeignKey",
    "DbUniqueness",
    "IndexNotFoundError",
    "PresenceValidator",
    "RecordErrors",
    "RecordInvalid",
    "RecordPersister",
    "RecordValidator",
    "Rescuer",
    "ValidationFailure",
    "ValidatorRegistry",
    "WriteResult",
    "WriteStatus",
    "db_belongs_to",
    "declares_db_uniqueness",
    "describe_uniqueness",
    "foreign_key_options",
    "uniqueness_options",
    "validates_db_uniqueness_of",
    "validators_for",
]
