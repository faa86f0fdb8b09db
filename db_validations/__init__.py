"""Database-enforced validations for SQLAlchemy/SQLModel records."""

from .validations import (
    AmbiguousConstraintError,
    DbForeignKey,
    DbUniqueness,
    IndexNotFoundError,
    PresenceValidator,
    RecordErrors,
    RecordInvalid,
    RecordPersister,
    ValidatorRegistry,
    db_belongs_to,
    validates_db_uniqueness_of,
)

__all__ = [
    "AmbiguousConstraintError",
    "DbForeignKey",
    "DbUniqueness",
    "IndexNotFoundError",
    "PresenceValidator",
    "RecordErrors",
    "RecordInvalid",
    "RecordPersister",
    "ValidatorRegistry",
    "db_belongs_to",
    "validates_db_uniqueness_of",
]
