"""Validator declarations.

``DbUniqueness`` and ``DbForeignKey`` describe rules the database enforces
through a unique index or a foreign key. Anything implementing
``RecordValidator`` runs purely in memory before a write is attempted.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol, Union, runtime_checkable

from ..db.errors import ConstraintKind
from .errors import RecordErrors

DEFAULT_UNIQUENESS_MESSAGE = "has already been taken"
DEFAULT_FOREIGN_KEY_MESSAGE = "must exist"
DEFAULT_PRESENCE_MESSAGE = "can't be blank"


def _as_names(value: str | Iterable[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class DbUniqueness:
    """Uniqueness of ``attributes`` (within ``scope``) backed by a unique index."""

    attributes: tuple[str, ...]
    scope: tuple[str, ...] = ()
    where: str | None = None
    index_name: str | None = None
    case_sensitive: bool | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        attributes = _as_names(self.attributes)
        scope = _as_names(self.scope)
        if not attributes:
            raise ValueError("DbUniqueness requires at least one attribute")
        overlap = set(attributes) & set(scope)
        if overlap:
            raise ValueError(f"scope must not repeat attributes: {sorted(overlap)}")
        object.__setattr__(self, "attributes", attributes)
        object.__setattr__(self, "scope", scope)

    @property
    def kind(self) -> ConstraintKind:
        return ConstraintKind.UNIQUENESS

    @property
    def columns(self) -> frozenset[str]:
        return frozenset(self.attributes + self.scope)

    @property
    def default_message(self) -> str:
        return DEFAULT_UNIQUENESS_MESSAGE


@dataclass(frozen=True)
class DbForeignKey:
    """Existence of the row referenced by ``attribute`` backed by a foreign key."""

    attribute: str
    message: str | None = None

    def __post_init__(self) -> None:
        if not self.attribute:
            raise ValueError("DbForeignKey requires an attribute")

    @property
    def kind(self) -> ConstraintKind:
        return ConstraintKind.FOREIGN_KEY

    @property
    def attributes(self) -> tuple[str, ...]:
        return (self.attribute,)

    @property
    def columns(self) -> frozenset[str]:
        return frozenset(self.attributes)

    @property
    def default_message(self) -> str:
        return DEFAULT_FOREIGN_KEY_MESSAGE


DatabaseValidator = Union[DbUniqueness, DbForeignKey]


@runtime_checkable
class RecordValidator(Protocol):
    def validate(self, record: Any, errors: RecordErrors) -> None: ...


class PresenceValidator:
    """Rejects None and blank strings."""

    def __init__(self, *attributes: str, message: str | None = None) -> None:
        if not attributes:
            raise ValueError("PresenceValidator requires at least one attribute")
        self.attributes = attributes
        self.message = message or DEFAULT_PRESENCE_MESSAGE

    def validate(self, record: Any, errors: RecordErrors) -> None:
        for attribute in self.attributes:
            value = getattr(record, attribute, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors.add(attribute, self.message, self)

    def __repr__(self) -> str:
        return f"PresenceValidator{self.attributes!r}"


def is_database_validator(validator: object) -> bool:
    return isinstance(validator, (DbUniqueness, DbForeignKey))


def validates_db_uniqueness_of(
    *attributes: str,
    scope: str | Iterable[str] | None = None,
    where: str | None = None,
    index_name: str | None = None,
    case_sensitive: bool | None = None,
    message: str | None = None,
) -> tuple[DbUniqueness, ...]:
    """One uniqueness rule per attribute, all sharing the same options."""
    if not attributes:
        raise ValueError("validates_db_uniqueness_of requires at least one attribute")
    return tuple(
        DbUniqueness(
            attributes=(attribute,),
            scope=_as_names(scope),
            where=where,
            index_name=index_name,
            case_sensitive=case_sensitive,
            message=message,
        )
        for attribute in attributes
    )


def db_belongs_to(*attributes: str, message: str | None = None) -> tuple[DbForeignKey, ...]:
    if not attributes:
        raise ValueError("db_belongs_to requires at least one attribute")
    return tuple(DbForeignKey(attribute=attribute, message=message) for attribute in attributes)
