"""Database error helpers.

Classifies ``IntegrityError`` instances raised by the supported drivers into
uniqueness / foreign-key violations and extracts whatever identity of the
violated constraint the driver reports (name, column list, table).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy.exc import IntegrityError

PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"
SQLITE_UNIQUE_ERRORNAMES = frozenset(
    {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
)
SQLITE_FOREIGN_KEY_ERRORNAME = "SQLITE_CONSTRAINT_FOREIGNKEY"
MYSQL_DUPLICATE_ENTRY = 1062
MYSQL_FOREIGN_KEY_ERRNOS = frozenset({1216, 1217, 1451, 1452})

_PG_CONSTRAINT = re.compile(r'constraint "(?P<name>[^"]+)"')
_PG_KEY_DETAIL = re.compile(r"Key \((?P<columns>.+?)\)=\(")
_PG_TABLE = re.compile(r'on table "(?P<table>[^"]+)"')
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<target>.+)$", re.MULTILINE)
_SQLITE_INDEX = re.compile(r"^index '(?P<name>[^']+)'$")
_MYSQL_DUPLICATE_KEY = re.compile(r"for key '(?P<key>[^']+)'")
_MYSQL_FOREIGN_KEY = re.compile(
    r"\(`[^`]+`\.`(?P<table>[^`]+)`, CONSTRAINT `(?P<name>[^`]+)` "
    r"FOREIGN KEY \((?P<columns>[^)]+)\)"
)


class ConstraintKind(str, Enum):
    UNIQUENESS = "uniqueness"
    FOREIGN_KEY = "foreign_key"


@dataclass(frozen=True)
class ConstraintIdentity:
    """What the driver told us about the violated constraint."""

    table: str | None = None
    name: str | None = None
    columns: frozenset[str] | None = None

    @property
    def is_empty(self) -> bool:
        return self.name is None and not self.columns


@dataclass(frozen=True)
class ConstraintViolation:
    """A classified uniqueness or foreign-key failure from a single write."""

    kind: ConstraintKind
    identity: ConstraintIdentity
    raw_message: str
    error: IntegrityError


def _original(error: IntegrityError) -> Any:
    return getattr(error, "orig", None)


def _sqlstate(original: Any) -> str | None:
    return getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)


def _mysql_errno(original: Any) -> int | None:
    args = getattr(original, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


def _message(error: IntegrityError) -> str:
    original = _original(error)
    return str(original if original is not None else error)


def violation_kind(error: IntegrityError) -> ConstraintKind | None:
    """Return the violation kind, or None for other integrity failures."""
    original = _original(error)
    sqlstate = _sqlstate(original)
    if sqlstate == PG_UNIQUE_VIOLATION:
        return ConstraintKind.UNIQUENESS
    if sqlstate == PG_FOREIGN_KEY_VIOLATION:
        return ConstraintKind.FOREIGN_KEY

    errorname = getattr(original, "sqlite_errorname", None)
    if errorname in SQLITE_UNIQUE_ERRORNAMES:
        return ConstraintKind.UNIQUENESS
    if errorname == SQLITE_FOREIGN_KEY_ERRORNAME:
        return ConstraintKind.FOREIGN_KEY

    errno = _mysql_errno(original)
    if errno == MYSQL_DUPLICATE_ENTRY:
        return ConstraintKind.UNIQUENESS
    if errno in MYSQL_FOREIGN_KEY_ERRNOS:
        return ConstraintKind.FOREIGN_KEY

    message = _message(error).lower()
    if "foreign key constraint" in message:
        return ConstraintKind.FOREIGN_KEY
    if (
        "duplicate key" in message
        or "unique constraint" in message
        or "duplicate entry" in message
    ):
        return ConstraintKind.UNIQUENESS
    return None


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    return violation_kind(error) is ConstraintKind.UNIQUENESS


def is_foreign_key_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a missing referenced row."""
    return violation_kind(error) is ConstraintKind.FOREIGN_KEY


def _split_columns(raw: str) -> frozenset[str]:
    return frozenset(part.strip().strip('`"') for part in raw.split(",") if part.strip())


def _postgres_identity(original: Any, message: str) -> ConstraintIdentity | None:
    diag = getattr(original, "diag", None)
    cause = getattr(original, "__cause__", None)
    name = getattr(diag, "constraint_name", None) or getattr(cause, "constraint_name", None)
    table = getattr(diag, "table_name", None) or getattr(cause, "table_name", None)
    detail = getattr(diag, "message_detail", None) or getattr(cause, "detail", None) or message

    if name is None:
        match = _PG_CONSTRAINT.search(message)
        if match is None:
            return None
        name = match.group("name")
    if table is None:
        table_match = _PG_TABLE.search(message)
        table = table_match.group("table") if table_match else None

    columns = None
    key_match = _PG_KEY_DETAIL.search(detail)
    if key_match is not None:
        columns = _split_columns(key_match.group("columns"))
    return ConstraintIdentity(table=table, name=name, columns=columns)


def _sqlite_identity(message: str) -> ConstraintIdentity | None:
    match = _SQLITE_UNIQUE.search(message)
    if match is None:
        return None
    target = match.group("target").strip()
    index_match = _SQLITE_INDEX.match(target)
    if index_match is not None:
        return ConstraintIdentity(name=index_match.group("name"))

    tables: set[str] = set()
    columns: set[str] = set()
    for qualified in target.split(","):
        table, _, column = qualified.strip().rpartition(".")
        if table:
            tables.add(table)
        columns.add(column)
    table_name = tables.pop() if len(tables) == 1 else None
    return ConstraintIdentity(table=table_name, columns=frozenset(columns))


def _mysql_identity(message: str) -> ConstraintIdentity | None:
    fk_match = _MYSQL_FOREIGN_KEY.search(message)
    if fk_match is not None:
        return ConstraintIdentity(
            table=fk_match.group("table"),
            name=fk_match.group("name"),
            columns=_split_columns(fk_match.group("columns")),
        )
    key_match = _MYSQL_DUPLICATE_KEY.search(message)
    if key_match is not None:
        table, _, name = key_match.group("key").rpartition(".")
        return ConstraintIdentity(table=table or None, name=name)
    return None


def extract_identity(error: IntegrityError) -> ConstraintIdentity:
    """Best-effort identity of the violated constraint; empty when unknown."""
    original = _original(error)
    message = _message(error)
    for identity in (
        _sqlite_identity(message),
        _mysql_identity(message),
        _postgres_identity(original, message),
    ):
        if identity is not None:
            return identity
    return ConstraintIdentity()


def classify_integrity_error(error: IntegrityError) -> ConstraintViolation | None:
    """Turn an IntegrityError into a ConstraintViolation, or None if unrelated."""
    kind = violation_kind(error)
    if kind is None:
        return None
    return ConstraintViolation(
        kind=kind,
        identity=extract_identity(error),
        raw_message=_message(error),
        error=error,
    )


__all__ = [
    "ConstraintIdentity",
    "ConstraintKind",
    "ConstraintViolation",
    "classify_integrity_error",
    "extract_identity",
    "is_foreign_key_violation",
    "is_unique_violation",
    "violation_kind",
]
