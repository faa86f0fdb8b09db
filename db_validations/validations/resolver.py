"""Mapping between validator declarations and physical constraints."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Column, ForeignKeyConstraint, Index, PrimaryKeyConstraint, Table, UniqueConstraint

from ..core.config import settings
from ..db.errors import ConstraintKind, ConstraintViolation
from .entries import DatabaseValidator, DbForeignKey, DbUniqueness
from .exceptions import ConfigurationError, IndexNotFoundError

logger = logging.getLogger(__name__)

_WHERE_NOISE = re.compile(r"[\s()\"`]")
_WHERE_DIALECT_KWARGS = ("sqlite_where", "postgresql_where", "mssql_where")


@dataclass(frozen=True)
class ConstraintSignature:
    """Identity of the physical constraint that enforces one validator.

    When both the signature and the violation carry a constraint name, only
    the names are compared. Column sets are compared when either side has no
    name. An explicit ``index_name`` the table metadata does not describe
    has an empty column set and therefore matches by name alone.
    """

    table: str
    kind: ConstraintKind
    columns: frozenset[str]
    name: str | None = None
    explicit: bool = False

    @property
    def key(self) -> tuple[Any, ...]:
        if self.name is not None:
            return (self.table, self.kind, self.name)
        return (self.table, self.kind, self.columns)

    def matches(self, violation: ConstraintViolation) -> bool:
        if violation.kind is not self.kind:
            return False
        identity = violation.identity
        if identity.table is not None and identity.table != self.table:
            return False
        if identity.name is not None and self.name is not None:
            return identity.name == self.name
        if identity.columns and self.columns:
            return identity.columns == self.columns
        return False


@dataclass(frozen=True)
class _UniqueCandidate:
    name: str | None
    columns: frozenset[str]
    where: str | None


def normalize_where(where: Any, table_name: str | None = None) -> str | None:
    """Reduce a partial-index predicate to a comparable form.

    Whitespace, quoting, parentheses and table qualifiers are dropped and the
    result is lower-cased. Equal output does not prove equal predicates; this
    is only used to pick between indexes on the same columns.
    """
    if where is None:
        return None
    text = str(where)
    if table_name:
        text = text.replace(f"{table_name}.", "")
    normalized = _WHERE_NOISE.sub("", text).lower()
    return normalized or None


def table_for(model: type) -> Table:
    table = getattr(model, "__table__", None)
    if not isinstance(table, Table):
        raise ConfigurationError(f"{model!r} is not a mapped table model")
    return table


def _index_where(index: Index) -> Any:
    for key in _WHERE_DIALECT_KWARGS:
        value = index.dialect_kwargs.get(key)
        if value is not None:
            return value
    return None


def _unique_candidates(table: Table) -> Iterator[_UniqueCandidate]:
    for index in table.indexes:
        if not index.unique:
            continue
        columns = frozenset(column.name for column in index.columns)
        if not columns:
            continue
        yield _UniqueCandidate(
            name=index.name if isinstance(index.name, str) else None,
            columns=columns,
            where=normalize_where(_index_where(index), table.name),
        )
    for constraint in table.constraints:
        if isinstance(constraint, (UniqueConstraint, PrimaryKeyConstraint)):
            columns = frozenset(column.name for column in constraint.columns)
            if not columns:
                continue
            yield _UniqueCandidate(
                name=constraint.name if isinstance(constraint.name, str) else None,
                columns=columns,
                where=None,
            )


class ConstraintResolver:
    """Resolves validators to ``ConstraintSignature`` values from table metadata.

    Results are cached per (model, validator), so repeated calls return the
    same signature object.
    """

    def __init__(self, *, strict: bool | None = None) -> None:
        self._strict = strict
        self._cache: dict[tuple[type, DatabaseValidator], ConstraintSignature] = {}

    @property
    def strict(self) -> bool:
        if self._strict is None:
            return settings.strict_index_lookup
        return self._strict

    def resolve(self, model: type, validator: DatabaseValidator) -> ConstraintSignature:
        cache_key = (model, validator)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        if isinstance(validator, DbUniqueness):
            signature = self._resolve_uniqueness(model, validator)
        elif isinstance(validator, DbForeignKey):
            signature = self._resolve_foreign_key(model, validator)
        else:
            raise TypeError(f"Cannot resolve a constraint for {validator!r}")

        logger.debug("Resolved %r on %s to %r", validator, model.__name__, signature)
        self._cache[cache_key] = signature
        return signature

    def _resolve_uniqueness(self, model: type, validator: DbUniqueness) -> ConstraintSignature:
        table = table_for(model)
        if validator.index_name is not None:
            named = [c for c in _unique_candidates(table) if c.name == validator.index_name]
            return ConstraintSignature(
                table=table.name,
                kind=ConstraintKind.UNIQUENESS,
                columns=named[0].columns if named else frozenset(),
                name=validator.index_name,
                explicit=True,
            )

        wanted_where = normalize_where(validator.where, table.name)
        for candidate in _unique_candidates(table):
            if candidate.columns == validator.columns and candidate.where == wanted_where:
                return ConstraintSignature(
                    table=table.name,
                    kind=ConstraintKind.UNIQUENESS,
                    columns=validator.columns,
                    name=candidate.name,
                )

        if self.strict:
            raise IndexNotFoundError(model, validator, validator.columns)
        return ConstraintSignature(
            table=table.name,
            kind=ConstraintKind.UNIQUENESS,
            columns=validator.columns,
        )

    def _find_foreign_key(self, model: type, validator: DbForeignKey) -> ForeignKeyConstraint | None:
        table = table_for(model)
        for constraint in table.foreign_key_constraints:
            columns = frozenset(column.name for column in constraint.columns)
            if columns == validator.columns:
                return constraint
        return None

    def _resolve_foreign_key(self, model: type, validator: DbForeignKey) -> ConstraintSignature:
        table = table_for(model)
        constraint = self._find_foreign_key(model, validator)
        if constraint is None and self.strict:
            raise IndexNotFoundError(model, validator, validator.columns)
        name = None
        if constraint is not None and isinstance(constraint.name, str):
            name = constraint.name
        return ConstraintSignature(
            table=table.name,
            kind=ConstraintKind.FOREIGN_KEY,
            columns=validator.columns,
            name=name,
        )

    def referenced_column(self, model: type, validator: DbForeignKey) -> Column[Any] | None:
        """The column a foreign-key validator points at, if the metadata knows it."""
        constraint = self._find_foreign_key(model, validator)
        if constraint is None or not constraint.elements:
            return None
        return constraint.elements[0].column


__all__ = ["ConstraintResolver", "ConstraintSignature", "normalize_where", "table_for"]
