"""Save records with database-enforced validations.

``validate`` never writes: database validators fall back to read-only
existence queries. ``save`` skips those queries, attempts the write inside a
SAVEPOINT and lets the database decide, turning declared constraint
violations into ``RecordInvalid``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from sqlalchemy import and_, func, inspect as sa_inspect, literal, not_, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from ..core.config import settings
from ..db.errors import ConstraintViolation, classify_integrity_error
from .entries import DatabaseValidator, DbForeignKey, DbUniqueness
from .errors import RecordErrors
from .exceptions import RecordInvalid
from .registry import ValidatorRegistry
from .rescuer import Rescuer
from .resolver import table_for

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class WriteStatus(str, Enum):
    SUCCESS = "success"
    CONSTRAINT_VIOLATION = "constraint_violation"
    OTHER_ERROR = "other_error"


@dataclass(frozen=True)
class WriteResult:
    status: WriteStatus
    violation: ConstraintViolation | None = None
    error: IntegrityError | None = None


class RecordPersister:
    """Validates and persists records through one ``AsyncSession``."""

    def __init__(
        self,
        session: AsyncSession,
        registry: ValidatorRegistry,
        rescuer: Rescuer | None = None,
    ) -> None:
        self.session = session
        self.registry = registry
        self.rescuer = rescuer or Rescuer(registry)

    async def validate(self, record: Any) -> RecordErrors:
        errors = RecordErrors()
        await self._run_validations(record, errors, fallback=True)
        return errors

    async def is_valid(self, record: Any) -> bool:
        errors = await self.validate(record)
        return len(errors) == 0

    async def save(self, record: RecordT, *, validate: bool = True) -> RecordT:
        errors = RecordErrors()
        if validate:
            await self._run_validations(record, errors, fallback=False)
            if errors:
                raise RecordInvalid(record, errors)

        owns_transaction = not self.session.in_transaction()
        result = await self._attempt_write(record)
        if result.status is WriteStatus.SUCCESS:
            if owns_transaction:
                await self.session.commit()
            return record

        try:
            if result.status is WriteStatus.CONSTRAINT_VIOLATION and result.violation is not None:
                if await self.rescuer.handle(self.session, record, result.violation, errors):
                    raise RecordInvalid(record, errors)
            # Unmatched or unrelated integrity failures surface unchanged.
            raise result.error  # type: ignore[misc]
        finally:
            if owns_transaction:
                await self.session.rollback()

    async def try_save(self, record: Any, *, validate: bool = True) -> bool:
        try:
            await self.save(record, validate=validate)
        except RecordInvalid:
            return False
        return True

    async def _attempt_write(self, record: Any) -> WriteResult:
        try:
            async with self.session.begin_nested():
                self.session.add(record)
                await self.session.flush()
        except IntegrityError as exc:
            violation = classify_integrity_error(exc)
            if violation is None:
                return WriteResult(WriteStatus.OTHER_ERROR, error=exc)
            return WriteResult(WriteStatus.CONSTRAINT_VIOLATION, violation=violation, error=exc)
        return WriteResult(WriteStatus.SUCCESS)

    async def _run_validations(self, record: Any, errors: RecordErrors, *, fallback: bool) -> None:
        model = type(record)
        for validator in self.registry.record_validators(model):
            validator.validate(record, errors)
        if not fallback:
            return
        for db_validator in self.registry.validators_for(model):
            await self._fallback_check(record, db_validator, errors)

    async def _fallback_check(self, record: Any, validator: DatabaseValidator, errors: RecordErrors) -> None:
        if isinstance(validator, DbUniqueness):
            conflict = await self._uniqueness_conflict(record, validator)
        else:
            conflict = await self._foreign_key_missing(record, validator)
        if conflict:
            errors.add(validator.attributes[0], validator.message or validator.default_message, validator)

    async def _exists(self, statement: Any) -> bool:
        # Pending changes on the record must not be flushed by a read.
        with self.session.sync_session.no_autoflush:
            result = await self.session.execute(statement.limit(1))
        return result.first() is not None

    async def _uniqueness_conflict(self, record: Any, validator: DbUniqueness) -> bool:
        model = type(record)
        table = table_for(model)
        case_sensitive = validator.case_sensitive
        if case_sensitive is None:
            case_sensitive = settings.case_sensitive_default

        conditions: list[ColumnElement[bool]] = []
        for attribute in validator.attributes:
            value = getattr(record, attribute, None)
            if value is None:
                return False
            column = table.c[attribute]
            if not case_sensitive and isinstance(value, str):
                conditions.append(func.lower(column) == value.lower())
            else:
                conditions.append(column == value)
        for attribute in validator.scope:
            value = getattr(record, attribute, None)
            column = table.c[attribute]
            conditions.append(column.is_(None) if value is None else column == value)
        if validator.where:
            conditions.append(text(validator.where))

        state = sa_inspect(record)
        if state.has_identity:
            conditions.append(
                not_(
                    and_(
                        *(column == getattr(record, column.key) for column in table.primary_key.columns)
                    )
                )
            )

        statement = select(literal(1)).select_from(table).where(and_(*conditions))
        return await self._exists(statement)

    async def _foreign_key_missing(self, record: Any, validator: DbForeignKey) -> bool:
        value = getattr(record, validator.attribute, None)
        if value is None:
            return False
        target = self.registry.resolver.referenced_column(type(record), validator)
        if target is None:
            logger.debug("No referenced column known for %r; skipping fallback", validator)
            return False
        return not await self._exists(select(literal(1)).select_from(target.table).where(target == value))


__all__ = ["RecordPersister", "WriteResult", "WriteStatus"]
