"""Translate database constraint violations into validation failures."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.errors import ConstraintKind, ConstraintViolation
from .entries import DatabaseValidator, DbForeignKey
from .errors import RecordErrors
from .registry import ValidatorRegistry

logger = logging.getLogger(__name__)


class Rescuer:
    def __init__(self, registry: ValidatorRegistry) -> None:
        self.registry = registry

    async def handle(
        self,
        session: AsyncSession,
        record: Any,
        violation: ConstraintViolation,
        errors: RecordErrors,
    ) -> bool:
        """Attach a failure for the validator owning ``violation``.

        Returns False when no declared validator owns the violated constraint;
        the caller must then re-raise the original error.
        """
        model = type(record)
        validator = self.match(model, violation)
        if validator is None and violation.kind is ConstraintKind.FOREIGN_KEY and violation.identity.is_empty:
            validator = await self._find_missing_reference(session, record)

        if validator is None:
            logger.warning(
                "Unmatched %s violation on %s: %s",
                violation.kind.value,
                model.__name__,
                violation.raw_message,
            )
            return False

        attribute = validator.attributes[0]
        errors.add(attribute, validator.message or validator.default_message, validator)
        logger.info(
            "Reconciled %s violation on %s.%s",
            violation.kind.value,
            model.__name__,
            attribute,
        )
        return True

    def match(self, model: type, violation: ConstraintViolation) -> DatabaseValidator | None:
        """First validator, in declaration order, whose constraint was violated."""
        for validator in self.registry.validators_for(model):
            if self.registry.signature_for(model, validator).matches(violation):
                return validator
        return None

    async def _find_missing_reference(self, session: AsyncSession, record: Any) -> DbForeignKey | None:
        # SQLite reports foreign-key failures without naming the key.
        model = type(record)
        for validator in self.registry.validators_for(model):
            if not isinstance(validator, DbForeignKey):
                continue
            value = getattr(record, validator.attribute, None)
            if value is None:
                continue
            target = self.registry.resolver.referenced_column(model, validator)
            if target is None:
                continue
            logger.debug("Probing %s for %s=%r", target.table.name, validator.attribute, value)
            result = await session.execute(select(target).where(target == value).limit(1))
            if result.first() is None:
                return validator
        return None


__all__ = ["Rescuer"]
