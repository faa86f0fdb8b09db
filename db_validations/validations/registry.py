"""Per-model validator table."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Union

from .entries import DatabaseValidator, RecordValidator, is_database_validator
from .exceptions import AmbiguousConstraintError
from .resolver import ConstraintResolver, ConstraintSignature

logger = logging.getLogger(__name__)

Declaration = Union[DatabaseValidator, RecordValidator]


class ValidatorRegistry:
    """Explicit table of validators per model class.

    Declarations are resolved against the model's table metadata as they are
    registered, so a missing index or two validators sharing one constraint
    fail at load time rather than on the first conflicting write. The table
    is append-only; entries keep declaration order.
    """

    def __init__(self, resolver: ConstraintResolver | None = None) -> None:
        self.resolver = resolver or ConstraintResolver()
        self._validators: dict[type, tuple[Declaration, ...]] = {}

    def declare(self, model: type, *validators: Declaration | Iterable[Declaration]) -> tuple[Declaration, ...]:
        flattened = tuple(_flatten(validators))
        for validator in flattened:
            if not (is_database_validator(validator) or isinstance(validator, RecordValidator)):
                raise TypeError(f"Unsupported validator declaration: {validator!r}")

        combined = self._validators.get(model, ()) + flattened
        self._check_unambiguous(model, combined)
        self._validators[model] = combined
        logger.debug("Declared %d validators on %s", len(flattened), model.__name__)
        return combined

    def _check_unambiguous(self, model: type, validators: tuple[Declaration, ...]) -> None:
        seen: dict[tuple[Any, ...], DatabaseValidator] = {}
        for validator in validators:
            if not is_database_validator(validator):
                continue
            signature = self.resolver.resolve(model, validator)
            previous = seen.get(signature.key)
            if previous is not None:
                raise AmbiguousConstraintError(model, previous, validator)
            seen[signature.key] = validator

    def all_validators(self, model: type) -> tuple[Declaration, ...]:
        return self._validators.get(model, ())

    def validators_for(self, model: type) -> tuple[DatabaseValidator, ...]:
        return tuple(v for v in self.all_validators(model) if is_database_validator(v))

    def record_validators(self, model: type) -> tuple[RecordValidator, ...]:
        return tuple(v for v in self.all_validators(model) if not is_database_validator(v))

    def signature_for(self, model: type, validator: DatabaseValidator) -> ConstraintSignature:
        return self.resolver.resolve(model, validator)

    def is_declared(self, model: type) -> bool:
        return model in self._validators


def _flatten(items: Iterable[Any]) -> Iterable[Any]:
    for item in items:
        if isinstance(item, (list, tuple)):
            yield from item
        else:
            yield item


__all__ = ["Declaration", "ValidatorRegistry"]
