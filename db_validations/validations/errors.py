"""Per-record validation error collection."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ValidationFailure:
    attribute: str
    message: str
    validator: Any = None


class RecordErrors:
    """Ordered collection of validation failures for one record."""

    def __init__(self) -> None:
        self._failures: list[ValidationFailure] = []

    def add(self, attribute: str, message: str, validator: Any = None) -> ValidationFailure:
        failure = ValidationFailure(attribute=attribute, message=message, validator=validator)
        self._failures.append(failure)
        return failure

    def on(self, attribute: str) -> list[str]:
        return [failure.message for failure in self._failures if failure.attribute == attribute]

    @property
    def failures(self) -> tuple[ValidationFailure, ...]:
        return tuple(self._failures)

    def full_messages(self) -> list[str]:
        return [f"{failure.attribute} {failure.message}" for failure in self._failures]

    def to_dict(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for failure in self._failures:
            grouped.setdefault(failure.attribute, []).append(failure.message)
        return grouped

    def clear(self) -> None:
        self._failures.clear()

    def __iter__(self) -> Iterator[ValidationFailure]:
        return iter(self._failures)

    def __len__(self) -> int:
        return len(self._failures)

    def __repr__(self) -> str:
        return f"RecordErrors({self.to_dict()!r})"
