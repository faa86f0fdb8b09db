"""Read-only view of declared database validators for test tooling."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..core.config import settings
from .entries import DatabaseValidator, DbForeignKey, DbUniqueness
from .registry import ValidatorRegistry


def validators_for(registry: ValidatorRegistry, model: type) -> tuple[DatabaseValidator, ...]:
    return registry.validators_for(model)


def _effective_case_sensitive(value: bool | None) -> bool:
    return settings.case_sensitive_default if value is None else value


def uniqueness_options(registry: ValidatorRegistry, model: type) -> list[dict[str, Any]]:
    """One mapping per uniqueness validator, in declaration order.

    ``case_sensitive`` reports the configured engine default when the
    validator left it unspecified.
    """
    return [
        {
            "field": validator.attributes[0],
            "attributes": list(validator.attributes),
            "scope": list(validator.scope),
            "where": validator.where,
            "message": validator.message,
            "index_name": validator.index_name,
            "case_sensitive": _effective_case_sensitive(validator.case_sensitive),
        }
        for validator in registry.validators_for(model)
        if isinstance(validator, DbUniqueness)
    ]


def foreign_key_options(registry: ValidatorRegistry, model: type) -> list[dict[str, Any]]:
    return [
        {"field": validator.attribute, "message": validator.message}
        for validator in registry.validators_for(model)
        if isinstance(validator, DbForeignKey)
    ]


def _expected_uniqueness(
    field: str,
    scope: str | Iterable[str] | None,
    where: str | None,
    message: str | None,
    index_name: str | None,
    case_sensitive: bool | None,
) -> dict[str, Any]:
    if scope is None:
        scope_list: list[str] = []
    elif isinstance(scope, str):
        scope_list = [scope]
    else:
        scope_list = list(scope)
    return {
        "field": field,
        "scope": scope_list,
        "where": where,
        "message": message,
        "index_name": index_name,
        "case_sensitive": _effective_case_sensitive(case_sensitive),
    }


def declares_db_uniqueness(
    registry: ValidatorRegistry,
    model: type,
    field: str,
    *,
    scope: str | Iterable[str] | None = None,
    where: str | None = None,
    message: str | None = None,
    index_name: str | None = None,
    case_sensitive: bool | None = None,
) -> bool:
    """True when ``model`` declares exactly this single-field uniqueness rule."""
    expected = _expected_uniqueness(field, scope, where, message, index_name, case_sensitive)
    for options in uniqueness_options(registry, model):
        if options["attributes"] != [field]:
            continue
        candidate = {key: options[key] for key in expected}
        if candidate == expected:
            return True
    return False


def describe_uniqueness(
    field: str,
    *,
    scope: str | Iterable[str] | None = None,
    where: str | None = None,
    message: str | None = None,
    index_name: str | None = None,
    case_sensitive: bool | None = None,
) -> str:
    expected = _expected_uniqueness(field, scope, where, message, index_name, case_sensitive)
    parts = [f"validate database uniqueness of {field}."]
    if message or expected["scope"] or where:
        parts.append("With options -")
    if message:
        parts.append(f"message: '{message}';")
    if expected["scope"]:
        parts.append(f"scope: {expected['scope']};")
    if where:
        parts.append(f"where: '{where}';")
    if index_name:
        parts.append(f"index_name: '{index_name}';")
    parts.append("be case sensitive." if expected["case_sensitive"] else "be case insensitive.")
    return " ".join(parts)


__all__ = [
    "declares_db_uniqueness",
    "describe_uniqueness",
    "foreign_key_options",
    "uniqueness_options",
    "validators_for",
]
