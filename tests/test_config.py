"""Tests for settings and logging setup."""

import logging

import pytest

from db_validations.core import Settings, configure_logging


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("DB_VALIDATIONS_CASE_SENSITIVE_DEFAULT", "false")
    monkeypatch.setenv("DB_VALIDATIONS_STRICT_INDEX_LOOKUP", "0")

    loaded = Settings()

    assert loaded.case_sensitive_default is False
    assert loaded.strict_index_lookup is False


def test_configure_logging_sets_package_level() -> None:
    logger = configure_logging("debug")

    assert logger.name == "db_validations"
    assert logger.level == logging.DEBUG
    configure_logging("info")


def test_configure_logging_rejects_unknown_level() -> None:
    with pytest.raises(ValueError):
        configure_logging("loud")
