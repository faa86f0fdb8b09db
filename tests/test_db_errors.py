"""Tests for IntegrityError classification and constraint identity extraction."""

from __future__ import annotations

from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError

from db_validations.db.errors import (
    ConstraintIdentity,
    ConstraintKind,
    classify_integrity_error,
    is_foreign_key_violation,
    is_unique_violation,
)


class FakePostgresError(Exception):
    def __init__(self, message: str, sqlstate: str, diag: object | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = diag


class FakeSqliteError(Exception):
    def __init__(self, message: str, errorname: str | None = None) -> None:
        super().__init__(message)
        self.sqlite_errorname = errorname


def _integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO authors", {}, orig)


def test_postgres_unique_violation_reports_name_and_columns() -> None:
    error = _integrity_error(
        FakePostgresError(
            'duplicate key value violates unique constraint "ix_authors_email"\n'
            "DETAIL:  Key (email)=(a@example.com) already exists.",
            "23505",
        )
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.UNIQUENESS
    assert violation.identity == ConstraintIdentity(
        name="ix_authors_email", columns=frozenset({"email"})
    )
    assert violation.error is error
    assert is_unique_violation(error)


def test_postgres_diag_takes_precedence_over_message_parsing() -> None:
    diag = SimpleNamespace(
        constraint_name="uq_authors_tenant_handle",
        table_name="authors",
        message_detail="Key (tenant_id, handle)=(1, bob) already exists.",
    )
    error = _integrity_error(FakePostgresError("duplicate key value", "23505", diag))

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.identity == ConstraintIdentity(
        table="authors",
        name="uq_authors_tenant_handle",
        columns=frozenset({"tenant_id", "handle"}),
    )


def test_postgres_foreign_key_violation() -> None:
    error = _integrity_error(
        FakePostgresError(
            'insert or update on table "posts" violates foreign key constraint '
            '"fk_posts_author_id"\nDETAIL:  Key (author_id)=(9) is not present in table "authors".',
            "23503",
        )
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.FOREIGN_KEY
    assert violation.identity.table == "posts"
    assert violation.identity.name == "fk_posts_author_id"
    assert violation.identity.columns == frozenset({"author_id"})
    assert is_foreign_key_violation(error)


def test_sqlite_unique_violation_reports_table_and_columns() -> None:
    error = _integrity_error(
        FakeSqliteError(
            "UNIQUE constraint failed: authors.tenant_id, authors.handle",
            "SQLITE_CONSTRAINT_UNIQUE",
        )
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.UNIQUENESS
    assert violation.identity == ConstraintIdentity(
        table="authors", columns=frozenset({"tenant_id", "handle"})
    )


def test_sqlite_expression_index_reports_index_name() -> None:
    error = _integrity_error(
        FakeSqliteError("UNIQUE constraint failed: index 'ix_authors_username_lower'")
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.identity == ConstraintIdentity(name="ix_authors_username_lower")


def test_sqlite_foreign_key_violation_has_no_identity() -> None:
    error = _integrity_error(
        FakeSqliteError("FOREIGN KEY constraint failed", "SQLITE_CONSTRAINT_FOREIGNKEY")
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.FOREIGN_KEY
    assert violation.identity.is_empty


def test_mysql_duplicate_entry_strips_table_prefix() -> None:
    error = _integrity_error(
        Exception(1062, "Duplicate entry 'a@example.com' for key 'authors.ix_authors_email'")
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.UNIQUENESS
    assert violation.identity == ConstraintIdentity(table="authors", name="ix_authors_email")


def test_mysql_foreign_key_violation() -> None:
    error = _integrity_error(
        Exception(
            1452,
            "Cannot add or update a child row: a foreign key constraint fails "
            "(`blog`.`posts`, CONSTRAINT `fk_posts_author_id` FOREIGN KEY (`author_id`) "
            "REFERENCES `authors` (`id`) ON DELETE CASCADE)",
        )
    )

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.FOREIGN_KEY
    assert violation.identity == ConstraintIdentity(
        table="posts", name="fk_posts_author_id", columns=frozenset({"author_id"})
    )


def test_not_null_failure_is_not_a_constraint_violation() -> None:
    error = _integrity_error(
        FakeSqliteError("NOT NULL constraint failed: posts.title", "SQLITE_CONSTRAINT_NOTNULL")
    )

    assert classify_integrity_error(error) is None
    assert not is_unique_violation(error)
    assert not is_foreign_key_violation(error)


def test_unknown_unique_message_without_identity() -> None:
    error = _integrity_error(Exception("forced commit failure: duplicate key"))

    violation = classify_integrity_error(error)

    assert violation is not None
    assert violation.kind is ConstraintKind.UNIQUENESS
    assert violation.identity.is_empty
