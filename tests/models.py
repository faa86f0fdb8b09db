"""SQLModel tables and validator declarations used across the tests."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func, text
from sqlmodel import Field, SQLModel

from db_validations import (
    PresenceValidator,
    ValidatorRegistry,
    db_belongs_to,
    validates_db_uniqueness_of,
)
from db_validations.validations import ConstraintResolver


class Author(SQLModel, table=True):
    """Author with several flavours of unique index."""

    __tablename__ = "authors"
    __table_args__ = (
        UniqueConstraint("tenant_id", "handle", name="uq_authors_tenant_handle"),
        Index(
            "ix_authors_nickname_active",
            "nickname",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    id: int | None = Field(default=None, sa_column=Column(Integer, primary_key=True))
    email: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True)
    )
    username: str | None = Field(default=None, sa_column=Column(String(30), nullable=True))
    tenant_id: int = Field(default=1, sa_column=Column(Integer, nullable=False))
    handle: str | None = Field(default=None, sa_column=Column(String(40), nullable=True))
    nickname: str | None = Field(default=None, sa_column=Column(String(40), nullable=True))
    # Unique in the database but deliberately never declared as a validator.
    legacy_code: str | None = Field(
        default=None, sa_column=Column(String(40), nullable=True, unique=True)
    )
    deleted_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )


Index("ix_authors_username_lower", func.lower(Author.__table__.c.username), unique=True)


class Post(SQLModel, table=True):
    """Post that must belong to an existing author."""

    __tablename__ = "posts"

    id: int | None = Field(default=None, sa_column=Column(Integer, primary_key=True))
    author_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("authors.id", name="fk_posts_author_id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    title: str | None = Field(default=None, sa_column=Column(String(120), nullable=False))


class Member(SQLModel, table=True):
    """Member whose uniqueness rule names its column index explicitly."""

    __tablename__ = "members"
    __table_args__ = (Index("ix_members_email", "email", unique=True),)

    id: int | None = Field(default=None, sa_column=Column(Integer, primary_key=True))
    email: str = Field(sa_column=Column(String(255), nullable=False))


registry = ValidatorRegistry(ConstraintResolver(strict=True))
registry.declare(
    Author,
    PresenceValidator("email"),
    validates_db_uniqueness_of("email"),
    validates_db_uniqueness_of(
        "username",
        index_name="ix_authors_username_lower",
        case_sensitive=False,
        message="is taken",
    ),
    validates_db_uniqueness_of("handle", scope="tenant_id"),
    validates_db_uniqueness_of("nickname", where="deleted_at IS NULL"),
)
registry.declare(Post, PresenceValidator("title"), db_belongs_to("author_id"))
registry.declare(Member, validates_db_uniqueness_of("email", index_name="ix_members_email"))
