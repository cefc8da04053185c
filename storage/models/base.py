"""
Base ORM Model and Mixins.

============================================================
PURPOSE
============================================================
Provides the declarative base and common mixins used by all
ORM models of the analytics record store.

============================================================
COMPONENTS
============================================================
- Base: SQLAlchemy declarative base for all models
- UuidPrimaryKeyMixin: Portable UUID primary key
- CreatedAtMixin: Insert timestamp column

Column types are dialect-neutral (Uuid, JSON) so the same
models run on PostgreSQL and on SQLite in tests.

============================================================
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all ORM models.

    Every datetime column is timezone-aware.
    """

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class UuidPrimaryKeyMixin:
    """Adds an `id` UUID primary key generated client-side."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier"
    )


class CreatedAtMixin:
    """
    Mixin providing the insert timestamp.

    Usage:
        class MyModel(UuidPrimaryKeyMixin, CreatedAtMixin, Base):
            __tablename__ = "my_table"
            ...
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Record creation timestamp (UTC)"
    )
