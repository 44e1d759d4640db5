"""
db/base.py
----------
Declarative base and shared mixins.

TimestampMixin: created_at / updated_at on every table. Values are set
                client-side so newest-first ordering stays stable within
                a single transaction, with a server default as fallback.
ScopedMixin:    organization_id (required) + branch_office_id (nullable).
                A null branch_office_id means "organization-wide"; a value
                means "owned by that branch". Every scoped resource uses it.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    return str(uuid.uuid4())


class TimestampMixin:

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )


class ScopedMixin:

    @declared_attr
    def organization_id(cls) -> Mapped[str]:
        return mapped_column(
            String(36),
            ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def branch_office_id(cls) -> Mapped[Optional[str]]:
        return mapped_column(
            String(36),
            ForeignKey("branch_offices.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        )
