"""
models/agreement.py
-------------------
Agreement ORM model.

sections, tags, comments and audit_log are embedded JSON collections owned
exclusively by the agreement. Every write re-serialises them in full; they
cannot be queried or paginated independently.

version is caller-managed. There is no optimistic concurrency check, so two
editors saving the same agreement overwrite each other (last write wins).
"""

from datetime import date
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lexcorp.db.base import Base, ScopedMixin, TimestampMixin, generate_uuid


class AgreementStatus(str, PyEnum):
    draft = "Draft"
    review = "Under Review"
    legal_review = "Legal Review"
    approved = "Approved"
    active = "Active"
    expired = "Expired"
    archived = "Archived"


class RiskLevel(str, PyEnum):
    low = "Low"
    medium = "Medium"
    high = "High"


class Agreement(Base, TimestampMixin, ScopedMixin):
    __tablename__ = "agreements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    project_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    owner_user_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    counterparty: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    effective_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    renewal_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    value: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    risk_level: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RiskLevel.low.value
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=AgreementStatus.draft.value
    )
    sections: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    comments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    audit_log: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Agreement id={self.id} title={self.title} status={self.status}>"
