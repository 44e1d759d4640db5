"""
models/vendor.py
----------------
Vendor registry. documents is a bounded embedded list of uploaded files
(see settings.VENDOR_MAX_DOCUMENTS).
"""

from typing import Optional

from sqlalchemy import JSON, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lexcorp.db.base import Base, ScopedMixin, TimestampMixin, generate_uuid


class Vendor(Base, TimestampMixin, ScopedMixin):
    __tablename__ = "vendors"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_vendors_org_name"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tin: Mapped[str] = mapped_column(String(64), nullable=False)
    contact_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    documents: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Vendor id={self.id} name={self.name}>"
