"""
models/invite.py
----------------
Branch invitations.

State machine:  pending → accepted   (once; sets user_id + accepted_at)
                pending → revoked
accepted and revoked are terminal. invite_token is the only credential
needed to accept, so it is long, random and unique.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lexcorp.db.base import Base, TimestampMixin, generate_uuid


class InviteStatus(str, PyEnum):
    pending = "pending"
    accepted = "accepted"
    revoked = "revoked"


class BranchInvite(Base, TimestampMixin):
    __tablename__ = "branch_invites"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    branch_office_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("branch_offices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    invite_token: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=InviteStatus.pending.value
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    accepted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    organization: Mapped["Organization"] = relationship(  # noqa: F821
        "Organization", lazy="joined"
    )
    branch_office: Mapped["BranchOffice"] = relationship(  # noqa: F821
        "BranchOffice", lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<BranchInvite id={self.id} email={self.email} status={self.status}>"
