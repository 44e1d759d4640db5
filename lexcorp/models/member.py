"""
models/member.py
----------------
Binding of a user to an organization.

Role design:
  - org_admin:    sees and manages everything in the organization;
                  branch_office_id is always null.
  - branch_admin: manages resources and branch users of one branch.
  - branch_user:  works with agreements inside one branch.

Exactly one row per (user_id, organization_id). Rows are created at
signup (org_admin) or invite acceptance (branch roles) and are never
role-upgraded in place.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lexcorp.db.base import Base, TimestampMixin, generate_uuid


class MemberRole(str, PyEnum):
    org_admin = "org_admin"
    branch_admin = "branch_admin"
    branch_user = "branch_user"


class OrganizationMember(Base, TimestampMixin):
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_organization_members_user_org"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    branch_office_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("branch_offices.id", ondelete="SET NULL"),
        nullable=True,
    )
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    organization: Mapped["Organization"] = relationship(  # noqa: F821
        "Organization", lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<OrganizationMember user_id={self.user_id} role={self.role}>"
