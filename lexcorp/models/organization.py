"""
models/organization.py
----------------------
Organization (tenant) and its branch offices.

One organization per owning user, enforced by the unique user_id column.
Branch offices are created by the org admin; memberships, invites and
scoped resources reference them weakly (nullable, ON DELETE SET NULL).
"""

from enum import Enum as PyEnum

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lexcorp.db.base import Base, TimestampMixin, generate_uuid


class BillingPlan(str, PyEnum):
    monthly = "monthly"
    one_year = "1_year"
    two_year = "2_year"
    five_year = "5_year"


class Organization(Base, TimestampMixin):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    hq_location: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    plan: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BillingPlan.monthly.value
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name}>"


class BranchOffice(Base, TimestampMixin):
    __tablename__ = "branch_offices"
    __table_args__ = (
        UniqueConstraint("organization_id", "identifier", name="uq_branch_offices_org_identifier"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    identifier: Mapped[str] = mapped_column(String(64), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    headcount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<BranchOffice id={self.id} identifier={self.identifier}>"
