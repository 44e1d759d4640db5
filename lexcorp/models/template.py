"""
models/template.py
------------------
Clause templates. visibility mirrors branch_office_id:
'organization' templates have no branch, 'branch' templates have one.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lexcorp.db.base import Base, ScopedMixin, TimestampMixin, generate_uuid


class TemplateVisibility(str, PyEnum):
    organization = "organization"
    branch = "branch"


class Template(Base, TimestampMixin, ScopedMixin):
    __tablename__ = "templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TemplateVisibility.organization.value
    )
    sections: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Template id={self.id} name={self.name} visibility={self.visibility}>"
