"""
models/user.py
--------------
Authentication principal.

A user is not bound to a tenant directly: the binding lives in
organization_members, which carries the role and branch assignment.
The hashed_password column stores bcrypt hashes only.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from lexcorp.db.base import Base, TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
