"""
schemas/invite.py
-----------------
Branch invitation payloads.

InviteRead never exposes the raw token; pending invites carry the
shareable invite_link instead.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from lexcorp.core.security import build_invite_link
from lexcorp.models.invite import BranchInvite, InviteStatus
from lexcorp.models.member import MemberRole


class InviteCreate(BaseModel):
    email: EmailStr
    role: MemberRole = MemberRole.branch_user
    full_name: Optional[str] = Field(default=None, max_length=255)
    department: Optional[str] = Field(default=None, max_length=255)
    title: Optional[str] = Field(default=None, max_length=255)

    @field_validator("role")
    @classmethod
    def branch_roles_only(cls, v: MemberRole) -> MemberRole:
        if v is MemberRole.org_admin:
            raise ValueError("Invites can only grant branch_admin or branch_user")
        return v


class InviteRead(BaseModel):
    id: str
    organization_id: str
    branch_office_id: str
    email: str
    role: str
    full_name: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None
    contact_email: Optional[str] = None
    status: InviteStatus
    user_id: Optional[str] = None
    created_at: datetime
    accepted_at: Optional[datetime] = None
    invite_link: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_invite(cls, invite: BranchInvite):
        data = cls.model_validate(invite)
        if data.status is InviteStatus.pending:
            data.invite_link = build_invite_link(invite.invite_token)
        return data


class InviteCreated(InviteRead):
    """Returned from invite creation. email_sent=false means share the link manually."""
    email_sent: bool = False


class InviteDetails(BaseModel):
    """Public view of an invite, shown on the acceptance page."""
    id: str
    email: str
    role: str
    status: InviteStatus
    full_name: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None
    organization_name: Optional[str] = None
    branch_identifier: Optional[str] = None
    branch_location: Optional[str] = None

    @classmethod
    def from_invite(cls, invite: BranchInvite) -> "InviteDetails":
        return cls(
            id=invite.id,
            email=invite.email,
            role=invite.role,
            status=InviteStatus(invite.status),
            full_name=invite.full_name,
            department=invite.department,
            title=invite.title,
            organization_name=invite.organization.name if invite.organization else None,
            branch_identifier=invite.branch_office.identifier if invite.branch_office else None,
            branch_location=invite.branch_office.location if invite.branch_office else None,
        )


class InviteAccept(BaseModel):
    password: str = Field(..., min_length=6, max_length=128)
