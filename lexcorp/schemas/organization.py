"""
schemas/organization.py
-----------------------
Organization, branch office, membership and session payloads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from lexcorp.models.organization import BillingPlan
from lexcorp.schemas.user import UserRead


class OrganizationRead(BaseModel):
    id: str
    user_id: str
    name: str
    hq_location: str
    plan: BillingPlan
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationUpdate(BaseModel):
    """Only name and plan are editable after creation."""
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    plan: Optional[BillingPlan] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class BranchOfficeCreate(BaseModel):
    identifier: str = Field(..., min_length=1, max_length=64, examples=["NYC-01"])
    location: str = Field(..., min_length=1, max_length=255, examples=["New York, NY"])
    headcount: int = Field(default=0, ge=0)

    @field_validator("identifier", "location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class BranchOfficeRead(BaseModel):
    id: str
    organization_id: str
    identifier: str
    location: str
    headcount: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MembershipRead(BaseModel):
    id: str
    organization_id: str
    user_id: str
    role: str
    branch_office_id: Optional[str] = None
    department: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SessionRead(BaseModel):
    """
    Everything the web client needs to render navigation for the signed-in
    user. needs_onboarding is true when the user has neither a membership
    nor an organization of their own.
    """
    user: UserRead
    organization: Optional[OrganizationRead] = None
    membership: Optional[MembershipRead] = None
    is_org_admin: bool = False
    is_branch_admin: bool = False
    # Branch role without an assigned branch: can sign in, cannot manage resources.
    branch_locked: bool = False
    branch_office_id: Optional[str] = None
    needs_onboarding: bool = True
    permitted_views: List[str] = Field(default_factory=list)
