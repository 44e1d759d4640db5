"""
schemas/user.py
---------------
Pydantic models for sign-up, login, and user responses.

Security note:
  - hashed_password is NEVER included in any response schema.
  - Passwords require min 6 chars, matching the invite acceptance form.
"""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from lexcorp.models.organization import BillingPlan


class OrganizationProfile(BaseModel):
    """Organization details captured at sign-up or profile completion."""
    name: str = Field(..., min_length=2, max_length=255, examples=["Acme Legal LLP"])
    hq_location: str = Field(..., min_length=1, max_length=255, examples=["New York, NY"])
    plan: BillingPlan = BillingPlan.monthly

    @field_validator("name", "hq_location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    organization: OrganizationProfile


class UserRead(BaseModel):
    id: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserRead
