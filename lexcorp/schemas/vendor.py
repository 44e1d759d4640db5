"""
schemas/vendor.py
-----------------
Vendor registry payloads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from lexcorp.services.scope import ResourceScope


class VendorDocument(BaseModel):
    id: str
    name: str
    url: str
    uploaded_at: datetime
    mime_type: Optional[str] = None


class VendorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Globex Supplies"])
    tin: str = Field(..., min_length=1, max_length=64, description="Tax identification number")
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    notes: Optional[str] = None
    scope: Optional[ResourceScope] = None
    branch_office_id: Optional[str] = None

    @field_validator("name", "tin")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class VendorUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    tin: Optional[str] = Field(default=None, min_length=1, max_length=64)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=64)
    notes: Optional[str] = None

    @field_validator("name", "tin")
    @classmethod
    def strip_required_text(cls, v: Optional[str]) -> str:
        # Omitted means unchanged; an explicit null would clear a required column.
        if v is None:
            raise ValueError("may be omitted but not null")
        return v.strip()


class VendorRead(BaseModel):
    id: str
    organization_id: str
    branch_office_id: Optional[str] = None
    name: str
    tin: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None
    documents: List[VendorDocument]
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
