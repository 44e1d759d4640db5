"""
schemas/template.py
-------------------
Clause template payloads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from lexcorp.models.template import TemplateVisibility


class TemplateSection(BaseModel):
    id: str
    title: str
    content: str = ""
    required: bool = False


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Mutual NDA"])
    description: Optional[str] = None
    visibility: TemplateVisibility = TemplateVisibility.organization
    sections: List[TemplateSection] = Field(default_factory=list)
    # Target branch for org_admins creating branch templates.
    branch_office_id: Optional[str] = None


class TemplateUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    visibility: Optional[TemplateVisibility] = None
    sections: Optional[List[TemplateSection]] = None
    branch_office_id: Optional[str] = None


class TemplateRead(BaseModel):
    id: str
    organization_id: str
    branch_office_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    visibility: TemplateVisibility
    sections: List[TemplateSection]
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
