"""
schemas/project.py
------------------
Project payloads.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from lexcorp.models.project import ProjectStatus
from lexcorp.services.scope import ResourceScope


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["Office Relocation 2026"])
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.active
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    scope: Optional[ResourceScope] = None
    branch_office_id: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "ProjectCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    # Omitted means unchanged; an explicit null would clear a required column.
    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v.strip()

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v: Optional[ProjectStatus]) -> ProjectStatus:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class ProjectRead(BaseModel):
    id: str
    organization_id: str
    branch_office_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    status: ProjectStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
