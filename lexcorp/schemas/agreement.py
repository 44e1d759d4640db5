"""
schemas/agreement.py
--------------------
Agreement payloads. sections, comments and audit_log travel as full lists:
the client sends the whole agreement on every save.
"""

from datetime import date, datetime
from enum import Enum as PyEnum
from typing import List, Optional

from pydantic import BaseModel, Field

from lexcorp.models.agreement import AgreementStatus, RiskLevel
from lexcorp.services.scope import ResourceScope


class ClauseType(str, PyEnum):
    standard = "standard"
    modified = "modified"
    custom = "custom"


class Clause(BaseModel):
    id: str
    title: str
    content: str = ""
    type: ClauseType = ClauseType.standard
    is_exception: bool = False


class Comment(BaseModel):
    id: str
    author: str
    text: str
    timestamp: datetime


class AuditEvent(BaseModel):
    id: str
    action: str
    user: str
    timestamp: datetime
    details: Optional[str] = None


class AgreementUpsert(BaseModel):
    """
    Full agreement body for PUT /agreements/{id}.

    scope / branch_office_id are honoured for org_admins only; branch
    members always save into their own branch.
    """
    title: str = Field(..., min_length=1, max_length=255)
    counterparty: str = Field(default="", max_length=255)
    department: Optional[str] = None
    owner: Optional[str] = None
    effective_date: Optional[date] = None
    renewal_date: Optional[date] = None
    value: float = Field(default=0, ge=0)
    risk_level: RiskLevel = RiskLevel.low
    status: AgreementStatus = AgreementStatus.draft
    sections: List[Clause] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    version: int = Field(default=1, ge=1)
    comments: List[Comment] = Field(default_factory=list)
    audit_log: List[AuditEvent] = Field(default_factory=list)
    project_id: Optional[str] = None
    scope: Optional[ResourceScope] = None
    branch_office_id: Optional[str] = None


class AgreementRead(BaseModel):
    id: str
    organization_id: str
    branch_office_id: Optional[str] = None
    project_id: Optional[str] = None
    owner_user_id: Optional[str] = None
    title: str
    counterparty: str
    department: Optional[str] = None
    owner: Optional[str] = None
    effective_date: Optional[date] = None
    renewal_date: Optional[date] = None
    value: float
    risk_level: RiskLevel
    status: AgreementStatus
    sections: List[Clause]
    tags: List[str]
    version: int
    comments: List[Comment]
    audit_log: List[AuditEvent]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssignProject(BaseModel):
    """project_id=None detaches the agreement from its project."""
    project_id: Optional[str] = None


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=4000)
