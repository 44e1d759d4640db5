"""
schemas/ai.py
-------------
Request/response models for the drafting assistant.
"""

from typing import Optional

from pydantic import BaseModel, Field

from lexcorp.models.agreement import RiskLevel


class ClauseContext(BaseModel):
    title: str = Field(default="", max_length=255, description="Agreement title")
    counterparty: str = Field(default="", max_length=255)
    type: Optional[str] = Field(default=None, max_length=100, examples=["Master Services Agreement"])


class ClauseRequest(BaseModel):
    section_title: str = Field(..., min_length=1, max_length=255, examples=["Limitation of Liability"])
    context: ClauseContext = Field(default_factory=ClauseContext)


class ClauseResponse(BaseModel):
    text: str
    mock: bool = False


class RiskRequest(BaseModel):
    text: str = Field(..., max_length=20000)


class RiskAnalysis(BaseModel):
    level: RiskLevel
    reason: str
