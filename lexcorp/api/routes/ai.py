"""
api/routes/ai.py
----------------
Drafting assistant endpoints. Thin proxies to LLMService; calls are
tracked in MLflow.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from lexcorp.dependencies import get_llm_service, get_principal
from lexcorp.schemas.ai import ClauseRequest, ClauseResponse, RiskAnalysis, RiskRequest
from lexcorp.services.llm_service import LLMService
from lexcorp.services.principal import Principal

router = APIRouter(prefix="/ai", tags=["AI"])


@router.post("/clauses", response_model=ClauseResponse, summary="Draft a clause")
async def generate_clause(
    body: ClauseRequest,
    principal: Annotated[Principal, Depends(get_principal)],
    llm: Annotated[LLMService, Depends(get_llm_service)],
) -> ClauseResponse:
    text = await llm.generate_clause(
        body.section_title,
        body.context,
        organization_id=principal.organization_id,
        user_id=principal.user_id,
    )
    return ClauseResponse(text=text, mock=llm.mock)


@router.post("/risk", response_model=RiskAnalysis, summary="Score clause risk")
async def analyze_risk(
    body: RiskRequest,
    principal: Annotated[Principal, Depends(get_principal)],
    llm: Annotated[LLMService, Depends(get_llm_service)],
) -> RiskAnalysis:
    """Texts under 50 characters are reported Low without a model call."""
    return await llm.analyze_risk(
        body.text,
        organization_id=principal.organization_id,
        user_id=principal.user_id,
    )
