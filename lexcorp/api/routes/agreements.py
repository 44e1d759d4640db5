"""
api/routes/agreements.py
------------------------
Agreement endpoints. Available to every member; what each member sees is
decided by the branch scope rules in services/scope.py.

GET  /agreements                  List (newest first), optional scope / branch / project.
GET  /agreements/{id}             Fetch one agreement.
PUT  /agreements/{id}             Create or replace (client-generated id).
PUT  /agreements/{id}/project     Assign to a project, or detach with null.
POST /agreements/{id}/comments    Append a comment.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.db.session import get_db
from lexcorp.dependencies import get_principal
from lexcorp.schemas.agreement import (
    AgreementRead,
    AgreementUpsert,
    AssignProject,
    CommentCreate,
)
from lexcorp.services.agreement_service import AgreementService
from lexcorp.services.principal import Principal
from lexcorp.services.scope import ResourceScope

router = APIRouter(prefix="/agreements", tags=["Agreements"])


@router.get("", response_model=List[AgreementRead], summary="List agreements")
async def list_agreements(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
    scope: Optional[ResourceScope] = Query(default=None, description="org_admin only"),
    branch_office_id: Optional[str] = Query(default=None, description="org_admin only"),
    project_id: Optional[str] = Query(default=None),
) -> List[AgreementRead]:
    agreements = await AgreementService.list_agreements(
        db, principal, scope=scope, branch_office_id=branch_office_id, project_id=project_id
    )
    return [AgreementRead.model_validate(a) for a in agreements]


@router.get("/{agreement_id}", response_model=AgreementRead, summary="Get an agreement")
async def get_agreement(
    agreement_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
) -> AgreementRead:
    agreement = await AgreementService.get_agreement(db, principal, agreement_id)
    return AgreementRead.model_validate(agreement)


@router.put("/{agreement_id}", response_model=AgreementRead, summary="Save an agreement")
async def upsert_agreement(
    agreement_id: str,
    body: AgreementUpsert,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
) -> AgreementRead:
    agreement = await AgreementService.upsert_agreement(db, principal, agreement_id, body)
    return AgreementRead.model_validate(agreement)


@router.put(
    "/{agreement_id}/project",
    response_model=AgreementRead,
    summary="Assign an agreement to a project",
)
async def assign_project(
    agreement_id: str,
    body: AssignProject,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
) -> AgreementRead:
    agreement = await AgreementService.assign_project(db, principal, agreement_id, body.project_id)
    return AgreementRead.model_validate(agreement)


@router.post(
    "/{agreement_id}/comments",
    response_model=AgreementRead,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on an agreement",
)
async def add_comment(
    agreement_id: str,
    body: CommentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
) -> AgreementRead:
    agreement = await AgreementService.add_comment(db, principal, agreement_id, body.text)
    return AgreementRead.model_validate(agreement)
