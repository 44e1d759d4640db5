"""
api/routes/organizations.py
---------------------------
Organization settings and branch offices.

PATCH /organization      Rename or change plan (org_admin).
GET   /branch-offices    org_admin: every branch; branch members: their own.
POST  /branch-offices    Create a branch office (org_admin).
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.db.session import get_db
from lexcorp.dependencies import get_principal, require_org_admin
from lexcorp.schemas.organization import (
    BranchOfficeCreate,
    BranchOfficeRead,
    OrganizationRead,
    OrganizationUpdate,
)
from lexcorp.services.organization_service import OrganizationService
from lexcorp.services.principal import Principal

router = APIRouter(tags=["Organization"])


@router.patch(
    "/organization",
    response_model=OrganizationRead,
    summary="Update organization name or plan",
)
async def update_organization(
    body: OrganizationUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_org_admin)],
) -> OrganizationRead:
    organization = await OrganizationService.update_organization(db, principal, body)
    return OrganizationRead.model_validate(organization)


@router.get(
    "/branch-offices",
    response_model=List[BranchOfficeRead],
    summary="List branch offices visible to the caller",
)
async def list_branch_offices(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
) -> List[BranchOfficeRead]:
    offices = await OrganizationService.list_branch_offices(db, principal)
    return [BranchOfficeRead.model_validate(o) for o in offices]


@router.post(
    "/branch-offices",
    response_model=BranchOfficeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a branch office",
)
async def create_branch_office(
    body: BranchOfficeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_org_admin)],
) -> BranchOfficeRead:
    office = await OrganizationService.create_branch_office(db, principal, body)
    return BranchOfficeRead.model_validate(office)
