"""
api/routes/projects.py
----------------------
Projects and their agreements.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.db.session import get_db
from lexcorp.dependencies import get_principal, require_manager
from lexcorp.models.project import ProjectStatus
from lexcorp.schemas.agreement import AgreementRead
from lexcorp.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate
from lexcorp.services.agreement_service import AgreementService
from lexcorp.services.principal import Principal
from lexcorp.services.project_service import ProjectService
from lexcorp.services.scope import ResourceScope

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=List[ProjectRead], summary="List projects")
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
    scope: Optional[ResourceScope] = Query(default=None),
    branch_office_id: Optional[str] = Query(default=None),
    status_in: Optional[List[ProjectStatus]] = Query(
        default=None, alias="status", description="Repeat to filter by several statuses"
    ),
) -> List[ProjectRead]:
    projects = await ProjectService.list_projects(
        db, principal, scope, branch_office_id, statuses=status_in
    )
    return [ProjectRead.model_validate(p) for p in projects]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    body: ProjectCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> ProjectRead:
    project = await ProjectService.create_project(db, principal, body)
    return ProjectRead.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update a project")
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> ProjectRead:
    project = await ProjectService.update_project(db, principal, project_id, body)
    return ProjectRead.model_validate(project)


@router.get(
    "/{project_id}/agreements",
    response_model=List[AgreementRead],
    summary="Agreements assigned to a project",
)
async def list_project_agreements(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
) -> List[AgreementRead]:
    agreements = await AgreementService.list_for_project(db, principal, project_id)
    return [AgreementRead.model_validate(a) for a in agreements]
