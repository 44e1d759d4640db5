"""
api/routes/templates.py
-----------------------
Clause templates. Every member can read; org_admins and branch_admins write.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.db.session import get_db
from lexcorp.dependencies import get_principal, require_manager
from lexcorp.schemas.template import TemplateCreate, TemplateRead, TemplateUpdate
from lexcorp.services.principal import Principal
from lexcorp.services.scope import ResourceScope
from lexcorp.services.template_service import TemplateService

router = APIRouter(prefix="/templates", tags=["Templates"])


@router.get("", response_model=List[TemplateRead], summary="List templates")
async def list_templates(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
    scope: Optional[ResourceScope] = Query(default=None),
    branch_office_id: Optional[str] = Query(default=None),
) -> List[TemplateRead]:
    templates = await TemplateService.list_templates(db, principal, scope, branch_office_id)
    return [TemplateRead.model_validate(t) for t in templates]


@router.post(
    "",
    response_model=TemplateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a template",
)
async def create_template(
    body: TemplateCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> TemplateRead:
    """branch_admins always get a branch template for their own branch."""
    template = await TemplateService.create_template(db, principal, body)
    return TemplateRead.model_validate(template)


@router.patch("/{template_id}", response_model=TemplateRead, summary="Update a template")
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> TemplateRead:
    template = await TemplateService.update_template(db, principal, template_id, body)
    return TemplateRead.model_validate(template)


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a template",
)
async def delete_template(
    template_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> Response:
    await TemplateService.delete_template(db, principal, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
