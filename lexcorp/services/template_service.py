"""
services/template_service.py
----------------------------
Clause templates.

Visibility and branch_office_id always agree: 'organization' templates
have no branch, 'branch' templates have one. branch_admins can only ever
produce branch templates for their own branch, whatever they send.
"""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import InvalidInputError, NotFoundError
from lexcorp.core.logging import get_logger
from lexcorp.models.template import Template, TemplateVisibility
from lexcorp.schemas.template import TemplateCreate, TemplateUpdate
from lexcorp.services.principal import Principal
from lexcorp.services.scope import (
    ResourceScope,
    ScopeParams,
    build_scope_query,
    ensure_visible,
    ensure_writable,
    get_branch_office,
)

logger = get_logger(__name__)


async def resolve_template_visibility(
    db: AsyncSession,
    principal: Principal,
    visibility: Optional[TemplateVisibility],
    branch_office_id: Optional[str],
) -> Tuple[TemplateVisibility, Optional[str]]:
    if principal.is_branch_member:
        return TemplateVisibility.branch, principal.require_branch()
    if visibility is TemplateVisibility.branch:
        if not branch_office_id:
            raise InvalidInputError("Branch templates require a branch office")
        await get_branch_office(db, principal.organization_id, branch_office_id)
        return TemplateVisibility.branch, branch_office_id
    return TemplateVisibility.organization, None


class TemplateService:

    @staticmethod
    async def list_templates(
        db: AsyncSession,
        principal: Principal,
        scope: Optional[ResourceScope] = None,
        branch_office_id: Optional[str] = None,
    ) -> List[Template]:
        params = ScopeParams.for_principal(principal, scope, branch_office_id)
        stmt = build_scope_query(select(Template), Template, params)
        result = await db.execute(stmt.order_by(Template.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_template(db: AsyncSession, principal: Principal, template_id: str) -> Template:
        template = await db.get(Template, template_id)
        if template is None:
            raise NotFoundError("Template not found")
        ensure_visible(principal, template)
        return template

    @staticmethod
    async def create_template(
        db: AsyncSession, principal: Principal, data: TemplateCreate
    ) -> Template:
        principal.require_manager()
        visibility, branch_office_id = await resolve_template_visibility(
            db, principal, data.visibility, data.branch_office_id
        )
        template = Template(
            organization_id=principal.organization_id,
            branch_office_id=branch_office_id,
            name=data.name.strip(),
            description=data.description,
            visibility=visibility.value,
            sections=[s.model_dump() for s in data.sections],
            created_by=principal.user_id,
        )
        db.add(template)
        await db.flush()
        await db.refresh(template)
        logger.info(
            "Template created",
            template_id=template.id,
            visibility=template.visibility,
            branch_office_id=branch_office_id,
        )
        return template

    @staticmethod
    async def update_template(
        db: AsyncSession, principal: Principal, template_id: str, data: TemplateUpdate
    ) -> Template:
        principal.require_manager()
        template = await TemplateService.get_template(db, principal, template_id)
        ensure_writable(principal, template)

        changes = data.model_dump(exclude_unset=True)
        if "visibility" in changes or "branch_office_id" in changes:
            visibility, branch_office_id = await resolve_template_visibility(
                db,
                principal,
                data.visibility or TemplateVisibility(template.visibility),
                data.branch_office_id or template.branch_office_id,
            )
            template.visibility = visibility.value
            template.branch_office_id = branch_office_id
        if data.name is not None:
            template.name = data.name.strip()
        if "description" in changes:
            template.description = data.description
        if data.sections is not None:
            template.sections = [s.model_dump() for s in data.sections]

        await db.flush()
        await db.refresh(template)
        logger.info("Template updated", template_id=template.id, fields=sorted(changes))
        return template

    @staticmethod
    async def delete_template(db: AsyncSession, principal: Principal, template_id: str) -> None:
        principal.require_manager()
        template = await TemplateService.get_template(db, principal, template_id)
        ensure_writable(principal, template)
        await db.delete(template)
        await db.flush()
        logger.info("Template deleted", template_id=template_id)
