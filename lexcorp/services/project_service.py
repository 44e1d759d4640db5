"""
services/project_service.py
---------------------------
Projects group agreements. Reads are open to every member; writes are
limited to org_admins and branch_admins.
"""

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from lexcorp.core.logging import get_logger
from lexcorp.models.project import Project, ProjectStatus
from lexcorp.schemas.project import ProjectCreate, ProjectUpdate
from lexcorp.services.principal import Principal
from lexcorp.services.scope import (
    ResourceScope,
    ScopeParams,
    build_scope_query,
    ensure_visible,
    ensure_writable,
    resolve_write_branch,
)

logger = get_logger(__name__)


class ProjectService:

    @staticmethod
    async def list_projects(
        db: AsyncSession,
        principal: Principal,
        scope: Optional[ResourceScope] = None,
        branch_office_id: Optional[str] = None,
        statuses: Optional[Sequence[ProjectStatus]] = None,
    ) -> List[Project]:
        params = ScopeParams.for_principal(principal, scope, branch_office_id)
        stmt = build_scope_query(select(Project), Project, params)
        if statuses:
            stmt = stmt.where(Project.status.in_([s.value for s in statuses]))
        result = await db.execute(stmt.order_by(Project.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_project(db: AsyncSession, principal: Principal, project_id: str) -> Project:
        project = await db.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project not found")
        ensure_visible(principal, project)
        return project

    @staticmethod
    async def create_project(
        db: AsyncSession, principal: Principal, data: ProjectCreate
    ) -> Project:
        principal.require_manager()
        branch_office_id = await resolve_write_branch(
            db, principal, data.scope, data.branch_office_id
        )
        project = Project(
            organization_id=principal.organization_id,
            branch_office_id=branch_office_id,
            name=data.name.strip(),
            description=data.description,
            status=data.status.value,
            start_date=data.start_date,
            end_date=data.end_date,
            created_by=principal.user_id,
        )
        db.add(project)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Project '{data.name}' already exists")
        await db.refresh(project)
        logger.info(
            "Project created",
            project_id=project.id,
            branch_office_id=branch_office_id,
        )
        return project

    @staticmethod
    async def update_project(
        db: AsyncSession, principal: Principal, project_id: str, data: ProjectUpdate
    ) -> Project:
        principal.require_manager()
        project = await ProjectService.get_project(db, principal, project_id)
        ensure_writable(principal, project)

        changes = data.model_dump(exclude_unset=True)
        if "status" in changes and changes["status"] is not None:
            changes["status"] = changes["status"].value
        for field, value in changes.items():
            setattr(project, field, value)
        if project.start_date and project.end_date and project.end_date < project.start_date:
            raise InvalidInputError("end_date must not be before start_date")
        name = project.name

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Project '{name}' already exists")
        await db.refresh(project)
        logger.info("Project updated", project_id=project.id, fields=sorted(changes))
        return project

    @staticmethod
    async def update_status(
        db: AsyncSession, principal: Principal, project_id: str, status: ProjectStatus
    ) -> Project:
        return await ProjectService.update_project(
            db, principal, project_id, ProjectUpdate(status=status)
        )
