"""
services/agreement_service.py
-----------------------------
Agreement persistence.

The client owns the agreement document: every save sends the complete
record (sections, tags, comments, audit log) and it replaces what is
stored. version is whatever the client says. There is no concurrency
check, so the last save wins.

Status changes are not validated; any status may follow any other.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import NotFoundError
from lexcorp.core.logging import get_logger
from lexcorp.db.base import utcnow
from lexcorp.models.agreement import Agreement
from lexcorp.schemas.agreement import AgreementUpsert
from lexcorp.services.principal import Principal
from lexcorp.services.project_service import ProjectService
from lexcorp.services.scope import (
    ResourceScope,
    ScopeParams,
    build_scope_query,
    ensure_visible,
    ensure_writable,
    resolve_write_branch,
)

logger = get_logger(__name__)


def _audit_event(principal: Principal, action: str, details: Optional[str] = None) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "action": action,
        "user": principal.email,
        "timestamp": utcnow().isoformat(),
        "details": details,
    }


class AgreementService:

    @staticmethod
    async def list_agreements(
        db: AsyncSession,
        principal: Principal,
        scope: Optional[ResourceScope] = None,
        branch_office_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[Agreement]:
        params = ScopeParams.for_principal(principal, scope, branch_office_id)
        stmt = build_scope_query(select(Agreement), Agreement, params)
        if project_id:
            stmt = stmt.where(Agreement.project_id == project_id)
        result = await db.execute(stmt.order_by(Agreement.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def list_for_project(
        db: AsyncSession, principal: Principal, project_id: str
    ) -> List[Agreement]:
        await ProjectService.get_project(db, principal, project_id)
        return await AgreementService.list_agreements(db, principal, project_id=project_id)

    @staticmethod
    async def get_agreement(
        db: AsyncSession, principal: Principal, agreement_id: str
    ) -> Agreement:
        agreement = await db.get(Agreement, agreement_id)
        if agreement is None:
            raise NotFoundError("Agreement not found")
        ensure_visible(principal, agreement)
        return agreement

    @staticmethod
    async def upsert_agreement(
        db: AsyncSession,
        principal: Principal,
        agreement_id: str,
        data: AgreementUpsert,
    ) -> Agreement:
        """
        Create or fully replace the agreement with the client-supplied id.

        On create the branch comes from the write rule. On update an
        org_admin may re-scope the agreement by sending scope or
        branch_office_id; otherwise the stored branch is kept.
        """
        agreement = await db.get(Agreement, agreement_id)
        if agreement is None:
            branch_office_id = await resolve_write_branch(
                db, principal, data.scope, data.branch_office_id
            )
            agreement = Agreement(
                id=agreement_id,
                organization_id=principal.organization_id,
                branch_office_id=branch_office_id,
                owner_user_id=principal.user_id,
            )
            db.add(agreement)
            created = True
        else:
            ensure_writable(principal, agreement)
            if principal.is_org_admin and (data.scope is not None or data.branch_office_id):
                agreement.branch_office_id = await resolve_write_branch(
                    db, principal, data.scope, data.branch_office_id
                )
            created = False

        if data.project_id:
            await ProjectService.get_project(db, principal, data.project_id)

        agreement.project_id = data.project_id
        agreement.title = data.title
        agreement.counterparty = data.counterparty
        agreement.department = data.department
        agreement.owner = data.owner
        agreement.effective_date = data.effective_date
        agreement.renewal_date = data.renewal_date
        agreement.value = data.value
        agreement.risk_level = data.risk_level.value
        agreement.status = data.status.value
        agreement.version = data.version
        agreement.sections = [s.model_dump(mode="json") for s in data.sections]
        agreement.tags = list(data.tags)
        agreement.comments = [c.model_dump(mode="json") for c in data.comments]
        agreement.audit_log = [e.model_dump(mode="json") for e in data.audit_log]

        await db.flush()
        await db.refresh(agreement)
        logger.info(
            "Agreement created" if created else "Agreement saved",
            agreement_id=agreement.id,
            branch_office_id=agreement.branch_office_id,
            status=agreement.status,
            version=agreement.version,
        )
        return agreement

    @staticmethod
    async def assign_project(
        db: AsyncSession,
        principal: Principal,
        agreement_id: str,
        project_id: Optional[str],
    ) -> Agreement:
        agreement = await AgreementService.get_agreement(db, principal, agreement_id)
        ensure_writable(principal, agreement)

        if project_id:
            project = await ProjectService.get_project(db, principal, project_id)
            details = f"Assigned to project {project.name}"
        else:
            details = "Removed from project"

        agreement.project_id = project_id
        agreement.audit_log = list(agreement.audit_log or []) + [
            _audit_event(principal, "Project updated", details)
        ]
        await db.flush()
        await db.refresh(agreement)
        logger.info("Agreement project assigned", agreement_id=agreement.id, project_id=project_id)
        return agreement

    @staticmethod
    async def add_comment(
        db: AsyncSession, principal: Principal, agreement_id: str, text: str
    ) -> Agreement:
        """Any member who can see the agreement may comment on it."""
        agreement = await AgreementService.get_agreement(db, principal, agreement_id)
        comment = {
            "id": str(uuid.uuid4()),
            "author": principal.email,
            "text": text,
            "timestamp": utcnow().isoformat(),
        }
        # New lists so the JSON columns are flagged dirty.
        agreement.comments = list(agreement.comments or []) + [comment]
        agreement.audit_log = list(agreement.audit_log or []) + [
            _audit_event(principal, "Comment added", text[:120])
        ]
        await db.flush()
        await db.refresh(agreement)
        logger.info("Agreement comment added", agreement_id=agreement.id, comment_id=comment["id"])
        return agreement
