"""Agreements and projects under branch scoping."""

import uuid

import pytest
from pydantic import ValidationError

from lexcorp.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from lexcorp.models.agreement import AgreementStatus
from lexcorp.models.project import ProjectStatus
from lexcorp.schemas.agreement import AgreementUpsert, Clause
from lexcorp.schemas.project import ProjectCreate, ProjectUpdate
from lexcorp.services.agreement_service import AgreementService
from lexcorp.services.project_service import ProjectService
from lexcorp.services.scope import ResourceScope

from conftest import create_organization


def new_id() -> str:
    return str(uuid.uuid4())


def body(**overrides) -> AgreementUpsert:
    data = {
        "title": "Master Services Agreement",
        "counterparty": "Initech",
        "value": 125000,
        "sections": [Clause(id="c1", title="Payment Terms", content="Net 30")],
        "tags": ["services"],
    }
    data.update(overrides)
    return AgreementUpsert(**data)


# ── Agreements ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_branch_user_agreement_is_saved_into_own_branch(db, workspace):
    agreement = await AgreementService.upsert_agreement(
        db,
        workspace.nyc_user,
        new_id(),
        body(scope=ResourceScope.organization, branch_office_id=workspace.sfo.id),
    )
    assert agreement.branch_office_id == workspace.nyc.id
    assert agreement.owner_user_id == workspace.nyc_user.user_id
    assert agreement.status == AgreementStatus.draft.value
    assert agreement.sections[0]["title"] == "Payment Terms"


@pytest.mark.asyncio
async def test_org_admin_agreement_defaults_to_org_wide(db, workspace):
    agreement = await AgreementService.upsert_agreement(db, workspace.org_admin, new_id(), body())
    assert agreement.branch_office_id is None
    assert agreement.organization_id == workspace.organization.id


@pytest.mark.asyncio
async def test_upsert_replaces_the_stored_record(db, workspace):
    agreement_id = new_id()
    await AgreementService.upsert_agreement(db, workspace.nyc_user, agreement_id, body())
    saved = await AgreementService.upsert_agreement(
        db,
        workspace.nyc_user,
        agreement_id,
        body(status=AgreementStatus.legal_review, version=2, tags=[], sections=[]),
    )
    assert saved.id == agreement_id
    assert saved.status == AgreementStatus.legal_review.value
    assert saved.version == 2
    assert saved.tags == []
    assert saved.sections == []
    assert saved.branch_office_id == workspace.nyc.id


@pytest.mark.asyncio
async def test_other_branch_cannot_see_or_save_agreement(db, workspace):
    agreement_id = new_id()
    await AgreementService.upsert_agreement(db, workspace.nyc_user, agreement_id, body())

    with pytest.raises(NotFoundError):
        await AgreementService.get_agreement(db, workspace.sfo_admin, agreement_id)
    with pytest.raises(NotFoundError):
        await AgreementService.upsert_agreement(db, workspace.sfo_admin, agreement_id, body())

    listed = await AgreementService.list_agreements(db, workspace.sfo_admin)
    assert listed == []


@pytest.mark.asyncio
async def test_org_admin_can_rescope_existing_agreement(db, workspace):
    agreement_id = new_id()
    await AgreementService.upsert_agreement(db, workspace.nyc_user, agreement_id, body())
    moved = await AgreementService.upsert_agreement(
        db,
        workspace.org_admin,
        agreement_id,
        body(scope=ResourceScope.branch, branch_office_id=workspace.sfo.id),
    )
    assert moved.branch_office_id == workspace.sfo.id
    assert moved.owner_user_id == workspace.nyc_user.user_id


@pytest.mark.asyncio
async def test_comment_appends_comment_and_audit_event(db, workspace):
    agreement_id = new_id()
    await AgreementService.upsert_agreement(db, workspace.nyc_admin, agreement_id, body())

    agreement = await AgreementService.add_comment(
        db, workspace.nyc_user, agreement_id, "Please double-check the payment terms."
    )
    assert [c["author"] for c in agreement.comments] == ["nyc.user@acme-legal.com"]
    assert agreement.audit_log[-1]["action"] == "Comment added"

    with pytest.raises(NotFoundError):
        await AgreementService.add_comment(db, workspace.sfo_admin, agreement_id, "Hello")


@pytest.mark.asyncio
async def test_project_from_another_organization_is_not_found(db, workspace):
    _, _, other_admin = await create_organization(db, "owner@globex-law.com", "Globex Law")
    foreign = await ProjectService.create_project(db, other_admin, ProjectCreate(name="Globex Merger"))

    with pytest.raises(NotFoundError):
        await AgreementService.upsert_agreement(
            db, workspace.org_admin, new_id(), body(project_id=foreign.id)
        )


@pytest.mark.asyncio
async def test_assign_project_and_list_for_project(db, workspace):
    project = await ProjectService.create_project(
        db, workspace.nyc_admin, ProjectCreate(name="NYC Office Move")
    )
    first, second = new_id(), new_id()
    await AgreementService.upsert_agreement(db, workspace.nyc_user, first, body())
    await AgreementService.upsert_agreement(db, workspace.nyc_user, second, body(title="Lease"))

    assigned = await AgreementService.assign_project(db, workspace.nyc_admin, first, project.id)
    assert assigned.project_id == project.id
    assert assigned.audit_log[-1]["details"] == "Assigned to project NYC Office Move"

    in_project = await AgreementService.list_for_project(db, workspace.nyc_user, project.id)
    assert [a.id for a in in_project] == [first]

    detached = await AgreementService.assign_project(db, workspace.nyc_admin, first, None)
    assert detached.project_id is None
    assert await AgreementService.list_for_project(db, workspace.nyc_user, project.id) == []


# ── Projects ──────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_project_writes_need_a_manager(db, workspace):
    with pytest.raises(PermissionDeniedError):
        await ProjectService.create_project(db, workspace.nyc_user, ProjectCreate(name="Side Project"))


@pytest.mark.asyncio
async def test_project_names_are_unique_per_organization(db, workspace):
    await ProjectService.create_project(db, workspace.org_admin, ProjectCreate(name="Audit 2026"))
    with pytest.raises(ConflictError):
        await ProjectService.create_project(db, workspace.org_admin, ProjectCreate(name="Audit 2026"))


@pytest.mark.asyncio
async def test_project_list_filters_by_status_and_branch(db, workspace):
    hq = await ProjectService.create_project(db, workspace.org_admin, ProjectCreate(name="HQ Audit"))
    nyc = await ProjectService.create_project(db, workspace.nyc_admin, ProjectCreate(name="NYC Move"))
    await ProjectService.create_project(db, workspace.sfo_admin, ProjectCreate(name="SFO Lease"))
    await ProjectService.update_status(db, workspace.nyc_admin, nyc.id, ProjectStatus.onhold)

    nyc_view = await ProjectService.list_projects(db, workspace.nyc_user)
    assert {p.name for p in nyc_view} == {"HQ Audit", "NYC Move"}

    on_hold = await ProjectService.list_projects(
        db, workspace.org_admin, statuses=[ProjectStatus.onhold]
    )
    assert [p.id for p in on_hold] == [nyc.id]

    org_only = await ProjectService.list_projects(
        db, workspace.org_admin, scope=ResourceScope.organization
    )
    assert [p.id for p in org_only] == [hq.id]


@pytest.mark.asyncio
async def test_project_update_checks_dates(db, workspace):
    from datetime import date

    project = await ProjectService.create_project(
        db, workspace.org_admin, ProjectCreate(name="HQ Audit", start_date=date(2026, 3, 1))
    )
    with pytest.raises(InvalidInputError):
        await ProjectService.update_project(
            db, workspace.org_admin, project.id, ProjectUpdate(end_date=date(2026, 1, 31))
        )


@pytest.mark.parametrize("field", ["name", "status"])
def test_project_update_rejects_null_for_required_fields(field):
    with pytest.raises(ValidationError):
        ProjectUpdate(**{field: None})


@pytest.mark.asyncio
async def test_project_rename_is_stripped_and_conflicts_report_the_name(db, workspace):
    await ProjectService.create_project(db, workspace.org_admin, ProjectCreate(name="HQ Audit"))
    relocation = await ProjectService.create_project(
        db, workspace.org_admin, ProjectCreate(name="Relocation")
    )
    with pytest.raises(ConflictError, match="'HQ Audit' already exists"):
        await ProjectService.update_project(
            db, workspace.org_admin, relocation.id, ProjectUpdate(name=" HQ Audit ")
        )
