"""Template visibility rules."""

import pytest

from lexcorp.core.exceptions import InvalidInputError, PermissionDeniedError
from lexcorp.models.template import TemplateVisibility
from lexcorp.schemas.template import TemplateCreate, TemplateSection, TemplateUpdate
from lexcorp.services.template_service import TemplateService

SECTIONS = [
    TemplateSection(id="s1", title="Confidentiality", content="Each party shall...", required=True),
    TemplateSection(id="s2", title="Term", content="This Agreement lasts..."),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("requested", [TemplateVisibility.organization, TemplateVisibility.branch])
async def test_branch_admin_always_gets_branch_visibility(db, workspace, requested):
    template = await TemplateService.create_template(
        db,
        workspace.nyc_admin,
        TemplateCreate(
            name="NYC Mutual NDA",
            visibility=requested,
            branch_office_id=workspace.sfo.id,
            sections=SECTIONS,
        ),
    )
    assert template.visibility == TemplateVisibility.branch.value
    assert template.branch_office_id == workspace.nyc.id
    assert template.sections[0]["required"] is True


@pytest.mark.asyncio
async def test_org_admin_chooses_visibility(db, workspace):
    org_wide = await TemplateService.create_template(
        db, workspace.org_admin, TemplateCreate(name="Standard MSA")
    )
    assert org_wide.visibility == TemplateVisibility.organization.value
    assert org_wide.branch_office_id is None

    branch = await TemplateService.create_template(
        db,
        workspace.org_admin,
        TemplateCreate(
            name="SFO Lease Addendum",
            visibility=TemplateVisibility.branch,
            branch_office_id=workspace.sfo.id,
        ),
    )
    assert branch.branch_office_id == workspace.sfo.id


@pytest.mark.asyncio
async def test_branch_template_requires_branch_context(db, workspace):
    with pytest.raises(InvalidInputError):
        await TemplateService.create_template(
            db,
            workspace.org_admin,
            TemplateCreate(name="Orphan Template", visibility=TemplateVisibility.branch),
        )


@pytest.mark.asyncio
async def test_branch_user_cannot_write_templates(db, workspace):
    with pytest.raises(PermissionDeniedError):
        await TemplateService.create_template(
            db, workspace.nyc_user, TemplateCreate(name="Not Allowed")
        )


@pytest.mark.asyncio
async def test_branch_admin_update_cannot_widen_visibility(db, workspace):
    template = await TemplateService.create_template(
        db, workspace.nyc_admin, TemplateCreate(name="NYC Mutual NDA")
    )
    updated = await TemplateService.update_template(
        db,
        workspace.nyc_admin,
        template.id,
        TemplateUpdate(name="NYC Mutual NDA v2", visibility=TemplateVisibility.organization),
    )
    assert updated.name == "NYC Mutual NDA v2"
    assert updated.visibility == TemplateVisibility.branch.value
    assert updated.branch_office_id == workspace.nyc.id


@pytest.mark.asyncio
async def test_listing_follows_branch_scope(db, workspace):
    await TemplateService.create_template(db, workspace.org_admin, TemplateCreate(name="Standard MSA"))
    await TemplateService.create_template(db, workspace.nyc_admin, TemplateCreate(name="NYC NDA"))
    await TemplateService.create_template(db, workspace.sfo_admin, TemplateCreate(name="SFO NDA"))

    nyc_view = await TemplateService.list_templates(db, workspace.nyc_user)
    assert {t.name for t in nyc_view} == {"Standard MSA", "NYC NDA"}

    everything = await TemplateService.list_templates(db, workspace.org_admin)
    assert [t.name for t in everything] == ["SFO NDA", "NYC NDA", "Standard MSA"]
