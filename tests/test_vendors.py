"""Vendor registry: branch assignment, document cap, document removal."""

import pytest
from pydantic import ValidationError

from lexcorp.core.config import settings
from lexcorp.core.exceptions import (
    BranchNotAssignedError,
    ConflictError,
    DocumentLimitError,
    NotFoundError,
    PermissionDeniedError,
    UpstreamServiceError,
)
from lexcorp.schemas.vendor import VendorCreate, VendorUpdate
from lexcorp.services.scope import ResourceScope
from lexcorp.services.vendor_service import DocumentUpload, VendorService

from conftest import FakeStorage


def pdf(name: str) -> DocumentUpload:
    return DocumentUpload(filename=name, data=b"%PDF-1.7 test", content_type="application/pdf")


@pytest.mark.asyncio
async def test_branch_admin_vendor_lands_in_own_branch(db, workspace):
    vendor = await VendorService.create_vendor(
        db,
        workspace.nyc_admin,
        VendorCreate(
            name="Hudson Couriers",
            tin="12-3456789",
            scope=ResourceScope.organization,
            branch_office_id=workspace.sfo.id,
        ),
    )
    assert vendor.branch_office_id == workspace.nyc.id
    assert vendor.organization_id == workspace.organization.id
    assert vendor.created_by == workspace.nyc_admin.user_id


@pytest.mark.asyncio
async def test_org_admin_vendor_is_org_wide_by_default(db, workspace):
    vendor = await VendorService.create_vendor(
        db, workspace.org_admin, VendorCreate(name="Global Audit LLP", tin="98-7654321")
    )
    assert vendor.branch_office_id is None


@pytest.mark.asyncio
async def test_vendor_writes_need_a_manager(db, workspace):
    with pytest.raises(PermissionDeniedError):
        await VendorService.create_vendor(
            db, workspace.nyc_user, VendorCreate(name="Shadow Vendor", tin="00-0000000")
        )
    with pytest.raises(BranchNotAssignedError):
        await VendorService.create_vendor(
            db, workspace.unassigned_admin, VendorCreate(name="Limbo Vendor", tin="00-0000001")
        )


@pytest.mark.asyncio
async def test_document_batch_over_cap_is_rejected_whole(db, workspace, storage):
    assert settings.VENDOR_MAX_DOCUMENTS == 3
    vendor = await VendorService.create_vendor(
        db, workspace.nyc_admin, VendorCreate(name="Hudson Couriers", tin="12-3456789")
    )
    vendor = await VendorService.add_documents(
        db, workspace.nyc_admin, vendor.id, [pdf("w9.pdf"), pdf("insurance.pdf")], storage
    )
    assert len(vendor.documents) == 2
    uploaded_before = set(storage.objects)

    with pytest.raises(DocumentLimitError):
        await VendorService.add_documents(
            db, workspace.nyc_admin, vendor.id, [pdf("msa.pdf"), pdf("nda.pdf")], storage
        )

    vendor = await VendorService.get_vendor(db, workspace.nyc_admin, vendor.id)
    assert [d["name"] for d in vendor.documents] == ["w9.pdf", "insurance.pdf"]
    assert set(storage.objects) == uploaded_before


@pytest.mark.asyncio
async def test_documents_are_stored_under_vendor_prefix(db, workspace, storage):
    vendor = await VendorService.create_vendor(
        db, workspace.org_admin, VendorCreate(name="Global Audit LLP", tin="98-7654321")
    )
    vendor = await VendorService.add_documents(
        db, workspace.org_admin, vendor.id, [pdf("Signed W-9 (2026).pdf")], storage
    )
    doc = vendor.documents[0]
    key = f"{vendor.id}/{doc['id']}-Signed_W-9_2026_.pdf"
    assert key in storage.objects
    assert doc["url"].endswith(key)
    assert doc["mime_type"] == "application/pdf"


@pytest.mark.asyncio
async def test_remove_document(db, workspace, storage):
    vendor = await VendorService.create_vendor(
        db, workspace.nyc_admin, VendorCreate(name="Hudson Couriers", tin="12-3456789")
    )
    vendor = await VendorService.add_documents(
        db, workspace.nyc_admin, vendor.id, [pdf("w9.pdf"), pdf("coi.pdf")], storage
    )
    doc_id = vendor.documents[0]["id"]

    vendor = await VendorService.remove_document(db, workspace.nyc_admin, vendor.id, doc_id, storage)
    assert [d["name"] for d in vendor.documents] == ["coi.pdf"]
    assert len(storage.deleted) == 1

    with pytest.raises(NotFoundError):
        await VendorService.remove_document(db, workspace.nyc_admin, vendor.id, doc_id, storage)


@pytest.mark.asyncio
async def test_other_branch_cannot_touch_vendor(db, workspace):
    vendor = await VendorService.create_vendor(
        db, workspace.nyc_admin, VendorCreate(name="Hudson Couriers", tin="12-3456789")
    )
    with pytest.raises(NotFoundError):
        await VendorService.update_vendor(
            db, workspace.sfo_admin, vendor.id, VendorUpdate(notes="hijacked")
        )

    updated = await VendorService.update_vendor(
        db, workspace.org_admin, vendor.id, VendorUpdate(notes="Preferred courier")
    )
    assert updated.notes == "Preferred courier"


@pytest.mark.parametrize("field", ["name", "tin"])
def test_update_rejects_null_for_required_fields(field):
    with pytest.raises(ValidationError):
        VendorUpdate(**{field: None})


@pytest.mark.asyncio
async def test_update_strips_name_before_uniqueness_check(db, workspace):
    await VendorService.create_vendor(
        db, workspace.org_admin, VendorCreate(name="Globex", tin="11-1111111")
    )
    other = await VendorService.create_vendor(
        db, workspace.org_admin, VendorCreate(name="Initech", tin="22-2222222")
    )
    assert VendorUpdate(name="  Globex ").name == "Globex"
    with pytest.raises(ConflictError):
        await VendorService.update_vendor(
            db, workspace.org_admin, other.id, VendorUpdate(name="Globex ")
        )


class FlakyStorage(FakeStorage):
    """Fails the upload after `fail_after` successful ones."""

    def __init__(self, fail_after: int) -> None:
        super().__init__()
        self.fail_after = fail_after

    async def upload(self, key, data, content_type=None):
        if len(self.objects) >= self.fail_after:
            raise UpstreamServiceError("Document storage is unavailable")
        return await super().upload(key, data, content_type)


@pytest.mark.asyncio
async def test_failed_batch_removes_already_uploaded_documents(db, workspace):
    storage = FlakyStorage(fail_after=1)
    vendor = await VendorService.create_vendor(
        db, workspace.org_admin, VendorCreate(name="Global Audit LLP", tin="98-7654321")
    )

    with pytest.raises(UpstreamServiceError):
        await VendorService.add_documents(
            db, workspace.org_admin, vendor.id, [pdf("w9.pdf"), pdf("coi.pdf")], storage
        )

    assert storage.objects == {}
    assert len(storage.deleted) == 1
    vendor = await VendorService.get_vendor(db, workspace.org_admin, vendor.id)
    assert vendor.documents == []
