"""
services/vendor_service.py
--------------------------
Vendor registry and vendor documents.

Each vendor holds at most settings.VENDOR_MAX_DOCUMENTS documents. The cap
is checked for the whole batch before anything is uploaded, so a rejected
batch leaves both storage and the vendor row untouched. A storage failure
partway through a batch removes the documents that batch already stored.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.config import settings
from lexcorp.core.exceptions import (
    ConflictError,
    DocumentLimitError,
    InvalidInputError,
    NotFoundError,
    UpstreamServiceError,
)
from lexcorp.core.logging import get_logger
from lexcorp.db.base import utcnow
from lexcorp.models.vendor import Vendor
from lexcorp.schemas.vendor import VendorCreate, VendorUpdate
from lexcorp.services.principal import Principal
from lexcorp.services.scope import (
    ResourceScope,
    ScopeParams,
    build_scope_query,
    ensure_visible,
    ensure_writable,
    resolve_write_branch,
)
from lexcorp.services.storage_service import ObjectStorage, document_key

logger = get_logger(__name__)


@dataclass(frozen=True)
class DocumentUpload:
    filename: str
    data: bytes
    content_type: Optional[str] = None


class VendorService:

    @staticmethod
    async def list_vendors(
        db: AsyncSession,
        principal: Principal,
        scope: Optional[ResourceScope] = None,
        branch_office_id: Optional[str] = None,
    ) -> List[Vendor]:
        params = ScopeParams.for_principal(principal, scope, branch_office_id)
        stmt = build_scope_query(select(Vendor), Vendor, params)
        result = await db.execute(stmt.order_by(Vendor.created_at.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_vendor(db: AsyncSession, principal: Principal, vendor_id: str) -> Vendor:
        vendor = await db.get(Vendor, vendor_id)
        if vendor is None:
            raise NotFoundError("Vendor not found")
        ensure_visible(principal, vendor)
        return vendor

    @staticmethod
    async def create_vendor(
        db: AsyncSession, principal: Principal, data: VendorCreate
    ) -> Vendor:
        """Branch admins always create vendors for their own branch."""
        principal.require_manager()
        branch_office_id = await resolve_write_branch(
            db, principal, data.scope, data.branch_office_id
        )
        vendor = Vendor(
            organization_id=principal.organization_id,
            branch_office_id=branch_office_id,
            name=data.name,
            tin=data.tin,
            contact_email=str(data.contact_email) if data.contact_email else None,
            contact_phone=data.contact_phone,
            notes=data.notes,
            documents=[],
            created_by=principal.user_id,
        )
        db.add(vendor)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Vendor '{data.name}' already exists")
        await db.refresh(vendor)
        logger.info(
            "Vendor created",
            vendor_id=vendor.id,
            branch_office_id=branch_office_id,
        )
        return vendor

    @staticmethod
    async def update_vendor(
        db: AsyncSession, principal: Principal, vendor_id: str, data: VendorUpdate
    ) -> Vendor:
        principal.require_manager()
        vendor = await VendorService.get_vendor(db, principal, vendor_id)
        ensure_writable(principal, vendor)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("contact_email") is not None:
            changes["contact_email"] = str(changes["contact_email"])
        for field, value in changes.items():
            setattr(vendor, field, value)
        name = vendor.name

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Vendor '{name}' already exists")
        await db.refresh(vendor)
        logger.info("Vendor updated", vendor_id=vendor.id, fields=sorted(changes))
        return vendor

    @staticmethod
    async def delete_vendor(
        db: AsyncSession, principal: Principal, vendor_id: str, storage: ObjectStorage
    ) -> None:
        principal.require_manager()
        vendor = await VendorService.get_vendor(db, principal, vendor_id)
        ensure_writable(principal, vendor)

        for doc in vendor.documents or []:
            await storage.delete(document_key(vendor.id, doc["id"], doc["name"]))
        await db.delete(vendor)
        await db.flush()
        logger.info("Vendor deleted", vendor_id=vendor_id)

    @staticmethod
    async def add_documents(
        db: AsyncSession,
        principal: Principal,
        vendor_id: str,
        uploads: Sequence[DocumentUpload],
        storage: ObjectStorage,
    ) -> Vendor:
        principal.require_manager()
        vendor = await VendorService.get_vendor(db, principal, vendor_id)
        ensure_writable(principal, vendor)

        if not uploads:
            raise InvalidInputError("Select at least one file to upload")
        existing = list(vendor.documents or [])
        limit = settings.VENDOR_MAX_DOCUMENTS
        if len(existing) + len(uploads) > limit:
            raise DocumentLimitError(
                f"A vendor can have at most {limit} documents "
                f"({len(existing)} attached, {len(uploads)} selected)"
            )

        added = []
        try:
            for upload in uploads:
                document_id = str(uuid.uuid4())
                url = await storage.upload(
                    document_key(vendor.id, document_id, upload.filename),
                    upload.data,
                    upload.content_type,
                )
                added.append({
                    "id": document_id,
                    "name": upload.filename,
                    "url": url,
                    "uploaded_at": utcnow().isoformat(),
                    "mime_type": upload.content_type,
                })
        except UpstreamServiceError:
            # The vendor row is unchanged, so drop what this batch already stored.
            for doc in added:
                await storage.delete(document_key(vendor.id, doc["id"], doc["name"]))
            logger.warning(
                "Vendor document batch failed",
                vendor_id=vendor.id,
                uploaded=len(added),
                selected=len(uploads),
            )
            raise

        vendor.documents = existing + added
        await db.flush()
        await db.refresh(vendor)
        logger.info("Vendor documents added", vendor_id=vendor.id, count=len(added))
        return vendor

    @staticmethod
    async def remove_document(
        db: AsyncSession,
        principal: Principal,
        vendor_id: str,
        document_id: str,
        storage: ObjectStorage,
    ) -> Vendor:
        principal.require_manager()
        vendor = await VendorService.get_vendor(db, principal, vendor_id)
        ensure_writable(principal, vendor)

        documents = list(vendor.documents or [])
        doc = next((d for d in documents if d["id"] == document_id), None)
        if doc is None:
            raise NotFoundError("Document not found")

        await storage.delete(document_key(vendor.id, doc["id"], doc["name"]))
        vendor.documents = [d for d in documents if d["id"] != document_id]
        await db.flush()
        await db.refresh(vendor)
        logger.info("Vendor document removed", vendor_id=vendor.id, document_id=document_id)
        return vendor
