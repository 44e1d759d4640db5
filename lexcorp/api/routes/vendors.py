"""
api/routes/vendors.py
---------------------
Vendor registry.

GET    /vendors                          Every member.
POST   /vendors                          org_admin / branch_admin.
PATCH  /vendors/{id}                     org_admin / branch_admin.
DELETE /vendors/{id}                     org_admin / branch_admin.
POST   /vendors/{id}/documents           Multipart upload, capped per vendor.
DELETE /vendors/{id}/documents/{doc_id}  Remove one document.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.db.session import get_db
from lexcorp.dependencies import get_principal, get_storage, require_manager
from lexcorp.schemas.vendor import VendorCreate, VendorRead, VendorUpdate
from lexcorp.services.principal import Principal
from lexcorp.services.scope import ResourceScope
from lexcorp.services.storage_service import ObjectStorage
from lexcorp.services.vendor_service import DocumentUpload, VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])


@router.get("", response_model=List[VendorRead], summary="List vendors")
async def list_vendors(
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(get_principal)],
    scope: Optional[ResourceScope] = Query(default=None),
    branch_office_id: Optional[str] = Query(default=None),
) -> List[VendorRead]:
    vendors = await VendorService.list_vendors(db, principal, scope, branch_office_id)
    return [VendorRead.model_validate(v) for v in vendors]


@router.post(
    "",
    response_model=VendorRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a vendor",
)
async def create_vendor(
    body: VendorCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> VendorRead:
    vendor = await VendorService.create_vendor(db, principal, body)
    return VendorRead.model_validate(vendor)


@router.patch("/{vendor_id}", response_model=VendorRead, summary="Update a vendor")
async def update_vendor(
    vendor_id: str,
    body: VendorUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> VendorRead:
    vendor = await VendorService.update_vendor(db, principal, vendor_id, body)
    return VendorRead.model_validate(vendor)


@router.delete(
    "/{vendor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a vendor and its documents",
)
async def delete_vendor(
    vendor_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
) -> Response:
    await VendorService.delete_vendor(db, principal, vendor_id, storage)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{vendor_id}/documents",
    response_model=VendorRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload vendor documents",
)
async def upload_documents(
    vendor_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
    files: List[UploadFile] = File(..., description="One or more documents"),
) -> VendorRead:
    """The whole batch is rejected if it would exceed the per-vendor cap."""
    uploads = [
        DocumentUpload(
            filename=f.filename or "document",
            data=await f.read(),
            content_type=f.content_type,
        )
        for f in files
    ]
    vendor = await VendorService.add_documents(db, principal, vendor_id, uploads, storage)
    return VendorRead.model_validate(vendor)


@router.delete(
    "/{vendor_id}/documents/{document_id}",
    response_model=VendorRead,
    summary="Remove a vendor document",
)
async def remove_document(
    vendor_id: str,
    document_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
    storage: Annotated[ObjectStorage, Depends(get_storage)],
) -> VendorRead:
    vendor = await VendorService.remove_document(db, principal, vendor_id, document_id, storage)
    return VendorRead.model_validate(vendor)
