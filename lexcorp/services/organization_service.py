"""
services/organization_service.py
--------------------------------
Organization profile and branch office management.

Service layer is responsible for:
  - Constructing queries
  - Enforcing role rules for organization-level writes
  - Returning ORM objects to the route layer
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import ConflictError, NotFoundError
from lexcorp.core.logging import get_logger
from lexcorp.models.member import MemberRole
from lexcorp.models.organization import BranchOffice, Organization
from lexcorp.schemas.organization import BranchOfficeCreate, OrganizationUpdate
from lexcorp.schemas.user import OrganizationProfile
from lexcorp.services.membership_service import MembershipService
from lexcorp.services.principal import Principal

logger = get_logger(__name__)


class OrganizationService:

    @staticmethod
    async def complete_profile(
        db: AsyncSession, user_id: str, data: OrganizationProfile
    ) -> Organization:
        """
        Upsert the organization owned by user_id and make sure the owner has
        an org_admin membership. Used by accounts that signed up without an
        organization.
        """
        member = await MembershipService.resolve_membership(db, user_id)
        if member is not None and member.role != MemberRole.org_admin.value:
            raise ConflictError("Branch members cannot create an organization")

        organization = await MembershipService.get_owned_organization(db, user_id)
        if organization is None:
            organization = Organization(user_id=user_id)
            db.add(organization)

        organization.name = data.name
        organization.hq_location = data.hq_location
        organization.plan = data.plan.value
        await db.flush()
        await db.refresh(organization)

        await MembershipService.ensure_membership(
            db,
            user_id=user_id,
            organization_id=organization.id,
            role=MemberRole.org_admin,
        )
        logger.info("Organization profile completed", organization_id=organization.id)
        return organization

    @staticmethod
    async def get_organization(db: AsyncSession, principal: Principal) -> Organization:
        organization = await db.get(Organization, principal.organization_id)
        if organization is None:
            raise NotFoundError("Organization not found")
        return organization

    @staticmethod
    async def update_organization(
        db: AsyncSession, principal: Principal, data: OrganizationUpdate
    ) -> Organization:
        principal.require_org_admin()
        organization = await OrganizationService.get_organization(db, principal)

        if data.name is not None:
            organization.name = data.name
        if data.plan is not None:
            organization.plan = data.plan.value
        await db.flush()
        await db.refresh(organization)
        logger.info("Organization updated", organization_id=organization.id)
        return organization

    @staticmethod
    async def create_branch_office(
        db: AsyncSession, principal: Principal, data: BranchOfficeCreate
    ) -> BranchOffice:
        principal.require_org_admin()
        office = BranchOffice(
            organization_id=principal.organization_id,
            identifier=data.identifier,
            location=data.location,
            headcount=data.headcount,
        )
        db.add(office)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Branch office '{data.identifier}' already exists")
        await db.refresh(office)
        logger.info(
            "Branch office created",
            branch_office_id=office.id,
            identifier=office.identifier,
            organization_id=office.organization_id,
        )
        return office

    @staticmethod
    async def list_branch_offices(
        db: AsyncSession, principal: Principal
    ) -> List[BranchOffice]:
        """org_admins see every branch; branch members only their own."""
        stmt = select(BranchOffice).where(
            BranchOffice.organization_id == principal.organization_id
        )
        if principal.is_branch_member:
            if not principal.branch_office_id:
                return []
            stmt = stmt.where(BranchOffice.id == principal.branch_office_id)
        result = await db.execute(stmt.order_by(BranchOffice.identifier))
        return list(result.scalars().all())
