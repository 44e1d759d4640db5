"""
services/membership_service.py
------------------------------
Membership resolution.

resolve_membership is a pure read. reconcile_membership is the explicit
repair step run at session start: an organization owner without a
membership row gets an org_admin membership synthesised for them. Both
are safe to call repeatedly.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.logging import get_logger
from lexcorp.models.member import MemberRole, OrganizationMember
from lexcorp.models.organization import Organization

logger = get_logger(__name__)


class MembershipService:

    @staticmethod
    async def resolve_membership(
        db: AsyncSession, user_id: str
    ) -> Optional[OrganizationMember]:
        """
        Return the user's membership with its organization loaded, or None.
        If a user somehow has several, the oldest one wins.
        """
        result = await db.execute(
            select(OrganizationMember)
            .where(OrganizationMember.user_id == user_id)
            .order_by(OrganizationMember.created_at)
            .limit(1)
        )
        return result.scalars().first()

    @staticmethod
    async def get_owned_organization(
        db: AsyncSession, user_id: str
    ) -> Optional[Organization]:
        result = await db.execute(
            select(Organization).where(Organization.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def ensure_membership(
        db: AsyncSession,
        user_id: str,
        organization_id: str,
        role: MemberRole,
        branch_office_id: Optional[str] = None,
        department: Optional[str] = None,
    ) -> OrganizationMember:
        """
        Upsert keyed on (user_id, organization_id). An existing row gets the
        new role / branch / department, so replaying the same call is a no-op.
        """
        result = await db.execute(
            select(OrganizationMember).where(
                OrganizationMember.user_id == user_id,
                OrganizationMember.organization_id == organization_id,
            )
        )
        member = result.scalar_one_or_none()

        if member is None:
            member = OrganizationMember(
                user_id=user_id,
                organization_id=organization_id,
                role=role.value,
                branch_office_id=branch_office_id,
                department=department,
            )
            db.add(member)
            logger.info(
                "Membership created",
                user_id=user_id,
                organization_id=organization_id,
                role=role.value,
                branch_office_id=branch_office_id,
            )
        else:
            member.role = role.value
            member.branch_office_id = branch_office_id
            member.department = department

        await db.flush()
        await db.refresh(member)
        return member

    @staticmethod
    async def reconcile_membership(
        db: AsyncSession, user_id: str
    ) -> Optional[OrganizationMember]:
        """
        Resolve the membership, synthesising an org_admin row for owners of
        an organization who have none. Returns None when the user still needs
        onboarding.
        """
        member = await MembershipService.resolve_membership(db, user_id)
        if member is not None:
            return member

        organization = await MembershipService.get_owned_organization(db, user_id)
        if organization is None:
            return None

        logger.info(
            "Reconciling missing org_admin membership",
            user_id=user_id,
            organization_id=organization.id,
        )
        return await MembershipService.ensure_membership(
            db,
            user_id=user_id,
            organization_id=organization.id,
            role=MemberRole.org_admin,
        )
