"""
services/invite_service.py
--------------------------
Branch invitation lifecycle.

  pending ──accept──▶ accepted
     └─────revoke───▶ revoked

Acceptance is the only way a branch_admin or branch_user membership comes
into existence. The invite token is a bearer secret: whoever holds it may
accept, so tokens are random, unique and single use. The final state change
is a conditional UPDATE on status='pending', so two concurrent acceptances
cannot both succeed.
"""

from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import (
    ConflictError,
    InviteAlreadyAcceptedError,
    InviteNotFoundError,
    NotFoundError,
    PermissionDeniedError,
)
from lexcorp.core.logging import get_logger
from lexcorp.core.security import build_invite_link, generate_invite_token, verify_password
from lexcorp.db.base import utcnow
from lexcorp.models.invite import BranchInvite, InviteStatus
from lexcorp.models.member import MemberRole, OrganizationMember
from lexcorp.models.user import User
from lexcorp.schemas.invite import InviteCreate
from lexcorp.services.email_service import EmailSender
from lexcorp.services.membership_service import MembershipService
from lexcorp.services.principal import Principal
from lexcorp.services.scope import get_branch_office
from lexcorp.services.user_service import UserService

logger = get_logger(__name__)


class InviteService:

    @staticmethod
    def _check_branch_access(
        principal: Principal, branch_office_id: str, role: Optional[MemberRole] = None
    ) -> None:
        """
        org_admins manage invites for every branch. branch_admins only for
        their own branch, and only for branch_user invites.
        """
        principal.require_manager()
        if principal.is_org_admin:
            return
        if branch_office_id != principal.branch_office_id:
            raise PermissionDeniedError("Branch admins can only manage their own branch")
        if role is not None and role is not MemberRole.branch_user:
            raise PermissionDeniedError("Branch admins can only invite branch users")

    @staticmethod
    async def create_invite(
        db: AsyncSession,
        principal: Principal,
        branch_office_id: str,
        data: InviteCreate,
        email_sender: EmailSender,
    ) -> Tuple[BranchInvite, bool]:
        """
        Store a pending invite, then try to email the link.

        Returns (invite, email_sent). A failed email does not undo the
        invite; the caller shows the link for manual sharing instead.
        """
        InviteService._check_branch_access(principal, branch_office_id, data.role)
        office = await get_branch_office(db, principal.organization_id, branch_office_id)
        email = data.email.lower()

        existing = await db.execute(
            select(BranchInvite.id).where(
                BranchInvite.organization_id == principal.organization_id,
                BranchInvite.email == email,
                BranchInvite.status == InviteStatus.pending.value,
            )
        )
        if existing.first() is not None:
            raise ConflictError(f"A pending invite for '{email}' already exists")

        invite = BranchInvite(
            organization_id=principal.organization_id,
            branch_office_id=office.id,
            email=email,
            role=data.role.value,
            full_name=data.full_name,
            department=data.department,
            title=data.title,
            contact_email=email,
            invite_token=generate_invite_token(),
            status=InviteStatus.pending.value,
        )
        db.add(invite)
        await db.flush()
        # The row must be durable before the link leaves the system.
        await db.commit()
        await db.refresh(invite)
        logger.info(
            "Invite created",
            invite_id=invite.id,
            branch_office_id=office.id,
            role=invite.role,
        )

        email_sent = await email_sender.send_branch_invite(
            to_email=email,
            organization_name=invite.organization.name,
            branch_identifier=office.identifier,
            role=invite.role,
            invite_link=build_invite_link(invite.invite_token),
            full_name=invite.full_name,
        )
        if not email_sent:
            logger.warning("Invite email not sent, share the link manually", invite_id=invite.id)
        return invite, email_sent

    @staticmethod
    async def list_invites(
        db: AsyncSession,
        principal: Principal,
        branch_office_id: str,
        role: Optional[MemberRole] = None,
    ) -> List[BranchInvite]:
        InviteService._check_branch_access(principal, branch_office_id)
        await get_branch_office(db, principal.organization_id, branch_office_id)

        stmt = select(BranchInvite).where(
            BranchInvite.organization_id == principal.organization_id,
            BranchInvite.branch_office_id == branch_office_id,
        )
        if role is not None:
            stmt = stmt.where(BranchInvite.role == role.value)
        result = await db.execute(stmt.order_by(BranchInvite.created_at.desc()))
        return list(result.scalars().unique().all())

    @staticmethod
    async def fetch_invite_by_token(db: AsyncSession, token: str) -> Optional[BranchInvite]:
        """Public lookup. Organization and branch office are loaded with the invite."""
        result = await db.execute(
            select(BranchInvite).where(BranchInvite.invite_token == token)
        )
        return result.scalars().unique().one_or_none()

    @staticmethod
    async def accept_invite(
        db: AsyncSession, token: str, password: str
    ) -> Tuple[User, OrganizationMember]:
        """
        Turn a pending invite into an account plus membership.

        An account that already exists for the invite email is reused only
        when the password matches it, which lets a half-finished acceptance
        be retried.
        """
        invite = await InviteService.fetch_invite_by_token(db, token)
        if invite is None or invite.status == InviteStatus.revoked.value:
            raise InviteNotFoundError()
        if invite.status == InviteStatus.accepted.value:
            raise InviteAlreadyAcceptedError()

        user = await UserService.get_by_email(db, invite.email)
        if user is None:
            user = await UserService.create_user(db, invite.email, password)
        elif not verify_password(password, user.hashed_password):
            raise ConflictError(
                "An account with this email already exists. "
                "Use its password to accept the invitation."
            )
        else:
            current = await db.execute(
                select(OrganizationMember.role).where(
                    OrganizationMember.user_id == user.id,
                    OrganizationMember.organization_id == invite.organization_id,
                )
            )
            if current.scalar_one_or_none() == MemberRole.org_admin.value:
                raise ConflictError("This account already administers the organization")

        member = await MembershipService.ensure_membership(
            db,
            user_id=user.id,
            organization_id=invite.organization_id,
            role=MemberRole(invite.role),
            branch_office_id=invite.branch_office_id,
            department=invite.department,
        )

        result = await db.execute(
            update(BranchInvite)
            .where(
                BranchInvite.id == invite.id,
                BranchInvite.status == InviteStatus.pending.value,
            )
            .values(
                status=InviteStatus.accepted.value,
                user_id=user.id,
                accepted_at=utcnow(),
            )
        )
        if result.rowcount != 1:
            raise InviteAlreadyAcceptedError()

        logger.info(
            "Invite accepted",
            invite_id=invite.id,
            user_id=user.id,
            organization_id=invite.organization_id,
            branch_office_id=invite.branch_office_id,
            role=invite.role,
        )
        return user, member

    @staticmethod
    async def revoke_invite(
        db: AsyncSession, principal: Principal, invite_id: str
    ) -> BranchInvite:
        invite = await db.get(BranchInvite, invite_id)
        if invite is None or invite.organization_id != principal.organization_id:
            raise NotFoundError("Invite not found")
        InviteService._check_branch_access(principal, invite.branch_office_id)
        if invite.status != InviteStatus.pending.value:
            raise ConflictError(f"Only pending invites can be revoked (status: {invite.status})")

        invite.status = InviteStatus.revoked.value
        await db.flush()
        await db.refresh(invite)
        logger.info("Invite revoked", invite_id=invite.id)
        return invite
