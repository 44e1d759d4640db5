"""
api/routes/invites.py
---------------------
Branch invitations.

GET  /branch-offices/{id}/invites      List invites of a branch (newest first).
POST /branch-offices/{id}/invites      Invite a branch_admin / branch_user.
POST /invites/{id}/revoke              Revoke a pending invite.
GET  /invites/token/{token}            Public: invite details for the accept page.
POST /invites/token/{token}/accept     Public: set a password and join.

The token endpoints need no authentication; the token itself is the
credential.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.api.routes.auth import issue_token
from lexcorp.core.exceptions import InviteNotFoundError
from lexcorp.db.session import get_db
from lexcorp.dependencies import get_email_sender, require_manager
from lexcorp.models.invite import InviteStatus
from lexcorp.models.member import MemberRole
from lexcorp.schemas.invite import (
    InviteAccept,
    InviteCreate,
    InviteCreated,
    InviteDetails,
    InviteRead,
)
from lexcorp.schemas.user import TokenResponse
from lexcorp.services.email_service import EmailSender
from lexcorp.services.invite_service import InviteService
from lexcorp.services.principal import Principal

router = APIRouter(tags=["Invites"])


@router.get(
    "/branch-offices/{branch_office_id}/invites",
    response_model=List[InviteRead],
    summary="List invites for a branch office",
)
async def list_invites(
    branch_office_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
    role: Optional[MemberRole] = Query(default=None, description="Filter by invited role"),
) -> List[InviteRead]:
    invites = await InviteService.list_invites(db, principal, branch_office_id, role)
    return [InviteRead.from_invite(i) for i in invites]


@router.post(
    "/branch-offices/{branch_office_id}/invites",
    response_model=InviteCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user to a branch office",
)
async def create_invite(
    branch_office_id: str,
    body: InviteCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> InviteCreated:
    """
    The invite is stored even when the email cannot be sent; check
    email_sent and share invite_link manually if it is false.
    """
    invite, email_sent = await InviteService.create_invite(
        db, principal, branch_office_id, body, email_sender
    )
    created = InviteCreated.from_invite(invite)
    created.email_sent = email_sent
    return created


@router.post(
    "/invites/{invite_id}/revoke",
    response_model=InviteRead,
    summary="Revoke a pending invite",
)
async def revoke_invite(
    invite_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    principal: Annotated[Principal, Depends(require_manager)],
) -> InviteRead:
    invite = await InviteService.revoke_invite(db, principal, invite_id)
    return InviteRead.from_invite(invite)


@router.get(
    "/invites/token/{token}",
    response_model=InviteDetails,
    summary="Look up an invite by token",
)
async def get_invite_by_token(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> InviteDetails:
    invite = await InviteService.fetch_invite_by_token(db, token)
    if invite is None or invite.status == InviteStatus.revoked.value:
        raise InviteNotFoundError()
    return InviteDetails.from_invite(invite)


@router.post(
    "/invites/token/{token}/accept",
    response_model=TokenResponse,
    summary="Accept an invite and sign in",
)
async def accept_invite(
    token: str,
    body: InviteAccept,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    user, _ = await InviteService.accept_invite(db, token, body.password)
    return issue_token(user)
