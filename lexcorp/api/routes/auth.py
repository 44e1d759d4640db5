"""
api/routes/auth.py
------------------
Authentication and session endpoints.

POST /signup           Create user + organization + org_admin membership.
POST /login            Exchange credentials for a JWT access token (OAuth2 form).
GET  /me               Session: user, organization, membership and role flags.
PUT  /me/organization  Complete (or refresh) the caller's organization profile.

Signing out is client-side: discard the token.
"""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.config import settings
from lexcorp.core.security import create_access_token
from lexcorp.db.session import get_db
from lexcorp.dependencies import get_current_user
from lexcorp.models.user import User
from lexcorp.schemas.organization import MembershipRead, OrganizationRead, SessionRead
from lexcorp.schemas.user import OrganizationProfile, SignUpRequest, TokenResponse, UserRead
from lexcorp.services.membership_service import MembershipService
from lexcorp.services.organization_service import OrganizationService
from lexcorp.services.principal import Principal
from lexcorp.services.user_service import UserService

router = APIRouter(tags=["Authentication"])


def issue_token(user: User) -> TokenResponse:
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token(subject=user.id, email=user.email, expires_delta=expires)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in=int(expires.total_seconds()),
        user=UserRead.model_validate(user),
    )


async def build_session(db: AsyncSession, user: User) -> SessionRead:
    member = await MembershipService.reconcile_membership(db, user.id)
    if member is None:
        organization = await MembershipService.get_owned_organization(db, user.id)
        return SessionRead(
            user=UserRead.model_validate(user),
            organization=OrganizationRead.model_validate(organization) if organization else None,
            needs_onboarding=True,
        )

    principal = Principal.from_membership(user, member)
    return SessionRead(
        user=UserRead.model_validate(user),
        organization=OrganizationRead.model_validate(member.organization),
        membership=MembershipRead.model_validate(member),
        is_org_admin=principal.is_org_admin,
        is_branch_admin=principal.is_branch_admin,
        branch_locked=principal.branch_locked,
        branch_office_id=principal.branch_office_id,
        needs_onboarding=False,
        permitted_views=list(principal.permitted_views),
    )


@router.post(
    "/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and its organization",
)
async def signup(
    body: SignUpRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """The new user becomes org_admin of the new organization."""
    user, _ = await UserService.sign_up(db, body)
    return issue_token(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login and receive a JWT access token",
)
async def login(
    # The OAuth2 "username" field holds the email address.
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email + password and receive a signed JWT.
    Send as form data: -d "username=you@email.com&password=yourpassword"
    """
    user = await UserService.authenticate(db, form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_token(user)


@router.get(
    "/me",
    response_model=SessionRead,
    summary="Current session with role flags and permitted views",
)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionRead:
    return await build_session(db, current_user)


@router.put(
    "/me/organization",
    response_model=SessionRead,
    summary="Complete the organization profile",
)
async def complete_organization_profile(
    body: OrganizationProfile,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionRead:
    await OrganizationService.complete_profile(db, current_user.id, body)
    return await build_session(db, current_user)
