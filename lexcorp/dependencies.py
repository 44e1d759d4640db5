"""
dependencies.py
---------------
FastAPI dependency injection functions for authentication, the request
principal and external collaborators.

Flow:
  1. OAuth2PasswordBearer extracts the Bearer token from the Authorization header.
  2. decode_access_token validates and parses the JWT (no DB round-trip).
  3. get_current_user loads the User named by the token's sub.
  4. get_principal reconciles the membership and builds the Principal that
     every service call receives. Role and branch always come from the
     database, never from the token.
  5. require_org_admin / require_manager layer role checks on top.

Collaborators (storage, email, LLM) are dependencies too, so tests can
swap them through app.dependency_overrides.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import OnboardingRequiredError
from lexcorp.core.logging import bind_principal_context, get_logger
from lexcorp.core.security import decode_access_token
from lexcorp.db.session import get_db
from lexcorp.models.user import User
from lexcorp.services.email_service import EmailSender
from lexcorp.services.llm_service import LLMService, llm_service
from lexcorp.services.membership_service import MembershipService
from lexcorp.services.principal import Principal
from lexcorp.services.storage_service import ObjectStorage

logger = get_logger(__name__)

# tokenUrl must match the login endpoint path
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Decode the JWT, then load and return the full User from the database.
    Raises 401 if the token is invalid or the user no longer exists.
    """
    try:
        payload = decode_access_token(token)
        user_id: str = payload.get("sub")
        if not user_id:
            raise _CREDENTIALS_EXCEPTION
    except JWTError as exc:
        logger.warning("JWT decode failed", error=str(exc))
        raise _CREDENTIALS_EXCEPTION

    user = await db.get(User, user_id)
    if user is None:
        logger.warning("User from valid JWT not found in DB", user_id=user_id)
        raise _CREDENTIALS_EXCEPTION

    bind_principal_context(user_id=user.id)
    return user


async def get_principal(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Principal:
    """
    Resolve (organization, role, branch) for the signed-in user.
    Raises 404 OnboardingRequiredError when the user has no organization yet.
    """
    member = await MembershipService.reconcile_membership(db, current_user.id)
    if member is None:
        raise OnboardingRequiredError()

    principal = Principal.from_membership(current_user, member)
    bind_principal_context(
        user_id=principal.user_id,
        organization_id=principal.organization_id,
        role=principal.role.value,
    )
    return principal


async def require_org_admin(
    principal: Annotated[Principal, Depends(get_principal)],
) -> Principal:
    principal.require_org_admin()
    return principal


async def require_manager(
    principal: Annotated[Principal, Depends(get_principal)],
) -> Principal:
    """org_admin, or a branch_admin with an assigned branch."""
    principal.require_manager()
    return principal


@lru_cache()
def get_storage() -> ObjectStorage:
    return ObjectStorage()


@lru_cache()
def get_email_sender() -> EmailSender:
    return EmailSender()


def get_llm_service() -> LLMService:
    return llm_service
