"""
services/user_service.py
------------------------
Business logic for sign-up and authentication.

Sign-up creates three rows in one transaction: the user, the organization
they own and their org_admin membership.
"""

from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lexcorp.core.exceptions import ConflictError
from lexcorp.core.logging import get_logger
from lexcorp.core.security import hash_password, verify_password
from lexcorp.models.member import MemberRole
from lexcorp.models.organization import Organization
from lexcorp.models.user import User
from lexcorp.schemas.user import SignUpRequest
from lexcorp.services.membership_service import MembershipService

logger = get_logger(__name__)


class UserService:

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def create_user(db: AsyncSession, email: str, password: str) -> User:
        """Raises ConflictError on duplicate email."""
        user = User(email=email.lower(), hashed_password=hash_password(password))
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Email '{email}' is already registered")
        await db.refresh(user)
        logger.info("User created", user_id=user.id)
        return user

    @staticmethod
    async def sign_up(db: AsyncSession, data: SignUpRequest) -> Tuple[User, Organization]:
        user = await UserService.create_user(db, data.email, data.password)

        organization = Organization(
            user_id=user.id,
            name=data.organization.name,
            hq_location=data.organization.hq_location,
            plan=data.organization.plan.value,
        )
        db.add(organization)
        await db.flush()
        await db.refresh(organization)

        await MembershipService.ensure_membership(
            db,
            user_id=user.id,
            organization_id=organization.id,
            role=MemberRole.org_admin,
        )
        logger.info("Organization signed up", user_id=user.id, organization_id=organization.id)
        return user, organization

    @staticmethod
    async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """
        Verify credentials and return the User if valid, else None.
        Email lookup is case-insensitive.
        """
        user = await UserService.get_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user
