"""
Shared fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool so
all sessions share one connection). Object storage and email are replaced
by in-memory fakes; the LLM runs in mock mode.
"""

import os

os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["OPENAI_API_KEY"] = ""
os.environ["BREVO_API_KEY"] = ""
os.environ["FRONTEND_URL"] = "https://app.lexcorp.test"

from dataclasses import dataclass
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lexcorp.db.session import get_db, init_models
from lexcorp.dependencies import get_email_sender, get_storage
from lexcorp.models.member import MemberRole
from lexcorp.models.organization import BranchOffice, Organization
from lexcorp.models.user import User
from lexcorp.schemas.organization import BranchOfficeCreate
from lexcorp.schemas.user import OrganizationProfile, SignUpRequest
from lexcorp.services.membership_service import MembershipService
from lexcorp.services.organization_service import OrganizationService
from lexcorp.services.principal import Principal
from lexcorp.services.user_service import UserService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "secret123"


class FakeStorage:
    """Stands in for ObjectStorage; keeps objects in a dict."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []

    async def upload(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        self.objects[key] = data
        return f"https://files.lexcorp.test/{key}"

    async def delete(self, key: str) -> None:
        self.deleted.append(key)
        self.objects.pop(key, None)


class FakeEmailSender:
    """Records invites instead of sending them. deliver=False simulates an outage."""

    def __init__(self, deliver: bool = True) -> None:
        self.deliver = deliver
        self.sent: List[dict] = []

    async def send_branch_invite(self, **kwargs) -> bool:
        self.sent.append(kwargs)
        return self.deliver


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest_asyncio.fixture
async def client(session_factory, storage, email_sender):
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Seed data ─────────────────────────────────────────────────────────────────

async def create_organization(
    db: AsyncSession, email: str, name: str
) -> tuple[User, Organization, Principal]:
    user, organization = await UserService.sign_up(
        db,
        SignUpRequest(
            email=email,
            password=PASSWORD,
            organization=OrganizationProfile(name=name, hq_location="New York, NY"),
        ),
    )
    member = await MembershipService.resolve_membership(db, user.id)
    return user, organization, Principal.from_membership(user, member)


async def add_member(
    db: AsyncSession,
    organization: Organization,
    email: str,
    role: MemberRole,
    branch: Optional[BranchOffice],
    department: Optional[str] = None,
) -> Principal:
    user = await UserService.create_user(db, email, PASSWORD)
    member = await MembershipService.ensure_membership(
        db,
        user_id=user.id,
        organization_id=organization.id,
        role=role,
        branch_office_id=branch.id if branch else None,
        department=department,
    )
    return Principal.from_membership(user, member)


@dataclass
class Workspace:
    organization: Organization
    owner: User
    org_admin: Principal
    nyc: BranchOffice
    sfo: BranchOffice
    nyc_admin: Principal
    nyc_user: Principal
    sfo_admin: Principal
    unassigned_admin: Principal


@pytest_asyncio.fixture
async def workspace(db) -> Workspace:
    """Acme Legal with two branches and one member of each kind."""
    owner, organization, org_admin = await create_organization(
        db, "owner@acme-legal.com", "Acme Legal"
    )
    nyc = await OrganizationService.create_branch_office(
        db, org_admin, BranchOfficeCreate(identifier="NYC-01", location="New York, NY", headcount=40)
    )
    sfo = await OrganizationService.create_branch_office(
        db, org_admin, BranchOfficeCreate(identifier="SFO-01", location="San Francisco, CA")
    )
    return Workspace(
        organization=organization,
        owner=owner,
        org_admin=org_admin,
        nyc=nyc,
        sfo=sfo,
        nyc_admin=await add_member(db, organization, "nyc.admin@acme-legal.com", MemberRole.branch_admin, nyc),
        nyc_user=await add_member(db, organization, "nyc.user@acme-legal.com", MemberRole.branch_user, nyc, "Finance"),
        sfo_admin=await add_member(db, organization, "sfo.admin@acme-legal.com", MemberRole.branch_admin, sfo),
        unassigned_admin=await add_member(db, organization, "floating@acme-legal.com", MemberRole.branch_admin, None),
    )
