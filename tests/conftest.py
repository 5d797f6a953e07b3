"""
Test configuration and fixtures.

Provides:
- SQLite database with tables created and dropped per test
- Users of each role and session cookies minted for them
- HTTPX AsyncClient with the session cookie and CSRF header
"""
import os
import tempfile
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Generator

# Settings are read at import time; configure before importing the app.
_TMP_DIR = tempfile.mkdtemp(prefix="desktown-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/test.db")
os.environ["TESTING"] = "1"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ["LOCAL_STORAGE_PATH"] = os.path.join(_TMP_DIR, "objects")
os.environ.pop("REDIS_URL", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from desktown.core import token_store
from desktown.core.deps import COOKIE_NAME, CSRF_HEADER, CSRF_HEADER_VALUE, get_db
from desktown.core.rate_limit import limiter
from desktown.core.security import create_session_token, hash_password
from desktown.db.base import Base
from desktown.db.enums import ApprovalStatus, Role
from desktown.db.models import Office, OfficeService, User
from desktown.db.session import SessionLocal, engine
from desktown.main import app

TEST_PASSWORD = "correct-horse-battery"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh schema per test; app code is free to commit."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Rate-limit counters and employee tokens do not leak between tests."""
    limiter.reset()
    token_store._store = token_store.MemoryTokenStore()
    yield
    token_store._store = None


@pytest.fixture
def user_password() -> str:
    """Plain-text password every make_user account is created with."""
    return TEST_PASSWORD


@pytest.fixture(scope="function")
def make_user(db: Session) -> Callable[..., User]:
    def _make(role: Role = Role.MEMBER, email: str | None = None, **fields) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email or f"user-{uuid.uuid4().hex[:8]}@test.com",
            password_hash=hash_password(TEST_PASSWORD),
            role=role.value,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture(scope="function")
def test_user(make_user) -> User:
    """A member account."""
    return make_user(Role.MEMBER, first_name="Test", last_name="User")


@pytest.fixture(scope="function")
def admin_user(make_user) -> User:
    return make_user(Role.ADMIN, first_name="Ada", last_name="Admin")


@pytest.fixture(scope="function")
def manager_user(make_user) -> User:
    return make_user(Role.MANAGER, first_name="Max", last_name="Manager")


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str
    cookie_name: str = COOKIE_NAME


def session_token_for(user: User) -> str:
    return create_session_token(user.id, user.role, user.token_version)


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    return TestAuth(user=test_user, token=session_token_for(test_user))


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def make_client(db: Session) -> AsyncGenerator[Callable[..., AsyncClient], None]:
    """
    Factory for AsyncClients sharing the test session.

    make_client(user) sends that user's session cookie; make_client() is
    anonymous. The CSRF header is sent unless csrf=False.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    clients: list[AsyncClient] = []

    def _make(user: User | None = None, csrf: bool = True) -> AsyncClient:
        cookies = {COOKIE_NAME: session_token_for(user)} if user else None
        headers = {CSRF_HEADER: CSRF_HEADER_VALUE} if csrf else None
        c = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
            headers=headers,
        )
        clients.append(c)
        return c

    yield _make

    for c in clients:
        await c.aclose()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(make_client) -> AsyncClient:
    """Unauthenticated client for public endpoints."""
    return make_client()


@pytest.fixture(scope="function")
async def authed_client(make_client, test_auth: TestAuth) -> AsyncClient:
    """Member client with session cookie and CSRF header."""
    return make_client(test_auth.user)


@pytest.fixture(scope="function")
async def admin_client(make_client, admin_user: User) -> AsyncClient:
    return make_client(admin_user)


@pytest.fixture(scope="function")
async def manager_client(make_client, manager_user: User) -> AsyncClient:
    return make_client(manager_user)


# =============================================================================
# Storefront Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def make_office(db: Session) -> Callable[..., Office]:
    """Office row; approved and published unless approved=False."""
    def _make(owner: User, approved: bool = True, **fields) -> Office:
        suffix = uuid.uuid4().hex[:8]
        office = Office(
            name=fields.pop("name", f"Office {suffix}"),
            slug=fields.pop("slug", f"office-{suffix}"),
            owner_id=owner.id,
            approval_status=(ApprovalStatus.APPROVED if approved else ApprovalStatus.PENDING).value,
            is_published=approved,
            **fields,
        )
        db.add(office)
        db.commit()
        db.refresh(office)
        return office
    return _make


@pytest.fixture(scope="function")
def make_service(db: Session) -> Callable[..., OfficeService]:
    def _make(office: Office, price: int = 5000, **fields) -> OfficeService:
        suffix = uuid.uuid4().hex[:8]
        service = OfficeService(
            office_id=office.id,
            owner_user_id=office.owner_id,
            name=fields.pop("name", f"Consultation {suffix}"),
            slug=f"consultation-{suffix}",
            share_token=uuid.uuid4().hex,
            price=price,
            **fields,
        )
        db.add(service)
        db.commit()
        db.refresh(service)
        return service
    return _make
