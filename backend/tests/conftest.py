"""Pytest configuration and fixtures."""

import os
import tempfile

# Settings are read at import time; point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="dineflow-uploads-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dineflow.core.cache import cache
from dineflow.core.policy import UserRole
from dineflow.core.rbac import TokenData
from dineflow.core.security import create_access_token, get_password_hash
from dineflow.db.base import Base
from dineflow.db.session import get_db
from dineflow.main import app
# Import all models to ensure they're registered with Base.metadata
from dineflow.models import *
from dineflow.models.business import Business
from dineflow.models.restaurant import DiningTable, MenuItem
from dineflow.models.user import StaffStatus, User
from dineflow.services.identity_service import FederatedIdentity, get_identity_provider
from dineflow.core.exceptions import IdentityProviderError

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def clear_cache():
    """Cached user and business records are keyed by id, which repeats across tests."""
    cache.clear()
    yield
    cache.clear()


class FakeIdentityProvider:
    """Accepts tokens of the form ``uid|email|name``."""

    def verify(self, id_token: str) -> FederatedIdentity:
        parts = id_token.split("|")
        if len(parts) < 2:
            raise IdentityProviderError("Sign-in could not be verified")
        name = parts[2] if len(parts) > 2 else None
        return FederatedIdentity(uid=parts[0], email=parts[1].lower(), name=name)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: FakeIdentityProvider()
    # Disable rate limiter during tests to avoid flaky failures
    from dineflow.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def business(db_session: Session) -> Business:
    """Create a test business."""
    biz = Business(name="Spice Route", business_type="restaurant", address="12 MG Road", phone="080-1234")
    db_session.add(biz)
    db_session.commit()
    db_session.refresh(biz)
    return biz


@pytest.fixture
def make_user(db_session: Session, business: Business):
    """Factory creating an active member of the test business."""
    def _make(role: UserRole, email: str = None, password: str = "testpass123") -> User:
        user = User(
            email=email or f"{role.value}@spiceroute.in",
            name=f"Test {role.value.title()}",
            password_hash=get_password_hash(password),
            role=role,
            status=StaffStatus.ACTIVE,
            business_id=business.id,
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        if role == UserRole.OWNER and business.owner_id is None:
            business.owner_id = user.id
            db_session.commit()
        return user
    return _make


def _headers_for(user: User) -> dict:
    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    return {"Authorization": f"Bearer {token}"}


def _actor_for(user: User) -> TokenData:
    """Service-level caller, as the route dependencies build it."""
    return TokenData(
        user_id=user.id,
        email=user.email,
        role=user.role,
        business_id=user.business_id,
        name=user.display_name,
    )


@pytest.fixture
def owner(make_user) -> User:
    return make_user(UserRole.OWNER)


@pytest.fixture
def manager(make_user) -> User:
    return make_user(UserRole.MANAGER)


@pytest.fixture
def cashier(make_user) -> User:
    return make_user(UserRole.CASHIER)


@pytest.fixture
def chef(make_user) -> User:
    return make_user(UserRole.CHEF)


@pytest.fixture
def waiter(make_user) -> User:
    return make_user(UserRole.STAFF)


@pytest.fixture
def owner_headers(owner) -> dict:
    return _headers_for(owner)


@pytest.fixture
def manager_headers(manager) -> dict:
    return _headers_for(manager)


@pytest.fixture
def cashier_headers(cashier) -> dict:
    return _headers_for(cashier)


@pytest.fixture
def chef_headers(chef) -> dict:
    return _headers_for(chef)


@pytest.fixture
def waiter_headers(waiter) -> dict:
    return _headers_for(waiter)


@pytest.fixture
def tables(db_session: Session, business: Business) -> dict:
    """Tables 1-8 on the ground floor, keyed by number."""
    created = {}
    for number in range(1, 9):
        table = DiningTable(
            business_id=business.id,
            table_number=number,
            capacity=4 if number < 7 else 6,
            floor="Ground Floor",
        )
        db_session.add(table)
        created[number] = table
    db_session.commit()
    for table in created.values():
        db_session.refresh(table)
    return created


@pytest.fixture
def menu(db_session: Session, business: Business) -> dict:
    """A small menu with one unavailable item."""
    items = {
        "tikka": MenuItem(business_id=business.id, name="Paneer Tikka", category="Starters",
                          price=Decimal("100.00"), available=True),
        "dal": MenuItem(business_id=business.id, name="Dal Tadka", category="Main Course",
                        price=Decimal("50.00"), available=True),
        "biryani": MenuItem(business_id=business.id, name="Veg Biryani", category="Main Course",
                            price=Decimal("180.00"), available=False),
    }
    db_session.add_all(items.values())
    db_session.commit()
    for item in items.values():
        db_session.refresh(item)
    return items


@pytest.fixture
def headers_for():
    """Bearer headers for any user record."""
    return _headers_for


@pytest.fixture
def actor_for():
    """TokenData for calling services directly."""
    return _actor_for
