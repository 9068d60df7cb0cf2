# Test Configuration
import os

# Settings are read at import time; point the app database at in-memory SQLite
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOAD_SAVED_CONNECTIONS"] = "false"
os.environ["LOG_JSON"] = "false"

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from dbworks.database import Base, app_engine, AppSessionLocal
from dbworks.models import (
    Organization,
    AppUser,
    Group,
    SavedConnection,
    ConnectionType,
    SUPER_ADMIN_ROLE,
)
from dbworks.connections import ConnectionInfo, ConnectionRegistry
from dbworks.connections.datasources import SQLiteDataSource
from dbworks.security import SqlAlchemyGrantStore, PermissionResolver

ORDER_COUNT = 150


@pytest.fixture
def db():
    """App database session on a freshly created schema."""
    Base.metadata.create_all(bind=app_engine)
    session = AppSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=app_engine)


@pytest.fixture
def seed(db):
    """
    Users, a group and two connections.

    owner owns `conn`; alice and bob are in the analysts group; carol has
    nothing; admin is a super admin. solo belongs to no organization.
    """
    org = Organization(name="Acme")
    db.add(org)
    db.flush()

    admin = AppUser(organization_id=org.id, name="Admin", email="admin@acme.test", role=SUPER_ADMIN_ROLE)
    owner = AppUser(organization_id=org.id, name="Owner", email="owner@acme.test")
    alice = AppUser(organization_id=org.id, name="Alice", email="alice@acme.test")
    bob = AppUser(organization_id=org.id, name="Bob", email="bob@acme.test")
    carol = AppUser(organization_id=org.id, name="Carol", email="carol@acme.test")
    solo = AppUser(name="Solo", email="solo@example.test")
    db.add_all([admin, owner, alice, bob, carol, solo])
    db.flush()

    analysts = Group(organization_id=org.id, name="analysts")
    analysts.members.extend([alice, bob])
    db.add(analysts)

    conn = SavedConnection(
        organization_id=org.id,
        owner_user_id=owner.id,
        name="sales",
        db_type=ConnectionType.SQLITE.value,
        database_name=":memory:",
    )
    other = SavedConnection(
        organization_id=org.id,
        name="warehouse",
        db_type=ConnectionType.SQLITE.value,
        database_name=":memory:",
    )
    db.add_all([conn, other])
    db.commit()

    return SimpleNamespace(
        org=org,
        admin=admin,
        owner=owner,
        alice=alice,
        bob=bob,
        carol=carol,
        solo=solo,
        analysts=analysts,
        conn=conn,
        other=other,
    )


@pytest.fixture
def grant_store(db):
    return SqlAlchemyGrantStore(db)


@pytest.fixture
def resolver(grant_store):
    return PermissionResolver(grant_store)


@pytest.fixture
def sales_engine():
    """In-memory SQLite data source contents: `orders` with a primary key, `audit_log` without."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        conn.execute(text("""
            CREATE TABLE orders (
                id INTEGER PRIMARY KEY,
                customer VARCHAR(50) NOT NULL,
                amount INTEGER,
                status TEXT DEFAULT 'new',
                note TEXT
            )
        """))
        conn.execute(text("CREATE TABLE audit_log (message TEXT)"))
        conn.execute(
            text("INSERT INTO orders (id, customer, amount, status) VALUES (:id, :customer, :amount, :status)"),
            [
                {
                    "id": i,
                    "customer": f"customer-{i:03d}",
                    "amount": i * 10,
                    "status": "paid" if i % 3 == 0 else "new",
                }
                for i in range(1, ORDER_COUNT + 1)
            ]
        )
    yield engine
    engine.dispose()


@pytest.fixture
def datasource(sales_engine):
    return SQLiteDataSource(sales_engine)


@pytest.fixture
def registry(seed, datasource):
    registry = ConnectionRegistry()
    registry.insert(ConnectionInfo.from_saved(seed.conn), datasource)
    return registry


@pytest.fixture
def client(registry):
    """Test client with the seeded registry; the lifespan is not run."""
    from dbworks.main import create_app

    app = create_app()
    app.state.registry = registry
    return TestClient(app)
