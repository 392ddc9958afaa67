"""
Pytest fixtures for the school inventory test suite.

Provides:
- A SQLite database file per test, built with the same engine factory the
  application uses (so ``BEGIN IMMEDIATE`` serialises writers)
- Seeded departments and users for every role
- Factories for inventory items and item requests
- A FastAPI TestClient wired to the test database
"""

from datetime import timedelta
from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

import school_inventory.models  # noqa: F401  registers every table on Base
from school_inventory import crud
from school_inventory.api.deps import actor_from_user
from school_inventory.core.security import create_access_token
from school_inventory.db.database import Base, create_db_engine, get_db
from school_inventory.main import app
from school_inventory.models.department import Department
from school_inventory.models.inventory import InventoryItem
from school_inventory.models.user import User, UserRole
from school_inventory.schemas import Actor, InventoryCreate, UserCreate
from school_inventory.services.request_lifecycle import lifecycle

TEST_PASSWORD = "secret123"


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'inventory_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Session:
    """Session for arranging and asserting.

    SQLite transactions start with BEGIN IMMEDIATE, so a read leaves the
    write lock held until the transaction ends. Fixtures commit before
    returning so other sessions (API requests, worker threads) are not
    blocked; ``expire_on_commit=False`` keeps the returned objects usable.
    """
    session = session_factory(expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Seed data
# =============================================================================


@pytest.fixture
def departments(db) -> Dict[str, Department]:
    science = Department(name="Science", description="Labs and science classes")
    arts = Department(name="Arts", description="Art and music rooms")
    db.add_all([science, arts])
    db.commit()
    return {"science": science, "arts": arts}


@pytest.fixture
def users(db, departments) -> Dict[str, User]:
    """One user per role, plus a second staff member in Science."""
    specs = {
        "staff": ("staff@school.test", "Sam Staff", UserRole.STAFF, "science"),
        "other_staff": ("other@school.test", "Olu Other", UserRole.STAFF, "science"),
        "arts_staff": ("arts@school.test", "Ada Arts", UserRole.STAFF, "arts"),
        "head": ("head@school.test", "Hana Head", UserRole.DEPARTMENT_HEAD, "science"),
        "arts_head": ("artshead@school.test", "Ari Head", UserRole.DEPARTMENT_HEAD, "arts"),
        "stock_manager": ("stock@school.test", "Stella Stock", UserRole.STOCK_MANAGER, None),
        "admin": ("admin@school.test", "Alex Admin", UserRole.ADMIN, None),
    }
    created = {}
    for key, (email, full_name, role, department) in specs.items():
        created[key] = crud.user.create(
            db,
            obj_in=UserCreate(
                email=email,
                full_name=full_name,
                role=role,
                department_id=departments[department].id if department else None,
                password=TEST_PASSWORD,
            ),
        )
    db.commit()
    return created


@pytest.fixture
def actors(db, users) -> Dict[str, Actor]:
    built = {key: actor_from_user(user) for key, user in users.items()}
    db.commit()
    return built


@pytest.fixture
def make_item(db, actors) -> Callable[..., InventoryItem]:
    def _make(name: str = "Beakers", quantity: int = 10, category: str = "Lab", **kwargs) -> InventoryItem:
        item = crud.inventory.add_item(
            db,
            obj_in=InventoryCreate(name=name, category=category, quantity=quantity, **kwargs),
            actor=actors["stock_manager"],
        )
        db.commit()
        return item

    return _make


@pytest.fixture
def approved_request(db, actors, make_item):
    """Submit a request as Science staff and give it final approval."""

    def _make(quantity: int = 4, item: InventoryItem = None, requester: str = "staff"):
        item = item or make_item()
        request = lifecycle.submit_request(
            db, actor=actors[requester], item_id=item.id, quantity=quantity
        )
        approved = lifecycle.approve(db, request_id=request.id, actor=actors["admin"])
        db.commit()
        return approved

    return _make


# =============================================================================
# API fixtures
# =============================================================================


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(users) -> Callable[[str], Dict[str, str]]:
    def _headers(key: str) -> Dict[str, str]:
        token = create_access_token(subject=users[key].id, expires_delta=timedelta(minutes=5))
        return {"Authorization": f"Bearer {token}"}

    return _headers
