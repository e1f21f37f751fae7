import itertools
import os
from datetime import datetime

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.db.base import Base
from app.db.get_db import get_db, init_db
from app.models.enums import AppRole
from app.models.rating import Rating
from app.models.store import Store
from app.models.user import User
from app.utils.auth import create_access_token
from app.utils.helpers import hash_password

DEFAULT_PASSWORD = "Secret#123"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    init_db(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    # Not used as a context manager so the startup hooks stay off the real database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role=AppRole.user, name=None, email=None, password=DEFAULT_PASSWORD, address="12 Market Street"):
        n = next(counter)
        now = datetime.utcnow()
        user = User(
            name=name or f"Registered Account Number {n:03d}",
            email=email or f"{role.value}{n}@example.com",
            hashed_password=hash_password(password),
            address=address,
            role=role,
            created_at=now,
            updated_at=now,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_store(db):
    counter = itertools.count(1)

    def _make(owner, name=None, email=None, address=None):
        n = next(counter)
        now = datetime.utcnow()
        store = Store(
            name=name or f"Corner Shop {n}",
            email=email or f"shop{n}@example.com",
            address=address or f"{n} High Street",
            owner_id=owner.id,
            created_at=now,
            updated_at=now,
        )
        db.add(store)
        db.commit()
        db.refresh(store)
        return store

    return _make


@pytest.fixture
def make_rating(db):
    def _make(user, store, value, created_at=None):
        created_at = created_at or datetime.utcnow()
        rating = Rating(
            user_id=user.id,
            store_id=store.id,
            rating=value,
            created_at=created_at,
            updated_at=created_at,
        )
        db.add(rating)
        db.commit()
        db.refresh(rating)
        return rating

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def admin(make_user):
    return make_user(role=AppRole.admin, name="System Administrator Account", email="admin@example.com")


@pytest.fixture
def owner(make_user):
    return make_user(role=AppRole.store_owner, name="Store Owner Account Alpha", email="owner@example.com")


@pytest.fixture
def normal_user(make_user):
    return make_user(name="Normal Platform User Account", email="user@example.com")
