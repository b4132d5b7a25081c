# tests/conftest.py
import os
import tempfile
from datetime import timedelta

import pytest

# configure the app before it is imported: throwaway SQLite file, no background scheduler
_tmpdir = tempfile.mkdtemp(prefix="dreambid-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_tmpdir, "test.db")
os.environ["SCHEDULER_ENABLED"] = "0"
os.environ["JWT_SECRET"] = "test-secret-for-signing-tokens-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

from fastapi.testclient import TestClient  # noqa: E402
from app.activity import activity_logger  # noqa: E402
from app.db import Base, engine, SessionLocal  # noqa: E402
from app.main import app  # noqa: E402
from app.models import User, Property  # noqa: E402
from app.security import hash_password, create_access_token  # noqa: E402
from app.utils import utcnow  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    activity_logger.drain()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="user", is_active=True, email=None, **extra):
        counter["n"] += 1
        user = User(
            email=email or f"{role}{counter['n']}@dreambid.in",
            password_hash=hash_password(PASSWORD),
            full_name=f"Test {role.title()} {counter['n']}",
            role=role,
            is_active=is_active,
            **extra,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_property(db):
    def _make(auction_date=None, auction_status="upcoming", **extra):
        data = {
            "title": "3BHK Apartment",
            "address": "12 MG Road",
            "city": "Bengaluru",
            "reserve_price": 5000000,
            "auction_date": auction_date or utcnow() + timedelta(days=7),
            "auction_status": auction_status,
        }
        data.update(extra)
        obj = Property(**data)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers
