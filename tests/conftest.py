from pathlib import Path
import os
import sys

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-alumni-connect-0123456789")
os.environ.setdefault("APP_TIMEZONE", "UTC")

ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import pytest
from fastapi.testclient import TestClient

from auth import create_access_token
from database import Base, SessionLocal, engine
from models import College, User
from server import app


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def make_college(db):
    def _make(name="Test College", domain=None):
        college = College(name=name, domain=domain)
        db.add(college)
        db.commit()
        db.refresh(college)
        return college
    return _make


@pytest.fixture
def make_user(db):
    counter = {"value": 0}

    def _make(college=None, role="student", first_name="Test", user_id=None):
        counter["value"] += 1
        user = User(
            id=user_id or f"user-{counter['value']}",
            email=f"user{counter['value']}@example.com",
            first_name=first_name,
            last_name="User",
            college_id=college.id if college else None,
            role=role if college else None,
            department="CSE" if college else None,
            batch="2020" if college else None,
            is_onboarded=college is not None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


def auth_headers_for(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture
def auth_headers():
    return auth_headers_for
