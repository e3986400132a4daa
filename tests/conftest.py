import os

# Must be set before ancestortree.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ancestortree.config import settings
from ancestortree.core.policy import PolicyEngine
from ancestortree.core.policy_config import get_policy_config
from ancestortree.database import Base, get_db
from ancestortree.main import app
from ancestortree.models.profile import Profile


ADMIN_USER_ID = "11111111-1111-1111-1111-111111111111"
MEMBER_USER_ID = "22222222-2222-2222-2222-222222222222"


def make_token(user_id, secret=None, audience=None, expires_in=timedelta(hours=1)):
    payload = {
        "sub": user_id,
        "aud": audience or settings.JWT_AUDIENCE,
        "exp": datetime.utcnow() + expires_in,
    }
    return jwt.encode(payload, secret or settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_header(user_id):
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def policy_engine():
    return PolicyEngine(get_policy_config("2026-02-26"))


@pytest.fixture
def field_filtering_engine():
    return PolicyEngine(get_policy_config("field-filtering"))


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(db_engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def profiles(db):
    db.add_all([
        Profile(user_id=ADMIN_USER_ID, email="admin@example.com", full_name="Admin", role="admin"),
        Profile(user_id=MEMBER_USER_ID, email="member@example.com", full_name="Member", role="member"),
    ])
    db.commit()


@pytest.fixture
def client(db_engine, profiles):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return auth_header(ADMIN_USER_ID)


@pytest.fixture
def member_headers():
    return auth_header(MEMBER_USER_ID)
