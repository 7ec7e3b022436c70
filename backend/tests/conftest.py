import os
# Override DATABASE_URL before any app imports to avoid PostgreSQL driver requirement
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
# Keep external integrations disabled by default for unit/API tests. Individual
# tests can opt-in by monkeypatching settings.
os.environ["DISABLE_CELERY"] = "true"
os.environ["RESEND_API_KEY"] = ""
os.environ["FRONTEND_URL"] = "http://localhost:3000"
os.environ["ASSIGNMENT_SECRET_KEY"] = "test-assignment-secret"

import uuid
import pytest
from fastapi.testclient import TestClient
from fastapi_users.password import PasswordHelper
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from app.platform.database import Base, get_db
from app.main import app
from app.platform.middleware import _rate_limit_store
from app.models.assessment import Assessment, Dimension, Field
from app.models.client import Client
from app.models.profile import AccessLevel, Profile
from app.models.user import User

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "TestPass123!"
_password_helper = PasswordHelper()

# Enable foreign key support for SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    Base.metadata.create_all(bind=engine)
    # Clear in-memory rate limit state between tests to prevent 429 bleed-through
    _rate_limit_store.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    _rate_limit_store.clear()
    Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# Factory helpers: create test entities quickly and consistently
# ---------------------------------------------------------------------------

_counter = 0

def _unique_id() -> str:
    global _counter
    _counter += 1
    return f"{_counter}-{uuid.uuid4().hex[:8]}"


def create_client_org(db, name=None):
    suffix = _unique_id()
    org = Client(name=name or f"Client {suffix}", slug=f"client-{suffix}")
    db.add(org)
    db.commit()
    db.refresh(org)
    return org


def create_profile(
    db,
    *,
    email=None,
    name="Test User",
    username=None,
    access_level=AccessLevel.MEMBER,
    client=None,
    with_login=False,
    password=DEFAULT_PASSWORD,
):
    """Create a profile, optionally with a FastAPI-Users login attached."""
    email = email or f"user-{_unique_id()}@test.com"
    profile = Profile(
        email=email,
        name=name,
        username=username,
        access_level=access_level.value if isinstance(access_level, AccessLevel) else access_level,
        client_id=client.id if client is not None else None,
    )
    if with_login:
        user = User(
            email=email,
            hashed_password=_password_helper.hash(password),
            is_active=True,
            is_superuser=False,
            is_verified=True,
            full_name=name,
        )
        db.add(user)
        db.flush()
        profile.auth_user_id = user.id
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


def create_login_only(db, email=None, password=DEFAULT_PASSWORD):
    """A login with no profile behind it."""
    user = User(
        email=email or f"orphan-{_unique_id()}@test.com",
        hashed_password=_password_helper.hash(password),
        is_active=True,
        is_superuser=False,
        is_verified=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_assessment(db, *, title="Leadership Survey", is_360=False, number_of_questions=None, dimension_question_counts=None):
    assessment = Assessment(
        title=title,
        is_360=is_360,
        number_of_questions=number_of_questions,
        dimension_question_counts=dimension_question_counts,
    )
    db.add(assessment)
    db.commit()
    db.refresh(assessment)
    return assessment


def add_dimension(db, assessment, name="Communication", order=0):
    dimension = Dimension(assessment_id=assessment.id, name=name, order=order)
    db.add(dimension)
    db.commit()
    db.refresh(dimension)
    return dimension


def add_field(db, assessment, order, *, dimension=None, type="rich_text", content=None):
    field = Field(
        assessment_id=assessment.id,
        dimension_id=dimension.id if dimension is not None else None,
        type=type,
        content=content or f"Question {order}",
        order=order,
    )
    db.add(field)
    db.commit()
    db.refresh(field)
    return field


def login_user(client, email, password=DEFAULT_PASSWORD):
    """Log in a user via the API (FastAPI-Users JWT). Returns the response."""
    return client.post(
        "/api/v1/auth/jwt/login",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )


def auth_headers(client, email, password=DEFAULT_PASSWORD):
    login_resp = login_user(client, email, password)
    assert login_resp.status_code == 200, f"Login failed: {login_resp.text}"
    token = login_resp.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def create_admin(db, client, *, access_level=AccessLevel.SUPER_ADMIN, org=None):
    """Create an admin profile with a login and return (profile, headers)."""
    profile = create_profile(db, access_level=access_level, client=org, with_login=True, name="Admin")
    return profile, auth_headers(client, profile.email)


def batch_payload(user_ids, assessment_ids, **overrides):
    payload = {
        "user_ids": list(user_ids),
        "assessment_ids": list(assessment_ids),
        "expires": "2099-12-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload
