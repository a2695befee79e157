"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["APP_ENV"] = "local"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from app.main import app
from app.db.base import Base
from app.core.deps import get_db
from app.core.security import create_access_token, hash_password

# Import all models to ensure they're registered with Base.metadata
from app.models import (
    User,
    Role,
    Entity,
    Membership,
    NotificationPreference,
    Starter,
    Room,
)  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email, role=Role.NONE, password="testpass123", active=True, name=None):
    user = User(
        email=email,
        name=name or email.split("@")[0].title(),
        role=role.value,
        password_hash=hash_password(password),
        active=active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_membership(db, user, entity, can_edit=False):
    membership = Membership(user_id=user.id, entity_id=entity.id, can_edit=can_edit)
    db.add(membership)
    db.commit()
    db.refresh(user)
    return membership


def headers_for(user):
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def entity_a(db):
    entity = Entity(name="Acme", color_hex="#ff0000", notify_emails=["hr@acme.test"])
    db.add(entity)
    db.commit()
    db.refresh(entity)
    return entity


@pytest.fixture
def entity_b(db):
    entity = Entity(name="Beta", color_hex="#00ff00", notify_emails=[])
    db.add(entity)
    db.commit()
    db.refresh(entity)
    return entity


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", Role.HR_ADMIN)


@pytest.fixture
def global_viewer(db):
    return make_user(db, "global@example.com", Role.GLOBAL_VIEWER)


@pytest.fixture
def editor(db, entity_a):
    """Entity editor with edit rights on entity A"""
    user = make_user(db, "editor@example.com", Role.ENTITY_EDITOR)
    add_membership(db, user, entity_a, can_edit=True)
    return user


@pytest.fixture
def viewer(db, entity_a):
    """Entity viewer with read-only membership on entity A"""
    user = make_user(db, "viewer@example.com", Role.ENTITY_VIEWER)
    add_membership(db, user, entity_a, can_edit=False)
    return user


@pytest.fixture
def outsider(db):
    """Authenticated user without any membership"""
    return make_user(db, "outsider@example.com", Role.NONE)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def room(db):
    room = Room(name="Boardroom", capacity=10, location="1st floor", ms_resource_email="boardroom@example.com", active=True)
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing email instead of calling the provider"""
    sent = []

    def fake_send_email(to, subject, html, text=None):
        sent.append({"to": to, "subject": subject, "html": html})
        return True

    monkeypatch.setattr("app.services.email_service.send_email", fake_send_email)
    return sent


@pytest.fixture
def user_factory(db):
    """Create users: user_factory("a@b.c", Role.ENTITY_EDITOR, memberships={entity: True})"""
    def _create(email, role=Role.NONE, memberships=None, **kwargs):
        user = make_user(db, email, role, **kwargs)
        for entity, can_edit in (memberships or {}).items():
            add_membership(db, user, entity, can_edit=can_edit)
        return user
    return _create


@pytest.fixture
def auth_headers():
    return headers_for
