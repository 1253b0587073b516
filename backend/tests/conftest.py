import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.gettempdir(), "blogcms-test", "unused.db"))
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "blogcms-test", "app.log"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from blogcms.database import Base, get_db
from blogcms.main import app
from blogcms.models import Role
from blogcms.services.users import register_user

PASSWORD = "s3cret-pass"


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Create a committed user and return its id."""
    def _make_user(name, email, role=Role.AUTHOR):
        session = session_factory()
        try:
            user = register_user(session, name, email, PASSWORD, PASSWORD, role=role)
            session.commit()
            return user.id
        finally:
            session.close()
    return _make_user


@pytest.fixture
def login(client):
    """Return Authorization headers for an existing user."""
    def _login(email):
        response = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _login


@pytest.fixture
def author(db):
    user = register_user(db, "Alice", "alice@example.com", PASSWORD, PASSWORD)
    db.commit()
    return user


@pytest.fixture
def other_author(db):
    user = register_user(db, "Bob", "bob@example.com", PASSWORD, PASSWORD)
    db.commit()
    return user
