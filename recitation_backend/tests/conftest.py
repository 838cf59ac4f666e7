import os

os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_ON_STARTUP"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.auth import hash_password
from src.api.db import create_db_engine, db_session_dep
from src.api.main import app
from src.api.models import ROLE_ADMIN, Base, User

from helpers import login, register


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _session():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[db_session_dep] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice(client):
    return register(client, "Alice", "alice@example.com")


@pytest.fixture
def bob(client):
    return register(client, "Bob", "bob@example.com")


@pytest.fixture
def admin(client, db):
    db.add(
        User(
            name="Site Admin",
            email="root@example.com",
            password_hash=hash_password("rootpass"),
            role=ROLE_ADMIN,
        )
    )
    db.commit()
    return login(client, "root@example.com", "rootpass")
