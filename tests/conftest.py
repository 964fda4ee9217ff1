import os

# Settings are read at import time; keep tests away from any real database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SKIP_DB_CHECK"] = "True"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("ADMIN_EMAIL", None)

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fundflow.database import Base, get_db
from fundflow.main import app
from fundflow.models import UserRole, UserStatus
from fundflow.services.auth_service import create_user
from fundflow.utils.security import Identity, create_access_token


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def make_user(db):
    """Factory for users stored directly through the service layer"""
    def _make(
        name="Alice",
        email=None,
        password="secret123",
        mobile="5550100",
        balance="0",
        status=UserStatus.APPROVED,
        role=UserRole.USER,
    ):
        email = email or f"{name.lower()}@fundflow.io"
        return create_user(
            db, name, email, password, mobile,
            role=role, status=status, balance=Decimal(balance),
        )
    return _make


@pytest.fixture
def identity_of():
    def _identity(user):
        return Identity(user_id=user.id, role=user.role, name=user.name, email=user.email)
    return _identity


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token(data={
            "sub": str(user.id),
            "name": user.name,
            "email": user.email,
            "role": user.role.value,
        })
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin", email="admin@fundflow.io", role=UserRole.ADMIN)
