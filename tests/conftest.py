"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import support_models  # noqa: F401  (registers test tables on Base)
from crudcore.api.app import create_app
from crudcore.database.schema import Base


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def user_data():
    return {
        "name": "John Doe",
        "email": "john.doe@gmail.com",
        "password": "password",
    }


@pytest.fixture
def users_array():
    """Six users, the third and fourth enabled."""
    return [
        {
            "name": f"User_{i}",
            "email": f"user_{i}@gmail.com",
            "password": "password",
            "enabled": i in (2, 3),
        }
        for i in range(6)
    ]


@pytest.fixture
def client():
    """API client backed by a fresh in-memory database."""
    app = create_app({"database": {"url": "sqlite://"}, "logging": {"level": "WARNING"}})
    with TestClient(app) as test_client:
        yield test_client
    app.state.engine.dispose()
