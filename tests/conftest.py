import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from product_service.config import Settings
from product_service.db import Base, make_session_factory
from product_service.main import create_app


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", jwt_secret="test-secret")


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same tables
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    db = make_session_factory(engine)()
    yield db
    db.close()


@pytest.fixture
def client(settings, engine):
    app = create_app(settings, engine)
    with TestClient(app) as c:
        yield c
