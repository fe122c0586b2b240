import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from habitsync import crud
from habitsync.client.store import LocalStore
from habitsync.db import get_db
from habitsync.main import create_app
from habitsync.models.base import Base
from habitsync.settings import settings


@pytest.fixture()
def test_app():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(engine)

    app = create_app()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app, TestingSessionLocal


@pytest.fixture()
def client(test_app):
    app, _ = test_app
    return TestClient(app)


def _issue_token(session_factory, external_id: str) -> tuple[int, str]:
    with session_factory() as db:
        user = crud.get_or_create_user(db, external_id=external_id)
        token = crud.rotate_user_api_key(db, user.id)
        return user.id, token


@pytest.fixture()
def api_token(test_app):
    _, TestingSessionLocal = test_app
    settings.API_KEY_SECRET = "test-secret"
    settings.API_KEY = None
    _, token = _issue_token(TestingSessionLocal, "test")
    return token


@pytest.fixture()
def auth_headers(api_token):
    return {"Authorization": f"Bearer {api_token}"}


@pytest.fixture()
def other_auth_headers(test_app, api_token):
    _, TestingSessionLocal = test_app
    _, token = _issue_token(TestingSessionLocal, "other")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def local_store():
    store = LocalStore("sqlite://").open()
    try:
        yield store
    finally:
        store.close()
