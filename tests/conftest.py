"""
Shared test fixtures for the Job Tracker tests.

Every test gets a fresh in-memory SQLite database (StaticPool, so the API's
threadpool and the test share one connection), a temporary upload
directory, and a TestClient whose session dependency points at that
database.
"""

import pytest
from fastapi.testclient import TestClient
from loguru import logger
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from job_tracker.config import config

# ============================================================
# Test configuration - set before anything signs a token
# ============================================================

config.auth.jwt_secret = "test-secret"
config.auth.bcrypt_rounds = 4
config.server.environment = "test"

from job_tracker.api.deps import get_db  # noqa: E402
from job_tracker.api.main import app  # noqa: E402
from job_tracker.database.db import create_db_engine, init_database  # noqa: E402
from job_tracker.services import applications as application_service  # noqa: E402
from job_tracker.services import auth as auth_service  # noqa: E402
from job_tracker.services import companies as company_service  # noqa: E402


# ============================================================
# Database
# ============================================================


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Uploaded files land in a per-test directory"""
    path = tmp_path / "uploads"
    monkeypatch.setattr(config.uploads, "upload_dir", str(path))
    return path


@pytest.fixture
def log_messages():
    """Collect loguru messages at WARNING and above"""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


# ============================================================
# API client
# ============================================================


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================
# Users and sample data
# ============================================================


@pytest.fixture
def user(db_session):
    return auth_service.register_user(db_session, "alex@example.com", "password123", "Alex", "Doe")


@pytest.fixture
def other_user(db_session):
    return auth_service.register_user(db_session, "sam@example.com", "password456", "Sam", "Roe")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {auth_service.create_access_token(user)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {auth_service.create_access_token(other_user)}"}


@pytest.fixture
def make_company(db_session):
    def _make(owner, name="Acme Corp", **fields):
        return company_service.create_company(db_session, owner.id, {"name": name, **fields})
    return _make


@pytest.fixture
def make_application(db_session, make_company):
    def _make(owner, company=None, position_title="Software Engineer", **fields):
        company = company or make_company(owner)
        data = {"company_id": company.id, "position_title": position_title, **fields}
        return application_service.create_application(db_session, owner.id, data)
    return _make


@pytest.fixture
def company(user, make_company):
    return make_company(user)


@pytest.fixture
def application(user, company, make_application):
    return make_application(user, company)
