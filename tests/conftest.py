"""Shared fixtures: in-memory database, app client and users."""

import os
import tempfile

# Set test environment variables before any project imports
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="postboard-uploads-"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")
os.environ.setdefault("WEBHOOK_VERIFY_TOKEN", "test-verify-token")
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("WEBHOOK_APP_SECRET", None)

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from postboard.db.models import SocialAccount, SocialPlatform, UserRole
from tests.db_utils import SyncClient, auth_headers_for, make_user


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Fresh in-memory SQLite database shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_session(test_engine):
    with Session(test_engine) as session:
        yield session


@pytest.fixture(scope="function")
def test_client(test_engine):
    """App client with the session dependency pointed at the test database."""
    from api.main import app
    from postboard.db.engine import get_session_dependency

    def override_session():
        with Session(test_engine) as session:
            yield session

    app.dependency_overrides[get_session_dependency] = override_session
    client = SyncClient(app)
    yield client
    app.dependency_overrides.clear()


# =============================================================================
# Data
# =============================================================================


@pytest.fixture
def admin_user(test_session):
    """The demo login: admin@test.com / password123."""
    return make_user(test_session)


@pytest.fixture
def other_user(test_session):
    return make_user(test_session, email="other@test.com", username="other", role=UserRole.editor)


@pytest.fixture
def auth_headers(admin_user):
    return auth_headers_for(admin_user)


@pytest.fixture
def facebook_page(test_session, admin_user):
    """An active Facebook page linked to the admin user."""
    account = SocialAccount(
        user_id=admin_user.id,
        platform=SocialPlatform.facebook,
        account_name="Page 1",
        account_id="fb-account-1",
        page_id="page-123",
        access_token="secret-page-token",
    )
    test_session.add(account)
    test_session.commit()
    test_session.refresh(account)
    return account

