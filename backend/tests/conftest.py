"""
Pytest fixtures for the ticketing backend tests.

Provides test database setup, user/event factories, auth headers, and the
Flask test client.
"""

from datetime import timedelta

import pytest

from ticketing import create_app
from ticketing.extensions import db
from ticketing.models import Event, ROLE_ADMIN, ROLE_USER
from ticketing.services import auth_service
from ticketing.services.credential_service import get_credential_service
from ticketing.time_utils import utcnow


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'JWT_SECRET_KEY': 'test-signing-key',
    # bcrypt's minimum cost; keeps the suite fast
    'BCRYPT_ROUNDS': 4,
    'LOG_LEVEL': 'WARNING',
}

DEFAULT_PASSWORD = "secret1"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh data for each test; the schema is kept."""
    with app.app_context():
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make_user(name=None, email=None, password=DEFAULT_PASSWORD, role=ROLE_USER):
        counter["n"] += 1
        n = counter["n"]
        return auth_service.create_user(
            name or f"User {n}",
            email or f"user{n}@example.com",
            password,
            role=role,
        )

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user(name="Regular User", email="user@example.com")


@pytest.fixture
def other_user(make_user):
    return make_user(name="Other User", email="other@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(name="Admin User", email="admin@example.com", role=ROLE_ADMIN)


@pytest.fixture
def make_event(db_session):
    def _make_event(capacity=10, days_ahead=30, title="Launch Party", price="25.00"):
        event = Event(
            title=title,
            description="An evening of demos",
            date=utcnow() + timedelta(days=days_ahead),
            location="Main Hall",
            capacity=capacity,
            price=price,
        )
        db_session.add(event)
        db_session.commit()
        return event

    return _make_event


@pytest.fixture
def event(make_event):
    return make_event(capacity=5)


def token_for(user) -> str:
    return get_credential_service().issue_token(user.id, user.role)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def user_headers(user):
    return auth_headers(token_for(user))


@pytest.fixture
def other_headers(other_user):
    return auth_headers(token_for(other_user))


@pytest.fixture
def admin_headers(admin):
    return auth_headers(token_for(admin))


@pytest.fixture
def headers_for():
    """Build Authorization headers for an arbitrary user."""
    return lambda user: auth_headers(token_for(user))
