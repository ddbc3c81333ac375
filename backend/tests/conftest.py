"""
Pytest fixtures for Tasklister backend tests.

Provides test database setup, two registered instances, and helpers for
logging users in over the API.
"""

import pytest
from tasklister import create_app
from tasklister.extensions import db
from tasklister.services import auth_service, session_service


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'BCRYPT_ROUNDS': 4,
    'JWT_SECRET': 'test-jwt-secret',
    'LOG_REQUESTS': False,
}

ADMIN_PASSWORD = "s3cret-pass"


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


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def acme(db_session):
    """Instance 'acme' with admin 'boss'."""
    instance, admin, token = auth_service.register_instance("Acme", "boss", ADMIN_PASSWORD)
    return instance


@pytest.fixture(scope='function')
def other(db_session):
    """Second tenant, 'other', with admin 'chief'."""
    instance, admin, token = auth_service.register_instance("Other", "chief", ADMIN_PASSWORD)
    return instance


def claim_for(token: str):
    """Decode a token issued during the test into its SessionClaim."""
    claim = session_service.validate_session(token)
    assert claim is not None
    return claim


@pytest.fixture(scope='function')
def acme_admin(acme):
    user, token = auth_service.authenticate_admin("acme", "boss", ADMIN_PASSWORD)
    return claim_for(token)


@pytest.fixture(scope='function')
def alice(acme):
    user, token = auth_service.login_user("acme", "alice")
    return claim_for(token)


@pytest.fixture(scope='function')
def bob(acme):
    user, token = auth_service.login_user("acme", "bob")
    return claim_for(token)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def login_headers(client, slug: str, username: str) -> dict:
    """Nickname login over the API; returns bearer headers."""
    response = client.post('/api/login/user', json={'slug': slug, 'username': username})
    assert response.status_code == 200, response.get_json()
    return auth_headers(response.get_json()['token'])


def admin_headers(client, slug: str, username: str, password: str = ADMIN_PASSWORD) -> dict:
    response = client.post('/api/login/admin', json={
        'slug': slug,
        'username': username,
        'password': password,
    })
    assert response.status_code == 200, response.get_json()
    return auth_headers(response.get_json()['token'])
