"""Shared fixtures: an app on an in-memory database and bearer-token actors."""

from dataclasses import dataclass

import pytest

from affiflow import create_app
from affiflow.auth import SessionPrincipal, issue_token
from affiflow.config import Config
from affiflow.extensions import db
from affiflow.models import Membership, PlatformRole, User, WorkspaceRole

DEFAULT_PASSWORD = 'Password123'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    SESSION_COOKIE_SECURE = False
    AUTO_CREATE_TABLES = False
    ANALYTICS_TRACK_VIEWS = True


@dataclass
class Actor:
    id: str
    email: str
    token: str

    @property
    def headers(self) -> dict:
        return {'Authorization': f'Bearer {self.token}'}


@pytest.fixture
def app():
    """Create and configure a test application instance.

    No app context stays pushed while tests issue requests, so every request
    gets its own ``g`` and session.
    """
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(email, password=DEFAULT_PASSWORD, name=None, role=PlatformRole.USER):
        with app.app_context():
            user = User(email=email, name=name or email.split('@')[0], role=role)
            user.set_password(password, rounds=app.config['BCRYPT_LOG_ROUNDS'])
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


@pytest.fixture
def make_actor(app, make_user):
    """A user plus a bearer token for API calls."""

    def _make_actor(email, role=PlatformRole.USER):
        user_id = make_user(email, role=role)
        with app.app_context():
            user = db.session.get(User, user_id)
            token = issue_token(SessionPrincipal.from_user(user))
        return Actor(id=user_id, email=email, token=token)

    return _make_actor


@pytest.fixture
def owner(make_actor):
    return make_actor('owner@example.com')


@pytest.fixture
def outsider(make_actor):
    return make_actor('outsider@example.com')


@pytest.fixture
def create_workspace(client):
    def _create_workspace(actor, name='Odecor', **extra):
        resp = client.post('/api/workspaces', json={'name': name, **extra}, headers=actor.headers)
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()['data']

    return _create_workspace


@pytest.fixture
def add_member(app):
    def _add_member(workspace_id, user_id, role=WorkspaceRole.MEMBER):
        with app.app_context():
            db.session.add(Membership(workspace_id=workspace_id, user_id=user_id, role=role))
            db.session.commit()

    return _add_member
