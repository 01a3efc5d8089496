import pytest

from affiflow.auth import SessionPrincipal, issue_token, verify_token
from affiflow.errors import AuthenticationError
from affiflow.extensions import db
from affiflow.models import PlatformRole, User
from affiflow.security.config import is_password_strong


def _register(client, **overrides):
    payload = {'name': 'Linh', 'email': 'linh@example.com', 'password': 'Password123', **overrides}
    return client.post('/api/auth/register', json=payload)


@pytest.mark.parametrize('password, strong', [
    ('Password123', True),
    ('password123', False),
    ('PASSWORD123', False),
    ('Password', False),
    ('Pass1', False),
])
def test_password_policy(password, strong):
    ok, _ = is_password_strong(password)
    assert ok is strong


def test_register_creates_user(app, client):
    resp = _register(client, email='Linh@Example.com')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['message'] == 'User created successfully'
    assert body['data']['email'] == 'linh@example.com'
    assert body['data']['role'] == 'USER'
    assert 'password' not in body['data']

    with app.app_context():
        user = db.session.query(User).filter_by(email='linh@example.com').one()
        assert user.password_hash != 'Password123'
        assert user.check_password('Password123')


def test_register_rejects_duplicates_and_weak_passwords(client):
    assert _register(client).status_code == 200

    resp = _register(client)
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'User already exists'

    resp = _register(client, email='other@example.com', password='weakpass')
    assert resp.status_code == 400
    assert resp.get_json()['details'][0]['field'] == 'password'

    resp = _register(client, email='not-an-email')
    assert resp.status_code == 400


def test_token_flow(client):
    _register(client)

    resp = client.post('/api/auth/token', json={'email': 'linh@example.com', 'password': 'Password123'})
    assert resp.status_code == 200
    data = resp.get_json()['data']
    assert data['expiresIn'] == 30 * 24 * 3600
    assert data['user']['email'] == 'linh@example.com'

    resp = client.get('/api/auth/session', headers={'Authorization': f"Bearer {data['token']}"})
    assert resp.status_code == 200
    assert resp.get_json()['data']['user']['name'] == 'Linh'


def test_token_rejects_bad_credentials(client):
    _register(client)

    for email, password in (('linh@example.com', 'Wrong12345'), ('nobody@example.com', 'Password123')):
        resp = client.post('/api/auth/token', json={'email': email, 'password': password})
        assert resp.status_code == 401
        assert resp.get_json() == {'success': False, 'error': 'Invalid credentials'}


def test_invalid_and_expired_tokens(app, client, owner):
    resp = client.get('/api/auth/session', headers={'Authorization': 'Bearer garbage'})
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'Invalid session token'

    app.config['SESSION_LIFETIME_SECONDS'] = -1
    resp = client.get('/api/auth/session', headers=owner.headers)
    assert resp.status_code == 401
    assert resp.get_json()['error'] == 'Session expired'


def test_token_round_trip_keeps_role(app):
    principal = SessionPrincipal(id='u1', email='a@example.com', name='A', role=PlatformRole.ADMIN)
    with app.app_context():
        restored = verify_token(issue_token(principal))
        assert restored == principal
        assert restored.is_platform_admin

        with pytest.raises(AuthenticationError):
            verify_token(issue_token(principal) + 'x')


def test_sign_in_page_flow(client, owner):
    resp = client.post('/auth/signin', data={'email': owner.email, 'password': 'nope'})
    assert resp.status_code == 401
    assert b'Invalid email or password' in resp.data

    resp = client.post('/auth/signin?next=/odecor/dashboard', data={'email': owner.email, 'password': 'Password123'})
    assert resp.status_code == 302
    assert resp.headers['Location'] == '/odecor/dashboard'

    resp = client.get('/auth/signout')
    assert resp.status_code == 302
    assert client.get('/dashboard').status_code == 302


def test_sign_in_ignores_external_next(client, owner):
    resp = client.post(
        '/auth/signin?next=//evil.example.com',
        data={'email': owner.email, 'password': 'Password123'},
    )
    assert resp.headers['Location'] == '/dashboard'


def test_sign_up_page_creates_account(app, client):
    resp = client.post('/auth/signup', data={
        'name': 'Minh',
        'email': 'minh@example.com',
        'password': 'Password123',
        'password_confirm': 'Password123',
    })
    assert resp.status_code == 302
    assert resp.headers['Location'] == '/auth/signin'

    with app.app_context():
        assert db.session.query(User).filter_by(email='minh@example.com').count() == 1


def test_security_headers(client):
    resp = client.get('/')
    assert resp.headers['X-Content-Type-Options'] == 'nosniff'
    assert 'frame-src' in resp.headers['Content-Security-Policy']
