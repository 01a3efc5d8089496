"""Authentication helpers shared across blueprints."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from flask import current_app, flash, g, redirect, request, url_for
from flask import session as flask_session
from flask_login import current_user
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from affiflow.errors import AuthenticationError, ConflictError, ValidationError
from affiflow.models import PlatformRole, User
from affiflow.security.config import is_password_strong
from affiflow.services.db import atomic

F = TypeVar('F', bound=Callable[..., object])

TOKEN_SALT = 'affiflow-session'
ADMIN_ROLES = (PlatformRole.ADMIN, PlatformRole.SUPER_ADMIN)


@dataclass(frozen=True)
class SessionPrincipal:
    """Identity carried by a signed session token."""

    id: str
    email: str
    name: str | None
    role: PlatformRole

    @classmethod
    def from_user(cls, user: User) -> "SessionPrincipal":
        return cls(id=user.id, email=user.email, name=user.name, role=user.role)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionPrincipal":
        return cls(
            id=data['id'],
            email=data['email'],
            name=data.get('name'),
            role=PlatformRole(data.get('role', PlatformRole.USER.value)),
        )

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload['role'] = self.role.value
        return payload

    @property
    def is_platform_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def authenticate(session: Session, email: str, password: str) -> SessionPrincipal:
    """Verify credentials; every failure raises the same error."""
    if not email or not password:
        raise AuthenticationError("Invalid credentials")

    user = session.execute(
        select(User).where(User.email == email.strip().lower())
    ).scalar_one_or_none()
    if user is None or not user.password_hash:
        raise AuthenticationError("Invalid credentials")

    if not user.check_password(password):
        raise AuthenticationError("Invalid credentials")

    return SessionPrincipal.from_user(user)


def register_user(session: Session, name: str, email: str, password: str) -> User:
    """Create a platform user with a bcrypt password hash."""
    ok, message = is_password_strong(password)
    if not ok:
        raise ValidationError.for_field('password', message)

    email = email.strip().lower()
    exists = session.execute(
        select(func.count(User.id)).where(User.email == email)
    ).scalar_one()
    if exists:
        raise ConflictError("User already exists")

    with atomic(session):
        user = User(name=name.strip(), email=email, role=PlatformRole.USER)
        user.set_password(password, rounds=current_app.config.get('BCRYPT_LOG_ROUNDS', 12))
        session.add(user)

    current_app.logger.info(f"Registered user {user.id}")
    return user


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(principal: SessionPrincipal) -> str:
    return _serializer().dumps(principal.to_dict())


def verify_token(token: str) -> SessionPrincipal:
    """Decode a bearer token; the lifetime is fixed from issuance."""
    max_age = current_app.config.get('SESSION_LIFETIME_SECONDS', 30 * 24 * 3600)
    try:
        data = _serializer().loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise AuthenticationError("Session expired") from exc
    except BadSignature as exc:
        raise AuthenticationError("Invalid session token") from exc
    try:
        return SessionPrincipal.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid session token") from exc


def bearer_token() -> str | None:
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def current_principal() -> SessionPrincipal | None:
    """Principal for the current request, from the bearer token or the session."""
    if 'principal' in g:
        return g.principal
    if not current_user.is_authenticated:
        return None
    stored = flask_session.get('principal')
    if stored and stored.get('id') == current_user.id:
        return SessionPrincipal.from_dict(stored)
    return SessionPrincipal.from_user(current_user)


def remember_principal(principal: SessionPrincipal) -> None:
    """Pin the principal into the signed session cookie at sign-in."""
    flask_session['principal'] = principal.to_dict()
    flask_session.permanent = True


def forget_principal() -> None:
    flask_session.pop('principal', None)


def api_login_required(func: F) -> F:
    """Decorator for JSON endpoints: raise instead of redirecting."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError()
        return func(*args, **kwargs)
    return cast(F, wrapper)


def login_required_with_message(func: F) -> F:
    """Decorator requiring authentication with custom flash message."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            flash('Please sign in to access this page', 'warning')
            return redirect(url_for('auth.signin', next=request.path))
        return func(*args, **kwargs)
    return cast(F, wrapper)


def platform_admin_required(func: F) -> F:
    """Decorator to ensure the session principal holds a platform admin role."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        principal = current_principal()
        if principal is None:
            return redirect(url_for('auth.signin', next=request.path))

        if not principal.is_platform_admin:
            flash('You need administrator privileges to access this page', 'error')
            return redirect(url_for('public.dashboard'))

        return func(*args, **kwargs)

    return cast(F, wrapper)


__all__ = [
    'SessionPrincipal',
    'authenticate',
    'register_user',
    'issue_token',
    'verify_token',
    'bearer_token',
    'current_principal',
    'remember_principal',
    'forget_principal',
    'api_login_required',
    'login_required_with_message',
    'platform_admin_required',
]
