"""Request routing for the page tree and tenant write guards."""

from __future__ import annotations

from flask import current_app, g, has_request_context, redirect, request, url_for
from flask_login import current_user

from affiflow.auth import current_principal
from affiflow.extensions import db

PUBLIC_PATHS = frozenset({'/', '/auth/signin', '/auth/signup'})
AUTH_PAGES = frozenset({'/auth/signin', '/auth/signup'})
SKIPPED_PREFIXES = ('/api/', '/static/')


def init_tenant(app) -> None:
    """Register the routing hook with the Flask app."""

    @app.before_request
    def _route_request():
        return route_request()


def route_request():
    """Gate page requests on authentication and the platform role.

    Returns a redirect, or ``None`` to let the request continue.
    """
    path = request.path
    if path.startswith(SKIPPED_PREFIXES) or path == '/favicon.ico':
        return None

    authenticated = current_user.is_authenticated

    if path in PUBLIC_PATHS:
        if authenticated and path in AUTH_PAGES:
            return redirect(url_for('public.dashboard'))
        return None

    if not authenticated:
        return redirect(url_for('auth.signin', next=path))

    if path == '/admin' or path.startswith('/admin/'):
        principal = current_principal()
        if principal is None or not principal.is_platform_admin:
            current_app.logger.info(f"Non-admin {current_user.id} redirected away from {path}")
            return redirect(url_for('public.dashboard'))

    return None


@db.event.listens_for(db.session, "before_flush")
def _guard_workspace_writes(session, flush_context, instances) -> None:
    """Block writes into a workspace other than the one the request was authorized for."""

    if not has_request_context():
        return

    workspace_id = g.get('workspace_id')
    if workspace_id is None:
        return

    for obj in list(session.new) + list(session.dirty):
        current_value = getattr(obj, 'workspace_id', None)
        if current_value is not None and current_value != workspace_id:
            raise PermissionError("Cross-workspace write blocked")


__all__ = ["init_tenant", "route_request"]
