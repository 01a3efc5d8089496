"""Application factory for AffiFlow."""

from __future__ import annotations

import os

from flask import Flask, g, redirect, request, url_for

from affiflow.auth import bearer_token, verify_token
from affiflow.blueprints.admin import admin_bp
from affiflow.blueprints.api import api_bp
from affiflow.blueprints.auth import auth_bp
from affiflow.blueprints.common.tenant import init_tenant
from affiflow.blueprints.public import public_bp
from affiflow.config import Config
from affiflow.errors import AuthenticationError, register_error_handlers
from affiflow.extensions import (
    db,
    migrate,
    login_manager,
    csrf,
    limiter,
)
from affiflow.models import User
from affiflow.security.config import (
    configure_security_headers,
    configure_secure_session,
    validate_input_length,
)
from affiflow.services.db import enable_sqlite_foreign_keys


def create_app(config_class=Config):
    """Create Flask application."""
    app = Flask(__name__, template_folder="templates")
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize Flask extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.login_view = "auth.signin"
    csrf.init_app(app)
    limiter.init_app(app)
    init_tenant(app)

    # Configure security
    configure_security_headers(app)
    configure_secure_session(app)
    validate_input_length(app)
    register_error_handlers(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        return db.session.get(User, user_id)

    @login_manager.request_loader
    def load_user_from_request(req):
        token = bearer_token()
        if token is None:
            return None
        principal = verify_token(token)
        user = db.session.get(User, principal.id)
        if user is not None:
            g.principal = principal
        return user

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        if request.path.startswith('/api/'):
            raise AuthenticationError()
        return redirect(url_for('auth.signin', next=request.path))

    # Ensure models are registered for migrations
    import affiflow.models  # noqa: F401

    with app.app_context():
        enable_sqlite_foreign_keys(db.engine)
        if app.config.get('AUTO_CREATE_TABLES'):
            db.create_all()

    if os.getenv("FLASK_ENV") == "development":
        app.config["TEMPLATES_AUTO_RELOAD"] = True
        app.jinja_env.auto_reload = True

    # Register blueprints
    csrf.exempt(api_bp)
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(public_bp)

    # Register CLI commands
    from affiflow.commands import register_commands
    register_commands(app)

    return app


__all__ = ["create_app"]
