from __future__ import annotations

from flask import current_app

from affiflow.auth import (
    SessionPrincipal,
    api_login_required,
    authenticate,
    current_principal,
    issue_token,
    register_user,
)
from affiflow.blueprints.api import api_bp
from affiflow.blueprints.api.helpers import json_body, ok
from affiflow.blueprints.api.serializers import serialize_principal
from affiflow.extensions import db, limiter
from affiflow.schemas import RegisterRequest, TokenRequest, parse_payload
from affiflow.security.config import auth_rate_limit


@api_bp.route('/auth/register', methods=['POST'])
@limiter.limit(auth_rate_limit)
def register():
    payload = parse_payload(RegisterRequest, json_body())
    user = register_user(db.session, payload.name, payload.email, payload.password)
    return ok(
        serialize_principal(SessionPrincipal.from_user(user)),
        message="User created successfully",
    )


@api_bp.route('/auth/token', methods=['POST'])
@limiter.limit(auth_rate_limit)
def token():
    payload = parse_payload(TokenRequest, json_body())
    principal = authenticate(db.session, payload.email, payload.password)
    current_app.logger.info(f"Issued API token for {principal.id}")
    return ok({
        'token': issue_token(principal),
        'expiresIn': current_app.config['SESSION_LIFETIME_SECONDS'],
        'user': serialize_principal(principal),
    })


@api_bp.route('/auth/session', methods=['GET'])
@api_login_required
def session_info():
    return ok({'user': serialize_principal(current_principal())})
