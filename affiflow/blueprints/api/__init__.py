"""JSON API under /api. Authenticated by session cookie or bearer token."""

from flask import Blueprint

api_bp = Blueprint('api', __name__)

from affiflow.blueprints.api import (  # noqa: E402,F401
    affiliate_links,
    auth,
    catalog,
    posts,
    workspaces,
)

__all__ = ['api_bp']
