from __future__ import annotations

from flask_login import current_user

from affiflow.auth import api_login_required
from affiflow.blueprints.api import api_bp
from affiflow.blueprints.api.helpers import json_body, ok
from affiflow.blueprints.api.serializers import (
    serialize_post_brief,
    serialize_workspace,
    serialize_workspace_summary,
)
from affiflow.extensions import db
from affiflow.models import WorkspaceRole
from affiflow.schemas import WorkspaceCreate, WorkspaceUpdate, parse_payload
from affiflow.security import workspace_role_required
from affiflow.services import WorkspaceService


def _detail(service: WorkspaceService, workspace_id: str) -> dict:
    workspace = service.get(workspace_id)
    data = serialize_workspace(workspace, service.post_counts([workspace.id])[workspace.id])
    data['posts'] = [serialize_post_brief(p) for p in service.recent_posts(workspace.id)]
    return data


@api_bp.route('/workspaces', methods=['GET'])
@api_login_required
def list_workspaces():
    service = WorkspaceService(db.session)
    workspaces = service.list_for_user(current_user.id)
    counts = service.post_counts([w.id for w in workspaces])
    return ok([serialize_workspace(w, counts[w.id]) for w in workspaces])


@api_bp.route('/workspaces', methods=['POST'])
@api_login_required
def create_workspace():
    payload = parse_payload(WorkspaceCreate, json_body())
    service = WorkspaceService(db.session)
    workspace = service.create(
        current_user.id,
        payload.name,
        description=payload.description,
        slug=payload.slug,
    )
    return ok(serialize_workspace(workspace, 0), message="Workspace created successfully")


@api_bp.route('/workspaces/by-slug/<slug>', methods=['GET'])
@api_login_required
def workspace_by_slug(slug):
    service = WorkspaceService(db.session)
    workspace, membership = service.get_by_slug(current_user.id, slug)
    post_count = service.post_counts([workspace.id])[workspace.id]
    return ok(serialize_workspace_summary(workspace, membership, post_count))


@api_bp.route('/workspaces/<workspace_id>', methods=['GET'])
@workspace_role_required(WorkspaceRole.MEMBER)
def get_workspace(workspace_id):
    return ok(_detail(WorkspaceService(db.session), workspace_id))


@api_bp.route('/workspaces/<workspace_id>', methods=['PUT'])
@workspace_role_required(WorkspaceRole.ADMIN)
def update_workspace(workspace_id):
    payload = parse_payload(WorkspaceUpdate, json_body())
    service = WorkspaceService(db.session)
    service.update(workspace_id, payload.provided())
    return ok(_detail(service, workspace_id), message="Workspace updated successfully")


@api_bp.route('/workspaces/<workspace_id>', methods=['DELETE'])
@workspace_role_required(WorkspaceRole.OWNER)
def delete_workspace(workspace_id):
    WorkspaceService(db.session).soft_delete(workspace_id)
    return ok(message="Workspace deleted successfully")
