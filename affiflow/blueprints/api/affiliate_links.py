from __future__ import annotations

from affiflow.blueprints.api import api_bp
from affiflow.blueprints.api.helpers import json_body, ok
from affiflow.blueprints.api.serializers import serialize_affiliate_link, serialize_product
from affiflow.extensions import db
from affiflow.schemas import AffiliateLinkCreate, AffiliateLinkUpdate, parse_payload
from affiflow.security import workspace_role_required
from affiflow.services import AffiliateLinkService, AnalyticsRecorder

LINKS = '/workspaces/<workspace_id>/affiliate-links'


def _with_clicks(link) -> dict:
    clicks = AnalyticsRecorder(db.session).link_click_counts([link.id])[link.id]
    return serialize_affiliate_link(link, clicks)


@api_bp.route(LINKS, methods=['GET'])
@workspace_role_required()
def list_affiliate_links(workspace_id):
    links = AffiliateLinkService(db.session).list_links(workspace_id)
    clicks = AnalyticsRecorder(db.session).link_click_counts([link.id for link in links])
    return ok([serialize_affiliate_link(link, clicks[link.id]) for link in links])


@api_bp.route(LINKS, methods=['POST'])
@workspace_role_required()
def create_affiliate_link(workspace_id):
    payload = parse_payload(AffiliateLinkCreate, json_body())
    link = AffiliateLinkService(db.session).create(workspace_id, payload.provided())
    return ok(serialize_affiliate_link(link, 0), message="Affiliate link created successfully")


@api_bp.route(f'{LINKS}/<link_id>', methods=['GET'])
@workspace_role_required()
def get_affiliate_link(workspace_id, link_id):
    return ok(_with_clicks(AffiliateLinkService(db.session).get(workspace_id, link_id)))


@api_bp.route(f'{LINKS}/<link_id>', methods=['PUT'])
@workspace_role_required()
def update_affiliate_link(workspace_id, link_id):
    payload = parse_payload(AffiliateLinkUpdate, json_body())
    link = AffiliateLinkService(db.session).update(workspace_id, link_id, payload.provided())
    return ok(_with_clicks(link), message="Affiliate link updated successfully")


@api_bp.route(f'{LINKS}/<link_id>', methods=['DELETE'])
@workspace_role_required()
def delete_affiliate_link(workspace_id, link_id):
    AffiliateLinkService(db.session).delete(workspace_id, link_id)
    return ok(message="Affiliate link deleted successfully")


@api_bp.route(f'{LINKS}/<link_id>/set-active', methods=['POST'])
@workspace_role_required()
def set_active_link(workspace_id, link_id):
    service = AffiliateLinkService(db.session)
    product = service.set_active(workspace_id, link_id)
    link = service.get(workspace_id, link_id)
    return ok(
        {'product': serialize_product(product), 'activeLink': serialize_affiliate_link(link)},
        message="Affiliate link set as active successfully",
    )


@api_bp.route(f'{LINKS}/<link_id>/set-active', methods=['DELETE'])
@workspace_role_required()
def clear_active_link(workspace_id, link_id):
    AffiliateLinkService(db.session).clear_active(workspace_id, link_id)
    return ok(message="Active status removed successfully")
