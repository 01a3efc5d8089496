from __future__ import annotations

from flask import current_app, request

from affiflow.blueprints.api import api_bp
from affiflow.blueprints.api.helpers import json_body, ok, query_bool, query_int
from affiflow.blueprints.api.serializers import serialize_post
from affiflow.extensions import db
from affiflow.models import AnalyticsEventType
from affiflow.schemas import EventCreate, PostCreate, PostUpdate, parse_payload
from affiflow.security import workspace_role_required
from affiflow.services import AnalyticsRecorder, PostService
from affiflow.services.lifecycle import DEFAULT_PAGE_SIZE

POSTS = '/workspaces/<workspace_id>/posts'


@api_bp.route(POSTS, methods=['GET'])
@workspace_role_required()
def list_posts(workspace_id):
    page = PostService(db.session).list_posts(
        workspace_id,
        page=query_int('page', 1),
        limit=query_int('limit', DEFAULT_PAGE_SIZE),
        search=request.args.get('search'),
        published=query_bool('published'),
        include_deleted=query_bool('includeDeleted') is True,
    )
    return ok({
        'posts': [serialize_post(p) for p in page.items],
        'pagination': page.meta(),
    })


@api_bp.route(POSTS, methods=['POST'])
@workspace_role_required()
def create_post(workspace_id):
    payload = parse_payload(PostCreate, json_body())
    post = PostService(db.session).create(workspace_id, payload.provided())
    return ok(serialize_post(post), message="Post created successfully")


@api_bp.route(f'{POSTS}/<post_id>', methods=['GET'])
@workspace_role_required()
def get_post(workspace_id, post_id):
    post = PostService(db.session).get(workspace_id, post_id)
    if current_app.config.get('ANALYTICS_TRACK_VIEWS', True):
        AnalyticsRecorder(db.session).record(post, AnalyticsEventType.VIEW, {'source': 'api'})
    return ok(serialize_post(post, include_workspace=True))


@api_bp.route(f'{POSTS}/<post_id>', methods=['PUT'])
@workspace_role_required()
def update_post(workspace_id, post_id):
    payload = parse_payload(PostUpdate, json_body())
    post = PostService(db.session).update(workspace_id, post_id, payload.provided())
    return ok(serialize_post(post, include_workspace=True), message="Post updated successfully")


@api_bp.route(f'{POSTS}/<post_id>', methods=['DELETE'])
@workspace_role_required()
def delete_post(workspace_id, post_id):
    PostService(db.session).delete(workspace_id, post_id)
    return ok(message="Post deleted successfully")


@api_bp.route(f'{POSTS}/<post_id>/events', methods=['POST'])
@workspace_role_required()
def record_post_event(workspace_id, post_id):
    payload = parse_payload(EventCreate, json_body())
    post = PostService(db.session).get(workspace_id, post_id)
    event = AnalyticsRecorder(db.session).record(
        post,
        payload.event,
        metadata=payload.metadata,
        product_id=payload.product_id,
        affiliate_link_id=payload.affiliate_link_id,
    )
    return ok({
        'id': event.id,
        'event': event.event.value,
        'productId': event.product_id,
        'affiliateLinkId': event.affiliate_link_id,
    }, message="Event recorded")


@api_bp.route(f'{POSTS}/<post_id>/analytics', methods=['GET'])
@workspace_role_required()
def post_analytics(workspace_id, post_id):
    post = PostService(db.session).get(workspace_id, post_id)
    return ok({'postId': post.id, 'events': AnalyticsRecorder(db.session).summarize_post(post.id)})
