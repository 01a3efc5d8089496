"""Products and categories."""

from __future__ import annotations

from flask import request

from affiflow.blueprints.api import api_bp
from affiflow.blueprints.api.helpers import json_body, ok, query_int
from affiflow.blueprints.api.serializers import (
    serialize_affiliate_link,
    serialize_category,
    serialize_product,
)
from affiflow.extensions import db
from affiflow.schemas import (
    CategoryCreate,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
    parse_payload,
)
from affiflow.security import workspace_role_required
from affiflow.services import AffiliateLinkService, AnalyticsRecorder, CategoryService, ProductService
from affiflow.services.lifecycle import DEFAULT_PAGE_SIZE

PRODUCTS = '/workspaces/<workspace_id>/products'
CATEGORIES = '/workspaces/<workspace_id>/categories'


# Products ------------------------------------------------------------

@api_bp.route(PRODUCTS, methods=['GET'])
@workspace_role_required()
def list_products(workspace_id):
    service = ProductService(db.session)
    page = service.list_products(
        workspace_id,
        page=query_int('page', 1),
        limit=query_int('limit', DEFAULT_PAGE_SIZE),
        search=request.args.get('search'),
        category_id=request.args.get('categoryId') or None,
    )
    counts = service.post_counts([p.id for p in page.items])
    return ok({
        'products': [serialize_product(p, counts[p.id]) for p in page.items],
        'pagination': page.meta(),
    })


@api_bp.route(PRODUCTS, methods=['POST'])
@workspace_role_required()
def create_product(workspace_id):
    payload = parse_payload(ProductCreate, json_body())
    product = ProductService(db.session).create(workspace_id, payload.provided())
    return ok(serialize_product(product, 0), message="Product created successfully")


@api_bp.route(f'{PRODUCTS}/<product_id>', methods=['GET'])
@workspace_role_required()
def get_product(workspace_id, product_id):
    service = ProductService(db.session)
    product = service.get(workspace_id, product_id)
    return ok(serialize_product(product, service.post_counts([product.id])[product.id], with_links=True))


@api_bp.route(f'{PRODUCTS}/<product_id>', methods=['PUT'])
@workspace_role_required()
def update_product(workspace_id, product_id):
    payload = parse_payload(ProductUpdate, json_body())
    service = ProductService(db.session)
    product = service.update(workspace_id, product_id, payload.provided())
    return ok(
        serialize_product(product, service.post_counts([product.id])[product.id]),
        message="Product updated successfully",
    )


@api_bp.route(f'{PRODUCTS}/<product_id>', methods=['DELETE'])
@workspace_role_required()
def delete_product(workspace_id, product_id):
    ProductService(db.session).delete(workspace_id, product_id)
    return ok(message="Product deleted successfully")


@api_bp.route(f'{PRODUCTS}/<product_id>/affiliate-links', methods=['GET'])
@workspace_role_required()
def list_product_links(workspace_id, product_id):
    ProductService(db.session).get(workspace_id, product_id)
    links = AffiliateLinkService(db.session).list_links(workspace_id, product_id=product_id)
    clicks = AnalyticsRecorder(db.session).link_click_counts([link.id for link in links])
    return ok([serialize_affiliate_link(link, clicks[link.id]) for link in links])


# Categories ----------------------------------------------------------

@api_bp.route(CATEGORIES, methods=['GET'])
@workspace_role_required()
def list_categories(workspace_id):
    service = CategoryService(db.session)
    categories = service.list_categories(workspace_id)
    counts = service.product_counts([c.id for c in categories])
    return ok([serialize_category(c, counts[c.id]) for c in categories])


@api_bp.route(CATEGORIES, methods=['POST'])
@workspace_role_required()
def create_category(workspace_id):
    payload = parse_payload(CategoryCreate, json_body())
    category = CategoryService(db.session).create(workspace_id, payload.provided())
    return ok(serialize_category(category, 0), message="Category created successfully")


@api_bp.route(f'{CATEGORIES}/<category_id>', methods=['GET'])
@workspace_role_required()
def get_category(workspace_id, category_id):
    service = CategoryService(db.session)
    category = service.get(workspace_id, category_id)
    count = service.product_counts([category.id])[category.id]
    return ok(serialize_category(category, count, with_products=True))


@api_bp.route(f'{CATEGORIES}/<category_id>', methods=['PUT'])
@workspace_role_required()
def update_category(workspace_id, category_id):
    payload = parse_payload(CategoryUpdate, json_body())
    service = CategoryService(db.session)
    category = service.update(workspace_id, category_id, payload.provided())
    count = service.product_counts([category.id])[category.id]
    return ok(serialize_category(category, count), message="Category updated successfully")


@api_bp.route(f'{CATEGORIES}/<category_id>', methods=['DELETE'])
@workspace_role_required()
def delete_category(workspace_id, category_id):
    CategoryService(db.session).delete(workspace_id, category_id)
    return ok(message="Category deleted successfully")
