"""JSON views of the models, camelCase keys."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from affiflow.auth import SessionPrincipal
from affiflow.models import (
    AffiliateLink,
    Category,
    Membership,
    Post,
    PostProduct,
    Product,
    User,
    Workspace,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _enum(value: Any) -> Any:
    return value.value if hasattr(value, 'value') else value


def serialize_principal(principal: SessionPrincipal) -> dict:
    return {
        'id': principal.id,
        'email': principal.email,
        'name': principal.name,
        'role': principal.role.value,
    }


def serialize_user(user: User) -> dict:
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'image': user.image,
    }


def serialize_member(membership: Membership) -> dict:
    return {
        'id': membership.id,
        'userId': membership.user_id,
        'workspaceId': membership.workspace_id,
        'role': membership.role.value,
        'createdAt': _iso(membership.created_at),
        'user': serialize_user(membership.user),
    }


def serialize_workspace(workspace: Workspace, post_count: int | None = None) -> dict:
    data = {
        'id': workspace.id,
        'name': workspace.name,
        'slug': workspace.slug,
        'description': workspace.description,
        'avatar': workspace.avatar,
        'cover': workspace.cover,
        'domain': workspace.domain,
        'theme': workspace.theme,
        'isActive': workspace.is_active,
        'createdAt': _iso(workspace.created_at),
        'updatedAt': _iso(workspace.updated_at),
        'deletedAt': _iso(workspace.deleted_at),
        'users': [serialize_member(m) for m in workspace.memberships],
    }
    if post_count is not None:
        data['_count'] = {'posts': post_count}
    return data


def serialize_workspace_summary(workspace: Workspace, membership: Membership, post_count: int) -> dict:
    return {
        'id': workspace.id,
        'name': workspace.name,
        'slug': workspace.slug,
        'description': workspace.description,
        'createdAt': _iso(workspace.created_at),
        'updatedAt': _iso(workspace.updated_at),
        'role': membership.role.value,
        'memberCount': len(workspace.memberships),
        'postCount': post_count,
    }


def serialize_post_brief(post: Post) -> dict:
    return {
        'id': post.id,
        'title': post.title,
        'slug': post.slug,
        'isPublished': post.is_published,
        'createdAt': _iso(post.created_at),
    }


def serialize_product_brief(product: Product) -> dict:
    return {
        'id': product.id,
        'name': product.name,
        'image': product.image,
        'price': product.price,
        'currency': product.currency,
        'activeAffiliateLinkId': product.active_affiliate_link_id,
    }


def serialize_post_product(link: PostProduct) -> dict:
    return {
        'id': link.id,
        'productId': link.product_id,
        'timestamp': link.timestamp,
        'position': link.position,
        'product': serialize_product_brief(link.product),
    }


def serialize_post(post: Post, include_workspace: bool = False) -> dict:
    data = {
        'id': post.id,
        'workspaceId': post.workspace_id,
        'title': post.title,
        'content': post.content,
        'excerpt': post.excerpt,
        'slug': post.slug,
        'videoUrl': post.video_url,
        'videoType': _enum(post.video_type),
        'thumbnail': post.thumbnail,
        'isPublished': post.is_published,
        'publishedAt': _iso(post.published_at),
        'createdAt': _iso(post.created_at),
        'updatedAt': _iso(post.updated_at),
        'deletedAt': _iso(post.deleted_at),
        'products': [serialize_post_product(link) for link in post.product_links],
        '_count': {'products': len(post.product_links)},
    }
    if include_workspace:
        data['workspace'] = {
            'id': post.workspace.id,
            'name': post.workspace.name,
            'slug': post.workspace.slug,
        }
    return data


def serialize_category(category: Category, product_count: int | None = None, with_products: bool = False) -> dict:
    data = {
        'id': category.id,
        'workspaceId': category.workspace_id,
        'name': category.name,
        'description': category.description,
        'color': category.color,
        'createdAt': _iso(category.created_at),
        'updatedAt': _iso(category.updated_at),
    }
    if product_count is not None:
        data['_count'] = {'products': product_count}
    if with_products:
        data['products'] = [serialize_product_brief(p) for p in category.products]
    return data


def serialize_product(product: Product, post_count: int | None = None, with_links: bool = False) -> dict:
    data = {
        'id': product.id,
        'workspaceId': product.workspace_id,
        'categoryId': product.category_id,
        'activeAffiliateLinkId': product.active_affiliate_link_id,
        'name': product.name,
        'description': product.description,
        'image': product.image,
        'price': product.price,
        'currency': product.currency,
        'createdAt': _iso(product.created_at),
        'updatedAt': _iso(product.updated_at),
        'category': (
            {'id': product.category.id, 'name': product.category.name, 'color': product.category.color}
            if product.category else None
        ),
    }
    if post_count is not None:
        data['_count'] = {'posts': post_count}
    if with_links:
        data['affiliateLinks'] = [serialize_affiliate_link(link) for link in product.affiliate_links]
    return data


def serialize_affiliate_link(link: AffiliateLink, clicks: int | None = None) -> dict:
    product = link.product
    data = {
        'id': link.id,
        'productId': link.product_id,
        'workspaceId': link.workspace_id,
        'name': link.name,
        'description': link.description,
        'originalUrl': link.original_url,
        'affiliateUrl': link.affiliate_url,
        'platform': link.platform,
        'commission': link.commission,
        'commissionType': _enum(link.commission_type),
        'tags': link.tags,
        'createdAt': _iso(link.created_at),
        'updatedAt': _iso(link.updated_at),
        'isActive': product is not None and product.active_affiliate_link_id == link.id,
        'product': (
            {
                'id': product.id,
                'name': product.name,
                'image': product.image,
                'activeAffiliateLinkId': product.active_affiliate_link_id,
            }
            if product is not None else None
        ),
    }
    if clicks is not None:
        data['_count'] = {'clicks': clicks}
    return data


__all__ = [
    'serialize_principal',
    'serialize_user',
    'serialize_member',
    'serialize_workspace',
    'serialize_workspace_summary',
    'serialize_post_brief',
    'serialize_post',
    'serialize_category',
    'serialize_product',
    'serialize_product_brief',
    'serialize_affiliate_link',
]
