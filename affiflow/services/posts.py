"""Post lifecycle: slugged, soft-deleted, tagged with workspace products."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from flask import current_app
from sqlalchemy import delete, func, select

from affiflow.errors import ValidationError
from affiflow.models import Post, PostProduct, Product
from affiflow.services.db import atomic
from affiflow.services.lifecycle import DEFAULT_PAGE_SIZE, Page, ResourceService, utcnow
from affiflow.services.slugs import slugify, with_suffix

POST_FIELDS = (
    'title',
    'content',
    'excerpt',
    'slug',
    'video_url',
    'video_type',
    'thumbnail',
    'is_published',
    'published_at',
)


def _dedupe(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class PostService(ResourceService[Post]):
    model = Post
    entity_name = "Post"

    def list_posts(
        self,
        workspace_id: str,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: str | None = None,
        published: bool | None = None,
        include_deleted: bool = False,
    ) -> Page[Post]:
        stmt = self.query(workspace_id, include_deleted=include_deleted)
        match = self.search_filter(search, Post.title, Post.content, Post.excerpt)
        if match is not None:
            stmt = stmt.where(match)
        if published is not None:
            stmt = stmt.where(Post.is_published.is_(published))
        stmt = stmt.order_by(Post.created_at.desc(), Post.id)
        return self.paginate(stmt, page, limit)

    def slug_taken(self, workspace_id: str, slug: str, exclude_id: str | None = None) -> bool:
        """Only live posts hold a slug."""
        stmt = select(func.count(Post.id)).where(
            Post.workspace_id == workspace_id,
            Post.slug == slug,
            Post.deleted_at.is_(None),
        )
        if exclude_id:
            stmt = stmt.where(Post.id != exclude_id)
        return self.session.execute(stmt).scalar_one() > 0

    def unique_slug(self, workspace_id: str, base: str, exclude_id: str | None = None) -> str:
        base = base or 'post'
        candidate = base
        while self.slug_taken(workspace_id, candidate, exclude_id):
            candidate = with_suffix(base)
        return candidate

    def _check_products(self, workspace_id: str, product_ids: list[str]) -> None:
        if not product_ids:
            return
        found = self.session.execute(
            select(func.count(Product.id)).where(
                Product.id.in_(product_ids),
                Product.workspace_id == workspace_id,
            )
        ).scalar_one()
        if found != len(product_ids):
            raise ValidationError.for_field('productIds', "Some products not found or access denied")

    def _link_products(self, post: Post, product_ids: list[str]) -> None:
        for product_id in product_ids:
            self.session.add(PostProduct(post_id=post.id, product_id=product_id))

    def create(self, workspace_id: str, data: dict[str, Any]) -> Post:
        data = dict(data)
        product_ids = _dedupe(data.pop('product_ids', None) or [])

        slug = data.pop('slug', None) or slugify(data['title'])
        is_published = bool(data.pop('is_published', False))
        published_at: datetime | None = data.pop('published_at', None)

        with atomic(self.session):
            self._check_products(workspace_id, product_ids)
            post = Post(
                workspace_id=workspace_id,
                slug=self.unique_slug(workspace_id, slug),
                is_published=is_published,
                published_at=(published_at or utcnow()) if is_published else None,
            )
            self._apply(post, data, POST_FIELDS)
            self.session.add(post)
            self.session.flush()
            self._link_products(post, product_ids)

        current_app.logger.info(f"Post {post.id} created in workspace {workspace_id}")
        return post

    def update(self, workspace_id: str, post_id: str, data: dict[str, Any]) -> Post:
        """Partial update; ``product_ids`` when present replaces every association."""
        post = self.get(workspace_id, post_id)
        data = dict(data)
        product_ids = data.pop('product_ids', None)
        replace_products = product_ids is not None

        if data.get('title') and data['title'] != post.title and not data.get('slug'):
            data['slug'] = slugify(data['title'])
        if data.get('slug'):
            data['slug'] = self.unique_slug(workspace_id, data['slug'], exclude_id=post.id)
        else:
            data.pop('slug', None)

        if 'is_published' in data:
            if data['is_published']:
                if not data.get('published_at'):
                    data['published_at'] = post.published_at or utcnow()
            else:
                data['published_at'] = None

        with atomic(self.session):
            self._apply(post, data, POST_FIELDS)
            if replace_products:
                self._replace_products(workspace_id, post, _dedupe(product_ids))

        return post

    def replace_products(self, workspace_id: str, post_id: str, product_ids: Sequence[str]) -> Post:
        post = self.get(workspace_id, post_id)
        with atomic(self.session):
            self._replace_products(workspace_id, post, _dedupe(product_ids))
        return post

    def _replace_products(self, workspace_id: str, post: Post, product_ids: list[str]) -> None:
        # Runs inside the caller's transaction so a failed check leaves the old set
        self.session.execute(delete(PostProduct).where(PostProduct.post_id == post.id))
        self._check_products(workspace_id, product_ids)
        self._link_products(post, product_ids)
        self.session.flush()
        self.session.expire(post, ['product_links'])

    def product_count(self, post: Post) -> int:
        return self.session.execute(
            select(func.count(PostProduct.id)).where(PostProduct.post_id == post.id)
        ).scalar_one()


__all__ = ["PostService", "POST_FIELDS"]
