"""Affiliate links and the per-product active link."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select, update

from affiflow.errors import ConflictError, NotFoundError
from affiflow.models import AffiliateLink, Product
from affiflow.services.db import atomic
from affiflow.services.lifecycle import ResourceService
from affiflow.services.slugs import detect_platform

LINK_FIELDS = (
    'name',
    'description',
    'original_url',
    'affiliate_url',
    'platform',
    'commission',
    'commission_type',
    'tags',
    'product_id',
)


class AffiliateLinkService(ResourceService[AffiliateLink]):
    model = AffiliateLink
    entity_name = "Affiliate link"

    def list_links(self, workspace_id: str, product_id: str | None = None) -> list[AffiliateLink]:
        stmt = self.query(workspace_id)
        if product_id:
            stmt = stmt.where(AffiliateLink.product_id == product_id)
        stmt = stmt.order_by(AffiliateLink.created_at.desc(), AffiliateLink.id)
        return list(self.session.execute(stmt).scalars().all())

    def _product(self, workspace_id: str, product_id: str) -> Product:
        product = self.session.execute(
            select(Product).where(Product.id == product_id, Product.workspace_id == workspace_id)
        ).scalar_one_or_none()
        if product is None:
            raise NotFoundError("Product not found or access denied")
        return product

    def _ensure_url_free(self, product_id: str, affiliate_url: str, exclude_id: str | None = None) -> None:
        stmt = select(func.count(AffiliateLink.id)).where(
            AffiliateLink.product_id == product_id,
            AffiliateLink.affiliate_url == affiliate_url,
        )
        if exclude_id:
            stmt = stmt.where(AffiliateLink.id != exclude_id)
        if self.session.execute(stmt).scalar_one():
            raise ConflictError("Affiliate URL already exists for this product")

    def create(self, workspace_id: str, data: dict[str, Any]) -> AffiliateLink:
        data = dict(data)
        product = self._product(workspace_id, data['product_id'])
        self._ensure_url_free(product.id, data['affiliate_url'])
        if not data.get('platform'):
            data['platform'] = detect_platform(data['affiliate_url'])

        with atomic(self.session):
            link = AffiliateLink(workspace_id=workspace_id)
            self._apply(link, data, LINK_FIELDS)
            self.session.add(link)

        current_app.logger.info(f"Affiliate link {link.id} created for product {product.id}")
        return link

    def update(self, workspace_id: str, link_id: str, data: dict[str, Any]) -> AffiliateLink:
        link = self.get(workspace_id, link_id)
        data = dict(data)
        old_product_id = link.product_id

        target_product_id = data.get('product_id') or old_product_id
        if target_product_id != old_product_id:
            self._product(workspace_id, target_product_id)
        else:
            data.pop('product_id', None)

        target_url = data.get('affiliate_url') or link.affiliate_url
        if target_product_id != old_product_id or target_url != link.affiliate_url:
            self._ensure_url_free(target_product_id, target_url, exclude_id=link.id)

        if 'platform' in data and not data['platform']:
            data.pop('platform')

        with atomic(self.session):
            if target_product_id != old_product_id:
                # The old product may not keep a link it no longer owns as active
                self._clear_reference(workspace_id, link.id)
            self._apply(link, data, LINK_FIELDS)

        return link

    def set_active(self, workspace_id: str, link_id: str) -> Product:
        """Make ``link_id`` the active link of the product that owns it.

        A single conditional UPDATE: the product row changes only while the
        link still belongs to it and to this workspace. Concurrent calls on one
        product are last-writer-wins.
        """
        owner = (
            select(AffiliateLink.product_id)
            .where(AffiliateLink.id == link_id, AffiliateLink.workspace_id == workspace_id)
            .scalar_subquery()
        )
        stmt = (
            update(Product)
            .where(Product.id == owner, Product.workspace_id == workspace_id)
            .values(active_affiliate_link_id=link_id, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        with atomic(self.session):
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError("Affiliate link not found or access denied")

        self.session.expire_all()
        link = self.get(workspace_id, link_id)
        current_app.logger.info(f"Affiliate link {link_id} set active on product {link.product_id}")
        return link.product

    def clear_active(self, workspace_id: str, link_id: str) -> AffiliateLink:
        """Idempotent: only a product currently pointing at the link is changed."""
        link = self.get(workspace_id, link_id)
        with atomic(self.session):
            self._clear_reference(workspace_id, link.id)
        self.session.expire_all()
        return self.get(workspace_id, link_id)

    def _clear_reference(self, workspace_id: str, link_id: str) -> int:
        result = self.session.execute(
            update(Product)
            .where(
                Product.active_affiliate_link_id == link_id,
                Product.workspace_id == workspace_id,
            )
            .values(active_affiliate_link_id=None, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def _before_delete(self, instance: AffiliateLink) -> None:
        self._clear_reference(instance.workspace_id, instance.id)
        self.session.expire(instance.product, ['active_affiliate_link_id'])


def is_active(link: AffiliateLink) -> bool:
    return link.product is not None and link.product.active_affiliate_link_id == link.id


__all__ = ["AffiliateLinkService", "LINK_FIELDS", "is_active"]
