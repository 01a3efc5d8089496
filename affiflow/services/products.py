"""Affiliate products and their workspace references."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select

from affiflow.errors import ConflictError, ValidationError
from affiflow.models import AffiliateLink, Category, PostProduct, Product
from affiflow.services.db import atomic
from affiflow.services.lifecycle import DEFAULT_PAGE_SIZE, Page, ResourceService

PRODUCT_FIELDS = (
    'name',
    'description',
    'image',
    'price',
    'currency',
    'category_id',
    'active_affiliate_link_id',
)
REFERENCE_FIELDS = ('category_id', 'active_affiliate_link_id')


class ProductService(ResourceService[Product]):
    model = Product
    entity_name = "Product"

    def list_products(
        self,
        workspace_id: str,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: str | None = None,
        category_id: str | None = None,
    ) -> Page[Product]:
        stmt = self.query(workspace_id)
        match = self.search_filter(search, Product.name, Product.description)
        if match is not None:
            stmt = stmt.where(match)
        if category_id:
            stmt = stmt.where(Product.category_id == category_id)
        stmt = stmt.order_by(Product.created_at.desc(), Product.id)
        return self.paginate(stmt, page, limit)

    def post_counts(self, product_ids: list[str]) -> dict[str, int]:
        if not product_ids:
            return {}
        stmt = (
            select(PostProduct.product_id, func.count(PostProduct.id))
            .where(PostProduct.product_id.in_(product_ids))
            .group_by(PostProduct.product_id)
        )
        counts = {product_id: 0 for product_id in product_ids}
        counts.update({row[0]: row[1] for row in self.session.execute(stmt)})
        return counts

    def _normalize_references(self, data: dict[str, Any]) -> dict[str, Any]:
        """Empty-string ids mean "not provided"; ``None`` clears the reference."""
        data = dict(data)
        for field in REFERENCE_FIELDS:
            if field in data and data[field] == '':
                data.pop(field)
        return data

    def _check_category(self, workspace_id: str, category_id: str | None) -> None:
        if category_id is None:
            return
        found = self.session.execute(
            select(func.count(Category.id)).where(
                Category.id == category_id,
                Category.workspace_id == workspace_id,
            )
        ).scalar_one()
        if not found:
            raise ValidationError.for_field('categoryId', "Category not found in this workspace")

    def _check_active_link(self, workspace_id: str, product_id: str | None, link_id: str | None) -> None:
        if link_id is None:
            return
        found = 0
        if product_id is not None:
            found = self.session.execute(
                select(func.count(AffiliateLink.id)).where(
                    AffiliateLink.id == link_id,
                    AffiliateLink.product_id == product_id,
                    AffiliateLink.workspace_id == workspace_id,
                )
            ).scalar_one()
        if not found:
            raise ValidationError.for_field(
                'activeAffiliateLinkId', "Affiliate link does not belong to this product"
            )

    def create(self, workspace_id: str, data: dict[str, Any]) -> Product:
        data = self._normalize_references(data)
        self._check_category(workspace_id, data.get('category_id'))
        # A new product owns no links yet
        self._check_active_link(workspace_id, None, data.get('active_affiliate_link_id'))

        with atomic(self.session):
            product = Product(workspace_id=workspace_id, currency=data.pop('currency', None) or 'VND')
            self._apply(product, data, PRODUCT_FIELDS)
            self.session.add(product)

        current_app.logger.info(f"Product {product.id} created in workspace {workspace_id}")
        return product

    def update(self, workspace_id: str, product_id: str, data: dict[str, Any]) -> Product:
        product = self.get(workspace_id, product_id)
        data = self._normalize_references(data)
        if 'category_id' in data:
            self._check_category(workspace_id, data['category_id'])
        if 'active_affiliate_link_id' in data:
            self._check_active_link(workspace_id, product.id, data['active_affiliate_link_id'])
        if 'currency' in data and not data['currency']:
            data.pop('currency')

        with atomic(self.session):
            self._apply(product, data, PRODUCT_FIELDS)
        return product

    def _check_delete(self, instance: Product) -> None:
        count = self.post_counts([instance.id])[instance.id]
        if count > 0:
            raise ConflictError(f"Product is used in {count} post(s). Remove from posts first.")

    def _before_delete(self, instance: Product) -> None:
        # Break the product -> active link cycle before the links cascade away
        instance.active_affiliate_link_id = None
        self.session.flush()


__all__ = ["ProductService", "PRODUCT_FIELDS"]
