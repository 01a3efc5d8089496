"""Product categories, unique by name within a workspace."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select

from affiflow.errors import ConflictError
from affiflow.models import Category, Product
from affiflow.services.db import atomic
from affiflow.services.lifecycle import ResourceService

CATEGORY_FIELDS = ('name', 'description', 'color')


class CategoryService(ResourceService[Category]):
    model = Category
    entity_name = "Category"

    def list_categories(self, workspace_id: str) -> list[Category]:
        stmt = self.query(workspace_id).order_by(Category.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def product_counts(self, category_ids: list[str]) -> dict[str, int]:
        if not category_ids:
            return {}
        stmt = (
            select(Product.category_id, func.count(Product.id))
            .where(Product.category_id.in_(category_ids))
            .group_by(Product.category_id)
        )
        counts = {category_id: 0 for category_id in category_ids}
        counts.update({row[0]: row[1] for row in self.session.execute(stmt)})
        return counts

    def _ensure_name_free(self, workspace_id: str, name: str, exclude_id: str | None = None) -> None:
        stmt = select(func.count(Category.id)).where(
            Category.workspace_id == workspace_id,
            Category.name == name,
        )
        if exclude_id:
            stmt = stmt.where(Category.id != exclude_id)
        if self.session.execute(stmt).scalar_one():
            raise ConflictError("Category name already exists")

    def create(self, workspace_id: str, data: dict[str, Any]) -> Category:
        self._ensure_name_free(workspace_id, data['name'])
        with atomic(self.session):
            category = Category(workspace_id=workspace_id)
            self._apply(category, data, CATEGORY_FIELDS)
            self.session.add(category)
        current_app.logger.info(f"Category {category.id} created in workspace {workspace_id}")
        return category

    def update(self, workspace_id: str, category_id: str, data: dict[str, Any]) -> Category:
        category = self.get(workspace_id, category_id)
        if data.get('name') and data['name'] != category.name:
            self._ensure_name_free(workspace_id, data['name'], exclude_id=category.id)
        with atomic(self.session):
            self._apply(category, data, CATEGORY_FIELDS)
        return category

    def _check_delete(self, instance: Category) -> None:
        count = self.product_counts([instance.id])[instance.id]
        if count > 0:
            raise ConflictError(
                f"Category has {count} product(s). Remove products from category first."
            )


__all__ = ["CategoryService"]
