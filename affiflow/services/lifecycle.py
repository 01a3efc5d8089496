"""Generic workspace-scoped resource service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, Iterable, TypeVar

from flask import current_app
from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import Session

from affiflow.errors import NotFoundError
from affiflow.extensions import db
from affiflow.models import DeletePolicy
from affiflow.services.db import atomic

Model = TypeVar("Model", bound=db.Model)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Page(Generic[Model]):
    """One page of a list query."""

    def __init__(self, items: list[Model], page: int, limit: int, total: int):
        self.items = items
        self.page = page
        self.limit = limit
        self.total = total

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    def meta(self) -> dict[str, int]:
        return {'page': self.page, 'limit': self.limit, 'total': self.total, 'pages': self.pages}


class ResourceService(Generic[Model]):
    """Base service for resources owned by a workspace.

    Subclasses set ``model``; the delete policy is read from the model's
    ``__delete_policy__`` so it is declared once per entity.
    """

    model: ClassVar[type]
    entity_name: ClassVar[str] = "Resource"
    scope_column: ClassVar[str] = "workspace_id"
    immutable_fields: ClassVar[frozenset[str]] = frozenset(
        {'id', 'created_at', 'updated_at', 'workspace_id', 'deleted_at'}
    )

    def __init__(self, session: Session):
        self.session = session

    @property
    def delete_policy(self) -> DeletePolicy:
        return getattr(self.model, '__delete_policy__', DeletePolicy.HARD)

    @property
    def soft_deletes(self) -> bool:
        return self.delete_policy is DeletePolicy.SOFT

    def query(self, workspace_id: str, include_deleted: bool = False) -> Select:
        """Base select filtered to one workspace and, by default, to live rows."""
        stmt = select(self.model).where(getattr(self.model, self.scope_column) == workspace_id)
        if self.soft_deletes and not include_deleted:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        return stmt

    def get(self, workspace_id: str, object_id: str, include_deleted: bool = False) -> Model:
        return self._lookup(workspace_id, object_id, include_deleted)

    def _lookup(self, workspace_id: str, object_id: str, include_deleted: bool = False) -> Model:
        stmt =self.query(workspace_id, include_deleted).where(self.model.id == object_id)
        instance = self.session.execute(stmt).scalar_one_or_none()
        if instance is None:
            raise NotFoundError(f"{self.entity_name} not found")
        return instance

    def paginate(
        self,
        stmt: Select,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Model]:
        page = max(int(page or 1), 1)
        limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)

        total = self.session.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        items = self.session.execute(
            stmt.limit(limit).offset((page - 1) * limit)
        ).scalars().all()
        return Page(list(items), page, limit, total)

    @staticmethod
    def search_filter(term: str | None, *columns) -> Any | None:
        """Case-insensitive substring match across ``columns``."""
        if not term or not term.strip():
            return None
        pattern = f"%{term.strip()}%"
        return or_(*(column.ilike(pattern) for column in columns))

    def _apply(self, instance: Model, data: dict[str, Any], fields: Iterable[str] | None = None) -> Model:
        """Copy provided keys onto ``instance``; absent keys are left alone."""
        allowed = set(fields) if fields is not None else None
        for key, value in data.items():
            if key in self.immutable_fields:
                continue
            if allowed is not None and key not in allowed:
                continue
            if hasattr(instance, key):
                setattr(instance, key, value)
        return instance

    def _check_delete(self, instance: Model) -> None:
        """Raise to refuse deleting ``instance``."""

    def _before_delete(self, instance: Model) -> None:
        """Hook run inside the delete transaction, after the precondition check."""

    def delete(self, workspace_id: str, object_id: str) -> Model:
        """Delete according to the entity's policy, after its precondition holds."""
        instance = self._lookup(workspace_id, object_id)
        self._check_delete(instance)

        with atomic(self.session):
            self._before_delete(instance)
            if self.soft_deletes:
                instance.deleted_at = utcnow()
            else:
                self.session.delete(instance)

        current_app.logger.info(
            f"{self.entity_name} {object_id} deleted ({self.delete_policy.value}) in workspace {workspace_id}"
        )
        return instance


__all__ = ["ResourceService", "Page", "utcnow", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE"]
