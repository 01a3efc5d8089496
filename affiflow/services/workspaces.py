"""Tenant directory: workspace CRUD and slug resolution."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select

from affiflow.errors import ConflictError, NotFoundError, ValidationError
from affiflow.models import Membership, Post, Workspace, WorkspaceRole
from affiflow.services.db import atomic
from affiflow.services.lifecycle import ResourceService
from affiflow.services.slugs import is_valid_slug, slugify, with_suffix

MAX_SLUG_LENGTH = 50
RECENT_POSTS = 5
UPDATABLE_FIELDS = ('name', 'description', 'slug', 'avatar', 'cover', 'domain', 'theme')


class WorkspaceService(ResourceService[Workspace]):
    model = Workspace
    entity_name = "Workspace"
    scope_column = "id"

    # Queries ----------------------------------------------------------

    def get(self, workspace_id: str, include_deleted: bool = False) -> Workspace:
        return self._lookup(workspace_id, workspace_id, include_deleted)

    def list_for_user(self, user_id: str) -> list[Workspace]:
        """Live workspaces the user belongs to, newest first."""
        stmt = (
            select(Workspace)
            .join(Membership, Membership.workspace_id == Workspace.id)
            .where(Membership.user_id == user_id, Workspace.deleted_at.is_(None))
            .order_by(Workspace.created_at.desc())
        )
        return list(self.session.execute(stmt).scalars().unique().all())

    def post_counts(self, workspace_ids: list[str]) -> dict[str, int]:
        """Live post count per workspace."""
        if not workspace_ids:
            return {}
        stmt = (
            select(Post.workspace_id, func.count(Post.id))
            .where(Post.workspace_id.in_(workspace_ids), Post.deleted_at.is_(None))
            .group_by(Post.workspace_id)
        )
        counts = {workspace_id: 0 for workspace_id in workspace_ids}
        counts.update({row[0]: row[1] for row in self.session.execute(stmt)})
        return counts

    def recent_posts(self, workspace_id: str, limit: int = RECENT_POSTS) -> list[Post]:
        stmt = (
            select(Post)
            .where(Post.workspace_id == workspace_id, Post.deleted_at.is_(None))
            .order_by(Post.created_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_by_slug(self, user_id: str, slug: str) -> tuple[Workspace, Membership]:
        """Resolve ``slug`` among the caller's live memberships only."""
        stmt = (
            select(Workspace, Membership)
            .join(Membership, Membership.workspace_id == Workspace.id)
            .where(
                Workspace.slug == slug,
                Workspace.deleted_at.is_(None),
                Membership.user_id == user_id,
            )
        )
        row = self.session.execute(stmt).first()
        if row is None:
            raise NotFoundError("Workspace not found")
        return row[0], row[1]

    def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        """Slugs are global and stay reserved after a soft delete."""
        stmt = select(func.count(Workspace.id)).where(Workspace.slug == slug)
        if exclude_id:
            stmt = stmt.where(Workspace.id != exclude_id)
        return self.session.execute(stmt).scalar_one() > 0

    def unique_slug(self, name: str, requested: str | None = None) -> str:
        """Requested slug when valid, else one derived from ``name``; suffixed until free."""
        if requested and is_valid_slug(requested):
            base = requested
        else:
            base = slugify(name)[:MAX_SLUG_LENGTH].strip('-')

        candidate = base
        if not is_valid_slug(candidate):
            candidate = with_suffix(base or 'workspace')
        while self.slug_taken(candidate):
            candidate = with_suffix(base or 'workspace')
        return candidate

    # Commands ---------------------------------------------------------

    def create(
        self,
        user_id: str,
        name: str,
        description: str | None = None,
        slug: str | None = None,
    ) -> Workspace:
        """Create a workspace owned by ``user_id``; never fails on slug collision."""
        with atomic(self.session):
            workspace = Workspace(
                name=name,
                description=description,
                slug=self.unique_slug(name, slug),
            )
            self.session.add(workspace)
            self.session.flush()
            self.session.add(
                Membership(user_id=user_id, workspace_id=workspace.id, role=WorkspaceRole.OWNER)
            )

        current_app.logger.info(f"Workspace {workspace.slug} created by {user_id}")
        return workspace

    def update(self, workspace_id: str, data: dict[str, Any]) -> Workspace:
        workspace = self.get(workspace_id)

        slug = data.get('slug')
        if 'slug' in data and slug != workspace.slug:
            if not slug or not is_valid_slug(slug):
                raise ValidationError.for_field('slug', "Invalid slug format")
            if self.slug_taken(slug, exclude_id=workspace.id):
                raise ConflictError("Slug already taken")

        domain = data.get('domain')
        if domain and domain != workspace.domain:
            taken = self.session.execute(
                select(func.count(Workspace.id)).where(
                    Workspace.domain == domain, Workspace.id != workspace.id
                )
            ).scalar_one()
            if taken:
                raise ConflictError("Domain already in use")

        with atomic(self.session):
            self._apply(workspace, data, UPDATABLE_FIELDS)

        return workspace

    def soft_delete(self, workspace_id: str) -> Workspace:
        return self.delete(workspace_id, workspace_id)


__all__ = ["WorkspaceService"]
