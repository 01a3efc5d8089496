"""Choose which workspace an unrouted dashboard request lands on."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from affiflow.models import Workspace
from affiflow.services.workspaces import WorkspaceService


class RoutingDecision(Enum):
    ONBOARDING = "onboarding"
    ROUTED = "routed"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class Resolution:
    decision: RoutingDecision
    slug: str | None = None

    @property
    def path(self) -> str | None:
        return f"/{self.slug}/dashboard" if self.slug else None


def pick_workspace(workspaces: list[Workspace], last_slug: str | None) -> Workspace | None:
    """Last-visited workspace if still available, else the most recently updated."""
    if not workspaces:
        return None
    if last_slug:
        for workspace in workspaces:
            if workspace.slug == last_slug:
                return workspace
    dated = [w for w in workspaces if w.updated_at is not None]
    if dated:
        return max(dated, key=lambda w: w.updated_at)
    return workspaces[0]


class TenantResolver:
    def __init__(self, session: Session):
        self.session = session

    def resolve(self, user_id: str, last_slug: str | None = None) -> Resolution:
        """Decide where ``/dashboard`` goes for ``user_id``.

        A store failure lets the request through to the page it asked for.
        """
        try:
            workspaces = WorkspaceService(self.session).list_for_user(user_id)
        except SQLAlchemyError as exc:
            self.session.rollback()
            current_app.logger.warning(f"Workspace lookup failed for {user_id}, not routing: {exc}")
            return Resolution(RoutingDecision.PASS_THROUGH)

        target = pick_workspace(workspaces, last_slug)
        if target is None:
            return Resolution(RoutingDecision.ONBOARDING)
        return Resolution(RoutingDecision.ROUTED, target.slug)


__all__ = ["RoutingDecision", "Resolution", "TenantResolver", "pick_workspace"]
