"""Workspace access control.

Every workspace-scoped operation is gated by :func:`authorize`: the caller
must hold a membership in the workspace whose role ranks at least as high as
the role the operation requires. Roles are totally ordered
(MEMBER < ADMIN < OWNER), so one rank comparison decides.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar, cast

from flask import g
from flask_login import current_user
from sqlalchemy import select
from sqlalchemy.orm import Session

from affiflow.errors import AuthenticationError, AuthorizationError, NotFoundError
from affiflow.extensions import db
from affiflow.models import Membership, WorkspaceRole

F = TypeVar('F', bound=Callable[..., object])


def find_membership(session: Session, user_id: str, workspace_id: str) -> Membership | None:
    stmt = select(Membership).where(
        Membership.user_id == user_id,
        Membership.workspace_id == workspace_id,
    )
    return session.execute(stmt).scalar_one_or_none()


def authorize(
    session: Session,
    user_id: str,
    workspace_id: str,
    required_role: WorkspaceRole = WorkspaceRole.MEMBER,
) -> Membership:
    """Return the caller's membership or raise if it does not satisfy ``required_role``."""
    membership = find_membership(session, user_id, workspace_id)
    if membership is None:
        raise AuthorizationError("Access denied to workspace")

    if membership.workspace.deleted_at is not None:
        raise NotFoundError("Workspace not found")

    if not membership.role.at_least(required_role):
        raise AuthorizationError("Insufficient permissions")

    return membership


def workspace_role_required(required_role: WorkspaceRole = WorkspaceRole.MEMBER):
    """Gate a view on the ``workspace_id`` URL parameter.

    The resolved membership is stored on ``g.membership``.
    """

    def decorator(view_func: F) -> F:
        @wraps(view_func)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationError()

            workspace_id = kwargs.get('workspace_id')
            if not workspace_id:
                raise NotFoundError("Workspace not found")

            g.membership = authorize(db.session, current_user.id, workspace_id, required_role)
            g.workspace_id = workspace_id
            return view_func(*args, **kwargs)

        return cast(F, wrapped)

    return decorator


__all__ = ["find_membership", "authorize", "workspace_role_required"]
