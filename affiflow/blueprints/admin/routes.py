from __future__ import annotations

from flask import Blueprint, render_template
from sqlalchemy import func, select

from affiflow.auth import platform_admin_required
from affiflow.extensions import db
from affiflow.models import (
    AffiliateLink,
    Post,
    Product,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
    User,
    Workspace,
)

admin_bp = Blueprint('admin', __name__)

RECENT_LIMIT = 10


def _count(stmt) -> int:
    return db.session.execute(stmt).scalar_one()


def _platform_overview() -> dict:
    plans = {plan.value: 0 for plan in SubscriptionPlan}
    rows = db.session.execute(
        select(Subscription.plan, func.count(Subscription.id))
        .where(Subscription.status == SubscriptionStatus.ACTIVE)
        .group_by(Subscription.plan)
    )
    for plan, count in rows:
        plans[plan.value] = count

    return {
        'users': _count(select(func.count(User.id))),
        'workspaces': _count(select(func.count(Workspace.id)).where(Workspace.deleted_at.is_(None))),
        'deleted_workspaces': _count(select(func.count(Workspace.id)).where(Workspace.deleted_at.is_not(None))),
        'posts': _count(select(func.count(Post.id)).where(Post.deleted_at.is_(None))),
        'products': _count(select(func.count(Product.id))),
        'affiliate_links': _count(select(func.count(AffiliateLink.id))),
        'plans': plans,
    }


@admin_bp.route('/')
@platform_admin_required
def admin_dashboard():
    recent_users = db.session.execute(
        select(User).order_by(User.created_at.desc()).limit(RECENT_LIMIT)
    ).scalars().all()
    recent_workspaces = db.session.execute(
        select(Workspace)
        .where(Workspace.deleted_at.is_(None))
        .order_by(Workspace.created_at.desc())
        .limit(RECENT_LIMIT)
    ).scalars().all()
    return render_template(
        'admin.html',
        overview=_platform_overview(),
        recent_users=recent_users,
        recent_workspaces=recent_workspaces,
    )


__all__ = ['admin_bp']
