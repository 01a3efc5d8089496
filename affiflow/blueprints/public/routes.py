"""Landing page, tenant routing and the workspace dashboard."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user
from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from affiflow.auth import login_required_with_message
from affiflow.errors import AppError, NotFoundError
from affiflow.extensions import db
from affiflow.services import AffiliateLinkService, CategoryService, PostService, TenantResolver, WorkspaceService
from affiflow.services.routing import RoutingDecision

public_bp = Blueprint('public', __name__)


class WorkspaceForm(FlaskForm):
    name = StringField("Workspace name", validators=[DataRequired(), Length(max=50)])
    slug = StringField("URL slug", validators=[Optional(), Length(max=50)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=200)])


def _last_workspace_cookie() -> str:
    return current_app.config.get('LAST_WORKSPACE_COOKIE', 'affiflow_last_workspace')


@public_bp.route('/')
def home():
    return render_template('landing.html')


@public_bp.route('/dashboard', methods=['GET', 'POST'])
@login_required_with_message
def dashboard():
    form = WorkspaceForm()
    if form.validate_on_submit():
        try:
            workspace = WorkspaceService(db.session).create(
                current_user.id,
                form.name.data.strip(),
                description=form.description.data or None,
                slug=(form.slug.data or '').strip() or None,
            )
        except AppError as exc:
            flash(exc.message, 'error')
        else:
            return redirect(url_for('public.workspace_dashboard', slug=workspace.slug))

    if request.method == 'GET':
        resolution = TenantResolver(db.session).resolve(
            current_user.id, request.cookies.get(_last_workspace_cookie())
        )
        if resolution.decision is RoutingDecision.ROUTED:
            return redirect(url_for('public.workspace_dashboard', slug=resolution.slug))

    return render_template('onboarding.html', form=form)


@public_bp.route('/<slug>/dashboard')
@login_required_with_message
def workspace_dashboard(slug):
    service = WorkspaceService(db.session)
    try:
        workspace, membership = service.get_by_slug(current_user.id, slug)
    except NotFoundError:
        abort(404)

    stats = {
        'posts': service.post_counts([workspace.id])[workspace.id],
        'products': len(workspace.products),
        'categories': len(CategoryService(db.session).list_categories(workspace.id)),
        'links': len(AffiliateLinkService(db.session).list_links(workspace.id)),
    }
    recent = PostService(db.session).list_posts(workspace.id, limit=5).items
    workspaces = service.list_for_user(current_user.id)

    response = current_app.make_response(render_template(
        'workspace_dashboard.html',
        workspace=workspace,
        membership=membership,
        stats=stats,
        recent_posts=recent,
        workspaces=workspaces,
    ))
    response.set_cookie(
        _last_workspace_cookie(),
        workspace.slug,
        max_age=current_app.config.get('SESSION_LIFETIME_SECONDS'),
        httponly=True,
        samesite='Lax',
    )
    return response


__all__ = ['public_bp']
