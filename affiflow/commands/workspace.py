"""Workspace management CLI commands."""

import click
from flask.cli import with_appcontext

from affiflow.errors import AppError
from affiflow.extensions import db
from affiflow.models import Membership, User, Workspace
from affiflow.services import WorkspaceService


@click.group('workspace')
def workspace_commands():
    """Workspace management commands."""
    pass


@workspace_commands.command('create')
@click.option('--owner', 'owner_email', required=True, help='Email of the owning user')
@click.option('--name', required=True, help='Workspace name')
@click.option('--slug', default=None, help='Preferred slug (suffixed if taken)')
@click.option('--description', default=None, help='Short description')
@with_appcontext
def create_workspace(owner_email, name, slug, description):
    """Create a workspace owned by an existing user."""
    owner = db.session.query(User).filter_by(email=owner_email.strip().lower()).first()
    if not owner:
        click.echo(click.style(f'Error: No user {owner_email} found', fg='red'))
        return

    try:
        workspace = WorkspaceService(db.session).create(owner.id, name, description=description, slug=slug)
    except AppError as exc:
        click.echo(click.style(f'Error: {exc.message}', fg='red'))
        return

    click.echo(click.style('Workspace created successfully!', fg='green'))
    click.echo(f'  Name: {workspace.name}')
    click.echo(f'  Slug: {workspace.slug}')
    click.echo(f'  Owner: {owner.email}')


@workspace_commands.command('list')
@click.option('--include-deleted', is_flag=True, help='Also list soft-deleted workspaces')
@with_appcontext
def list_workspaces(include_deleted):
    """List workspaces with their member counts."""
    query = db.session.query(Workspace).order_by(Workspace.created_at.asc())
    if not include_deleted:
        query = query.filter(Workspace.deleted_at.is_(None))

    workspaces = query.all()
    if not workspaces:
        click.echo('No workspaces found.')
        return

    for workspace in workspaces:
        members = db.session.query(Membership).filter_by(workspace_id=workspace.id).count()
        marker = ' [deleted]' if workspace.deleted_at else ''
        click.echo(f'{workspace.slug:<30} {workspace.name:<40} members={members}{marker}')
