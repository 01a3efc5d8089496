"""CLI commands for AffiFlow."""

import click
from flask.cli import with_appcontext

from affiflow.extensions import db

from .user import user_commands
from .workspace import workspace_commands


@click.command('init-db')
@with_appcontext
def init_db():
    """Create all tables directly, bypassing migrations."""
    import affiflow.models  # noqa: F401
    db.create_all()
    click.echo(click.style('Database tables created.', fg='green'))


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    app.cli.add_command(user_commands)
    app.cli.add_command(workspace_commands)
    app.cli.add_command(init_db)
