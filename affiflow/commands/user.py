"""User management CLI commands."""

import click
from flask import current_app
from flask.cli import with_appcontext

from affiflow.extensions import db
from affiflow.models import PlatformRole, User


def _get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter_by(email=email.strip().lower()).first()


@click.group('user')
def user_commands():
    """User management commands."""
    pass


@user_commands.command('create')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='User password')
@click.option('--name', default=None, help='Display name')
@click.option('--role', type=click.Choice([r.value for r in PlatformRole]), default=PlatformRole.USER.value, show_default=True)
@with_appcontext
def create_user(email, password, name, role):
    """Create a platform user."""
    if _get_user_by_email(email):
        click.echo(click.style(f'Error: User with email "{email}" already exists', fg='red'))
        return

    user = User(email=email.strip().lower(), name=name, role=PlatformRole(role))
    user.set_password(password, rounds=current_app.config.get('BCRYPT_LOG_ROUNDS', 12))
    db.session.add(user)
    db.session.commit()

    click.echo(click.style('User created successfully!', fg='green'))
    click.echo(f'  Email: {user.email}')
    click.echo(f'  Role: {role}')


@user_commands.command('set-password')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='New password')
@with_appcontext
def set_password(email, password):
    """Set or reset a user's password."""
    user = _get_user_by_email(email)
    if not user:
        click.echo(click.style(f'Error: No user {email} found', fg='red'))
        return

    user.set_password(password, rounds=current_app.config.get('BCRYPT_LOG_ROUNDS', 12))
    db.session.commit()
    click.echo(click.style('Password updated.', fg='green'))


@user_commands.command('promote')
@click.option('--email', required=True, help='User email')
@click.option('--role', type=click.Choice([r.value for r in PlatformRole]), default=PlatformRole.ADMIN.value, show_default=True)
@with_appcontext
def promote(email, role):
    """Change a user's platform role. Existing sessions keep their old role until they expire."""
    user = _get_user_by_email(email)
    if not user:
        click.echo(click.style(f'Error: No user {email} found', fg='red'))
        return

    user.role = PlatformRole(role)
    db.session.commit()
    click.echo(click.style(f'{user.email} is now {role}.', fg='green'))
