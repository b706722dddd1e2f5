"""Operator account commands."""

import click
from flask.cli import with_appcontext

from website_admin.extensions import db
from website_admin.domain.permissions import ALL_CAPABILITIES, ROLE_PERMISSIONS
from website_admin.models.user import User


@click.group('users')
def user_commands():
    """User management commands."""
    pass


@user_commands.command('create')
@click.option('--email', required=True, help='Login email')
@click.option('--password', required=True, help='Initial password')
@click.option('--role', type=click.Choice(sorted(ROLE_PERMISSIONS)), default='Editor', show_default=True)
@click.option('--name', 'display_name', help='Name shown in workflow history')
@click.option('--grant', multiple=True, type=click.Choice(sorted(ALL_CAPABILITIES)),
              help='Extra capability on top of the role (repeatable)')
@with_appcontext
def create_user(email, password, role, display_name, grant):
    """Create an operator account.

    Example:
        flask users create --email editor@example.com --password secret --role Editor
    """
    email = email.strip().lower()

    if db.session.query(User).filter_by(email=email).first():
        click.echo(click.style(f'Error: User "{email}" already exists', fg='red'))
        raise SystemExit(1)

    user = User(
        email=email,
        role=role,
        display_name=display_name,
        extra_permissions=list(grant),
    )
    user.set_password(password)

    db.session.add(user)
    db.session.commit()

    click.echo(click.style('✓ User created successfully!', fg='green'))
    click.echo(f'  Email: {email}')
    click.echo(f'  Role: {role}')
    click.echo(f'  Permissions: {", ".join(user.permissions)}')
