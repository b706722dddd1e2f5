"""Page publishing maintenance commands."""

import click
from flask import current_app
from flask.cli import with_appcontext

from website_admin.application.pages.schedule_page import publish_due
from website_admin.application.pages.sync_pages import sync_landing_sections
from website_admin.utils.timestamps import parse_ts


@click.group('pages')
def page_commands():
    """Page publishing commands."""
    pass


@page_commands.command('publish-due')
@click.option('--now', 'now_raw', help='Treat this ISO timestamp as the current time')
@with_appcontext
def publish_due_command(now_raw):
    """Publish scheduled pages whose time has passed.

    Example:
        flask pages publish-due
    """
    now = None
    if now_raw:
        try:
            now = parse_ts(now_raw)
        except (ValueError, OverflowError):
            raise click.BadParameter(f'Invalid timestamp: {now_raw}', param_hint='--now')

    published = publish_due(now=now)

    if not published:
        click.echo('No scheduled pages are due.')
        return

    click.echo(click.style(f'✓ Published {len(published)} scheduled page(s)', fg='green'))
    for slug in published:
        click.echo(f'  {slug}')


@page_commands.command('sync')
@with_appcontext
def sync_command():
    """Create missing landing sections and mark other pages unlinked."""
    result = sync_landing_sections(sections=current_app.config['LANDING_SECTIONS'])

    for label, key, color in (
        ('Created', 'created', 'green'),
        ('Relinked', 'relinked', 'green'),
        ('Unlinked', 'unlinked', 'yellow'),
    ):
        slugs = result[key]
        click.echo(click.style(f'{label}: {len(slugs)}', fg=color))
        for slug in slugs:
            click.echo(f'  {slug}')
