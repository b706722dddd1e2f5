"""CLI commands for the website admin."""

from .pages import page_commands
from .users import user_commands


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    app.cli.add_command(page_commands)
    app.cli.add_command(user_commands)
