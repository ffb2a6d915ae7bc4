"""
CLI commands, e.g.:

    flask --app api create-admin --email admin@example.com --name Admin
"""
import click

from models.client import Role
from utils.login import get_login_service


def register_commands(app):
    @app.cli.command("create-admin")
    @click.option("--email", required=True, envvar="ADMIN_EMAIL")
    @click.option("--name", default="Administrator", show_default=True)
    @click.password_option(envvar="ADMIN_PASSWORD")
    def create_admin(email, name, password):
        """Create the first administrator account."""
        result = get_login_service().register(name, email.strip(), password, Role.ADMIN)
        if not result.ok:
            raise click.ClickException(result.error.message)
        click.echo(f"Created administrator {result.value.email} (id: {result.value.id})")
