"""
Flask CLI commands for bootstrapping a deployment.

POST /users needs a bearer token, so the very first account has to be
created from the command line:

    flask --app pickem init-db
    flask --app pickem create-user --username alice
"""
import click
from flask import Flask
from marshmallow import ValidationError as SchemaValidationError

from models.schemas.user import UserCreateSchema
from pickem.db import get_session, get_storage
from pickem.users import create_user
from utils.exceptions import ValidationError


def register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    @click.option("--drop", is_flag=True, help="Drop existing tables first (destroys data).")
    def init_db(drop):
        """Create the database tables."""
        storage = get_storage()
        if drop:
            storage.drop_all()
            click.echo("Dropped all tables")
        storage.reload()
        click.echo("Database initialized")

    @app.cli.command("create-user")
    @click.option("--username", prompt="Username")
    @click.option("--first-name", prompt="First name")
    @click.option("--last-name", prompt="Last name")
    @click.option("--password", prompt="Password", hide_input=True, confirmation_prompt=True)
    def create_user_command(username, first_name, last_name, password):
        """Create a user without an access token."""
        payload = {
            "username": username,
            "firstName": first_name,
            "lastName": last_name,
            "password": password,
            "confirmPassword": password,
        }
        try:
            data = UserCreateSchema().load(payload)
            user = create_user(get_session(), data)
        except SchemaValidationError as exc:
            raise click.ClickException(f"Invalid input: {exc.messages}")
        except ValidationError as exc:
            raise click.ClickException(exc.message)
        click.echo(f"Created user {user.username} ({user.id})")
