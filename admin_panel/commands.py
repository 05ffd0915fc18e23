from datetime import datetime, timezone

import click
from flask.cli import AppGroup

from . import app, mongo
from .common.ids import generate_id
from .common.mongo import init_collections as init_collections_func
from .users.models import User, hash_password

user_group = AppGroup("user", help="Manage users.")
app.cli.add_command(user_group)


@user_group.command("add", help="Add a user that can log into the dashboard.")
@click.option("-e", "--email", required=True)
@click.option("-n", "--name", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, required=True)
@click.option("-r", "--role", multiple=True, type=click.Choice(User.ROLES))
def add_user(email, name, password, role):
    if User.get_by_email(email):
        click.echo("User already exists.")
        return
    now = datetime.now(timezone.utc)
    user = User(
        generate_id("user"),
        name,
        email,
        email_verified=True,
        roles=list(role),
        pwhash=hash_password(password),
        created_at=now,
        updated_at=now,
    )
    res = mongo.db.users.insert_one(user.dict)
    click.echo(f"User added _id={res.inserted_id}")


@user_group.command("passwd", help="Set the password of a user.")
@click.option("-e", "--email", required=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True, required=True)
def set_password(email, password):
    user = User.get_by_email(email)
    if not user:
        click.echo("User does not exist.")
        return
    user.set_password(password)
    click.echo("Password set.")


@user_group.command("del", help="Delete a user.")
@click.option("-e", "--email", required=True)
def del_user(email):  # pragma: no cover
    user = User.get_by_email(email)
    if not user:
        click.echo("User does not exist.")
        return
    if click.confirm(f"Do you really want to delete user {email}?"):
        mongo.db.users.delete_one({"_id": user.id})
        click.echo("User deleted")


@user_group.command("list", help="List users.")
def list_users():
    for doc in mongo.db.users.find({}, {"pwhash": 0}):
        click.echo(doc)


@app.cli.command("init-collections", help="Create the collections and their indexes.")
def init_collections():
    created, existed = init_collections_func()
    if created:
        click.echo(f"Created collections: {', '.join(sorted(created))}")
    if existed:
        click.echo(f"Collections already present: {', '.join(sorted(existed))}")
