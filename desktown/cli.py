"""CLI tools for DeskTown administration."""

import click

from desktown.db.enums import Role
from desktown.db.models import User
from desktown.db.session import SessionLocal
from desktown.services import auth_service


@click.group()
def cli():
    """DeskTown CLI tools."""
    pass


@cli.command()
@click.option("--email", required=True, help="Admin email address")
@click.option("--password", required=True, prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--username", default=None, help="Optional username")
@click.option("--super-admin", is_flag=True, help="Create as super_admin instead of admin")
def create_admin(email: str, password: str, username: str | None, super_admin: bool):
    """
    Create an admin account, or promote an existing user.

    Example:
        desktown create-admin --email admin@desktown.app
    """
    role = Role.SUPER_ADMIN if super_admin else Role.ADMIN
    db = SessionLocal()
    try:
        existing = auth_service.get_user_by_email(db, email)
        if existing:
            existing.role = role.value
            existing.token_version += 1
            db.commit()
            click.echo(f"✓ Promoted {existing.email} to {role.value}")
            return

        user = auth_service.register_user(
            db,
            email=email,
            password=password,
            username=username,
            role=role,
        )
        click.echo(f"✓ Created {role.value}: {user.email}")
        click.echo(f"  ID: {user.id}")
    except ValueError as e:
        db.rollback()
        click.echo(f"❌ {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email to revoke sessions for")
def revoke_sessions(email: str):
    """
    Revoke all sessions for a user by bumping their token_version.

    Example:
        desktown revoke-sessions --email user@example.com
    """
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.strip().lower()).first()
        if not user:
            click.echo(f"❌ User not found: {email}")
            raise SystemExit(1)

        old_version = user.token_version
        user.token_version += 1
        db.commit()
        click.echo(f"✓ Revoked all sessions for {user.email}")
        click.echo(f"  Token version: {old_version} → {user.token_version}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
