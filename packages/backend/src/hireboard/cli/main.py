"""Hireboard admin CLI.

Usage:
    hireboard serve                              # Run the API with uvicorn
    hireboard init-db                            # Create tables (dev/test only)
    hireboard create-admin -e a@x.io -n Admin    # Provision an admin account
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from hireboard import __version__
from hireboard.config import settings


def _run(coro):
    """Run an async coroutine from a synchronous Click handler."""
    return asyncio.run(coro)


async def _create_tables(database_url: str) -> None:
    from hireboard.db.models import Base

    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()


async def _create_admin(database_url: str, email: str, name: str, password: str) -> str:
    from hireboard.auth.password import hash_password
    from hireboard.db.models import User

    engine = create_async_engine(database_url)
    try:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            existing = await session.execute(select(User).where(User.email == email))
            if existing.scalars().first():
                raise click.ClickException(f"{email} is already registered")
            user = User(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role="admin",
                skills=[],
            )
            session.add(user)
            await session.commit()
            return str(user.id)
    finally:
        await engine.dispose()


@click.group()
@click.version_option(version=__version__, prog_name="hireboard")
def main():
    """Hireboard — job board backend administration."""


@main.command()
@click.option("--host", default=None, help="Bind address (default: HIREBOARD_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: HIREBOARD_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server.

    Push connections live in this process's memory, so run a single
    worker.
    """
    import uvicorn

    uvicorn.run(
        "hireboard.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        workers=1,
    )


@main.command("init-db")
@click.option("--database-url", default=None, help="Override HIREBOARD_DATABASE_URL")
def init_db(database_url: Optional[str]):
    """Create all tables from the models. Use Alembic in production."""
    url = database_url or settings.database_url
    _run(_create_tables(url))
    click.secho("Tables created.", fg="green")


@main.command("create-admin")
@click.option("--email", "-e", required=True)
@click.option("--name", "-n", required=True)
@click.option("--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--database-url", default=None, help="Override HIREBOARD_DATABASE_URL")
def create_admin(email: str, name: str, password: str, database_url: Optional[str]):
    """Create an admin account (admins can't self-register)."""
    if len(password) < 6:
        click.secho("Error: password must be at least 6 characters", fg="red", err=True)
        sys.exit(1)
    url = database_url or settings.database_url
    user_id = _run(_create_admin(url, email.strip().lower(), name, password))
    click.secho(f"Admin created: {user_id}", fg="green")


if __name__ == "__main__":
    main()
