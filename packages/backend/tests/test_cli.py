"""CLI tests — init-db and create-admin against a throwaway SQLite file."""

import asyncio

from click.testing import CliRunner
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from hireboard.auth.password import verify_password
from hireboard.cli.main import main
from hireboard.db.models import User


def _url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


async def _load_user(url: str, email: str):
    engine = create_async_engine(url)
    try:
        async with AsyncSession(engine) as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalars().first()
    finally:
        await engine.dispose()


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "hireboard" in result.output


def test_init_db_then_create_admin(tmp_path):
    url = _url(tmp_path)
    runner = CliRunner()

    result = runner.invoke(main, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "Tables created" in result.output

    result = runner.invoke(
        main,
        [
            "create-admin",
            "-e", "Root@Example.com",
            "-n", "Root",
            "-p", "admin_pass",
            "--database-url", url,
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Admin created" in result.output

    user = asyncio.run(_load_user(url, "root@example.com"))
    assert user is not None
    assert user.role == "admin"
    assert verify_password("admin_pass", user.password_hash)


def test_create_admin_duplicate_email(tmp_path):
    url = _url(tmp_path)
    runner = CliRunner()
    runner.invoke(main, ["init-db", "--database-url", url])
    args = ["create-admin", "-e", "a@x.io", "-n", "A", "-p", "admin_pass", "--database-url", url]

    assert runner.invoke(main, args).exit_code == 0
    result = runner.invoke(main, args)
    assert result.exit_code != 0
    assert "already registered" in result.output


def test_create_admin_short_password(tmp_path):
    result = CliRunner().invoke(
        main,
        ["create-admin", "-e", "a@x.io", "-n", "A", "-p", "123", "--database-url", _url(tmp_path)],
    )
    assert result.exit_code == 1
    assert "at least 6" in result.output
