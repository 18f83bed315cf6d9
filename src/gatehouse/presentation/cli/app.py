"""Gatehouse CLI application using Typer.

Operator utilities: signing key generation, PEM to JWKS conversion,
secret generation and refresh session housekeeping.
"""

import asyncio
import json
import secrets
from pathlib import Path
from typing import Annotated, Awaitable, Callable, Optional

import typer
from rich.console import Console

from gatehouse.presentation.api.dependencies import (
    create_engine_from_settings,
    create_session_maker,
)
from gatehouse_auth import KeyMaterialError, RefreshSessionService, SigningKeyMaterial
from gatehouse_auth.persistence.sqlalchemy import (
    AuthBase,
    RefreshSessionRepositorySQLAlchemy,
)
from gatehouse_config.settings import Settings, get_settings

app = typer.Typer(
    name="gatehouse",
    help="Gatehouse - identity service CLI",
    no_args_is_help=True,
)
console = Console()


# Create subcommand groups
keys_app = typer.Typer(
    name="keys",
    help="Access token signing key utilities",
    no_args_is_help=True,
)
secrets_app = typer.Typer(
    name="secrets",
    help="Secret generation utilities",
    no_args_is_help=True,
)
sessions_app = typer.Typer(
    name="sessions",
    help="Refresh session housekeeping",
    no_args_is_help=True,
)
app.add_typer(keys_app)
app.add_typer(secrets_app)
app.add_typer(sessions_app)


@keys_app.command("generate")
def generate_key(
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Where to write the private key PEM"),
    ] = Path("config/private.pem"),
    key_size: Annotated[
        int,
        typer.Option("--key-size", help="RSA modulus size in bits"),
    ] = 2048,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing key file"),
    ] = False,
) -> None:
    """Generate an RSA private key for signing access tokens."""
    if output.exists() and not force:
        console.print(f"[red]{output} already exists.[/red] Use --force to replace it.")
        raise typer.Exit(code=1)

    material = SigningKeyMaterial.generate(key_size=key_size)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(material.private_pem())
    output.chmod(0o600)

    console.print(f"\n[bold green]Signing key written to[/bold green] {output}")
    console.print(f"[cyan]Key id[/cyan]: {material.key_id}")
    console.print(f"[cyan]JWT_PRIVATE_KEY_PATH[/cyan]={output.resolve()}")
    console.print(
        "[yellow]⚠  Keep the private key secure and never commit it "
        "to version control![/yellow]\n",
    )


@keys_app.command("jwks")
def export_jwks(
    key_file: Annotated[
        Path,
        typer.Argument(help="RSA private key PEM file"),
    ],
    key_id: Annotated[
        Optional[str],
        typer.Option("--kid", help="Key id to publish (default: RFC 7638 thumbprint)"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the key set here instead of stdout"),
    ] = None,
) -> None:
    """Print the public key set (JWKS) for a private key."""
    try:
        material = SigningKeyMaterial.from_file(key_file, key_id=key_id)
    except KeyMaterialError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(code=1) from e

    document = json.dumps(material.jwks(), indent=2)
    if output is None:
        typer.echo(document)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document + "\n", encoding="utf-8")
    console.print(f"[bold green]Key set written to[/bold green] {output}")


@secrets_app.command("generate")
def generate_secrets() -> None:
    """Generate secure secrets for Gatehouse configuration.

    Generates:
    - JWT_REFRESH_SECRET: Secret for signing refresh tokens (HS256)
    - POSTGRES_PASSWORD: Database password

    Copy the output to your .env file.
    """
    console.print("\n[bold green]Gatehouse Secret Generation[/bold green]")
    console.print("=" * 60)
    console.print(
        "\nGenerated secrets for your [bold].env[/bold] configuration file:\n",
    )

    # 64 bytes of entropy for a strong HS256 key
    refresh_secret = secrets.token_urlsafe(64)
    console.print(f"[cyan]JWT_REFRESH_SECRET[/cyan]={refresh_secret}")

    db_password = secrets.token_urlsafe(32)
    console.print(f"[cyan]POSTGRES_PASSWORD[/cyan]={db_password}")

    console.print("\n" + "=" * 60)
    console.print(
        "[dim]Generate the access token signing key with "
        "[bold]gatehouse keys generate[/bold].[/dim]\n",
    )


async def _run_session_task(
    settings: Settings,
    task: Callable[[RefreshSessionService], Awaitable[int]],
) -> int:
    engine = create_engine_from_settings(settings)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(AuthBase.metadata.create_all)

        async with create_session_maker(engine)() as session:
            service = RefreshSessionService(
                RefreshSessionRepositorySQLAlchemy(session),
                ttl_days=settings.jwt_refresh_token_expire_days,
            )
            result = await task(service)
            await session.commit()
            return result
    finally:
        await engine.dispose()


@sessions_app.command("prune")
def prune_sessions() -> None:
    """Delete refresh sessions whose expiry has passed."""
    count = asyncio.run(
        _run_session_task(get_settings(), lambda s: s.prune_expired()),
    )
    console.print(f"[bold green]Pruned {count} expired refresh session(s)[/bold green]")


@sessions_app.command("count")
def count_sessions(
    user_id: Annotated[int, typer.Argument(help="Id of the user")],
) -> None:
    """Show on how many devices a user is signed in."""
    count = asyncio.run(
        _run_session_task(get_settings(), lambda s: s.count(user_id)),
    )
    console.print(f"User {user_id} holds {count} refresh session(s)")


@sessions_app.command("revoke")
def revoke_sessions(
    user_id: Annotated[int, typer.Argument(help="Id of the user")],
) -> None:
    """Sign a user out on every device.

    Access tokens already issued stay valid until they expire.
    """
    count = asyncio.run(
        _run_session_task(get_settings(), lambda s: s.revoke_all(user_id)),
    )
    console.print(
        f"[bold green]Revoked {count} session(s) of user {user_id}[/bold green]",
    )


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
