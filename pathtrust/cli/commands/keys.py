"""``pathtrust keygen NAME`` — generate an Ed25519 signing key."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from pathtrust.bridge.crypto_bridge import BadKey, generate_secret_key

err_console = Console(stderr=True)


def keygen_cmd(
    name: str = typer.Argument(..., help="Key name, e.g. cache.example.org-1."),
    secret_out: Path = typer.Option(
        None, "--secret-out", help="Write the secret key here instead of stdout."
    ),
) -> None:
    """Print (or write) a new secret key, then print its public key."""
    try:
        secret = generate_secret_key(name)
    except BadKey as exc:
        err_console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(code=2)

    if secret_out is not None:
        secret_out.write_text(secret.to_string() + "\n", encoding="utf-8")
        secret_out.chmod(0o600)
    else:
        typer.echo(secret.to_string())
    typer.echo(secret.to_public_key().to_string())
