"""``pathtrust convert HASH...`` — re-encode digests in another format."""

from __future__ import annotations

import typer
from rich.console import Console

from pathtrust.config import config
from pathtrust.core.digest import BadDigest, UsageError, parse_digest, parse_hash_algorithm, parse_hash_format

err_console = Console(stderr=True)


def convert_cmd(
    hashes: list[str] = typer.Argument(..., help="Digests in any supported format."),
    to: str = typer.Option(None, "--to", help="base16, base32, base64 or sri."),
    hash_type: str = typer.Option(
        None, "--type", "-t", help="Algorithm for digests without a prefix."
    ),
) -> None:
    """Parse each HASH and print it in the target format."""
    try:
        fmt = parse_hash_format(to) if to else config.format
        algorithm = parse_hash_algorithm(hash_type) if hash_type else None
    except UsageError as exc:
        err_console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(code=2)

    for text in hashes:
        try:
            digest = parse_digest(text, algorithm)
        except UsageError as exc:
            err_console.print(f"[red]error:[/red] {exc}")
            raise typer.Exit(code=2)
        except BadDigest as exc:
            err_console.print(f"[red]error:[/red] {exc}")
            raise typer.Exit(code=1)
        typer.echo(digest.to_string(fmt, True))
