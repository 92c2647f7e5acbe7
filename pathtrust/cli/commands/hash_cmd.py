"""``pathtrust hash PATH...`` — print the digest of files or trees.

``--mode flat`` hashes a regular file's bytes; ``--mode nar`` hashes the
canonical archive serialisation of a file or directory tree.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from pathtrust.config import config
from pathtrust.core.digest import UsageError, parse_hash_algorithm, parse_hash_format
from pathtrust.core.hasher import hash_file, hash_path

err_console = Console(stderr=True)

_MODES = ("flat", "nar")


def hash_cmd(
    paths: list[Path] = typer.Argument(..., help="Files or directories to hash."),
    hash_type: str = typer.Option(None, "--type", "-t", help="md5, sha1, sha256 or sha512."),
    hash_format: str = typer.Option(None, "--format", "-f", help="base16, base32, base64 or sri."),
    mode: str = typer.Option("nar", "--mode", "-m", help="flat or nar."),
) -> None:
    """Hash each PATH and print one digest per line."""
    try:
        algorithm = parse_hash_algorithm(hash_type) if hash_type else config.algorithm
        fmt = parse_hash_format(hash_format) if hash_format else config.format
        if mode not in _MODES:
            raise UsageError(f"unknown hash mode '{mode}', expect 'flat' or 'nar'")
    except UsageError as exc:
        err_console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(code=2)

    for path in paths:
        try:
            if mode == "flat":
                digest = hash_file(algorithm, path)
            else:
                digest = hash_path(algorithm, path).digest
        except OSError as exc:
            err_console.print(f"[red]error:[/red] cannot hash '{path}': {exc}")
            raise typer.Exit(code=1)
        typer.echo(digest.to_string(fmt, True))
