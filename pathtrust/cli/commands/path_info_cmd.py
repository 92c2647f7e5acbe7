"""``pathtrust fingerprint|sign|verify INFO.json`` — path info signatures.

INFO.json holds one path info object in the layout written by
``path_info_to_json``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from pathtrust.bridge.crypto_bridge import BadKey, SecretKey, parse_public_keys
from pathtrust.config import config
from pathtrust.core.digest import BadDigest, UsageError
from pathtrust.core.path_info import (
    MAX_SIGS,
    FingerprintError,
    SelfReferenceError,
    check_signature,
    count_valid_signatures,
    fingerprint,
    path_info_from_json,
    path_info_to_json,
    sign,
)
from pathtrust.models.content_address import ContentAddressError
from pathtrust.models.path_info import PathInfo
from pathtrust.models.store_path import BadStorePath

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _fail(message: str, code: int = 1) -> typer.Exit:
    err_console.print(f"[red]error:[/red] {message}")
    return typer.Exit(code=code)


def _load(info_file: Path) -> PathInfo:
    try:
        data: dict[str, Any] = json.loads(info_file.read_text(encoding="utf-8"))
        return path_info_from_json(config.store(), data)
    except OSError as exc:
        raise _fail(f"cannot read '{info_file}': {exc}")
    except json.JSONDecodeError as exc:
        raise _fail(f"'{info_file}' is not valid JSON: {exc}")
    except KeyError as exc:
        raise _fail(f"'{info_file}' is missing field {exc}")
    except UsageError as exc:
        raise _fail(f"'{info_file}': {exc}", code=2)
    except (BadDigest, BadStorePath, ContentAddressError) as exc:
        raise _fail(f"'{info_file}': {exc}")
    except ValidationError as exc:
        raise _fail(f"'{info_file}' is not a valid path info: {exc.errors()[0]['msg']}")


def fingerprint_cmd(
    info_file: Path = typer.Argument(..., help="Path info JSON file."),
) -> None:
    """Print the fingerprint that signatures over INFO_FILE cover."""
    info = _load(info_file)
    try:
        typer.echo(fingerprint(config.store(), info))
    except FingerprintError as exc:
        raise _fail(str(exc))


def sign_cmd(
    info_file: Path = typer.Argument(..., help="Path info JSON file, updated in place."),
    key_file: Path = typer.Option(
        None, "--key-file", "-k", help="Secret key file (defaults to PATHTRUST_SECRET_KEY_FILE)."
    ),
) -> None:
    """Sign INFO_FILE and write the new signature set back."""
    key_path = key_file or config.secret_key_file
    if key_path is None:
        raise _fail("no secret key given; use --key-file or PATHTRUST_SECRET_KEY_FILE", code=2)
    try:
        secret = SecretKey.parse(key_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise _fail(f"cannot read '{key_path}': {exc}")
    except BadKey as exc:
        raise _fail(str(exc))

    store = config.store()
    info = _load(info_file)
    try:
        sig = sign(store, info, secret)
    except FingerprintError as exc:
        raise _fail(str(exc))

    info_file.write_text(
        json.dumps(path_info_to_json(store, info), indent=2) + "\n", encoding="utf-8"
    )
    typer.echo(sig)


def verify_cmd(
    info_file: Path = typer.Argument(..., help="Path info JSON file."),
    trusted_keys: list[str] = typer.Option(
        None, "--trusted-key", help="Trusted public key (name:base64). Repeatable."
    ),
) -> None:
    """Check the signatures on INFO_FILE against the trusted keys.

    Exits 1 when the path is neither content-addressed nor carries a
    valid signature.
    """
    try:
        public_keys = parse_public_keys(trusted_keys or config.trusted_public_keys)
    except BadKey as exc:
        raise _fail(str(exc), code=2)

    store = config.store()
    info = _load(info_file)
    try:
        good = count_valid_signatures(store, info, public_keys)
    except (FingerprintError, SelfReferenceError) as exc:
        raise _fail(str(exc))

    path = store.print_store_path(info.path)
    if good == MAX_SIGS:
        console.print(f"[green]{path}[/green] is content-addressed (self-certifying)")
        return

    table = Table(title=path)
    table.add_column("Signature", style="cyan", overflow="fold")
    table.add_column("Valid", justify="center")
    for sig in sorted(info.sigs):
        ok = check_signature(store, info, public_keys, sig)
        table.add_row(sig, "[green]Yes[/green]" if ok else "[red]No[/red]")
    console.print(table)
    console.print(f"{good} valid signature(s)")

    if good == 0:
        raise typer.Exit(code=1)
