"""Main Typer application — imports and registers all CLI commands.

Entry point: ``pathtrust`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from pathtrust.cli.commands.convert import convert_cmd
from pathtrust.cli.commands.hash_cmd import hash_cmd
from pathtrust.cli.commands.keys import keygen_cmd
from pathtrust.cli.commands.path_info_cmd import fingerprint_cmd, sign_cmd, verify_cmd
from pathtrust.config import config

app = typer.Typer(
    name="pathtrust",
    help="pathtrust: digests, fingerprints and signatures for content-addressed stores.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(None, "--log-level", help="Logging level (default from config)."),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# Register subcommands
app.command(name="hash", help="Hash files or directory trees.")(hash_cmd)
app.command(name="convert", help="Convert digests between text formats.")(convert_cmd)
app.command(name="keygen", help="Generate an Ed25519 signing key.")(keygen_cmd)
app.command(name="fingerprint", help="Print the fingerprint of a path info file.")(fingerprint_cmd)
app.command(name="sign", help="Sign a path info file.")(sign_cmd)
app.command(name="verify", help="Verify the signatures of a path info file.")(verify_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
