"""pathtrust CLI — Typer-based command-line interface.

Provides the ``pathtrust`` command with subcommands for hashing files and
trees, converting digest text between formats, generating signing keys,
and building, signing and verifying path info fingerprints.

Tables and errors use Rich; digests and keys are printed plainly for
scripting.
"""
