"""Store directory: printable identities and content-addressed path derivation.

A store path is printed as ``<store_dir>/<hash part>-<name>``.  The hash
part is the SHA-256 of a type-tagged description of the object, folded
down to 20 bytes and printed in base-32.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable

from pathtrust.core.digest import Digest, HashAlgorithm, HashFormat, compress_digest
from pathtrust.core.hasher import hash_bytes
from pathtrust.models.content_address import (
    ContentAddressError,
    ContentAddressMethod,
    ContentAddressWithReferences,
    FixedOutputInfo,
    StoreReferences,
    TextInfo,
)
from pathtrust.models.store_path import BadStorePath, StorePath, check_name

logger = logging.getLogger(__name__)

DEFAULT_STORE_DIR = "/nix/store"

STORE_PATH_HASH_SIZE = 20


class StoreDir:
    """Path arithmetic for one store directory.  Performs no I/O."""

    def __init__(self, store_dir: str = DEFAULT_STORE_DIR) -> None:
        store_dir = posixpath.normpath(store_dir)
        if not store_dir.startswith("/"):
            raise BadStorePath(f"store directory '{store_dir}' is not absolute")
        self.store_dir = store_dir

    def __repr__(self) -> str:
        return f"StoreDir({self.store_dir!r})"

    # ------------------------------------------------------------------
    # Printing and parsing
    # ------------------------------------------------------------------

    def print_store_path(self, path: StorePath) -> str:
        return f"{self.store_dir}/{path}"

    def print_store_path_set(self, paths: Iterable[StorePath]) -> list[str]:
        """Printed paths in sorted order."""
        return sorted(self.print_store_path(p) for p in paths)

    def parse_store_path(self, text: str) -> StorePath:
        """Parse an absolute path that must sit directly in the store."""
        path = posixpath.normpath(text)
        parent, base = posixpath.split(path)
        if parent != self.store_dir:
            raise BadStorePath(f"path '{text}' is not in the store '{self.store_dir}'")
        return StorePath.parse(base)

    def is_store_path(self, text: str) -> bool:
        try:
            self.parse_store_path(text)
        except BadStorePath:
            return False
        return True

    # ------------------------------------------------------------------
    # Path derivation
    # ------------------------------------------------------------------

    def make_store_path(self, path_type: str, digest: Digest, name: str) -> StorePath:
        """Derive a store path from a type tag, a digest, and a name."""
        check_name(name)
        s = f"{path_type}:{digest.to_string(HashFormat.BASE16, True)}:{self.store_dir}:{name}"
        h = compress_digest(hash_bytes(HashAlgorithm.SHA256, s), STORE_PATH_HASH_SIZE)
        return StorePath(hash_part=h.to_string(HashFormat.BASE32, False), name=name)

    def make_type(self, path_type: str, references: StoreReferences) -> str:
        parts = [path_type, *self.print_store_path_set(references.others)]
        if references.self_reference:
            parts.append("self")
        return ":".join(parts)

    def make_text_path(self, name: str, info: TextInfo) -> StorePath:
        if info.hash.algorithm is not HashAlgorithm.SHA256:
            raise ContentAddressError(
                f"text path '{name}' must be hashed with sha256, not {info.hash.algorithm}"
            )
        refs = StoreReferences(others=info.references)
        return self.make_store_path(self.make_type("text", refs), info.hash, name)

    def make_fixed_output_path(self, name: str, info: FixedOutputInfo) -> StorePath:
        if (
            info.hash.algorithm is HashAlgorithm.SHA256
            and info.method is ContentAddressMethod.RECURSIVE
        ):
            return self.make_store_path(
                self.make_type("source", info.references), info.hash, name
            )
        if not info.references.is_empty():
            raise ContentAddressError(
                f"fixed output '{name}' is not allowed to refer to other store paths"
            )
        inner = hash_bytes(
            HashAlgorithm.SHA256,
            f"fixed:out:{info.method.ingestion_prefix}"
            f"{info.hash.to_string(HashFormat.BASE16, True)}:",
        )
        return self.make_store_path("output:out", inner, name)

    def make_fixed_output_path_from_ca(
        self, name: str, ca: ContentAddressWithReferences
    ) -> StorePath:
        if isinstance(ca, TextInfo):
            return self.make_text_path(name, ca)
        return self.make_fixed_output_path(name, ca)
