"""Fingerprints, signatures, and content-address checks for path info.

Fingerprint format (version 1)::

    1;<store path>;<algo>:<base32 nar hash>;<nar size>;<ref>,<ref>,...

References are printed and sorted, so the fingerprint does not depend on
set iteration order.  The fingerprint is never stored; it is rebuilt from
the path info whenever a signature is made or checked.

A path whose store path can be recomputed from its content address is
self-certifying: ``count_valid_signatures`` reports it as fully trusted
without looking at signatures.  A content address that does *not*
reproduce the store path is logged and the path falls back to ordinary
signature checking.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import Any, Protocol

from pathtrust.bridge.crypto_bridge import PublicKeys, SecretKey, verify_detached
from pathtrust.core.digest import Digest, HashFormat, parse_any_prefixed
from pathtrust.models.content_address import (
    ContentAddress,
    ContentAddressError,
    ContentAddressMethod,
    ContentAddressWithReferences,
    FixedOutputInfo,
    StoreReferences,
    TextInfo,
)
from pathtrust.models.path_info import PathInfo
from pathtrust.models.store_path import StorePath

logger = logging.getLogger(__name__)

FINGERPRINT_VERSION = "1"

# Returned by count_valid_signatures for self-certifying paths.
MAX_SIGS = sys.maxsize


class FingerprintError(RuntimeError):
    """Raised when a fingerprint cannot be built (unknown NAR size)."""


class SelfReferenceError(RuntimeError):
    """Raised when a text-ingested path lists itself as a reference."""


class Store(Protocol):
    """What this module needs from a store.  ``StoreDir`` satisfies it."""

    def print_store_path(self, path: StorePath) -> str: ...

    def print_store_path_set(self, paths: Iterable[StorePath]) -> list[str]: ...

    def parse_store_path(self, text: str) -> StorePath: ...

    def make_fixed_output_path_from_ca(
        self, name: str, ca: ContentAddressWithReferences
    ) -> StorePath: ...


# ---------------------------------------------------------------------------
# Fingerprint and signatures
# ---------------------------------------------------------------------------


def build_fingerprint(
    store: Store,
    path: StorePath,
    nar_hash: Digest,
    nar_size: int,
    references: Iterable[StorePath],
) -> str:
    """Build the canonical string that signatures are computed over.

    Raises
    ------
    FingerprintError
        If *nar_size* is 0 (unknown).
    """
    if nar_size == 0:
        raise FingerprintError(
            f"cannot calculate fingerprint of path '{store.print_store_path(path)}' "
            "because its size is not known"
        )
    return ";".join(
        [
            FINGERPRINT_VERSION,
            store.print_store_path(path),
            nar_hash.to_string(HashFormat.BASE32, True),
            str(nar_size),
            ",".join(store.print_store_path_set(references)),
        ]
    )


def fingerprint(store: Store, info: PathInfo) -> str:
    return build_fingerprint(store, info.path, info.nar_hash, info.nar_size, info.references)


def sign(store: Store, info: PathInfo, secret_key: SecretKey) -> str:
    """Sign *info*'s fingerprint and add the signature to ``info.sigs``."""
    sig = secret_key.sign_detached(fingerprint(store, info))
    info.sigs.add(sig)
    logger.debug("signed %s with key '%s'", info.path, secret_key.name)
    return sig


def check_signature(store: Store, info: PathInfo, public_keys: PublicKeys, sig: str) -> bool:
    """Whether *sig* is valid for the current fingerprint of *info*."""
    return verify_detached(fingerprint(store, info), sig, public_keys)


def count_valid_signatures(store: Store, info: PathInfo, public_keys: PublicKeys) -> int:
    """Number of signatures on *info* that verify.

    Self-certifying (content-addressed) paths return ``MAX_SIGS``.
    """
    if is_content_addressed(store, info):
        return MAX_SIGS
    return sum(1 for sig in info.sigs if check_signature(store, info, public_keys, sig))


# ---------------------------------------------------------------------------
# Content addressing
# ---------------------------------------------------------------------------


def content_address_with_references(info: PathInfo) -> ContentAddressWithReferences | None:
    """Recover the full content address of *info*, or None if it has none.

    For fixed-output paths a self reference is taken out of the reference
    set and carried as ``StoreReferences.self_reference``.

    Raises
    ------
    SelfReferenceError
        If a text-ingested path refers to itself.
    """
    if info.ca is None:
        return None

    if info.ca.method is ContentAddressMethod.TEXT:
        if info.path in info.references:
            raise SelfReferenceError(f"text path '{info.path}' refers to itself")
        return TextInfo(hash=info.ca.hash, references=frozenset(info.references))

    others = set(info.references)
    has_self_reference = info.path in others
    others.discard(info.path)
    return FixedOutputInfo(
        method=info.ca.method,
        hash=info.ca.hash,
        references=StoreReferences(others=frozenset(others), self_reference=has_self_reference),
    )


def is_content_addressed(store: Store, info: PathInfo) -> bool:
    """Whether *info*'s content address reproduces its store path.

    A mismatch, or a content address no store path can be derived from,
    is logged as a warning and reported as False.
    """
    full_ca = content_address_with_references(info)
    if full_ca is None:
        return False

    try:
        ca_path = store.make_fixed_output_path_from_ca(info.path.name, full_ca)
    except ContentAddressError as exc:
        logger.debug("cannot recompute path from content address: %s", exc)
        ca_path = None
    if ca_path != info.path:
        logger.warning(
            "path '%s' claims to be content-addressed but isn't",
            store.print_store_path(info.path),
        )
        return False
    return True


def path_info_from_content_address(
    store: Store,
    name: str,
    ca: ContentAddressWithReferences,
    nar_hash: Digest,
    nar_size: int = 0,
) -> PathInfo:
    """Build the path info for a freshly ingested content-addressed object.

    The store path is derived from *ca*; a fixed-output self reference is
    put back into the reference set under that derived path.
    """
    path = store.make_fixed_output_path_from_ca(name, ca)
    if isinstance(ca, TextInfo):
        references = set(ca.references)
        method = ContentAddressMethod.TEXT
    else:
        references = set(ca.references.others)
        if ca.references.self_reference:
            references.add(path)
        method = ca.method
    return PathInfo(
        path=path,
        nar_hash=nar_hash,
        nar_size=nar_size,
        references=references,
        ca=ContentAddress(method=method, hash=ca.hash),
    )


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def path_info_to_json(store: Store, info: PathInfo) -> dict[str, Any]:
    """Render *info* as a JSON-compatible dict with absolute paths."""
    return {
        "path": store.print_store_path(info.path),
        "deriver": store.print_store_path(info.deriver) if info.deriver else None,
        "narHash": info.nar_hash.to_string(HashFormat.SRI, True),
        "narSize": info.nar_size,
        "references": store.print_store_path_set(info.references),
        "registrationTime": info.registration_time,
        "ultimate": info.ultimate,
        "signatures": sorted(info.sigs),
        "ca": info.ca.render() if info.ca else None,
    }


def path_info_from_json(store: Store, data: dict[str, Any]) -> PathInfo:
    """Inverse of ``path_info_to_json``.

    Raises ``KeyError`` for a missing ``path`` or ``narHash`` and
    ``BadDigest``/``BadStorePath`` for malformed values.
    """
    deriver = data.get("deriver")
    ca = data.get("ca")
    return PathInfo(
        path=store.parse_store_path(data["path"]),
        nar_hash=parse_any_prefixed(data["narHash"]),
        nar_size=data.get("narSize", 0),
        deriver=store.parse_store_path(deriver) if deriver else None,
        references={store.parse_store_path(r) for r in data.get("references", [])},
        registration_time=data.get("registrationTime", 0),
        ultimate=data.get("ultimate", False),
        sigs=set(data.get("signatures", [])),
        ca=ContentAddress.parse(ca) if ca else None,
    )
