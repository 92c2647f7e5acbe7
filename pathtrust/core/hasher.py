"""Streaming and one-shot digest computation.

``HashSink`` carries one running hash state for a single algorithm plus a
byte counter.  ``current_hash`` copies the running state so a caller can
checkpoint mid-stream and keep feeding bytes.  A sink belongs to the one
caller driving the read loop; it is not safe to share between threads.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path
from typing import Any, NamedTuple

from pathtrust.core.archive import dump_path
from pathtrust.core.digest import Digest, HashAlgorithm, parse_hash_algorithm

CHUNK_SIZE = 64 * 1024

PathFilter = Callable[[str], bool]

_CONSTRUCTORS: dict[HashAlgorithm, Callable[[], Any]] = {
    HashAlgorithm.MD5: hashlib.md5,
    HashAlgorithm.SHA1: hashlib.sha1,
    HashAlgorithm.SHA256: hashlib.sha256,
    HashAlgorithm.SHA512: hashlib.sha512,
}


class HashResult(NamedTuple):
    """A finished digest and the number of bytes that went into it."""

    digest: Digest
    bytes_hashed: int


def _accept_all(path: str) -> bool:
    return True


class HashSink:
    """Incremental hasher.

    Examples
    --------
    >>> sink = HashSink(HashAlgorithm.SHA256)
    >>> sink.update(b"ab")
    >>> sink.update(b"c")
    >>> sink.finish().bytes_hashed
    3
    """

    def __init__(self, algorithm: HashAlgorithm) -> None:
        self.algorithm = parse_hash_algorithm(algorithm)
        self._ctx = _CONSTRUCTORS[self.algorithm]()
        self._bytes = 0

    @property
    def bytes_hashed(self) -> int:
        return self._bytes

    def update(self, data: bytes) -> None:
        """Feed *data* (may be empty)."""
        self._bytes += len(data)
        self._ctx.update(data)

    def finish(self) -> HashResult:
        """Finalise and return the digest of everything fed so far.

        The sink must not be fed again afterwards.
        """
        return HashResult(self._finalise(self._ctx), self._bytes)

    def current_hash(self) -> HashResult:
        """Digest of the bytes fed so far, leaving the sink usable."""
        return HashResult(self._finalise(self._ctx.copy()), self._bytes)

    def _finalise(self, ctx: Any) -> Digest:
        return Digest.from_bytes(self.algorithm, ctx.digest())


def hash_bytes(algorithm: HashAlgorithm, data: bytes | str) -> Digest:
    """One-shot digest of an in-memory buffer (``str`` is UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    sink = HashSink(algorithm)
    sink.update(data)
    return sink.finish().digest


def hash_file(algorithm: HashAlgorithm, path: Path | str) -> Digest:
    """Digest of a regular file's contents, read in chunks."""
    sink = HashSink(algorithm)
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
            sink.update(chunk)
    return sink.finish().digest


def hash_path(
    algorithm: HashAlgorithm,
    path: Path | str,
    path_filter: PathFilter | None = None,
) -> HashResult:
    """Digest of the canonical archive serialisation of a file system tree.

    Entries for which *path_filter* returns False are left out.  Anything
    the filter raises propagates to the caller.
    """
    sink = HashSink(algorithm)
    dump_path(path, sink, path_filter or _accept_all)
    return sink.finish()
