"""Canonical archive serialisation of a file system tree.

The byte stream is deterministic: directory entries are emitted in
byte-wise name order, and only the executable bit and symlink targets
are recorded besides file contents.  Every string is a little-endian
u64 length followed by the bytes, zero-padded to a multiple of 8.

The writer only needs an object with an ``update(bytes)`` method, so the
stream can go straight into a ``HashSink`` without being buffered.
"""

from __future__ import annotations

import logging
import os
import stat
import struct
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

ARCHIVE_VERSION_MAGIC = b"nix-archive-1"

_CHUNK_SIZE = 64 * 1024


class ArchiveError(RuntimeError):
    """Raised when a path cannot be serialised."""


class Sink(Protocol):
    def update(self, data: bytes) -> None: ...


def _write_int(sink: Sink, n: int) -> None:
    sink.update(struct.pack("<Q", n))


def _write_padding(sink: Sink, n: int) -> None:
    if n % 8:
        sink.update(b"\0" * (8 - n % 8))


def _write_string(sink: Sink, data: bytes | str) -> None:
    if isinstance(data, str):
        data = data.encode("utf-8")
    _write_int(sink, len(data))
    sink.update(data)
    _write_padding(sink, len(data))


def _dump_contents(path: str, size: int, sink: Sink) -> None:
    _write_string(sink, b"contents")
    _write_int(sink, size)
    left = size
    with open(path, "rb") as fh:
        while left:
            chunk = fh.read(min(left, _CHUNK_SIZE))
            if not chunk:
                raise ArchiveError(f"file '{path}' shrank while it was being read")
            sink.update(chunk)
            left -= len(chunk)
    _write_padding(sink, size)


def _dump(path: str, sink: Sink, path_filter: Callable[[str], bool]) -> None:
    st = os.lstat(path)
    _write_string(sink, b"(")

    if stat.S_ISREG(st.st_mode):
        _write_string(sink, b"type")
        _write_string(sink, b"regular")
        if st.st_mode & stat.S_IXUSR:
            _write_string(sink, b"executable")
            _write_string(sink, b"")
        _dump_contents(path, st.st_size, sink)

    elif stat.S_ISDIR(st.st_mode):
        _write_string(sink, b"type")
        _write_string(sink, b"directory")
        for name in sorted(os.listdir(os.fsencode(path))):
            child = os.path.join(path, os.fsdecode(name))
            if not path_filter(child):
                logger.debug("archive: skipping filtered path %s", child)
                continue
            _write_string(sink, b"entry")
            _write_string(sink, b"(")
            _write_string(sink, b"name")
            _write_string(sink, name)
            _write_string(sink, b"node")
            _dump(child, sink, path_filter)
            _write_string(sink, b")")

    elif stat.S_ISLNK(st.st_mode):
        _write_string(sink, b"type")
        _write_string(sink, b"symlink")
        _write_string(sink, b"target")
        _write_string(sink, os.fsencode(os.readlink(path)))

    else:
        raise ArchiveError(f"file '{path}' has an unsupported type")

    _write_string(sink, b")")


def dump_path(
    path: Path | str,
    sink: Sink,
    path_filter: Callable[[str], bool] = lambda p: True,
) -> None:
    """Serialise *path* into *sink*.

    *path_filter* is consulted for every directory entry below *path*;
    the root itself is always included.
    """
    _write_string(sink, ARCHIVE_VERSION_MAGIC)
    _dump(os.fspath(path), sink, path_filter)
