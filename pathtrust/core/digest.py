"""Fixed-size digest values tagged with their hash algorithm.

A ``Digest`` keeps its bytes in a buffer sized for the largest supported
algorithm plus an explicit logical length.  Only the first ``hash_size``
bytes are ever read, compared, or printed.

Parsing is a pure function (``parse_digest`` and friends) that returns a
finished ``Digest`` or raises ``BadDigest``.  Unknown algorithm or format
*names* raise ``UsageError`` instead, since those come from configuration
or the command line rather than from stored data.
"""

from __future__ import annotations

import logging
from enum import Enum

from pathtrust.core import codec

logger = logging.getLogger(__name__)

MD5_HASH_SIZE = 16
SHA1_HASH_SIZE = 20
SHA256_HASH_SIZE = 32
SHA512_HASH_SIZE = 64
MAX_HASH_SIZE = SHA512_HASH_SIZE


class BadDigest(ValueError):
    """Raised when digest text or bytes are malformed.

    The offending text is kept on ``text`` for diagnostics.
    """

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text


class UsageError(ValueError):
    """Raised for an unrecognised algorithm or format name."""


# ---------------------------------------------------------------------------
# Algorithms and formats
# ---------------------------------------------------------------------------


class HashAlgorithm(str, Enum):
    """The closed set of supported hash algorithms."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def size(self) -> int:
        """Canonical digest size in bytes."""
        return _ALGORITHM_SIZES[self]

    def __str__(self) -> str:
        return self.value


_ALGORITHM_SIZES: dict[HashAlgorithm, int] = {
    HashAlgorithm.MD5: MD5_HASH_SIZE,
    HashAlgorithm.SHA1: SHA1_HASH_SIZE,
    HashAlgorithm.SHA256: SHA256_HASH_SIZE,
    HashAlgorithm.SHA512: SHA512_HASH_SIZE,
}


class HashFormat(str, Enum):
    """Textual encodings a digest can be printed in."""

    BASE16 = "base16"
    BASE32 = "base32"
    BASE64 = "base64"
    SRI = "sri"

    def __str__(self) -> str:
        return self.value


def parse_hash_algorithm_opt(name: str) -> HashAlgorithm | None:
    """Like ``parse_hash_algorithm`` but returns None for an unknown name."""
    try:
        return HashAlgorithm(name)
    except ValueError:
        return None


def parse_hash_algorithm(name: str) -> HashAlgorithm:
    """Map an algorithm token to its ``HashAlgorithm``.

    Raises
    ------
    UsageError
        If *name* is not one of ``md5``, ``sha1``, ``sha256``, ``sha512``.
    """
    algorithm = parse_hash_algorithm_opt(name)
    if algorithm is None:
        raise UsageError(
            f"unknown hash algorithm '{name}', expect 'md5', 'sha1', 'sha256', or 'sha512'"
        )
    return algorithm


def parse_hash_format_opt(name: str) -> HashFormat | None:
    """Like ``parse_hash_format`` but returns None for an unknown name."""
    try:
        return HashFormat(name)
    except ValueError:
        return None


def parse_hash_format(name: str) -> HashFormat:
    """Map a format token to its ``HashFormat``.

    Raises
    ------
    UsageError
        If *name* is not one of ``base16``, ``base32``, ``base64``, ``sri``.
    """
    fmt = parse_hash_format_opt(name)
    if fmt is None:
        raise UsageError(
            f"unknown hash format '{name}', expect 'base16', 'base32', 'base64', or 'sri'"
        )
    return fmt


# ---------------------------------------------------------------------------
# Digest value
# ---------------------------------------------------------------------------


class Digest:
    """The output of one hash algorithm.

    ``Digest(algorithm)`` is the all-zero digest of the canonical size.
    Equality is length plus byte equality; ordering is length first, then
    bytes.  The algorithm tag takes no part in either, so two compressed
    digests of the same width compare purely on their bytes.
    """

    __slots__ = ("algorithm", "hash_size", "_buf")

    def __init__(self, algorithm: HashAlgorithm) -> None:
        self.algorithm = parse_hash_algorithm(algorithm)
        self.hash_size = self.algorithm.size
        self._buf = bytearray(MAX_HASH_SIZE)

    @classmethod
    def from_bytes(cls, algorithm: HashAlgorithm, raw: bytes) -> Digest:
        """Build a digest from exactly ``algorithm.size`` raw bytes."""
        digest = cls(algorithm)
        if len(raw) != digest.hash_size:
            raise BadDigest(
                f"{digest.algorithm} digest must be {digest.hash_size} bytes, got {len(raw)}"
            )
        digest._buf[: digest.hash_size] = raw
        return digest

    @classmethod
    def _sized(cls, algorithm: HashAlgorithm, raw: bytes) -> Digest:
        # Non-canonical widths are only produced by compress_digest.
        digest = cls(algorithm)
        digest.hash_size = len(raw)
        digest._buf[: len(raw)] = raw
        return digest

    @property
    def digest(self) -> bytes:
        """The meaningful bytes of the digest."""
        return bytes(self._buf[: self.hash_size])

    # -- comparison --------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        return self.hash_size == other.hash_size and self.digest == other.digest

    def __lt__(self, other: Digest) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        if self.hash_size != other.hash_size:
            return self.hash_size < other.hash_size
        return self.digest < other.digest

    def __le__(self, other: Digest) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        return self == other or self < other

    def __gt__(self, other: Digest) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        return other < self

    def __ge__(self, other: Digest) -> bool:
        if not isinstance(other, Digest):
            return NotImplemented
        return other <= self

    def __hash__(self) -> int:
        return hash((self.hash_size, self.digest))

    # -- text --------------------------------------------------------------

    @property
    def base16_len(self) -> int:
        return codec.base16_len(self.hash_size)

    @property
    def base32_len(self) -> int:
        return codec.base32_len(self.hash_size)

    @property
    def base64_len(self) -> int:
        return codec.base64_len(self.hash_size)

    def to_string(self, fmt: HashFormat, include_algorithm: bool) -> str:
        """Print the digest.

        SRI output is always ``<algorithm>-<base64>``.  The other formats
        get an ``<algorithm>:`` prefix only when *include_algorithm* is set.
        """
        fmt = parse_hash_format(fmt)
        prefix = ""
        if fmt is HashFormat.SRI or include_algorithm:
            prefix = f"{self.algorithm}{'-' if fmt is HashFormat.SRI else ':'}"
        raw = self.digest
        if fmt is HashFormat.BASE16:
            return prefix + codec.encode_base16(raw)
        if fmt is HashFormat.BASE32:
            return prefix + codec.encode_base32(raw)
        return prefix + codec.encode_base64(raw)

    def to_base16_or_base32(self) -> str:
        """Legacy display form: hex for MD5, base-32 for everything else."""
        if self.algorithm is HashAlgorithm.MD5:
            return self.to_string(HashFormat.BASE16, False)
        return self.to_string(HashFormat.BASE32, False)

    def __str__(self) -> str:
        return self.to_string(HashFormat.SRI, True)

    def __repr__(self) -> str:
        return f"Digest({self.to_string(HashFormat.BASE16, True)!r})"


DUMMY_DIGEST = Digest(HashAlgorithm.SHA256)


def compress_digest(digest: Digest, new_size: int) -> Digest:
    """XOR-fold *digest* down to *new_size* bytes.

    Byte ``i`` of the source is folded into byte ``i % new_size`` of the
    result.  The result keeps the source algorithm label but has a
    non-canonical width; it identifies, it does not verify.
    """
    if not 0 < new_size <= MAX_HASH_SIZE:
        raise ValueError(f"cannot compress a digest to {new_size} bytes")
    out = bytearray(new_size)
    for i, b in enumerate(digest.digest):
        out[i % new_size] ^= b
    return Digest._sized(digest.algorithm, bytes(out))


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _split_prefix(text: str, sep: str) -> tuple[str | None, str]:
    head, found, rest = text.partition(sep)
    if not found:
        return None, text
    return head, rest


def _split_algorithm(text: str) -> tuple[HashAlgorithm | None, bool, str]:
    """Strip an ``algo:`` or ``algo-`` prefix.

    Returns ``(algorithm or None, is_sri, remaining text)``.
    """
    name, rest = _split_prefix(text, ":")
    is_sri = False
    if name is None:
        name, rest = _split_prefix(text, "-")
        is_sri = name is not None
    if name is None:
        return None, False, text
    return parse_hash_algorithm(name), is_sri, rest


def _decode_payload(rest: str, algorithm: HashAlgorithm, is_sri: bool) -> Digest:
    expected = Digest(algorithm)
    size = expected.hash_size

    if not is_sri and len(rest) == expected.base16_len:
        try:
            raw = codec.decode_base16(rest)
        except ValueError:
            raise BadDigest(f"invalid base-16 hash '{rest}'", rest) from None

    elif not is_sri and len(rest) == expected.base32_len:
        try:
            raw = codec.decode_base32(rest, size)
        except ValueError:
            raise BadDigest(f"invalid base-32 hash '{rest}'", rest) from None

    elif is_sri or len(rest) == expected.base64_len:
        kind = "SRI" if is_sri else "base-64"
        try:
            raw = codec.decode_base64(rest)
        except ValueError:
            raise BadDigest(f"invalid {kind} hash '{rest}'", rest) from None
        if len(raw) != size:
            raise BadDigest(f"invalid {kind} hash '{rest}'", rest)

    else:
        raise BadDigest(
            f"hash '{rest}' has wrong length for hash algorithm '{algorithm}'", rest
        )

    return Digest.from_bytes(algorithm, raw)


def parse_digest(
    text: str,
    algorithm: HashAlgorithm | None = None,
    *,
    require_sri: bool = False,
) -> Digest:
    """Parse digest text in any of the four formats.

    The algorithm comes from a ``name:``/``name-`` prefix in *text* or from
    *algorithm*; when both are present they must agree.  With
    *require_sri* the text must be in ``<algorithm>-<base64>`` form.
    """
    parsed, is_sri, rest = _split_algorithm(text)
    if require_sri and not is_sri:
        raise BadDigest(f"hash '{text}' is not SRI", text)
    if parsed is None and algorithm is None:
        raise BadDigest(
            f"hash '{rest}' does not include a type, nor is the type otherwise known from context",
            text,
        )
    if parsed is not None and algorithm is not None and parsed != algorithm:
        raise BadDigest(f"hash '{text}' should have type '{algorithm}'", text)
    return _decode_payload(rest, parsed or parse_hash_algorithm(algorithm), is_sri)


def parse_any_prefixed(text: str) -> Digest:
    """Parse digest text that must carry its own algorithm prefix."""
    parsed, is_sri, rest = _split_algorithm(text)
    if parsed is None:
        raise BadDigest(f"hash '{rest}' does not include a type", text)
    return _decode_payload(rest, parsed, is_sri)


def parse_sri(text: str) -> Digest:
    """Parse ``<algorithm>-<base64>`` text."""
    name, rest = _split_prefix(text, "-")
    if name is None:
        raise BadDigest(f"hash '{text}' is not SRI", text)
    return _decode_payload(rest, parse_hash_algorithm(name), True)


def parse_non_sri_unprefixed(text: str, algorithm: HashAlgorithm) -> Digest:
    return _decode_payload(text, parse_hash_algorithm(algorithm), False)


def parse_digest_allow_empty(text: str, algorithm: HashAlgorithm | None = None) -> Digest:
    """Like ``parse_digest`` but maps empty text to the zero digest."""
    if not text:
        if algorithm is None:
            raise BadDigest("empty hash requires explicit hash type", text)
        digest = Digest(algorithm)
        logger.warning("found empty hash, assuming '%s'", digest.to_string(HashFormat.SRI, True))
        return digest
    return parse_digest(text, algorithm)
