"""Text codecs for raw digest bytes.

Three payload encodings are supported:

* base-16 — two lower-case hex digits per byte, high nibble first.
* base-32 — a 32-symbol alphabet without ``e``, ``o``, ``t`` and ``u``.
  Bits are packed least-significant digit first: the *last* character of
  the output carries the low-order bits of the *first* byte.  Existing
  store identities depend on this order, so it must never change.
* base-64 — the standard alphabet with padding.

Decoders raise ``ValueError`` on malformed input; ``core.digest`` turns
those into ``BadDigest`` with the offending text attached.
"""

from __future__ import annotations

import base64
import binascii

BASE16_CHARS = "0123456789abcdef"

# omitted: e o t u
BASE32_CHARS = "0123456789abcdfghijklmnpqrsvwxyz"

_BASE32_INDEX = {c: i for i, c in enumerate(BASE32_CHARS)}


def base16_len(size: int) -> int:
    return size * 2


def base32_len(size: int) -> int:
    return (size * 8 - 1) // 5 + 1


def base64_len(size: int) -> int:
    return ((size + 2) // 3) * 4


# ---------------------------------------------------------------------------
# base-16
# ---------------------------------------------------------------------------


def encode_base16(data: bytes) -> str:
    out = []
    for b in data:
        out.append(BASE16_CHARS[b >> 4])
        out.append(BASE16_CHARS[b & 0x0F])
    return "".join(out)


def _hex_digit(c: str) -> int:
    if "0" <= c <= "9":
        return ord(c) - ord("0")
    if "a" <= c <= "f":
        return ord(c) - ord("a") + 10
    if "A" <= c <= "F":
        return ord(c) - ord("A") + 10
    raise ValueError(f"invalid base-16 digit {c!r}")


def decode_base16(text: str) -> bytes:
    """Decode hex text.  Upper-case digits are accepted."""
    if len(text) % 2:
        raise ValueError("odd-length base-16 text")
    return bytes(
        _hex_digit(text[i]) << 4 | _hex_digit(text[i + 1])
        for i in range(0, len(text), 2)
    )


# ---------------------------------------------------------------------------
# base-32
# ---------------------------------------------------------------------------


def encode_base32(data: bytes) -> str:
    """Encode *data* with the reversed-bit-order base-32 scheme."""
    size = len(data)
    if size == 0:
        return ""
    out = []
    for n in range(base32_len(size) - 1, -1, -1):
        b = n * 5
        i = b // 8
        j = b % 8
        c = data[i] >> j
        if i < size - 1:
            c |= data[i + 1] << (8 - j)
        out.append(BASE32_CHARS[c & 0x1F])
    return "".join(out)


def decode_base32(text: str, size: int) -> bytes:
    """Decode *text* into exactly *size* bytes.

    Rejects unknown symbols and any bits that would spill past the last
    byte, which is what misaligned or garbage input produces.
    """
    if len(text) != base32_len(size):
        raise ValueError(f"base-32 text must be {base32_len(size)} characters")
    out = bytearray(size)
    for n in range(len(text)):
        c = text[len(text) - n - 1]
        digit = _BASE32_INDEX.get(c)
        if digit is None:
            raise ValueError(f"invalid base-32 digit {c!r}")
        b = n * 5
        i = b // 8
        j = b % 8
        out[i] |= (digit << j) & 0xFF
        carry = digit >> (8 - j)
        if i < size - 1:
            out[i + 1] |= carry
        elif carry:
            raise ValueError("base-32 text has overflow bits set")
    return bytes(out)


# ---------------------------------------------------------------------------
# base-64
# ---------------------------------------------------------------------------


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"invalid base-64 text: {exc}") from exc
