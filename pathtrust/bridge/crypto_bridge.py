"""Crypto bridge — Ed25519 detached signing and verification via PyNaCl.

Text forms
----------
All three values are ``<key name>:<base64 payload>``:

* secret key: 64 bytes (32-byte seed followed by the 32-byte public key),
* public key: 32 bytes,
* signature: 64 bytes.

The key name embedded in a signature selects which trusted public key it
is checked against.  Verification never raises: an unknown key name, a
malformed signature, or a cryptographic mismatch all yield ``False``.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Iterable

import nacl.signing
from nacl.exceptions import BadSignatureError
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

SEED_SIZE = 32
SECRET_KEY_SIZE = 64
PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64


class BadKey(ValueError):
    """Raised when key text cannot be parsed."""


def _split_name(text: str, what: str) -> tuple[str, bytes]:
    name, sep, payload = text.partition(":")
    if not sep or not name or not payload:
        raise BadKey(f"{what} is corrupt")
    try:
        return name, base64.b64decode(payload, validate=True)
    except ValueError as exc:
        raise BadKey(f"{what} '{name}' has invalid base-64 payload") from exc


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _as_bytes(message: str | bytes) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return message


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class PublicKey(BaseModel):
    """A named Ed25519 verification key."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: bytes

    @classmethod
    def parse(cls, text: str) -> PublicKey:
        name, key = _split_name(text, "public key")
        if len(key) != PUBLIC_KEY_SIZE:
            raise BadKey(f"public key '{name}' must be {PUBLIC_KEY_SIZE} bytes, got {len(key)}")
        return cls(name=name, key=key)

    def to_string(self) -> str:
        return f"{self.name}:{_b64(self.key)}"

    def verify_detached(self, message: str | bytes, sig: bytes) -> bool:
        try:
            nacl.signing.VerifyKey(self.key).verify(_as_bytes(message), sig)
        except (BadSignatureError, ValueError):
            return False
        return True


class SecretKey(BaseModel):
    """A named Ed25519 signing key."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: bytes

    @classmethod
    def parse(cls, text: str) -> SecretKey:
        name, key = _split_name(text.strip(), "secret key")
        if len(key) != SECRET_KEY_SIZE:
            raise BadKey(f"secret key '{name}' must be {SECRET_KEY_SIZE} bytes, got {len(key)}")
        return cls(name=name, key=key)

    def to_string(self) -> str:
        return f"{self.name}:{_b64(self.key)}"

    def _signing_key(self) -> nacl.signing.SigningKey:
        return nacl.signing.SigningKey(self.key[:SEED_SIZE])

    def to_public_key(self) -> PublicKey:
        return PublicKey(name=self.name, key=self._signing_key().verify_key.encode())

    def sign_detached(self, message: str | bytes) -> str:
        """Return ``<name>:<base64 signature>`` over *message*."""
        signed = self._signing_key().sign(_as_bytes(message))
        return f"{self.name}:{_b64(signed.signature)}"


PublicKeys = dict[str, PublicKey]


def generate_secret_key(name: str) -> SecretKey:
    """Generate a fresh Ed25519 key under *name*."""
    if not name or ":" in name:
        raise BadKey(f"invalid key name '{name}'")
    sk = nacl.signing.SigningKey.generate()
    return SecretKey(name=name, key=sk.encode() + sk.verify_key.encode())


def parse_public_keys(texts: Iterable[str]) -> PublicKeys:
    """Parse ``name:base64`` strings into a name-indexed key set."""
    keys: PublicKeys = {}
    for text in texts:
        key = PublicKey.parse(text)
        keys[key.name] = key
    return keys


def verify_detached(message: str | bytes, sig: str, public_keys: PublicKeys) -> bool:
    """Check *sig* over *message* against the key its name selects."""
    name, sep, payload = sig.partition(":")
    if not sep:
        return False
    key = public_keys.get(name)
    if key is None:
        logger.debug("verify_detached: no trusted key named '%s'", name)
        return False
    try:
        raw = base64.b64decode(payload, validate=True)
    except ValueError:
        return False
    if len(raw) != SIGNATURE_SIZE:
        return False
    return key.verify_detached(message, raw)
