"""Runtime configuration — env-driven.

Reads ``PATHTRUST_*`` environment variables and an optional ``.env`` file
through pydantic-settings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pathtrust.bridge.crypto_bridge import PublicKeys, parse_public_keys
from pathtrust.core.digest import HashAlgorithm, HashFormat, parse_hash_algorithm, parse_hash_format
from pathtrust.core.store_dir import DEFAULT_STORE_DIR, StoreDir


class TrustConfig(BaseSettings):
    """Configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PATHTRUST_STORE_DIR=/srv/store
        export PATHTRUST_HASH_FORMAT=base32
        export PATHTRUST_TRUSTED_PUBLIC_KEYS='["cache-1:..."]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PATHTRUST_",
        env_file_encoding="utf-8",
    )

    log_level: str = "WARNING"

    store_dir: str = DEFAULT_STORE_DIR

    # Defaults for the hash / convert commands
    hash_algorithm: str = "sha256"
    hash_format: str = "sri"

    # Trust roots — "name:base64" Ed25519 public keys
    trusted_public_keys: list[str] = []
    secret_key_file: Path | None = None

    @field_validator("hash_algorithm")
    @classmethod
    def _check_algorithm(cls, v: str) -> str:
        parse_hash_algorithm(v)
        return v

    @field_validator("hash_format")
    @classmethod
    def _check_format(cls, v: str) -> str:
        parse_hash_format(v)
        return v

    @property
    def algorithm(self) -> HashAlgorithm:
        return parse_hash_algorithm(self.hash_algorithm)

    @property
    def format(self) -> HashFormat:
        return parse_hash_format(self.hash_format)

    def store(self) -> StoreDir:
        return StoreDir(self.store_dir)

    def public_keys(self) -> PublicKeys:
        return parse_public_keys(self.trusted_public_keys)


# Module-level singleton — import as `from pathtrust.config import config`
config = TrustConfig()
