"""Shared test fixtures for pathtrust."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from pathtrust.bridge.crypto_bridge import SecretKey, generate_secret_key
from pathtrust.core.digest import Digest, HashAlgorithm
from pathtrust.core.hasher import hash_bytes
from pathtrust.core.store_dir import StoreDir
from pathtrust.models.path_info import PathInfo
from pathtrust.models.store_path import StorePath


@pytest.fixture
def store() -> StoreDir:
    """Provide a StoreDir rooted at the default /nix/store."""
    return StoreDir("/nix/store")


@pytest.fixture
def nar_hash() -> Digest:
    """A deterministic SHA-256 NAR hash."""
    return hash_bytes(HashAlgorithm.SHA256, "test nar contents")


@pytest.fixture
def make_store_path(store: StoreDir) -> Callable[..., StorePath]:
    """Factory fixture: a valid, deterministic store path for *name*."""

    def _factory(name: str = "hello-2.12", seed: str = "") -> StorePath:
        return store.make_store_path(
            "test", hash_bytes(HashAlgorithm.SHA256, seed or name), name
        )

    return _factory


@pytest.fixture
def make_path_info(
    make_store_path: Callable[..., StorePath], nar_hash: Digest
) -> Callable[..., PathInfo]:
    """Factory fixture: build a PathInfo with sensible defaults."""

    def _factory(name: str = "hello-2.12", **overrides: Any) -> PathInfo:
        defaults: dict[str, Any] = {
            "path": make_store_path(name),
            "nar_hash": nar_hash,
            "nar_size": 1234,
        }
        defaults.update(overrides)
        return PathInfo(**defaults)

    return _factory


@pytest.fixture
def secret_key() -> SecretKey:
    return generate_secret_key("cache.example.org-1")


@pytest.fixture
def other_secret_key() -> SecretKey:
    return generate_secret_key("attacker.example.org-1")
