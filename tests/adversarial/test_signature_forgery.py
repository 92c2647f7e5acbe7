"""Adversarial tests — signatures must bind the full fingerprint.

These tests verify that:
1. A signature goes stale when the reference set, NAR hash or size changes
2. A signature cannot be moved to another path
3. Renaming a signature's key onto a trusted name does not make it valid
4. A spoofed content address does not grant self-certifying trust
5. A content address no path can be derived from falls back to signatures
"""

from __future__ import annotations

import pytest

from pathtrust.bridge.crypto_bridge import parse_public_keys
from pathtrust.core.digest import HashAlgorithm
from pathtrust.core.hasher import hash_bytes
from pathtrust.core.path_info import (
    MAX_SIGS,
    check_signature,
    count_valid_signatures,
    path_info_from_content_address,
    sign,
)
from pathtrust.models.content_address import (
    ContentAddress,
    ContentAddressMethod,
    FixedOutputInfo,
)


class TestStaleSignatures:
    @pytest.fixture
    def signed(self, store, make_path_info, secret_key):
        info = make_path_info()
        sig = sign(store, info, secret_key)
        keys = parse_public_keys([secret_key.to_public_key().to_string()])
        return info, sig, keys

    def test_added_reference_invalidates(self, store, make_store_path, signed):
        info, sig, keys = signed
        info.references.add(make_store_path("injected"))
        assert check_signature(store, info, keys, sig) is False

    def test_changed_nar_hash_invalidates(self, store, signed):
        info, sig, keys = signed
        tampered = info.model_copy(update={"nar_hash": hash_bytes(HashAlgorithm.SHA256, "evil")})
        assert check_signature(store, tampered, keys, sig) is False

    def test_changed_size_invalidates(self, store, signed):
        info, sig, keys = signed
        tampered = info.model_copy(update={"nar_size": info.nar_size + 1})
        assert check_signature(store, tampered, keys, sig) is False

    def test_signature_not_transferable(self, store, make_path_info, signed):
        _info, sig, keys = signed
        other = make_path_info("other-pkg", sigs={sig})
        assert count_valid_signatures(store, other, keys) == 0

    def test_renamed_key_rejected(self, store, signed, other_secret_key):
        info, _sig, keys = signed
        forged = other_secret_key.sign_detached("anything")
        payload = forged.partition(":")[2]
        info.sigs.add(f"cache.example.org-1:{payload}")
        assert count_valid_signatures(store, info, keys) == 1


class TestSpoofedContentAddress:
    def test_ca_claim_on_unrelated_path(self, store, make_path_info):
        info = make_path_info(
            ca=ContentAddress(
                method=ContentAddressMethod.RECURSIVE,
                hash=hash_bytes(HashAlgorithm.SHA256, "claimed"),
            )
        )
        assert count_valid_signatures(store, info, {}) == 0

    def test_ca_with_swapped_hash(self, store, nar_hash):
        ca = FixedOutputInfo(
            method=ContentAddressMethod.RECURSIVE, hash=hash_bytes(HashAlgorithm.SHA256, "real")
        )
        info = path_info_from_content_address(store, "pkg", ca, nar_hash, 5)
        assert count_valid_signatures(store, info, {}) == MAX_SIGS
        info.ca = ContentAddress(
            method=ContentAddressMethod.RECURSIVE, hash=hash_bytes(HashAlgorithm.SHA256, "fake")
        )
        assert count_valid_signatures(store, info, {}) == 0

    def test_underivable_ca_falls_back_to_signatures(
        self, store, make_path_info, secret_key, caplog
    ):
        info = make_path_info(
            ca=ContentAddress(
                method=ContentAddressMethod.TEXT,
                hash=hash_bytes(HashAlgorithm.SHA1, "text"),
            )
        )
        sign(store, info, secret_key)
        keys = parse_public_keys([secret_key.to_public_key().to_string()])
        assert count_valid_signatures(store, info, keys) == 1
        assert "claims to be content-addressed" in caplog.text
