"""Tests for fingerprints, signatures and content-address derivation."""

from __future__ import annotations

import logging

import pytest

from pathtrust.bridge.crypto_bridge import parse_public_keys
from pathtrust.core.digest import HashAlgorithm, HashFormat
from pathtrust.core.hasher import hash_bytes
from pathtrust.core.path_info import (
    MAX_SIGS,
    FingerprintError,
    SelfReferenceError,
    build_fingerprint,
    check_signature,
    content_address_with_references,
    count_valid_signatures,
    fingerprint,
    is_content_addressed,
    path_info_from_content_address,
    path_info_from_json,
    path_info_to_json,
    sign,
)
from pathtrust.models.content_address import (
    ContentAddress,
    ContentAddressMethod,
    FixedOutputInfo,
    StoreReferences,
    TextInfo,
)


# ---------------------------------------------------------------------------
# Test: fingerprint
# ---------------------------------------------------------------------------


class TestFingerprint:
    def test_zero_size_fails(self, store, make_store_path, nar_hash):
        with pytest.raises(FingerprintError, match="size is not known"):
            build_fingerprint(store, make_store_path("foo"), nar_hash, 0, set())

    def test_no_references_has_trailing_empty_segment(self, store, make_store_path, nar_hash):
        p = make_store_path("foo")
        fp = build_fingerprint(store, p, nar_hash, 42, set())
        assert fp == (
            f"1;/nix/store/{p};{nar_hash.to_string(HashFormat.BASE32, True)};42;"
        )

    def test_references_sorted_and_comma_joined(self, store, make_store_path, nar_hash):
        p = make_store_path("foo")
        refs = [make_store_path(n) for n in ("c", "a", "b")]
        fp = build_fingerprint(store, p, nar_hash, 7, refs)
        printed = sorted(f"/nix/store/{r}" for r in refs)
        assert fp.endswith(";7;" + ",".join(printed))

    def test_order_independent(self, store, make_store_path, nar_hash):
        p = make_store_path("foo")
        refs = [make_store_path(n) for n in ("x", "y", "z")]
        assert build_fingerprint(store, p, nar_hash, 7, refs) == build_fingerprint(
            store, p, nar_hash, 7, list(reversed(refs))
        )

    def test_fingerprint_of_path_info(self, store, make_path_info):
        info = make_path_info()
        assert fingerprint(store, info).startswith("1;/nix/store/")


# ---------------------------------------------------------------------------
# Test: signing
# ---------------------------------------------------------------------------


class TestSignatures:
    def test_sign_then_check(self, store, make_path_info, secret_key):
        info = make_path_info()
        sig = sign(store, info, secret_key)
        assert sig in info.sigs
        assert sig.startswith("cache.example.org-1:")
        keys = parse_public_keys([secret_key.to_public_key().to_string()])
        assert check_signature(store, info, keys, sig) is True

    def test_duplicate_signature_collapses(self, store, make_path_info, secret_key):
        info = make_path_info()
        sign(store, info, secret_key)
        sign(store, info, secret_key)
        assert len(info.sigs) == 1

    def test_sign_unknown_size_fails(self, store, make_path_info, secret_key):
        info = make_path_info(nar_size=0)
        with pytest.raises(FingerprintError):
            sign(store, info, secret_key)
        assert info.sigs == set()

    def test_count_one_of_two_valid(self, store, make_path_info, secret_key, other_secret_key):
        info = make_path_info()
        sign(store, info, secret_key)
        sign(store, info, other_secret_key)
        keys = parse_public_keys([secret_key.to_public_key().to_string()])
        assert len(info.sigs) == 2
        assert count_valid_signatures(store, info, keys) == 1

    def test_count_zero_without_trusted_keys(self, store, make_path_info, secret_key):
        info = make_path_info()
        sign(store, info, secret_key)
        assert count_valid_signatures(store, info, {}) == 0


# ---------------------------------------------------------------------------
# Test: content addressing
# ---------------------------------------------------------------------------


class TestContentAddress:
    def test_no_ca(self, make_path_info, store):
        info = make_path_info()
        assert content_address_with_references(info) is None
        assert is_content_addressed(store, info) is False

    def test_text_round_trip(self, store, make_store_path, nar_hash):
        dep = make_store_path("dep")
        ca = TextInfo(hash=hash_bytes(HashAlgorithm.SHA256, "text"), references=frozenset({dep}))
        info = path_info_from_content_address(store, "notes.txt", ca, nar_hash, 10)
        assert info.references == {dep}
        assert info.ca == ContentAddress(method=ContentAddressMethod.TEXT, hash=ca.hash)
        assert content_address_with_references(info) == ca
        assert is_content_addressed(store, info) is True

    def test_text_self_reference_fails(self, make_path_info):
        info = make_path_info(
            ca=ContentAddress(
                method=ContentAddressMethod.TEXT, hash=hash_bytes(HashAlgorithm.SHA256, "t")
            )
        )
        info.references.add(info.path)
        with pytest.raises(SelfReferenceError):
            content_address_with_references(info)

    def test_fixed_output_self_reference_split(self, store, make_store_path, nar_hash):
        dep = make_store_path("dep")
        ca = FixedOutputInfo(
            method=ContentAddressMethod.RECURSIVE,
            hash=hash_bytes(HashAlgorithm.SHA256, "tree"),
            references=StoreReferences(others=frozenset({dep}), self_reference=True),
        )
        info = path_info_from_content_address(store, "src", ca, nar_hash, 100)
        assert info.references == {dep, info.path}

        derived = content_address_with_references(info)
        assert derived == ca
        assert info.path not in derived.references.others

        rebuilt = path_info_from_content_address(store, "src", derived, nar_hash, 100)
        assert rebuilt.references == info.references
        assert rebuilt.path == info.path

    def test_fixed_output_without_self_reference(self, store, nar_hash):
        ca = FixedOutputInfo(
            method=ContentAddressMethod.FLAT, hash=hash_bytes(HashAlgorithm.SHA256, "file")
        )
        info = path_info_from_content_address(store, "file", ca, nar_hash, 4)
        derived = content_address_with_references(info)
        assert derived.references.self_reference is False
        assert is_content_addressed(store, info) is True

    def test_content_addressed_is_fully_trusted(self, store, nar_hash):
        ca = FixedOutputInfo(
            method=ContentAddressMethod.RECURSIVE, hash=hash_bytes(HashAlgorithm.SHA256, "t")
        )
        info = path_info_from_content_address(store, "pkg", ca, nar_hash, 9)
        assert info.sigs == set()
        assert count_valid_signatures(store, info, {}) == MAX_SIGS

    def test_mismatch_warns_and_returns_false(self, store, make_store_path, nar_hash, caplog):
        ca = FixedOutputInfo(
            method=ContentAddressMethod.RECURSIVE, hash=hash_bytes(HashAlgorithm.SHA256, "t")
        )
        info = path_info_from_content_address(store, "pkg", ca, nar_hash, 9)
        spoofed = info.model_copy(update={"path": make_store_path("pkg", seed="other")})
        with caplog.at_level(logging.WARNING, logger="pathtrust.core.path_info"):
            assert is_content_addressed(store, spoofed) is False
        assert "claims to be content-addressed" in caplog.text
        assert count_valid_signatures(store, spoofed, {}) == 0


# ---------------------------------------------------------------------------
# Test: JSON
# ---------------------------------------------------------------------------


class TestJson:
    def test_round_trip(self, store, make_path_info, make_store_path, secret_key):
        info = make_path_info(
            deriver=make_store_path("hello.drv"),
            references={make_store_path("glibc")},
            ca=ContentAddress(
                method=ContentAddressMethod.FLAT, hash=hash_bytes(HashAlgorithm.SHA1, "x")
            ),
            registration_time=1700000000,
        )
        sign(store, info, secret_key)
        data = path_info_to_json(store, info)
        assert data["narHash"].startswith("sha256-")
        assert data["ca"].startswith("fixed:sha1:")
        back = path_info_from_json(store, data)
        assert back == info

    def test_missing_path(self, store):
        with pytest.raises(KeyError):
            path_info_from_json(store, {"narHash": "sha256-" + "A" * 43 + "="})
