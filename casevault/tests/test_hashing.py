"""Tests for content digests and audit hashing."""

import hashlib

from casevault.core.hashing import (
    compute_audit_hash,
    compute_digests,
    digests_match,
    is_hex_digest,
    normalize_digest,
)

HELLO_MD5 = "5d41402abc4b2a76b9719d911017c592"
HELLO_SHA256 = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def test_known_vectors():
    digests = compute_digests(b"hello")
    assert digests.md5 == HELLO_MD5
    assert digests.sha256 == HELLO_SHA256


def test_empty_input():
    digests = compute_digests(b"")
    assert digests.md5 == "d41d8cd98f00b204e9800998ecf8427e"
    assert digests.sha256 == hashlib.sha256(b"").hexdigest()


def test_multi_chunk_input_matches_hashlib():
    data = bytes(range(256)) * 1000  # several chunks, last one partial
    digests = compute_digests(data)
    assert digests.md5 == hashlib.md5(data).hexdigest()
    assert digests.sha256 == hashlib.sha256(data).hexdigest()


def test_digests_are_lowercase_hex():
    digests = compute_digests(b"Case 42")
    assert is_hex_digest(digests.md5, 32)
    assert is_hex_digest(digests.sha256, 64)


def test_normalize_digest():
    assert normalize_digest("  ABCDEF \n") == "abcdef"


def test_is_hex_digest_rejects_wrong_length_and_chars():
    assert not is_hex_digest(HELLO_MD5[:-1], 32)
    assert not is_hex_digest("g" * 32, 32)
    assert not is_hex_digest(HELLO_MD5.upper(), 32)


def test_digests_match_is_case_insensitive():
    assert digests_match(HELLO_MD5.upper(), HELLO_MD5)
    assert not digests_match(HELLO_MD5, "0" * 32)


class TestAuditHash:
    def test_deterministic(self):
        args = (None, "content.changed", "1", "c1", "saved", "{}", "info", "2026-01-01T00:00:00")
        assert compute_audit_hash(*args) == compute_audit_hash(*args)

    def test_chains_on_previous_hash(self):
        base = ("content.changed", "1", "c1", "saved", "{}", "info", "2026-01-01T00:00:00")
        first = compute_audit_hash(None, *base)
        second = compute_audit_hash(first, *base)
        assert first != second

    def test_missing_actor_and_scope_use_placeholders(self):
        ts = "2026-01-01T00:00:00"
        expected = hashlib.sha256(
            f"GENESIS|e|SYSTEM|-|a|{{}}|info|{ts}".encode()
        ).hexdigest()
        assert compute_audit_hash(None, "e", None, None, "a", "{}", "info", ts) == expected
