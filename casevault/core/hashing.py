"""Content digests for the integrity ledger and the audit hash chain."""

import hashlib
import hmac
from dataclasses import dataclass

# Bytes fed to both hash states per step; payloads are small documents/images.
_CHUNK_SIZE = 64 * 1024

MD5_HEX_LENGTH = 32
SHA256_HEX_LENGTH = 64
_HEX_DIGITS = frozenset("0123456789abcdef")


@dataclass(frozen=True)
class DigestPair:
    md5: str
    sha256: str


def compute_digests(data: bytes) -> DigestPair:
    """Hash ``data`` with MD5 and SHA-256 in a single pass over the buffer."""
    md5 = hashlib.md5(usedforsecurity=False)
    sha256 = hashlib.sha256()
    view = memoryview(data)
    for offset in range(0, len(view), _CHUNK_SIZE):
        chunk = view[offset : offset + _CHUNK_SIZE]
        md5.update(chunk)
        sha256.update(chunk)
    return DigestPair(md5=md5.hexdigest(), sha256=sha256.hexdigest())


def normalize_digest(value: str) -> str:
    return value.strip().lower()


def is_hex_digest(value: str, length: int) -> bool:
    return len(value) == length and all(c in _HEX_DIGITS for c in value)


def digests_match(expected: str, actual: str) -> bool:
    """Compare two hex digests case-insensitively in constant time."""
    return hmac.compare_digest(normalize_digest(expected), normalize_digest(actual))


def compute_audit_hash(
    prev_hash: str | None,
    event_type: str,
    actor_id: str | None,
    scope_id: str | None,
    action: str,
    details_json: str,
    severity: str,
    timestamp_iso: str,
) -> str:
    payload = "|".join([
        prev_hash or "GENESIS",
        event_type,
        actor_id or "SYSTEM",
        scope_id or "-",
        action,
        details_json,
        severity,
        timestamp_iso,
    ])
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
