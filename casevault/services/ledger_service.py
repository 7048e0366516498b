"""Integrity ledger: append and exact-match lookup of digest records."""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.core.hashing import MD5_HEX_LENGTH, SHA256_HEX_LENGTH, is_hex_digest, normalize_digest
from casevault.core.paths import Scope
from casevault.models.integrity_record import IntegrityRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    object_name: str
    version_id: str
    md5: str
    sha256: str


def _scope_filters(scope: Scope) -> list:
    filters = [
        IntegrityRecord.case_id == scope.case_id,
        IntegrityRecord.scope == scope.kind,
    ]
    if scope.owner_id is None:
        filters.append(IntegrityRecord.owner_id.is_(None))
    else:
        filters.append(IntegrityRecord.owner_id == scope.owner_id)
    return filters


class IntegrityLedger:
    """Ledger bound to one request's session.

    Records are only ever added; a missing record for an exact version is a
    normal ``None`` result, distinct from a record whose digests disagree.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(self, scope: Scope, entry: LedgerEntry) -> IntegrityRecord:
        md5 = normalize_digest(entry.md5)
        sha256 = normalize_digest(entry.sha256)
        if not is_hex_digest(md5, MD5_HEX_LENGTH):
            raise ValueError(f"md5 must be {MD5_HEX_LENGTH} hex characters, got {entry.md5!r}")
        if not is_hex_digest(sha256, SHA256_HEX_LENGTH):
            raise ValueError(f"sha256 must be {SHA256_HEX_LENGTH} hex characters, got {entry.sha256!r}")
        if not entry.object_name or not entry.version_id:
            raise ValueError("object_name and version_id are required")

        record = IntegrityRecord(
            case_id=scope.case_id,
            scope=scope.kind,
            owner_id=scope.owner_id,
            object_name=entry.object_name,
            version_id=entry.version_id,
            md5_hash=md5,
            sha_hash=sha256,
        )
        self.db.add(record)
        await self.db.flush()
        logger.debug("Recorded digests for %s version %s", entry.object_name, entry.version_id)
        return record

    async def lookup(self, scope: Scope, object_name: str, version_id: str) -> IntegrityRecord | None:
        result = await self.db.execute(
            select(IntegrityRecord).where(
                *_scope_filters(scope),
                IntegrityRecord.object_name == object_name,
                IntegrityRecord.version_id == version_id,
            )
        )
        return result.scalar_one_or_none()

    async def history(self, scope: Scope, object_name: str) -> list[IntegrityRecord]:
        result = await self.db.execute(
            select(IntegrityRecord)
            .where(*_scope_filters(scope), IntegrityRecord.object_name == object_name)
            .order_by(IntegrityRecord.created_at.asc(), IntegrityRecord.version_id.asc())
        )
        return list(result.scalars().all())

    async def commit(self) -> None:
        await self.db.commit()
