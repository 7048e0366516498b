"""Integrity-verified upload and download of case content.

Upload:   check container -> put -> stat the version put created -> hash the
          sent bytes -> ledger record -> audit.
Download: check container -> stat -> ledger lookup for that exact version ->
          get that version -> hash -> compare md5 and sha256 -> bytes.

Content leaves ``download`` only when both recomputed digests equal the
ledger entry for the version observed at stat time.
"""

import logging
from dataclasses import dataclass

from casevault.core.exceptions import (
    ConfigurationError,
    ConflictError,
    IntegrityError,
    NoProvenanceError,
    NotFoundError,
    TransientIOError,
)
from casevault.core.hashing import DigestPair, compute_digests, digests_match
from casevault.core.paths import Scope
from casevault.models.integrity_record import IntegrityRecord
from casevault.services.audit_service import AuditSink
from casevault.services.ledger_service import IntegrityLedger, LedgerEntry
from casevault.storage.base import Blob, BlobStore, BlobStoreError, Found, NotFound, StoreError

logger = logging.getLogger(__name__)

PRESIGN_TTL_SECONDS = 3600
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadReceipt:
    object_name: str
    version_id: str
    md5: str
    sha256: str
    size: int
    created: bool = True


@dataclass(frozen=True)
class VerifiedContent:
    object_name: str
    version_id: str
    data: bytes
    md5: str
    sha256: str
    content_type: str | None = None


def _scope_id(scope: Scope) -> str:
    return scope.case_id


class ContentPipeline:
    def __init__(self, store: BlobStore, ledger: IntegrityLedger):
        self.store = store
        self.ledger = ledger

    async def _check_bucket(self) -> None:
        try:
            exists = await self.store.bucket_exists()
        except BlobStoreError as e:
            raise TransientIOError(str(e)) from e
        if not exists:
            logger.error("Storage container `%s` does not exist", self.store.container_name)
            raise ConfigurationError(self.store.container_name)

    async def _stat(self, object_name: str, version_id: str | None = None) -> Found | NotFound:
        result = await self.store.stat(object_name, version_id=version_id)
        if isinstance(result, StoreError):
            raise TransientIOError(result.message)
        return result

    async def upload(
        self,
        scope: Scope,
        object_name: str,
        data: bytes,
        *,
        actor_id: str,
        description: str,
        audit: AuditSink,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> UploadReceipt:
        await self._check_bucket()
        return await self._write(
            scope, object_name, data,
            actor_id=actor_id, description=description, audit=audit, content_type=content_type,
        )

    async def _write(
        self,
        scope: Scope,
        object_name: str,
        data: bytes,
        *,
        actor_id: str,
        description: str,
        audit: AuditSink,
        content_type: str,
    ) -> UploadReceipt:
        try:
            version_id = await self.store.put(object_name, data, content_type)
        except BlobStoreError as e:
            raise TransientIOError(str(e)) from e

        # Confirm the version this put created; a concurrent writer may
        # already have made a newer one the current version.
        stat = await self._stat(object_name, version_id=version_id or None)
        if isinstance(stat, NotFound):
            raise TransientIOError(f"Object `{object_name}` is missing immediately after upload")

        digests = compute_digests(data)
        try:
            await self.ledger.record(
                scope,
                LedgerEntry(
                    object_name=object_name,
                    version_id=stat.version_id,
                    md5=digests.md5,
                    sha256=digests.sha256,
                ),
            )
            await self.ledger.commit()
        except Exception:
            logger.error(
                "Orphaned object version: %s version %s was written but its digests were not recorded",
                object_name, stat.version_id,
            )
            raise

        logger.info(
            "Stored %s version %s (%d bytes, md5 %s)",
            object_name, stat.version_id, len(data), digests.md5,
        )
        await audit.record(description, actor_id, _scope_id(scope))

        return UploadReceipt(
            object_name=object_name,
            version_id=stat.version_id,
            md5=digests.md5,
            sha256=digests.sha256,
            size=len(data),
        )

    async def upload_image(
        self,
        scope: Scope,
        object_name: str,
        data: bytes,
        *,
        actor_id: str,
        description: str,
        audit: AuditSink,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> UploadReceipt:
        """Upload an image without ever replacing a different existing image.

        Re-sending identical bytes is a no-op that returns the existing
        version; different bytes under an existing name are a conflict.
        """
        await self._check_bucket()

        stat = await self._stat(object_name)
        if isinstance(stat, Found):
            record = await self._require_record(scope, stat)
            digests = compute_digests(data)
            if digests_match(record.md5_hash, digests.md5) and digests_match(record.sha_hash, digests.sha256):
                return UploadReceipt(
                    object_name=object_name,
                    version_id=stat.version_id,
                    md5=digests.md5,
                    sha256=digests.sha256,
                    size=len(data),
                    created=False,
                )
            raise ConflictError([object_name.rsplit("/", 1)[-1]])

        return await self._write(
            scope,
            object_name,
            data,
            actor_id=actor_id,
            description=description,
            audit=audit,
            content_type=content_type,
        )

    async def _require_record(self, scope: Scope, stat: Found) -> IntegrityRecord:
        record = await self.ledger.lookup(scope, stat.object_name, stat.version_id)
        if record is None:
            logger.warning(
                "No provenance for %s version %s", stat.object_name, stat.version_id,
            )
            raise NoProvenanceError(stat.object_name, stat.version_id)
        return record

    async def download(self, scope: Scope, object_name: str) -> VerifiedContent:
        await self._check_bucket()

        stat = await self._stat(object_name)
        if isinstance(stat, NotFound):
            raise NotFoundError(f"An object with the path `{object_name}` can not be found in the storage container!")

        record = await self._require_record(scope, stat)

        fetched = await self.store.get(object_name, version_id=stat.version_id)
        if isinstance(fetched, NotFound):
            raise NotFoundError(
                f"Version `{stat.version_id}` of `{object_name}` can not be found in the storage container!"
            )
        if isinstance(fetched, StoreError):
            raise TransientIOError(fetched.message)

        digests = self._verify(record, fetched)
        return VerifiedContent(
            object_name=object_name,
            version_id=stat.version_id,
            data=fetched.data,
            md5=digests.md5,
            sha256=digests.sha256,
            content_type=stat.content_type,
        )

    def _verify(self, record: IntegrityRecord, blob: Blob) -> DigestPair:
        digests = compute_digests(blob.data)
        if not digests_match(record.md5_hash, digests.md5):
            logger.error(
                "MD5 mismatch for %s version %s: ledger %s, store %s",
                blob.object_name, record.version_id, record.md5_hash, digests.md5,
            )
            raise IntegrityError(blob.object_name, "MD5")
        if not digests_match(record.sha_hash, digests.sha256):
            logger.error(
                "SHA256 mismatch for %s version %s: ledger %s, store %s",
                blob.object_name, record.version_id, record.sha_hash, digests.sha256,
            )
            raise IntegrityError(blob.object_name, "SHA256")
        return digests

    async def presign_verified(self, scope: Scope, object_name: str) -> str:
        """Verify the current version, then issue a read-only link to it."""
        verified = await self.download(scope, object_name)
        try:
            return await self.store.presign(
                object_name, PRESIGN_TTL_SECONDS, version_id=verified.version_id,
            )
        except BlobStoreError as e:
            raise TransientIOError(str(e)) from e

    async def history(self, scope: Scope, object_name: str) -> list[IntegrityRecord]:
        return await self.ledger.history(scope, object_name)
