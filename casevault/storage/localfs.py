import asyncio
import json
import logging
import os
import uuid
from pathlib import Path

from casevault.storage.base import Blob, BlobStoreError, Found, GetResult, NotFound, StatResult, StoreError

logger = logging.getLogger(__name__)

_VERSION_WIDTH = 12
_BLOB_SUFFIX = ".blob"
_META_SUFFIX = ".json"


class LocalBlobStore:
    """Versioned object store on the local filesystem.

    Every key is a directory holding one file per version:
        root/container/cases/1/u1/tabs/t1/content.txt/000000000001.blob

    Version ids are zero-padded counters, increasing per key. A version is
    claimed with a hard link, which fails if another writer already took the
    same number, so concurrent writers never share a version id.
    """

    def __init__(self, root_dir: str, container_name: str = "case-content", create: bool = True):
        self.root = Path(root_dir)
        self.container_name = container_name
        if create:
            (self.root / container_name).mkdir(parents=True, exist_ok=True)

    @property
    def container_dir(self) -> Path:
        return self.root / self.container_name

    async def bucket_exists(self) -> bool:
        return await asyncio.to_thread(self.container_dir.is_dir)

    async def stat(self, key: str, version_id: str | None = None) -> StatResult:
        try:
            return await asyncio.to_thread(self._stat_sync, key, version_id)
        except (OSError, BlobStoreError) as e:
            logger.exception("Failed to stat object: %s", key)
            return StoreError(key, str(e))

    async def get(self, key: str, version_id: str | None = None) -> GetResult:
        try:
            return await asyncio.to_thread(self._get_sync, key, version_id)
        except (OSError, BlobStoreError) as e:
            logger.exception("Failed to read object: %s", key)
            return StoreError(key, str(e))

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            version_id = await asyncio.to_thread(self._put_sync, key, data, content_type)
        except OSError as e:
            logger.exception("Failed to write object: %s", key)
            raise BlobStoreError(str(e)) from e
        logger.debug("Stored object: %s version %s (%d bytes)", key, version_id, len(data))
        return version_id

    async def presign(self, key: str, ttl_seconds: int, version_id: str | None = None) -> str:
        """Return a file:// URI; local files carry no expiry."""
        found = await self.stat(key) if version_id is None else None
        if isinstance(found, (NotFound, StoreError)):
            raise BlobStoreError(f"Cannot presign missing object `{key}`")
        version = version_id or found.version_id
        path = self._key_dir(key) / f"{version}{_BLOB_SUFFIX}"
        return path.resolve().as_uri()

    async def close(self) -> None:
        return None

    # -- sync helpers run in worker threads --------------------------------

    def _key_dir(self, key: str) -> Path:
        """Resolve a key to its version directory and keep it inside the container."""
        parts = key.split("/")
        if not key or any(p in {"", ".", ".."} for p in parts):
            raise BlobStoreError(f"Invalid object key: {key!r}")
        candidate = self.container_dir.joinpath(*parts)
        root_resolved = self.container_dir.resolve()
        resolved = candidate.resolve()
        if root_resolved not in resolved.parents:
            raise BlobStoreError(f"Object key escapes the container: {key!r}")
        return resolved

    def _versions(self, key_dir: Path) -> list[str]:
        if not key_dir.is_dir():
            return []
        return sorted(
            p.name[: -len(_BLOB_SUFFIX)]
            for p in key_dir.iterdir()
            if p.is_file() and p.name.endswith(_BLOB_SUFFIX)
        )

    def _stat_sync(self, key: str, version_id: str | None = None) -> StatResult:
        key_dir = self._key_dir(key)
        if version_id is None:
            versions = self._versions(key_dir)
            if not versions:
                return NotFound(key)
            version_id = versions[-1]
        elif not version_id.isdigit():
            return NotFound(key, version_id)
        blob_path = key_dir / f"{version_id}{_BLOB_SUFFIX}"
        if not blob_path.is_file():
            return NotFound(key, version_id)
        return Found(
            object_name=key,
            version_id=version_id,
            size=blob_path.stat().st_size,
            content_type=self._read_content_type(key_dir, version_id),
        )

    def _get_sync(self, key: str, version_id: str | None) -> GetResult:
        key_dir = self._key_dir(key)
        if version_id is None:
            versions = self._versions(key_dir)
            if not versions:
                return NotFound(key)
            version_id = versions[-1]
        if not version_id.isdigit():
            return NotFound(key, version_id)
        blob_path = key_dir / f"{version_id}{_BLOB_SUFFIX}"
        if not blob_path.is_file():
            return NotFound(key, version_id)
        return Blob(object_name=key, version_id=version_id, data=blob_path.read_bytes())

    def _put_sync(self, key: str, data: bytes, content_type: str) -> str:
        key_dir = self._key_dir(key)
        key_dir.mkdir(parents=True, exist_ok=True)
        tmp_path = key_dir / f".{uuid.uuid4().hex}.tmp"
        tmp_path.write_bytes(data)
        try:
            versions = self._versions(key_dir)
            next_number = int(versions[-1]) + 1 if versions else 1
            while True:
                version_id = str(next_number).zfill(_VERSION_WIDTH)
                try:
                    os.link(tmp_path, key_dir / f"{version_id}{_BLOB_SUFFIX}")
                    break
                except FileExistsError:
                    next_number += 1
        finally:
            tmp_path.unlink(missing_ok=True)

        meta_path = key_dir / f"{version_id}{_META_SUFFIX}"
        meta_path.write_text(json.dumps({"content_type": content_type, "size": len(data)}))
        return version_id

    @staticmethod
    def _read_content_type(key_dir: Path, version_id: str) -> str | None:
        meta_path = key_dir / f"{version_id}{_META_SUFFIX}"
        try:
            return json.loads(meta_path.read_text()).get("content_type")
        except (FileNotFoundError, json.JSONDecodeError):
            return None
