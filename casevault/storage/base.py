"""Outcome types and the async interface shared by every object store backend.

Absence is an ordinary result of ``stat``/``get`` rather than an exception, so
callers branch on the returned type.
"""

from dataclasses import dataclass
from typing import Protocol, Union


class BlobStoreError(Exception):
    """Transport or service failure reported by the underlying object store."""


@dataclass(frozen=True)
class Found:
    object_name: str
    version_id: str
    size: int
    content_type: str | None = None


@dataclass(frozen=True)
class NotFound:
    object_name: str
    version_id: str | None = None


@dataclass(frozen=True)
class StoreError:
    object_name: str
    message: str


@dataclass(frozen=True)
class Blob:
    object_name: str
    version_id: str
    data: bytes


StatResult = Union[Found, NotFound, StoreError]
GetResult = Union[Blob, NotFound, StoreError]


class BlobStore(Protocol):
    container_name: str

    async def bucket_exists(self) -> bool: ...

    async def stat(self, key: str, version_id: str | None = None) -> StatResult: ...

    async def get(self, key: str, version_id: str | None = None) -> GetResult: ...

    async def put(self, key: str, data: bytes, content_type: str) -> str: ...

    async def presign(self, key: str, ttl_seconds: int, version_id: str | None = None) -> str: ...

    async def close(self) -> None: ...
