"""Azure Blob Storage adapter for case content.

Uses the async azure-storage-blob SDK. One client is shared by every request;
the container must exist and blob versioning must be enabled on the account,
because every read is verified against the exact version that was written.

Requires: AZURE_STORAGE_CONNECTION_STRING and AZURE_STORAGE_CONTAINER env vars.
"""

import logging
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobSasPermissions, ContentSettings, generate_blob_sas
from azure.storage.blob.aio import BlobServiceClient

from casevault.storage.base import Blob, BlobStoreError, Found, GetResult, NotFound, StatResult, StoreError

logger = logging.getLogger(__name__)


class AzureBlobStore:
    """Versioned Azure Blob Storage backend."""

    def __init__(self, connection_string: str, container_name: str = "case-content"):
        if not connection_string:
            raise ValueError(
                "Azure Blob Storage requires AZURE_STORAGE_CONNECTION_STRING. "
                "Set the connection string via environment variable."
            )
        self._connection_string = connection_string
        self.container_name = container_name
        self._client = None

    def _get_client(self) -> BlobServiceClient:
        """Lazy-initialize the BlobServiceClient."""
        if self._client is None:
            self._client = BlobServiceClient.from_connection_string(self._connection_string)
        return self._client

    def _blob_client(self, blob_name: str):
        return self._get_client().get_blob_client(container=self.container_name, blob=blob_name)

    async def bucket_exists(self) -> bool:
        container_client = self._get_client().get_container_client(self.container_name)
        try:
            return await container_client.exists()
        except AzureError as e:
            logger.exception("Failed to check container: %s", self.container_name)
            raise BlobStoreError(str(e)) from e

    async def stat(self, key: str, version_id: str | None = None) -> StatResult:
        blob_client = self._blob_client(key)
        try:
            props = await blob_client.get_blob_properties(version_id=version_id)
        except ResourceNotFoundError:
            return NotFound(key, version_id)
        except AzureError as e:
            logger.exception("Failed to stat blob: %s", key)
            return StoreError(key, str(e))

        if not props.version_id:
            return StoreError(
                key,
                f"Blob versioning is not enabled for the storage account of `{self.container_name}`",
            )
        content_type = props.content_settings.content_type if props.content_settings else None
        return Found(
            object_name=key,
            version_id=props.version_id,
            size=props.size,
            content_type=content_type,
        )

    async def get(self, key: str, version_id: str | None = None) -> GetResult:
        blob_client = self._blob_client(key)
        try:
            downloader = await blob_client.download_blob(version_id=version_id)
            data = await downloader.readall()
        except ResourceNotFoundError:
            return NotFound(key, version_id)
        except AzureError as e:
            logger.exception("Failed to download blob: %s", key)
            return StoreError(key, str(e))

        resolved_version = version_id or downloader.properties.version_id
        return Blob(object_name=key, version_id=resolved_version, data=data)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        blob_client = self._blob_client(key)
        try:
            result = await blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            logger.exception("Failed to upload blob: %s", key)
            raise BlobStoreError(str(e)) from e

        logger.debug("Uploaded blob: %s (%d bytes)", key, len(data))
        return result.get("version_id") or ""

    async def presign(self, key: str, ttl_seconds: int, version_id: str | None = None) -> str:
        client = self._get_client()
        account_key = getattr(client.credential, "account_key", None)
        if not account_key:
            raise BlobStoreError(
                "Presigned URLs require an account key in AZURE_STORAGE_CONNECTION_STRING"
            )

        sas_token = generate_blob_sas(
            account_name=client.account_name,
            container_name=self.container_name,
            blob_name=key,
            account_key=account_key,
            permission=BlobSasPermissions(read=True),
            expiry=datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds),
            version_id=version_id,
        )
        url = self._blob_client(key).url
        if version_id:
            return f"{url}?versionid={quote(version_id, safe='')}&{sas_token}"
        return f"{url}?{sas_token}"

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
