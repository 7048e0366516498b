from casevault.config import settings
from casevault.storage.base import BlobStore

# Singleton storage instance, shared by every request
_storage: BlobStore | None = None


def get_storage() -> BlobStore:
    """Get or create the global storage instance.

    Uses Azure Blob Storage when AZURE_STORAGE_CONNECTION_STRING is set,
    otherwise falls back to the local versioned store.
    """
    global _storage
    if _storage is None:
        if settings.azure_storage_connection_string:
            from casevault.storage.azure_blob import AzureBlobStore
            _storage = AzureBlobStore(
                connection_string=settings.azure_storage_connection_string,
                container_name=settings.azure_storage_container,
            )
        else:
            from casevault.storage.localfs import LocalBlobStore
            _storage = LocalBlobStore(
                root_dir=settings.content_store_path,
                container_name=settings.content_store_container,
            )
    return _storage


async def close_storage() -> None:
    """Release the shared store's transport. Call on shutdown."""
    global _storage
    if _storage is not None:
        await _storage.close()
        _storage = None


def get_blob_store() -> BlobStore:
    """FastAPI dependency returning the shared store."""
    return get_storage()
