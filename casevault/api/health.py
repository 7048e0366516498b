import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.database import get_db
from casevault.models.integrity_record import IntegrityRecord
from casevault.schemas.content import HealthResponse
from casevault.services.storage_service import get_blob_store
from casevault.storage.base import BlobStore, BlobStoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_VERSION = "0.1.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    records = (await db.execute(select(func.count(IntegrityRecord.id)))).scalar() or 0
    return HealthResponse(
        status="healthy",
        version=_VERSION,
        storage_backend=type(store).__name__,
        ledger_records=records,
    )


@router.get("/health/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
):
    """Readiness probe: database reachable and storage container present."""
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Readiness check failed, database unreachable")
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "database": "unavailable"},
        )

    try:
        container_ok = await store.bucket_exists()
    except BlobStoreError:
        logger.exception("Readiness check failed, storage unreachable")
        container_ok = False
    if not container_ok:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "database": "connected", "storage": "unavailable"},
        )
    return {"status": "ready", "database": "connected", "storage": "available"}
