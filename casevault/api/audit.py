"""Audit log query endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.core.auth import Identity, get_current_identity
from casevault.database import get_db
from casevault.models.audit_log import AuditLog
from casevault.services.audit_service import verify_chain

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("/events")
async def list_audit_events(
    event_type: str | None = None,
    scope_id: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    filters = [AuditLog.organization_id == identity.organization_id]
    if event_type:
        filters.append(AuditLog.event_type == event_type)
    if scope_id:
        filters.append(AuditLog.scope_id == scope_id)

    stmt = (
        select(AuditLog)
        .where(*filters)
        .order_by(AuditLog.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    entries = (await db.execute(stmt)).scalars().all()
    total = (await db.execute(select(func.count(AuditLog.id)).where(*filters))).scalar() or 0

    return {
        "events": [
            {
                "id": e.id, "event_type": e.event_type, "action": e.action,
                "actor_id": e.actor_id, "scope_id": e.scope_id,
                "severity": e.severity, "entry_hash": e.entry_hash,
                "created_at": str(e.created_at),
            }
            for e in entries
        ],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/events/verify")
async def verify_audit_chain(
    limit: int = Query(1000, ge=1, le=10000),
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(get_current_identity),
):
    return await verify_chain(db, limit=limit)
