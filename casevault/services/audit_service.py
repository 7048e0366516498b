"""Immutable audit logging with SHA-256 hash chain."""

import asyncio
import json
import logging
import weakref
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.core.hashing import compute_audit_hash
from casevault.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

_chain_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _chain_lock() -> asyncio.Lock:
    """Lock serializing chain appends within this process (one per event loop)."""
    loop = asyncio.get_running_loop()
    lock = _chain_locks.get(loop)
    if lock is None:
        lock = _chain_locks[loop] = asyncio.Lock()
    return lock


def _hash_timestamp(value: datetime) -> str:
    # SQLite hands back naive datetimes; hash the UTC wall time either way.
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat()


async def log_event(
    db: AsyncSession,
    event_type: str,
    action: str,
    *,
    actor_id: str | None = None,
    scope_id: str | None = None,
    organization_id: str | None = None,
    details: dict | None = None,
    severity: str = "info",
) -> AuditLog:
    latest = await db.execute(
        select(AuditLog.entry_hash).order_by(AuditLog.created_at.desc()).limit(1)
    )
    prev_hash = latest.scalar_one_or_none()

    created_at = datetime.now(timezone.utc)
    details_json = json.dumps(details or {}, sort_keys=True, default=str)

    entry_hash = compute_audit_hash(
        prev_hash, event_type, actor_id, scope_id, action, details_json, severity,
        _hash_timestamp(created_at),
    )

    entry = AuditLog(
        event_type=event_type,
        action=action,
        actor_id=actor_id,
        scope_id=scope_id,
        organization_id=organization_id,
        details=details_json,
        severity=severity,
        prev_hash=prev_hash,
        entry_hash=entry_hash,
        created_at=created_at,
    )
    db.add(entry)
    await db.flush()
    return entry


async def verify_chain(db: AsyncSession, limit: int = 1000) -> dict:
    """Recompute the hash chain from the oldest entry and report the first break."""
    entries = await db.execute(
        select(AuditLog).order_by(AuditLog.created_at.asc()).limit(limit)
    )
    entries = entries.scalars().all()

    prev_hash = None
    checked = 0
    for entry in entries:
        if entry.entry_hash is None:
            continue
        expected = compute_audit_hash(
            prev_hash, entry.event_type, entry.actor_id, entry.scope_id, entry.action,
            entry.details, entry.severity, _hash_timestamp(entry.created_at),
        )
        if expected != entry.entry_hash:
            logger.error("Audit chain broken at entry %s", entry.id)
            return {"valid": False, "broken_at": entry.id, "entry_number": checked + 1}
        prev_hash = entry.entry_hash
        checked += 1

    return {"valid": True, "entries_checked": checked}


class AuditSink(Protocol):
    async def record(self, action: str, actor_id: str, scope_id: str) -> None: ...


class DatabaseAuditSink:
    """Audit sink writing hash-chained entries through the request's session.

    Reading the chain head and committing the new entry happen under one lock,
    so concurrent requests never chain from the same previous hash. Several
    worker processes writing one database still need a database-level lock.
    """

    def __init__(self, db: AsyncSession, organization_id: str | None = None, event_type: str = "content.changed"):
        self.db = db
        self.organization_id = organization_id
        self.event_type = event_type

    async def record(self, action: str, actor_id: str, scope_id: str) -> None:
        async with _chain_lock():
            await log_event(
                self.db,
                self.event_type,
                action,
                actor_id=actor_id,
                scope_id=scope_id,
                organization_id=self.organization_id,
            )
            await self.db.commit()
