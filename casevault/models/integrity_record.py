"""Append-only ledger of (object, version, digest pair) records."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, String, UniqueConstraint, event

from casevault.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class IntegrityRecord(Base):
    __tablename__ = "integrity_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    case_id = Column(String(64), nullable=False)
    scope = Column(String(10), nullable=False)  # personal | shared
    owner_id = Column(String(64), nullable=True)  # NULL for shared content
    object_name = Column(String(1024), nullable=False)
    version_id = Column(String(255), nullable=False)
    md5_hash = Column(String(32), nullable=False)
    sha_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("object_name", "version_id", name="uq_integrity_object_version"),
        Index("idx_integrity_scope", "case_id", "scope", "owner_id"),
        Index("idx_integrity_object", "object_name"),
    )


@event.listens_for(IntegrityRecord, "before_update")
def _refuse_update(mapper, connection, target):
    raise ValueError(f"Integrity record {target.id} is immutable")


@event.listens_for(IntegrityRecord, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise ValueError(f"Integrity record {target.id} cannot be deleted")
