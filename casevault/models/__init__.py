from casevault.models.audit_log import AuditLog
from casevault.models.integrity_record import IntegrityRecord

__all__ = [
    "AuditLog",
    "IntegrityRecord",
]
