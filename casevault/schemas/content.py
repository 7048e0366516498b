from datetime import datetime

from pydantic import BaseModel


class UploadReceiptResponse(BaseModel):
    object_name: str
    version_id: str
    md5: str
    sha256: str
    size: int


class ImageUploadResponse(BaseModel):
    count: int
    size: int


class PresignedUrlResponse(BaseModel):
    url: str
    expires_in: int


class IntegrityRecordResponse(BaseModel):
    object_name: str
    version_id: str
    md5: str
    sha256: str
    created_at: datetime


class ContentHistoryResponse(BaseModel):
    object_name: str
    versions: list[IntegrityRecordResponse]


class HealthResponse(BaseModel):
    status: str
    version: str
    storage_backend: str
    ledger_records: int
