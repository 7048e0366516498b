"""Verified content endpoints for notes, tabs and their images.

Personal and shared content share one set of handlers; the scope dependency
decides the key prefix and the ledger partition.
"""

from typing import Callable

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from casevault.core.auth import Identity, get_current_identity
from casevault.core.exceptions import ConflictError, NotFoundError
from casevault.core.ids import decode_path_id, get_id_obfuscator
from casevault.core.paths import Personal, ResourceType, Scope, Shared, content_key, image_key
from casevault.database import get_db
from casevault.schemas.content import (
    ContentHistoryResponse,
    ImageUploadResponse,
    IntegrityRecordResponse,
    PresignedUrlResponse,
    UploadReceiptResponse,
)
from casevault.services.audit_service import DatabaseAuditSink
from casevault.services.content_service import PRESIGN_TTL_SECONDS, ContentPipeline
from casevault.services.ledger_service import IntegrityLedger
from casevault.services.storage_service import get_blob_store
from casevault.storage.base import BlobStore

router = APIRouter(prefix="/cases/{case_id}", tags=["content"])

TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

_RESOURCE_LABELS = {
    ResourceType.CONTEMPORANEOUS_NOTES: "contemporaneous note",
    ResourceType.TABS: "tab",
}


def personal_scope(case_id: str, identity: Identity = Depends(get_current_identity)) -> Scope:
    decode_path_id(case_id, "case")
    return Personal(case_id=case_id, owner_id=get_id_obfuscator().encode(identity.user_id))


def shared_scope(case_id: str, _identity: Identity = Depends(get_current_identity)) -> Scope:
    decode_path_id(case_id, "case")
    return Shared(case_id=case_id)


def get_pipeline(
    db: AsyncSession = Depends(get_db),
    store: BlobStore = Depends(get_blob_store),
) -> ContentPipeline:
    return ContentPipeline(store, IntegrityLedger(db))


def _content_key(scope: Scope, resource_type: ResourceType, resource_id: str) -> str:
    decode_path_id(resource_id, _RESOURCE_LABELS[resource_type])
    return content_key(scope, resource_type, resource_id)


def _where(scope: Scope) -> str:
    return "shared " if scope.kind == "shared" else ""


def _describe(identity: Identity, verb: str, resource_type: ResourceType, resource_id: str, scope: Scope) -> str:
    return (
        f"User `{identity.email or identity.user_id}` {verb} {_where(scope)}{_RESOURCE_LABELS[resource_type]} "
        f"`{resource_id}` for case `{scope.case_id}`."
    )


def _describe_image(identity: Identity, file_name: str, resource_type: ResourceType, scope: Scope) -> str:
    return (
        f"User `{identity.email or identity.user_id}` uploaded the image `{file_name}` to "
        f"{_where(scope)}{_RESOURCE_LABELS[resource_type]}s of case `{scope.case_id}`."
    )


def _image_keys(scope: Scope, resource_type: ResourceType, files: list[UploadFile]) -> list[str]:
    """Resolve every file name up front so a bad name rejects the whole batch."""
    keys = []
    for upload in files:
        file_name = (upload.filename or "").strip()
        try:
            keys.append(image_key(scope, resource_type, file_name))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid image file name: `{file_name}`",
            )
    return keys


def _register(prefix: str, scope_dependency: Callable[..., Scope], name: str) -> None:
    # Image routes first: the literal `image` segment must win over {resource_id}.
    @router.get(
        f"{prefix}/{{resource_type}}/image/{{file_name}}",
        response_model=PresignedUrlResponse,
        name=f"{name}_get_image",
    )
    async def get_image(
        resource_type: ResourceType,
        file_name: str,
        scope: Scope = Depends(scope_dependency),
        pipeline: ContentPipeline = Depends(get_pipeline),
    ) -> PresignedUrlResponse:
        try:
            object_name = image_key(scope, resource_type, file_name)
        except ValueError:
            raise NotFoundError(f"The image `{file_name}` does not exist!")
        url = await pipeline.presign_verified(scope, object_name)
        return PresignedUrlResponse(url=url, expires_in=PRESIGN_TTL_SECONDS)

    @router.post(
        f"{prefix}/{{resource_type}}/image",
        response_model=ImageUploadResponse,
        name=f"{name}_post_images",
    )
    async def post_images(
        resource_type: ResourceType,
        files: list[UploadFile] = File(...),
        scope: Scope = Depends(scope_dependency),
        identity: Identity = Depends(get_current_identity),
        pipeline: ContentPipeline = Depends(get_pipeline),
    ) -> ImageUploadResponse:
        object_names = _image_keys(scope, resource_type, files)
        audit = DatabaseAuditSink(pipeline.ledger.db, organization_id=identity.organization_id)

        total_size = 0
        conflicts: list[str] = []
        for upload, object_name in zip(files, object_names):
            data = await upload.read()
            total_size += len(data)
            try:
                await pipeline.upload_image(
                    scope,
                    object_name,
                    data,
                    actor_id=str(identity.user_id),
                    description=_describe_image(identity, object_name.rsplit("/", 1)[-1], resource_type, scope),
                    audit=audit,
                    content_type=upload.content_type or "application/octet-stream",
                )
            except ConflictError as e:
                conflicts.extend(e.file_names)

        if conflicts:
            raise ConflictError(conflicts)
        return ImageUploadResponse(count=len(files), size=total_size)

    @router.get(f"{prefix}/{{resource_type}}/{{resource_id}}/content", name=f"{name}_get_content")
    async def get_content(
        resource_type: ResourceType,
        resource_id: str,
        scope: Scope = Depends(scope_dependency),
        pipeline: ContentPipeline = Depends(get_pipeline),
    ) -> Response:
        verified = await pipeline.download(scope, _content_key(scope, resource_type, resource_id))
        return Response(
            content=verified.data,
            media_type=verified.content_type or TEXT_CONTENT_TYPE,
            headers={
                "X-Content-Version": verified.version_id,
                "X-Content-MD5": verified.md5,
                "X-Content-SHA256": verified.sha256,
            },
        )

    @router.post(
        f"{prefix}/{{resource_type}}/{{resource_id}}/content",
        response_model=UploadReceiptResponse,
        name=f"{name}_put_content",
    )
    async def put_content(
        resource_type: ResourceType,
        resource_id: str,
        file: UploadFile = File(...),
        scope: Scope = Depends(scope_dependency),
        identity: Identity = Depends(get_current_identity),
        pipeline: ContentPipeline = Depends(get_pipeline),
    ) -> UploadReceiptResponse:
        object_name = _content_key(scope, resource_type, resource_id)
        data = await file.read()
        audit = DatabaseAuditSink(pipeline.ledger.db, organization_id=identity.organization_id)
        receipt = await pipeline.upload(
            scope,
            object_name,
            data,
            actor_id=str(identity.user_id),
            description=_describe(identity, "saved the content of", resource_type, resource_id, scope),
            audit=audit,
            content_type=TEXT_CONTENT_TYPE,
        )
        return UploadReceiptResponse(
            object_name=receipt.object_name,
            version_id=receipt.version_id,
            md5=receipt.md5,
            sha256=receipt.sha256,
            size=receipt.size,
        )

    @router.get(
        f"{prefix}/{{resource_type}}/{{resource_id}}/history",
        response_model=ContentHistoryResponse,
        name=f"{name}_content_history",
    )
    async def content_history(
        resource_type: ResourceType,
        resource_id: str,
        scope: Scope = Depends(scope_dependency),
        pipeline: ContentPipeline = Depends(get_pipeline),
    ) -> ContentHistoryResponse:
        object_name = _content_key(scope, resource_type, resource_id)
        records = await pipeline.history(scope, object_name)
        return ContentHistoryResponse(
            object_name=object_name,
            versions=[
                IntegrityRecordResponse(
                    object_name=r.object_name,
                    version_id=r.version_id,
                    md5=r.md5_hash,
                    sha256=r.sha_hash,
                    created_at=r.created_at,
                )
                for r in records
            ],
        )


# Shared routes first: their literal segment must win over {resource_type}.
_register("/shared", shared_scope, "shared")
_register("", personal_scope, "personal")
