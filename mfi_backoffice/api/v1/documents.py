"""/v1/upload - Document attachments for applications and other entities"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mfi_backoffice.api.v1.schemas import (
    DocumentDeleteResponse,
    DocumentResponse,
    DocumentUpdate,
    ErrorResponse,
    UploadedDocument,
    UploadFailure,
    UploadResponse,
    UploadSuccess,
)
from mfi_backoffice.api.dependencies import get_file_store, get_identity, get_request_id, parse_uuid
from mfi_backoffice.config import settings
from mfi_backoffice.infrastructure.database.session import get_db
from mfi_backoffice.infrastructure.database.repositories import DocumentRepository
from mfi_backoffice.infrastructure.storage.local import LocalFileStore
from mfi_backoffice.infrastructure.observability.logging import log_file_removal_failure, log_upload_batch
from mfi_backoffice.infrastructure.observability.metrics import file_removal_failure_counter, record_upload
from mfi_backoffice.domain.models import Identity
from mfi_backoffice.domain.documents import (
    check_category,
    check_relation,
    check_upload,
    editable_patch,
    file_type_from_mime,
)
from mfi_backoffice.domain.exceptions import DomainException, NotFoundError, ValidationError
from mfi_backoffice.utils.date_utils import utcnow

router = APIRouter(responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})


def _load(repo: DocumentRepository, document_id: str):
    document = repo.get(parse_uuid(document_id, "Document"))
    if not document:
        raise NotFoundError("Document not found")
    return document


@router.post("/upload", response_model=UploadResponse)
def upload_documents(
    request: Request,
    files: List[UploadFile] = File(default=[]),
    related_to: Optional[str] = Form(None, alias="relatedTo"),
    related_id: Optional[str] = Form(None, alias="relatedId"),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    store: LocalFileStore = Depends(get_file_store),
    identity: Identity = Depends(get_identity),
):
    """
    Store one or more files and record their metadata.

    Files are handled one at a time. A file that fails validation, storage or
    the metadata write is reported in `errors` while its siblings are still
    stored, so the caller can retry just the failures. A file whose metadata
    write fails is removed from the store again.
    """
    if not files:
        raise ValidationError("No files provided")

    relation = check_relation(related_to, related_id)
    category_value = check_category(category or "Other").value

    repo = DocumentRepository(db)
    uploads: List[UploadSuccess] = []
    errors: List[UploadFailure] = []

    for upload in files:
        original_name = upload.filename or "file"
        mime_type = upload.content_type or ""
        try:
            # Reject on the declared size before buffering anything
            if upload.size is not None:
                check_upload(mime_type, upload.size, settings.max_upload_bytes)
            content = upload.file.read(settings.max_upload_bytes + 1)
            check_upload(mime_type, len(content), settings.max_upload_bytes)

            stored = store.save(original_name, content, mime_type)
        except DomainException as e:
            errors.append(UploadFailure(file_name=original_name, error=e.message))
            continue

        try:
            document = repo.create({
                "related_to": relation.value,
                "related_id": related_id,
                "file_name": stored.file_name,
                "original_name": stored.original_name,
                "file_type": file_type_from_mime(mime_type),
                "file_size": stored.file_size,
                "mime_type": stored.mime_type,
                "file_path": stored.file_path,
                "file_url": stored.file_url,
                "storage_type": "local",
                "category": category_value,
                "description": description or "",
                "tags": [],
                "uploaded_by": identity.subject,
                "uploaded_by_name": identity.email,
                "status": "Active",
            })
            # Commit per file so a later failure does not undo earlier uploads
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            store.delete(stored.file_path)
            logging.error(
                f"Failed to record uploaded document: {e}",
                extra={"request_id": get_request_id(request), "original_name": original_name},
            )
            errors.append(UploadFailure(file_name=original_name, error="Failed to record document metadata"))
            continue

        uploads.append(UploadSuccess(document=UploadedDocument.model_validate(document)))

    record_upload(stored=len(uploads), rejected=len(errors))
    log_upload_batch(get_request_id(request), relation.value, related_id, len(uploads), len(errors))

    return UploadResponse(
        success=len(uploads) > 0,
        uploads=uploads,
        errors=errors,
        message=f"Successfully uploaded {len(uploads)} of {len(files)} files",
    )


@router.get("/upload", response_model=List[DocumentResponse])
def list_documents(
    related_to: Optional[str] = Query(None, alias="relatedTo"),
    related_id: Optional[str] = Query(None, alias="relatedId"),
    category: Optional[str] = Query(None),
    status: str = Query("Active"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Documents matching the filters, newest first; only Active unless status is given"""
    return DocumentRepository(db).list(
        related_to=related_to,
        related_id=related_id,
        category=category,
        status=status,
    )


@router.get("/upload/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    return _load(DocumentRepository(db), document_id)


@router.put("/upload/{document_id}", response_model=DocumentResponse)
def update_document(
    document_id: str,
    body: DocumentUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Update category, description, tags, status, or verification"""
    repo = DocumentRepository(db)
    document = _load(repo, document_id)

    patch = editable_patch(body.model_dump(exclude_unset=True))
    if patch.get("verified") is True and not document.verified:
        patch["verified_by"] = identity.subject
        patch["verified_at"] = utcnow()
    elif patch.get("verified") is False:
        patch["verified_by"] = None
        patch["verified_at"] = None

    repo.update(document, patch)
    db.commit()
    db.refresh(document)
    return document


@router.delete("/upload/{document_id}", response_model=DocumentDeleteResponse)
def delete_document(
    document_id: str,
    request: Request,
    db: Session = Depends(get_db),
    store: LocalFileStore = Depends(get_file_store),
    identity: Identity = Depends(get_identity),
):
    """
    Remove the stored file, then the metadata row.

    The row is removed even when the file cannot be; the response flags it
    so the leftover file can be reconciled.
    """
    repo = DocumentRepository(db)
    document = _load(repo, document_id)
    file_path = document.file_path

    file_removed = store.delete(file_path)
    repo.delete(document)
    db.commit()

    if not file_removed:
        file_removal_failure_counter.inc()
        log_file_removal_failure(get_request_id(request), document_id, file_path)

    return DocumentDeleteResponse(
        message="Document deleted successfully",
        file_removal_failed=not file_removed,
    )
