"""Upload validation rules for document attachments"""

from typing import Any, Dict
from mfi_backoffice.domain.models import DocumentCategory, DocumentStatus, RelatedTo
from mfi_backoffice.domain.exceptions import ValidationError

IMAGE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
)

DOCUMENT_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)

ALLOWED_MIME_TYPES = IMAGE_TYPES + DOCUMENT_TYPES

# Metadata fields staff may change after upload
EDITABLE_FIELDS = ("category", "description", "tags", "status", "verified")


def check_upload(mime_type: str, size: int, max_size: int) -> None:
    """Reject files outside the allow-list or above the size ceiling"""
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(f"File type {mime_type or 'unknown'} is not allowed")

    if size > max_size:
        raise ValidationError(f"File size {size} exceeds maximum allowed size of {max_size} bytes")


def file_type_from_mime(mime_type: str) -> str:
    """Short type label, e.g. application/pdf → pdf"""
    parts = (mime_type or "").split("/", 1)
    return parts[1] if len(parts) == 2 and parts[1] else "unknown"


def check_relation(related_to: str, related_id: str) -> RelatedTo:
    if not related_to or not related_id:
        raise ValidationError("relatedTo and relatedId are required")
    try:
        return RelatedTo(related_to)
    except ValueError:
        allowed = ", ".join(r.value for r in RelatedTo)
        raise ValidationError(f"Invalid relatedTo '{related_to}'. Allowed values: {allowed}")


def check_category(category: str) -> DocumentCategory:
    try:
        return DocumentCategory(category)
    except ValueError:
        raise ValidationError(f"Invalid document category '{category}'")


def editable_patch(body: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only editable fields and validate enum values among them"""
    patch = {key: value for key, value in body.items() if key in EDITABLE_FIELDS}

    if "category" in patch:
        patch["category"] = check_category(patch["category"]).value
    if "status" in patch:
        try:
            patch["status"] = DocumentStatus(patch["status"]).value
        except ValueError:
            raise ValidationError(f"Invalid document status '{patch['status']}'")

    return patch
