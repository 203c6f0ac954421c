"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Callable, Optional
from fastapi import Depends, Header, HTTPException, Request
from mfi_backoffice.domain.models import Identity
from mfi_backoffice.domain.exceptions import ForbiddenError
from mfi_backoffice.infrastructure.identity import extract_bearer_token, verify_token
from mfi_backoffice.infrastructure.storage.local import LocalFileStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_file_store() -> LocalFileStore:
    """Provide document file store instance"""
    return LocalFileStore()


def get_identity(authorization: Optional[str] = Header(None)) -> Identity:
    """Resolve the verified caller for this request, or fail with 401"""
    return verify_token(extract_bearer_token(authorization))


def require_roles(*roles: str) -> Callable[..., Identity]:
    """Build a dependency that admits only identities holding one of `roles`"""

    def checker(identity: Identity = Depends(get_identity)) -> Identity:
        if not identity.has_role(*roles):
            raise ForbiddenError("Forbidden - Insufficient permissions")
        return identity

    return checker


require_privileged = require_roles("admin", "manager")


def parse_uuid(value: str, entity: str) -> uuid.UUID:
    """Parse a path identifier, failing with 400 on a malformed value"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID format")
