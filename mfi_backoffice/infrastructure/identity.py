"""Bearer credential verification against the shared JWT secret"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from mfi_backoffice.config import settings
from mfi_backoffice.domain.models import Identity, Role
from mfi_backoffice.domain.exceptions import UnauthorizedError


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an 'Authorization: Bearer <token>' header value"""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None


def create_access_token(subject: str, email: str, role: str, expires_in: Optional[timedelta] = None) -> str:
    """Issue a signed token. Production tokens come from the credential service."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + (expires_in or timedelta(days=settings.jwt_expiry_days)),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str]) -> Identity:
    """
    Decode and check a bearer token.

    Raises:
        UnauthorizedError: on missing, expired, tampered or incomplete tokens
    """
    if not token:
        raise UnauthorizedError("Unauthorized - No token provided")

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Unauthorized - Token expired") from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError("Unauthorized - Invalid token") from e

    subject, email, role = payload.get("sub"), payload.get("email"), payload.get("role")
    if not subject or role not in {r.value for r in Role}:
        raise UnauthorizedError("Unauthorized - Invalid token")

    return Identity(subject=str(subject), email=email or "", role=role)
