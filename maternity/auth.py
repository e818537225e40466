"""Admin session tokens.

Tokens are HS256 JWTs issued by the authentication provider. They are read
from the session cookie first, then from an ``Authorization: Bearer`` header.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request
from pydantic import BaseModel

from maternity.config import Settings, get_settings
from maternity.services.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class AdminSession(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str


def create_admin_token(admin: AdminSession, settings: Settings | None = None) -> str:
    settings = settings or get_settings()
    issued_at = datetime.now(timezone.utc)
    payload = {
        **admin.model_dump(),
        "sub": admin.id,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.session_ttl_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_admin_token(token: str, settings: Settings | None = None) -> Optional[AdminSession]:
    """Decode ``token``; ``None`` when it is expired, tampered with or malformed."""
    settings = settings or get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired admin token")
        return None
    except jwt.InvalidTokenError:
        logger.info("Rejected invalid admin token")
        return None
    try:
        return AdminSession.model_validate(payload)
    except ValueError:
        logger.info("Rejected admin token with incomplete claims")
        return None


def _extract_token(request: Request, settings: Settings) -> Optional[str]:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def require_admin(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> AdminSession:
    token = _extract_token(request, settings)
    if not token:
        raise UnauthorizedError("Unauthorized")
    session = verify_admin_token(token, settings)
    if session is None:
        raise UnauthorizedError("Unauthorized")
    return session
