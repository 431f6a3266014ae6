# backend/rentdesk/auth.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Any

import jwt
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .domain.errors import NotAuthenticated
from .models import AppUser


@dataclass(frozen=True)
class Principal:
    user_id: int
    email: str
    role: str  # tenant | landlord | agent | admin


# -------------------------
# JWT helpers
# -------------------------
def create_access_token(user_id: int, *, expires_minutes: int = 60 * 24) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(int(user_id)),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode_token(token: str) -> dict[str, Any]:
    try:
        return dict(jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]))
    except jwt.ExpiredSignatureError:
        raise NotAuthenticated("Token expired")
    except jwt.InvalidTokenError:
        raise NotAuthenticated("Invalid token")


def _principal_for(db: Session, user_id: int) -> Principal:
    user = db.get(AppUser, int(user_id))
    if user is None:
        raise NotAuthenticated("Unknown user")
    return Principal(user_id=int(user.id), email=str(user.email), role=str(user.role or "tenant").lower())


# -------------------------
# get_principal
# -------------------------
def get_principal(
    request: Request,
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Principal:
    """
    Auth modes supported (in priority order):
      1) Authorization: Bearer <token>
      2) dev header spoofing (ONLY if settings.auth_mode == "dev")
    """
    if authorization and str(authorization).lower().startswith("bearer "):
        token = str(authorization).split(" ", 1)[1].strip()
        claims = _decode_token(token)
        sub = str(claims.get("sub") or "")
        if not sub.isdigit():
            raise NotAuthenticated("Token missing sub")
        return _principal_for(db, int(sub))

    if settings.auth_mode == "dev":
        raw = (request.headers.get(settings.dev_header_user_id) or "").strip()
        if not raw:
            raise NotAuthenticated(f"Missing {settings.dev_header_user_id} for dev auth")
        if not raw.isdigit():
            raise NotAuthenticated(f"{settings.dev_header_user_id} must be a user id")
        return _principal_for(db, int(raw))

    raise NotAuthenticated()
