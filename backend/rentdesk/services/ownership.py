# backend/rentdesk/services/ownership.py
from __future__ import annotations

from sqlalchemy.orm import Session

from ..domain.errors import NotFound
from ..models import AppUser, Application, Property


def must_get_application(db: Session, *, application_id: int) -> Application:
    row = db.get(Application, int(application_id))
    if not row:
        raise NotFound("application not found")
    return row


def must_get_property(db: Session, *, property_id: int) -> Property:
    row = db.get(Property, int(property_id))
    if not row:
        raise NotFound("property not found")
    return row


def must_get_user(db: Session, *, user_id: int, what: str = "user") -> AppUser:
    row = db.get(AppUser, int(user_id))
    if not row:
        raise NotFound(f"{what} not found")
    return row
