# backend/rentdesk/domain/representation.py
from __future__ import annotations

from typing import Callable, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import AppUser, LandlordProfile, TenantProfile

Lookup = Callable[[], Optional[int]]


def first_present(lookups: Iterable[Lookup]) -> Optional[int]:
    """Run lookups in order and return the first non-empty id."""
    for lookup in lookups:
        v = lookup()
        if v:
            return int(v)
    return None


def _direct(db: Session, user_id: int) -> Lookup:
    def run() -> Optional[int]:
        user = db.get(AppUser, int(user_id))
        return user.represented_by_id if user is not None else None

    return run


def _profile(db: Session, model, user_id: int) -> Lookup:
    def run() -> Optional[int]:
        return db.scalar(select(model.represented_by_id).where(model.user_id == int(user_id)))

    return run


def landlord_agent_id(db: Session, landlord_id: int) -> Optional[int]:
    """Agent representing a landlord: direct user field first, then the landlord profile."""
    return first_present([_direct(db, landlord_id), _profile(db, LandlordProfile, landlord_id)])


def tenant_agent_id(db: Session, tenant_id: int) -> Optional[int]:
    return first_present([_direct(db, tenant_id), _profile(db, TenantProfile, tenant_id)])
