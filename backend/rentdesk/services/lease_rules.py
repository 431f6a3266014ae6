# backend/rentdesk/services/lease_rules.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Lease


def _day(v: Any) -> Optional[date]:
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    try:
        return date.fromisoformat(str(v))
    except ValueError:
        return None


@dataclass(frozen=True)
class LeaseWindow:
    """Calendar days a lease occupies. Both ends inclusive; no end means open-ended."""

    start: date
    end: Optional[date] = None

    def overlaps(self, other: "LeaseWindow") -> bool:
        mine_end = self.end or date.max
        their_end = other.end or date.max
        return self.start <= their_end and other.start <= mine_end

    def describe(self) -> str:
        return f"{self.start.isoformat()} -> {self.end.isoformat() if self.end else 'open-ended'}"


def find_conflicting_lease(
    db: Session,
    *,
    property_id: int,
    window: LeaseWindow,
) -> Optional[tuple[Lease, LeaseWindow]]:
    q = select(Lease).where(Lease.property_id == int(property_id))

    for lease in db.scalars(q.order_by(Lease.id.desc())).all():
        start = _day(lease.start_date)
        if start is None:
            continue
        existing = LeaseWindow(start=start, end=_day(lease.end_date))
        if window.overlaps(existing):
            return lease, existing
    return None


def ensure_no_lease_overlap(
    db: Session,
    *,
    property_id: int,
    start_date: Any,
    end_date: Any = None,
) -> None:
    """
    Raise ValueError when the dates are malformed or another lease on the
    property already covers any day of them.
    """
    start = _day(start_date)
    if start is None:
        raise ValueError("lease start_date is required and must be a date")

    end = _day(end_date)
    if end is not None and end < start:
        raise ValueError("lease end_date cannot be before start_date")

    hit = find_conflicting_lease(db, property_id=property_id, window=LeaseWindow(start=start, end=end))
    if hit is not None:
        lease, existing = hit
        raise ValueError(f"lease dates overlap with existing lease id={int(lease.id)} ({existing.describe()})")


def lease_for_application(db: Session, *, application_id: int) -> Optional[Lease]:
    return db.scalar(select(Lease).where(Lease.application_id == int(application_id)))
