# backend/rentdesk/services/locks_service.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import WorkflowLock


def _now() -> datetime:
    return datetime.utcnow()


def application_lock_key(application_id: int) -> str:
    return f"application:{int(application_id)}:review"


def _row(db: Session, lock_key: str) -> Optional[WorkflowLock]:
    return db.scalar(select(WorkflowLock).where(WorkflowLock.lock_key == lock_key))


def _is_expired(row: WorkflowLock) -> bool:
    return row.expires_at is None or row.expires_at <= _now()


def acquire_lock(db: Session, *, lock_key: str, owner: Optional[str], ttl_seconds: int) -> bool:
    """
    Take the advisory row lock for lock_key.

    Free, expired, or already ours: (re)claim it, commit, return True.
    Held by another owner: return False without writing anything.
    The commit makes the claim visible to concurrent sessions immediately.
    """
    until = _now() + timedelta(seconds=int(ttl_seconds))
    row = _row(db, lock_key)

    if row is None:
        db.add(WorkflowLock(lock_key=lock_key, owner=owner, expires_at=until, created_at=_now()))
        try:
            db.commit()
        except IntegrityError:
            # lost the insert race for the unique key
            db.rollback()
            return False
        return True

    if not _is_expired(row) and (row.owner or "") != (owner or ""):
        return False

    row.owner = owner
    row.expires_at = until
    db.commit()
    return True


def release_lock(db: Session, *, lock_key: str, owner: Optional[str]) -> bool:
    """Expire the lock if owner holds it. Returns False when someone else does."""
    row = _row(db, lock_key)
    if row is None:
        return True
    if owner and (row.owner or "") != owner:
        return False
    row.expires_at = _now() - timedelta(seconds=1)
    db.commit()
    return True
