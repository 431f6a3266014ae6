# backend/rentdesk/domain/audit.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models import AuditEvent


def _snapshot(v: Optional[dict[str, Any]]) -> Optional[str]:
    return None if v is None else json.dumps(v, sort_keys=True, default=str)


def audit_write(
    db: Session,
    *,
    actor_user_id: Optional[int],
    action: str,
    entity_type: str,
    entity_id: Any,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
    commit: bool = False,
) -> AuditEvent:
    """
    Adds an audit row to the session.

    Workflow steps call this next to the write being audited and commit both
    together; pass commit=True for a standalone entry.
    """
    row = AuditEvent(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=_snapshot(before),
        after_json=_snapshot(after),
        created_at=datetime.utcnow(),
    )
    db.add(row)
    if commit:
        db.commit()
        db.refresh(row)
    return row


def audit_status_change(
    db: Session,
    *,
    actor_user_id: Optional[int],
    application_id: int,
    before: str,
    after: str,
    action: str = "application.status",
) -> AuditEvent:
    return audit_write(
        db,
        actor_user_id=actor_user_id,
        action=action,
        entity_type="Application",
        entity_id=application_id,
        before={"status": before},
        after={"status": after},
    )
