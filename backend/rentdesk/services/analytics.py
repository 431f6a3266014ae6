# backend/rentdesk/services/analytics.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import AnalyticsEvent

log = logging.getLogger(__name__)


def _dumps(v: Any) -> str:
    try:
        return json.dumps(v, default=str)
    except Exception:
        return "{}"


def _loads(s: Optional[str], default: Any) -> Any:
    if not s:
        return default
    try:
        return json.loads(s)
    except Exception:
        return default


@dataclass(frozen=True)
class AnalyticsEventOut:
    id: int
    event_type: str
    user_id: Optional[int]
    payload: dict[str, Any]
    created_at: Optional[datetime]


class AnalyticsFacade:
    """
    Best-effort event tracking. A failed emission is logged and swallowed;
    analytics never affects the business flow that produced the event.
    """

    def track(
        self,
        db: Session,
        *,
        event_type: str,
        user_id: Optional[int],
        payload: dict[str, Any] | None = None,
    ) -> Optional[AnalyticsEvent]:
        if not event_type:
            raise ValueError("event_type required")

        row = AnalyticsEvent(
            event_type=str(event_type),
            user_id=user_id,
            payload_json=_dumps(payload or {}),
            created_at=datetime.utcnow(),
        )
        try:
            db.add(row)
            db.commit()
        except Exception:
            db.rollback()
            log.warning("analytics event dropped", exc_info=True, extra={"user_id": user_id})
            return None
        return row

    def list(self, db: Session, *, event_type: Optional[str] = None, limit: int = 200) -> list[AnalyticsEventOut]:
        q = select(AnalyticsEvent).order_by(AnalyticsEvent.id.desc())
        if event_type:
            q = q.where(AnalyticsEvent.event_type == event_type)

        return [
            AnalyticsEventOut(
                id=int(r.id),
                event_type=str(r.event_type),
                user_id=r.user_id,
                payload=_loads(r.payload_json, {}),
                created_at=r.created_at,
            )
            for r in db.scalars(q.limit(int(limit))).all()
        ]


analytics = AnalyticsFacade()
