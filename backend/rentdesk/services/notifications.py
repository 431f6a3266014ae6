# backend/rentdesk/services/notifications.py
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.errors import NotificationFailed
from ..models import Notification

log = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def notify(
        self,
        db: Session,
        *,
        user_id: int,
        type: str,
        title: str,
        message: str,
        link: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None: ...


class DbNotificationSink:
    """Stores notifications for the in-app inbox."""

    def notify(
        self,
        db: Session,
        *,
        user_id: int,
        type: str,
        title: str,
        message: str,
        link: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        try:
            db.add(
                Notification(
                    user_id=int(user_id),
                    type=type,
                    title=title,
                    message=message,
                    link=link,
                    metadata_json=json.dumps(metadata or {}, default=str),
                    is_read=False,
                    created_at=datetime.utcnow(),
                )
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise NotificationFailed(details={"user_id": user_id, "type": type}) from e


def notify_best_effort(sink: NotificationSink, db: Session, **kwargs: Any) -> bool:
    """Deliver a notification; failures are logged and never propagate."""
    try:
        sink.notify(db, **kwargs)
        return True
    except Exception:
        log.warning(
            "notification failed (ignored)",
            exc_info=True,
            extra={"user_id": kwargs.get("user_id")},
        )
        return False
