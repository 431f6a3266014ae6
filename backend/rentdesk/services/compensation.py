# backend/rentdesk/services/compensation.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.approval_states import ApprovalStatus
from ..domain.audit import audit_status_change, audit_write
from ..models import Application, Lease, Payment

log = logging.getLogger(__name__)


class CompensationManager:
    """
    Inverse operations for a partially provisioned approval.

    Each step runs on its own: a failing step is logged and the next one still
    runs. Nothing is retried and nothing is raised; the caller re-raises the
    provisioning error that triggered compensation.
    """

    def compensate(
        self,
        db: Session,
        *,
        application: Application,
        original_status: ApprovalStatus,
        original_reviewed_date: Optional[datetime],
        lease: Optional[Lease],
        actor_user_id: Optional[int] = None,
    ) -> None:
        # Session may hold a failed flush from the step that raised.
        try:
            db.rollback()
        except SQLAlchemyError:
            log.exception("rollback before compensation failed")

        if lease is not None:
            self._delete_lease(db, lease=lease, actor_user_id=actor_user_id)

        self._revert_status(
            db,
            application=application,
            original_status=original_status,
            original_reviewed_date=original_reviewed_date,
            actor_user_id=actor_user_id,
        )

    def _delete_lease(self, db: Session, *, lease: Lease, actor_user_id: Optional[int]) -> None:
        lease_id = None
        try:
            lease_id = lease.id
            before = {"status": lease.status, "application_id": lease.application_id}
            # Escrow orders first: no payment may outlive its lease.
            db.execute(delete(Payment).where(Payment.lease_id == lease_id))
            db.execute(delete(Lease).where(Lease.id == lease_id))
            audit_write(
                db,
                actor_user_id=actor_user_id,
                action="lease.compensate_delete",
                entity_type="Lease",
                entity_id=lease_id,
                before=before,
                after=None,
            )
            db.commit()
            log.info("compensation: lease deleted", extra={"lease_id": lease_id})
        except SQLAlchemyError:
            db.rollback()
            log.exception("compensation: failed to delete lease", extra={"lease_id": lease_id})

    def _revert_status(
        self,
        db: Session,
        *,
        application: Application,
        original_status: ApprovalStatus,
        original_reviewed_date: Optional[datetime],
        actor_user_id: Optional[int],
    ) -> None:
        try:
            failed_status = application.status
            application.status = original_status.value
            application.reviewed_date = original_reviewed_date
            db.add(application)
            audit_status_change(
                db,
                actor_user_id=actor_user_id,
                application_id=application.id,
                before=failed_status,
                after=original_status.value,
                action="application.compensate_status",
            )
            db.commit()
            log.info(
                "compensation: application status reverted",
                extra={"application_id": application.id, "status": original_status.value},
            )
        except SQLAlchemyError:
            db.rollback()
            log.exception("compensation: failed to revert application status", extra={"application_id": application.id})
