# backend/rentdesk/services/approval_workflow.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.approval_states import ApprovalStatus, next_status, parse_status
from ..domain.audit import audit_status_change
from ..domain.errors import ConcurrentModification
from ..middleware.request_id import current_owner_token
from ..models import AppUser, Application, Lease, Property
from .analytics import AnalyticsFacade, analytics
from .approval_authority import authorize, bind_representing_agent
from .compensation import CompensationManager
from .escrow_payments import EscrowOrder, EscrowPaymentCoordinator
from .lease_provisioner import LeaseProvisioner, validate_price
from .locks_service import acquire_lock, application_lock_key, release_lock
from .notifications import DbNotificationSink, NotificationSink, notify_best_effort
from .ownership import must_get_application, must_get_property, must_get_user
from .payment_gateway import PaymentGateway

log = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Approval workflow
# -----------------------------------------------------------------------------
#   AUTHORIZE -> TRANSITION -> [final approval] PROVISION_LEASE -> CREATE_ESCROW
#             -> OCCUPANCY -> NOTIFY
#
# The status write is committed before provisioning so an agent approval is
# durable on its own. Any failure in PROVISION_LEASE / CREATE_ESCROW runs
# compensation (delete escrow order + lease, revert status) and re-raises.
# -----------------------------------------------------------------------------


@dataclass
class ApprovalOutcome:
    application: Application
    property: Property
    tenant: AppUser
    previous_status: ApprovalStatus
    status: ApprovalStatus
    lease: Optional[Lease] = None
    escrow: Optional[EscrowOrder] = None


def _utcnow() -> datetime:
    return datetime.utcnow()


class ApprovalWorkflow:
    def __init__(
        self,
        *,
        gateway: Optional[PaymentGateway] = None,
        notifier: Optional[NotificationSink] = None,
        provisioner: Optional[LeaseProvisioner] = None,
        compensation: Optional[CompensationManager] = None,
        tracker: Optional[AnalyticsFacade] = None,
    ) -> None:
        self.provisioner = provisioner or LeaseProvisioner()
        self.escrow = EscrowPaymentCoordinator(gateway)
        self.compensation = compensation or CompensationManager()
        self.notifier = notifier or DbNotificationSink()
        self.tracker = tracker or analytics

    def run(
        self,
        db: Session,
        *,
        application_id: int,
        approver_id: int,
        approver_role: str,
        requested_status: str,
    ) -> ApprovalOutcome:
        requested = parse_status(requested_status)

        application = must_get_application(db, application_id=application_id)
        property = must_get_property(db, property_id=application.property_id)
        landlord = db.get(AppUser, property.landlord_id)
        tenant = must_get_user(db, user_id=application.tenant_id, what="tenant")

        # AUTHORIZE
        auth = authorize(db, approver_id=approver_id, approver_role=approver_role, property=property, landlord=landlord)

        # TRANSITION (validation only; nothing written yet)
        original_status = parse_status(application.status)
        original_reviewed_date = application.reviewed_date
        property_has_agent = property.agent_id is not None or auth.pending_agent_id is not None
        new_status = next_status(original_status, requested, auth, property_has_agent=property_has_agent)
        if new_status.reaches_final_approval:
            validate_price(property)

        lock_key = application_lock_key(application.id)
        owner = current_owner_token()
        if not acquire_lock(db, lock_key=lock_key, owner=owner, ttl_seconds=settings.approval_lock_ttl_seconds):
            raise ConcurrentModification(details={"application_id": application.id})

        try:
            self._persist_transition(
                db,
                application,
                original_status,
                new_status,
                actor_user_id=approver_id,
                bind_agent_to=property if auth.pending_agent_id is not None else None,
            )

            outcome = ApprovalOutcome(
                application=application,
                property=property,
                tenant=tenant,
                previous_status=original_status,
                status=new_status,
            )

            if new_status.reaches_final_approval:
                outcome.lease, outcome.escrow = self._provision(
                    db,
                    application=application,
                    property=property,
                    tenant=tenant,
                    original_status=original_status,
                    original_reviewed_date=original_reviewed_date,
                    actor_user_id=approver_id,
                )
        finally:
            try:
                release_lock(db, lock_key=lock_key, owner=owner)
            except SQLAlchemyError:
                db.rollback()
                log.exception("failed to release approval lock", extra={"application_id": application.id})

        self._notify(db, outcome)
        self.tracker.track(
            db,
            event_type="APPLICATION_STATUS_CHANGE",
            user_id=approver_id,
            payload={
                "application_id": application.id,
                "property_id": property.id,
                "from": original_status.value,
                "to": new_status.value,
                "lease_id": outcome.lease.id if outcome.lease is not None else None,
            },
        )
        return outcome

    # ------------------------------------------------------------------

    def _persist_transition(
        self,
        db: Session,
        application: Application,
        expected: ApprovalStatus,
        new_status: ApprovalStatus,
        *,
        actor_user_id: int,
        bind_agent_to: Optional[Property] = None,
    ) -> None:
        res = db.execute(
            update(Application)
            .where(Application.id == application.id, Application.status == expected.value)
            .values(status=new_status.value, reviewed_date=_utcnow())
        )
        if res.rowcount != 1:
            db.rollback()
            raise ConcurrentModification(details={"application_id": application.id, "expected": expected.value})

        audit_status_change(
            db,
            actor_user_id=actor_user_id,
            application_id=application.id,
            before=expected.value,
            after=new_status.value,
        )
        if bind_agent_to is not None:
            bind_representing_agent(db, property=bind_agent_to, agent_id=actor_user_id)
        db.commit()
        db.refresh(application)
        log.info(
            "application status changed",
            extra={"application_id": application.id, "user_id": actor_user_id, "status": new_status.value},
        )

    def _provision(
        self,
        db: Session,
        *,
        application: Application,
        property: Property,
        tenant: AppUser,
        original_status: ApprovalStatus,
        original_reviewed_date: Optional[datetime],
        actor_user_id: int,
    ) -> tuple[Lease, EscrowOrder]:
        lease: Optional[Lease] = None
        try:
            lease = self.provisioner.provision(db, application, property, tenant)
            order = self.escrow.create_escrow_order(
                db,
                tenant=tenant,
                lease=lease,
                monthly_rent=lease.monthly_rent,
                deposit_amount=lease.deposit_amount,
            )
        except Exception:
            log.warning(
                "provisioning failed; compensating",
                extra={"application_id": application.id, "lease_id": lease.id if lease is not None else None},
            )
            self.compensation.compensate(
                db,
                application=application,
                original_status=original_status,
                original_reviewed_date=original_reviewed_date,
                lease=lease,
                actor_user_id=actor_user_id,
            )
            raise

        self.provisioner.apply_occupancy(db, property, tenant.id)
        return lease, order

    def _notify(self, db: Session, outcome: ApprovalOutcome) -> None:
        app_id = outcome.application.id
        prop = outcome.property
        meta = {"applicationId": app_id, "propertyId": prop.id}

        if outcome.status == ApprovalStatus.AGENT_APPROVED:
            notify_best_effort(
                self.notifier,
                db,
                user_id=prop.landlord_id,
                type="APPLICATION_UPDATE",
                title="Application approved by agent",
                message=f"The agent approved an application for {prop.title}. Your final approval is needed.",
                link="/dashboard/landlord/applications",
                metadata=meta,
            )
        elif outcome.status.reaches_final_approval:
            payment_url = outcome.escrow.payment_url if outcome.escrow is not None else None
            notify_best_effort(
                self.notifier,
                db,
                user_id=outcome.tenant.id,
                type="APPLICATION_APPROVED",
                title="Application approved",
                message=(
                    f"Your application for {prop.title} was approved. "
                    f"Pay the first month's rent and deposit to secure the lease: {payment_url}"
                ),
                link=payment_url,
                metadata={
                    **meta,
                    "leaseId": outcome.lease.id if outcome.lease is not None else None,
                    "paymentId": outcome.escrow.payment_id if outcome.escrow is not None else None,
                },
            )
        elif outcome.status in (ApprovalStatus.REJECTED, ApprovalStatus.WITHDRAWN):
            notify_best_effort(
                self.notifier,
                db,
                user_id=outcome.tenant.id,
                type="APPLICATION_UPDATE",
                title=f"Application {outcome.status.value.lower()}",
                message=f"Your application for {prop.title} was {outcome.status.value.lower()}.",
                link="/dashboard/tenant/applications",
                metadata=meta,
            )
