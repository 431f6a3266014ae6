from __future__ import annotations

import httpx
import pytest
from sqlalchemy import select

from rentdesk.cli.seed_demo import seed_demo
from rentdesk.clients.checkout import CheckoutClient
from rentdesk.db import SessionLocal
from rentdesk.domain.errors import LeaseCreationFailed, PaymentProvisioningFailed
from rentdesk.models import Application, AuditEvent, Lease, Payment, Property
from rentdesk.services.approval_workflow import ApprovalWorkflow
from rentdesk.services.lease_provisioner import LeaseProvisioner
from rentdesk.services.payment_gateway import EscrowGateway, GatewayResult


class DecliningGateway:
    def create_escrow_payment(self, db, **kw):
        return GatewayResult(success=False, error="card declined")


class RecordsThenFailsGateway:
    """Writes the escrow payment row, then reports failure."""

    def __init__(self):
        self.inner = EscrowGateway()

    def create_escrow_payment(self, db, **kw):
        self.inner.create_escrow_payment(db, **kw)
        return GatewayResult(success=False, error="provider rejected after order")


class FailingProvisioner(LeaseProvisioner):
    def provision(self, db, application, property, tenant):
        raise LeaseCreationFailed()


def _run(db, s, approver_id, role, gateway=None, **kw):
    return ApprovalWorkflow(gateway=gateway, **kw).run(
        db,
        application_id=s.application_id,
        approver_id=approver_id,
        approver_role=role,
        requested_status="APPROVED",
    )


def test_payment_failure_reverts_status_and_deletes_lease():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="comp1")
        _run(db, s, s.agent_id, "agent")

        with pytest.raises(PaymentProvisioningFailed):
            _run(db, s, s.landlord_id, "landlord", gateway=DecliningGateway())

        db.expire_all()
        app_row = db.get(Application, s.application_id)
        assert app_row.status == "AGENT_APPROVED"
        assert db.scalars(select(Lease).where(Lease.application_id == s.application_id)).all() == []
        assert db.get(Property, s.property_id).status == "AVAILABLE"

        actions = {a.action for a in db.scalars(select(AuditEvent)).all()}
        assert "lease.compensate_delete" in actions
        assert "application.compensate_status" in actions
    finally:
        db.close()


def test_no_payment_outlives_its_lease():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="comp2", with_agent=False)

        with pytest.raises(PaymentProvisioningFailed):
            _run(db, s, s.landlord_id, "landlord", gateway=RecordsThenFailsGateway())

        db.expire_all()
        assert db.get(Application, s.application_id).status == "PENDING"
        assert db.get(Application, s.application_id).reviewed_date is None
        assert db.scalars(select(Lease)).all() == []
        for pay in db.scalars(select(Payment)).all():
            assert pay.lease_id is None or db.get(Lease, pay.lease_id) is not None
        assert db.scalars(select(Payment)).all() == []
    finally:
        db.close()


def test_lease_failure_reverts_status():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="comp3", with_agent=False)

        with pytest.raises(LeaseCreationFailed):
            _run(db, s, s.landlord_id, "landlord", provisioner=FailingProvisioner())

        db.expire_all()
        assert db.get(Application, s.application_id).status == "PENDING"
    finally:
        db.close()


def test_retry_after_compensation_succeeds():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="comp4", with_agent=False)
        with pytest.raises(PaymentProvisioningFailed):
            _run(db, s, s.landlord_id, "landlord", gateway=DecliningGateway())

        out = _run(db, s, s.landlord_id, "landlord")
        assert out.status.value == "APPROVED"
        assert out.lease is not None
        assert out.escrow.payment_id is not None
    finally:
        db.close()


def test_checkout_timeout_compensates_full_approval():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    gateway = EscrowGateway(CheckoutClient(base_url="https://pay.test/v1", transport=httpx.MockTransport(handler)))

    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="comp5", with_agent=False)

        with pytest.raises(PaymentProvisioningFailed):
            _run(db, s, s.landlord_id, "landlord", gateway=gateway)

        db.expire_all()
        app_row = db.get(Application, s.application_id)
        assert app_row.status == "PENDING"
        assert app_row.reviewed_date is None
        assert db.scalars(select(Lease).where(Lease.application_id == s.application_id)).all() == []
        assert db.scalars(select(Payment)).all() == []
        assert db.get(Property, s.property_id).status == "AVAILABLE"
    finally:
        db.close()
