from __future__ import annotations

import pytest

from rentdesk.cli.seed_demo import get_or_create_user, seed_demo
from rentdesk.db import SessionLocal
from rentdesk.domain.errors import InvalidPrice, LeaseCreationFailed
from rentdesk.models import AppUser, Application, Property, TenantProfile
from rentdesk.services.lease_provisioner import LEASE_PENDING_PAYMENT, LeaseProvisioner, _add_years


def _load(db, s):
    app_row = db.get(Application, s.application_id)
    return app_row, db.get(Property, s.property_id), db.get(AppUser, s.tenant_id)


def test_lease_written_pending_payment_with_property_deposit():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="lp1", price=1800.0, deposit=900.0)
        app_row, prop, tenant = _load(db, s)

        lease = LeaseProvisioner().provision(db, app_row, prop, tenant)

        assert lease.id is not None
        assert lease.status == LEASE_PENDING_PAYMENT
        assert lease.is_active is False
        assert lease.monthly_rent == 1800.0
        assert lease.deposit_amount == 900.0
        assert lease.listing_agent_id == s.agent_id
        assert lease.application_id == s.application_id
        assert lease.end_date == _add_years(lease.start_date, 1)
    finally:
        db.close()


def test_deposit_falls_back_to_application_then_rent():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="lp2", price=1500.0)
        app_row, prop, tenant = _load(db, s)
        app_row.deposit_amount = 750.0
        db.commit()

        terms = LeaseProvisioner().derive_terms(db, app_row, prop, tenant)
        assert terms.deposit_amount == 750.0

        app_row.deposit_amount = None
        db.commit()
        terms = LeaseProvisioner().derive_terms(db, app_row, prop, tenant)
        assert terms.deposit_amount == 1500.0
    finally:
        db.close()


@pytest.mark.parametrize("price", [0.0, -10.0])
def test_non_positive_price_is_rejected(price):
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix=f"lp3{int(abs(price))}", price=price)
        app_row, prop, tenant = _load(db, s)

        with pytest.raises(InvalidPrice):
            LeaseProvisioner().provision(db, app_row, prop, tenant)
    finally:
        db.close()


def test_tenant_agent_recorded_from_tenant_profile():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="lp4")
        tenant_agent = get_or_create_user(db, "lp4-tenant-agent@rentdesk.local", "TA", "agent")
        db.add(TenantProfile(user_id=s.tenant_id, represented_by_id=tenant_agent.id))
        db.commit()
        app_row, prop, tenant = _load(db, s)

        lease = LeaseProvisioner().provision(db, app_row, prop, tenant)
        assert lease.tenant_agent_id == tenant_agent.id
    finally:
        db.close()


def test_second_lease_for_same_application_fails():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="lp5")
        app_row, prop, tenant = _load(db, s)
        LeaseProvisioner().provision(db, app_row, prop, tenant)

        with pytest.raises(LeaseCreationFailed):
            LeaseProvisioner().provision(db, app_row, prop, tenant)
    finally:
        db.close()


def test_occupancy_marks_property_and_tenant_profile():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="lp6")
        _, prop, _ = _load(db, s)

        LeaseProvisioner().apply_occupancy(db, prop, s.tenant_id)

        db.expire_all()
        assert db.get(Property, s.property_id).status == "OCCUPIED"
        profile = db.query(TenantProfile).filter(TenantProfile.user_id == s.tenant_id).one()
        assert profile.status == "OCCUPIED"
    finally:
        db.close()


def test_add_years_handles_leap_day():
    from datetime import datetime

    assert _add_years(datetime(2028, 2, 29), 1) == datetime(2029, 2, 28)
