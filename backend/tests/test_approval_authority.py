from __future__ import annotations

import pytest
from sqlalchemy import select

from rentdesk.cli.seed_demo import get_or_create_user, seed_demo
from rentdesk.db import SessionLocal
from rentdesk.domain.errors import InvalidTransition, NotAuthorized
from rentdesk.models import AppUser, Application, AuditEvent, LandlordProfile, Property
from rentdesk.services.approval_authority import authorize
from rentdesk.services.approval_workflow import ApprovalWorkflow


def test_outsider_is_not_authorized_and_nothing_changes():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="stranger")
        outsider = get_or_create_user(db, "outsider@rentdesk.local", "Outsider", "agent")
        assert outsider.id not in (s.landlord_id, s.agent_id, s.tenant_id)

        with pytest.raises(NotAuthorized):
            ApprovalWorkflow().run(
                db,
                application_id=s.application_id,
                approver_id=outsider.id,
                approver_role=outsider.role,
                requested_status="APPROVED",
            )

        db.expire_all()
        app_row = db.get(Application, s.application_id)
        assert app_row.status == "PENDING"
        assert app_row.reviewed_date is None
        assert db.get(Property, s.property_id).agent_id == s.agent_id
    finally:
        db.close()


def test_tenant_cannot_review_own_application():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="selfreview")
        prop = db.get(Property, s.property_id)
        with pytest.raises(NotAuthorized):
            authorize(db, approver_id=s.tenant_id, approver_role="tenant", property=prop, landlord=None)
    finally:
        db.close()


def test_landlord_and_assigned_agent_roles():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="roles")
        prop = db.get(Property, s.property_id)

        a = authorize(db, approver_id=s.landlord_id, approver_role="landlord", property=prop, landlord=None)
        assert a.is_landlord and not a.is_agent

        a = authorize(db, approver_id=s.agent_id, approver_role="agent", property=prop, landlord=None)
        assert a.is_agent and not a.is_landlord
    finally:
        db.close()


def _representing_broker(db, s, email):
    rep = get_or_create_user(db, email, "Broker", "agent")
    db.add(LandlordProfile(user_id=s.landlord_id, represented_by_id=rep.id))
    db.commit()
    return rep


def _autobind_rows(db):
    return db.scalars(select(AuditEvent).where(AuditEvent.action == "property.agent_autobind")).all()


def test_authorize_flags_representing_agent_without_writing():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="repcheck", with_agent=False)
        rep = _representing_broker(db, s, "repcheck-broker@rentdesk.local")

        prop = db.get(Property, s.property_id)
        a = authorize(db, approver_id=rep.id, approver_role="agent", property=prop, landlord=None)
        assert a.is_agent
        assert a.pending_agent_id == rep.id

        db.expire_all()
        assert db.get(Property, s.property_id).agent_id is None
        assert _autobind_rows(db) == []
    finally:
        db.close()


def test_representing_agent_review_binds_agent_with_status_change():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="rep", with_agent=False)
        rep = _representing_broker(db, s, "rep-broker@rentdesk.local")

        outcome = ApprovalWorkflow().run(
            db,
            application_id=s.application_id,
            approver_id=rep.id,
            approver_role="agent",
            requested_status="APPROVED",
        )
        assert outcome.status.value == "AGENT_APPROVED"

        db.expire_all()
        assert db.get(Property, s.property_id).agent_id == rep.id
        assert db.get(Application, s.application_id).status == "AGENT_APPROVED"
        assert len(_autobind_rows(db)) == 1
    finally:
        db.close()


def test_refused_review_by_representing_agent_leaves_property_unbound():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="repdenied", with_agent=False)
        rep = _representing_broker(db, s, "repdenied-broker@rentdesk.local")

        app_row = db.get(Application, s.application_id)
        app_row.status = "REJECTED"
        db.commit()

        with pytest.raises(InvalidTransition):
            ApprovalWorkflow().run(
                db,
                application_id=s.application_id,
                approver_id=rep.id,
                approver_role="agent",
                requested_status="APPROVED",
            )

        db.expire_all()
        assert db.get(Property, s.property_id).agent_id is None
        assert db.get(Application, s.application_id).status == "REJECTED"
        assert _autobind_rows(db) == []
    finally:
        db.close()


def test_direct_representation_field_wins_over_profile():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="direct", with_agent=False)
        direct = get_or_create_user(db, "direct-broker@rentdesk.local", "Direct", "agent")
        other = get_or_create_user(db, "profile-broker@rentdesk.local", "Profile", "agent")

        landlord = db.get(AppUser, s.landlord_id)
        landlord.represented_by_id = direct.id
        db.add(LandlordProfile(user_id=s.landlord_id, represented_by_id=other.id))
        db.commit()

        prop = db.get(Property, s.property_id)
        with pytest.raises(NotAuthorized):
            authorize(db, approver_id=other.id, approver_role="agent", property=prop, landlord=landlord)

        a = authorize(db, approver_id=direct.id, approver_role="agent", property=prop, landlord=landlord)
        assert a.is_agent
    finally:
        db.close()


def test_representing_agent_does_not_override_assigned_agent():
    db = SessionLocal()
    try:
        s = seed_demo(db, prefix="keep")
        rep = get_or_create_user(db, "keep-broker@rentdesk.local", "Broker", "agent")
        db.add(LandlordProfile(user_id=s.landlord_id, represented_by_id=rep.id))
        db.commit()

        prop = db.get(Property, s.property_id)
        a = authorize(db, approver_id=rep.id, approver_role="agent", property=prop, landlord=None)
        assert a.pending_agent_id is None

        db.expire_all()
        assert db.get(Property, s.property_id).agent_id == s.agent_id
    finally:
        db.close()
