# backend/rentdesk/services/lease_provisioner.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.errors import InvalidPrice, LeaseCreationFailed
from ..domain.representation import landlord_agent_id, tenant_agent_id
from ..models import AppUser, Application, Lease, Property, TenantProfile
from .lease_rules import ensure_no_lease_overlap, lease_for_application

log = logging.getLogger(__name__)

LEASE_PENDING_PAYMENT = "PENDING_PAYMENT"
OCCUPIED = "OCCUPIED"


def _utcnow() -> datetime:
    return datetime.utcnow()


def _add_years(dt: datetime, years: int) -> datetime:
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        # Feb 29 -> Feb 28
        return dt.replace(year=dt.year + years, day=28)


@dataclass(frozen=True)
class LeaseTerms:
    monthly_rent: float
    deposit_amount: float
    listing_agent_id: Optional[int]
    tenant_agent_id: Optional[int]
    start_date: datetime
    end_date: datetime


def validate_price(property: Property) -> float:
    price = float(property.price or 0)
    if price <= 0:
        raise InvalidPrice(details={"property_id": property.id, "price": property.price})
    return price


class LeaseProvisioner:
    """
    Derives lease terms from the property/application and writes the lease in
    PENDING_PAYMENT. Occupancy side effects are applied separately, once the
    escrow order exists.
    """

    def derive_terms(self, db: Session, application: Application, property: Property, tenant: AppUser) -> LeaseTerms:
        rent = validate_price(property)

        if property.deposit is not None:
            deposit = float(property.deposit)
        elif application.deposit_amount is not None:
            deposit = float(application.deposit_amount)
        else:
            deposit = rent

        listing_agent = property.agent_id or landlord_agent_id(db, property.landlord_id)

        tenant_agent: Optional[int] = None
        try:
            tenant_agent = tenant_agent_id(db, tenant.id)
        except SQLAlchemyError:
            log.warning("tenant agent lookup failed; continuing without one", exc_info=True,
                        extra={"application_id": application.id, "user_id": tenant.id})

        start = _utcnow()
        return LeaseTerms(
            monthly_rent=rent,
            deposit_amount=deposit,
            listing_agent_id=listing_agent,
            tenant_agent_id=tenant_agent,
            start_date=start,
            end_date=_add_years(start, int(settings.lease_term_years)),
        )

    def provision(self, db: Session, application: Application, property: Property, tenant: AppUser) -> Lease:
        terms = self.derive_terms(db, application, property, tenant)

        existing = lease_for_application(db, application_id=application.id)
        if existing is not None:
            raise LeaseCreationFailed(
                "A lease already exists for this application; the application was not approved again",
                details={"lease_id": existing.id},
            )

        try:
            ensure_no_lease_overlap(
                db,
                property_id=property.id,
                start_date=terms.start_date,
                end_date=terms.end_date,
            )
        except ValueError as e:
            raise LeaseCreationFailed(
                f"Lease could not be created ({e}); the application was not approved",
                details={"property_id": property.id},
            ) from e

        lease = Lease(
            property_id=property.id,
            tenant_id=tenant.id,
            landlord_id=property.landlord_id,
            listing_agent_id=terms.listing_agent_id,
            tenant_agent_id=terms.tenant_agent_id,
            application_id=application.id,
            start_date=terms.start_date,
            end_date=terms.end_date,
            monthly_rent=terms.monthly_rent,
            deposit_amount=terms.deposit_amount,
            status=LEASE_PENDING_PAYMENT,
            is_active=False,
            created_at=_utcnow(),
        )
        try:
            db.add(lease)
            db.commit()
            db.refresh(lease)
        except SQLAlchemyError as e:
            db.rollback()
            log.exception("lease write rejected", extra={"application_id": application.id})
            raise LeaseCreationFailed(details={"application_id": application.id}) from e

        log.info(
            "lease provisioned",
            extra={"application_id": application.id, "lease_id": lease.id, "property_id": property.id},
        )
        return lease

    def apply_occupancy(self, db: Session, property: Property, tenant_id: int) -> None:
        """Mark property and tenant profile OCCUPIED. Best-effort: failures are logged only."""
        try:
            property.status = OCCUPIED
            db.add(property)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            log.exception("failed to mark property occupied", extra={"property_id": property.id})

        try:
            profile = db.scalar(select(TenantProfile).where(TenantProfile.user_id == int(tenant_id)))
            if profile is None:
                profile = TenantProfile(user_id=int(tenant_id))
            profile.status = OCCUPIED
            profile.updated_at = _utcnow()
            db.add(profile)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            log.exception("failed to mark tenant profile occupied", extra={"user_id": tenant_id})
