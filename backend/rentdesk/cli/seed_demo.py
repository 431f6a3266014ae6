# backend/rentdesk/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import AppUser, Application, Property


@dataclass(frozen=True)
class SeedResult:
    landlord_id: int
    agent_id: Optional[int]
    tenant_id: int
    property_id: int
    application_id: int


def get_or_create_user(db: Session, email: str, name: str, role: str) -> AppUser:
    row = db.scalar(select(AppUser).where(AppUser.email == email))
    if row:
        return row
    row = AppUser(email=email, name=name, role=role)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def seed_demo(
    db: Session,
    *,
    prefix: str = "demo",
    with_agent: bool = True,
    price: float = 2400.0,
    deposit: Optional[float] = None,
) -> SeedResult:
    """Landlord, optional listing agent, tenant, one listed property and a PENDING application."""
    landlord = get_or_create_user(db, f"{prefix}-landlord@rentdesk.local", "Demo Landlord", "landlord")
    agent = get_or_create_user(db, f"{prefix}-agent@rentdesk.local", "Demo Agent", "agent") if with_agent else None
    tenant = get_or_create_user(db, f"{prefix}-tenant@rentdesk.local", "Demo Tenant", "tenant")

    prop = Property(
        landlord_id=landlord.id,
        agent_id=agent.id if agent is not None else None,
        title=f"{prefix.title()} 2BR near the park",
        price=price,
        deposit=deposit,
        status="AVAILABLE",
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)

    app_row = Application(
        tenant_id=tenant.id,
        property_id=prop.id,
        status="PENDING",
        monthly_income=price * 3.5,
        credit_score=720,
    )
    db.add(app_row)
    db.commit()
    db.refresh(app_row)

    return SeedResult(
        landlord_id=int(landlord.id),
        agent_id=int(agent.id) if agent is not None else None,
        tenant_id=int(tenant.id),
        property_id=int(prop.id),
        application_id=int(app_row.id),
    )
