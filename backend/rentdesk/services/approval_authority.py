# backend/rentdesk/services/approval_authority.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.approval_states import Authorization
from ..domain.audit import audit_write
from ..domain.errors import NotAuthorized
from ..domain.representation import landlord_agent_id
from ..models import AppUser, Property

log = logging.getLogger(__name__)

AGENT_ROLE = "agent"


def authorize(
    db: Session,
    *,
    approver_id: int,
    approver_role: str,
    property: Property,
    landlord: Optional[AppUser],
) -> Authorization:
    """
    Decide whether the approver may review applications for this property.

    An agent qualifies either as the property's assigned agent or as the agent
    representing the landlord. In the latter case, on an unassigned property,
    the returned Authorization carries ``pending_agent_id`` and the caller binds
    the agent in the same commit as the status change. Nothing is written here.
    Raises NotAuthorized when neither role holds.
    """
    approver_id = int(approver_id)
    is_landlord = int(property.landlord_id) == approver_id
    is_agent = property.agent_id is not None and int(property.agent_id) == approver_id

    represents_landlord = False
    if not is_agent and (approver_role or "").strip().lower() == AGENT_ROLE:
        landlord_id = int(landlord.id) if landlord is not None else int(property.landlord_id)
        represents_landlord = landlord_agent_id(db, landlord_id) == approver_id
        is_agent = represents_landlord

    if not (is_landlord or is_agent):
        raise NotAuthorized()

    pending_agent_id = approver_id if represents_landlord and property.agent_id is None else None
    return Authorization(is_landlord=is_landlord, is_agent=is_agent, pending_agent_id=pending_agent_id)


def bind_representing_agent(db: Session, *, property: Property, agent_id: int) -> None:
    """Assign the landlord's representing agent to an unassigned property. Does not commit."""
    property.agent_id = int(agent_id)
    db.add(property)
    audit_write(
        db,
        actor_user_id=int(agent_id),
        action="property.agent_autobind",
        entity_type="Property",
        entity_id=property.id,
        before={"agent_id": None},
        after={"agent_id": int(agent_id)},
    )
    log.info(
        "bound representing agent to property",
        extra={"property_id": property.id, "user_id": int(agent_id)},
    )
