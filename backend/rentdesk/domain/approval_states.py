# backend/rentdesk/domain/approval_states.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import AgentReviewRequired, InvalidTransition

# -----------------------------------------------------------------------------
# Application approval state machine
# -----------------------------------------------------------------------------
# PENDING -> (UNDER_REVIEW) -> (AGENT_APPROVED) -> APPROVED
# any non-terminal state -> REJECTED | WITHDRAWN
#
# AGENT_APPROVED is only reachable when the property has an assigned agent,
# and is then the only legal predecessor of APPROVED.
# -----------------------------------------------------------------------------


class ApprovalStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    AGENT_APPROVED = "AGENT_APPROVED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    @property
    def reaches_final_approval(self) -> bool:
        """True when entering this status must provision a lease and escrow order."""
        return self in FINAL_APPROVAL_STATES


TERMINAL_STATES = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.WITHDRAWN})
FINAL_APPROVAL_STATES = frozenset({ApprovalStatus.APPROVED})

# Statuses a reviewer may request. AGENT_APPROVED is derived, never requested.
REQUESTABLE_STATES = frozenset(
    {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.WITHDRAWN, ApprovalStatus.UNDER_REVIEW}
)

_REVIEWABLE_FROM = frozenset({ApprovalStatus.PENDING, ApprovalStatus.UNDER_REVIEW})


@dataclass(frozen=True)
class Authorization:
    is_landlord: bool
    is_agent: bool
    # set when the approver qualifies only as the landlord's representing
    # agent and the property has no agent yet
    pending_agent_id: Optional[int] = None

    @property
    def allowed(self) -> bool:
        return self.is_landlord or self.is_agent


def parse_status(value: str) -> ApprovalStatus:
    try:
        return ApprovalStatus(str(value or "").strip().upper())
    except ValueError:
        raise InvalidTransition(f"unknown application status: {value!r}")


def next_status(
    current: ApprovalStatus,
    requested: ApprovalStatus,
    auth: Authorization,
    property_has_agent: bool,
) -> ApprovalStatus:
    """
    Map a requested status change onto the legal next status.

    Raises AgentReviewRequired when a landlord tries to approve ahead of the
    property's agent, InvalidTransition for anything else that is illegal
    (terminal source state, self-transition, non-requestable target).
    """
    if requested not in REQUESTABLE_STATES:
        raise InvalidTransition(f"{requested.value} cannot be requested directly")

    if current.is_terminal:
        raise InvalidTransition(f"application is already {current.value}")

    if requested == ApprovalStatus.APPROVED:
        if not property_has_agent:
            if current not in _REVIEWABLE_FROM:
                raise InvalidTransition(f"cannot approve from {current.value}")
            return ApprovalStatus.APPROVED

        # Landlord who is also the property's agent finalises an agent-approved application.
        if auth.is_landlord and current == ApprovalStatus.AGENT_APPROVED:
            return ApprovalStatus.APPROVED

        if auth.is_agent:
            if current == ApprovalStatus.AGENT_APPROVED:
                raise InvalidTransition("application is already agent-approved; awaiting landlord")
            return ApprovalStatus.AGENT_APPROVED

        if auth.is_landlord:
            raise AgentReviewRequired()

        raise InvalidTransition("approval requires the landlord or the property's agent")

    if requested == ApprovalStatus.UNDER_REVIEW and current != ApprovalStatus.PENDING:
        raise InvalidTransition(f"cannot move back to UNDER_REVIEW from {current.value}")

    if requested == current:
        raise InvalidTransition(f"application is already {current.value}")

    return requested
