# backend/rentdesk/domain/errors.py
from __future__ import annotations

from typing import Any, Optional


class WorkflowError(Exception):
    """
    Base for every failure the approval workflow surfaces to a caller.

    kind        machine-readable error kind (returned as "error")
    status_code HTTP status the API layer responds with
    """

    kind = "WorkflowError"
    status_code = 500
    default_message = "Approval workflow failed"

    def __init__(self, message: Optional[str] = None, *, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


class NotAuthenticated(WorkflowError):
    kind = "NotAuthenticated"
    status_code = 401
    default_message = "Not authenticated"


class NotFound(WorkflowError):
    kind = "NotFound"
    status_code = 404
    default_message = "Not found"


class NotAuthorized(WorkflowError):
    kind = "NotAuthorized"
    status_code = 403
    default_message = "Not authorized to review this application"


class AgentReviewRequired(WorkflowError):
    kind = "AgentReviewRequired"
    status_code = 403
    default_message = "The property's agent must approve this application before the landlord can"


class InvalidTransition(WorkflowError):
    kind = "InvalidTransition"
    status_code = 409
    default_message = "Status change is not allowed from the application's current status"


class ConcurrentModification(WorkflowError):
    kind = "ConcurrentModification"
    status_code = 409
    default_message = "Application is being reviewed by another request; reload and retry"


class InvalidPrice(WorkflowError):
    kind = "InvalidPrice"
    status_code = 400
    default_message = "Property price must be greater than zero before a lease can be created"


class ProvisioningError(WorkflowError):
    """Failures after a committed write; the caller sees them only after compensation ran."""

    status_code = 500


class LeaseCreationFailed(ProvisioningError):
    kind = "LeaseCreationFailed"
    default_message = "Lease could not be created; the application was not approved"


class PaymentProvisioningFailed(ProvisioningError):
    kind = "PaymentProvisioningFailed"
    default_message = (
        "Escrow payment could not be created; the lease was cancelled and the application was not approved"
    )


class NotificationFailed(WorkflowError):
    """Raised by notification delivery; always swallowed by the workflow."""

    kind = "NotificationFailed"
    default_message = "Notification could not be delivered"
