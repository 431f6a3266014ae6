# backend/rentdesk/services/payment_gateway.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy.orm import Session

from ..clients.checkout import CheckoutClient
from ..config import settings
from ..domain.distribution import compute_rent_distribution
from ..models import Lease, Payment

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResult:
    success: bool
    payment_url: Optional[str] = None
    payment_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    error: Optional[str] = None


class PaymentGateway(Protocol):
    def create_escrow_payment(
        self,
        db: Session,
        *,
        tenant_id: int,
        lease: Lease,
        monthly_rent: float,
        deposit_amount: float,
        method: Optional[str] = None,
    ) -> GatewayResult: ...


class EscrowGateway:
    """
    Records the escrow payment order (first month's rent + deposit, held in
    escrow) and obtains a checkout link for it.

    With a checkout provider configured the link comes from the provider;
    otherwise the built-in hosted checkout page is used.
    """

    def __init__(self, checkout: Optional[CheckoutClient] = None) -> None:
        self.checkout = checkout or CheckoutClient()

    def create_escrow_payment(
        self,
        db: Session,
        *,
        tenant_id: int,
        lease: Lease,
        monthly_rent: float,
        deposit_amount: float,
        method: Optional[str] = None,
    ) -> GatewayResult:
        distribution = compute_rent_distribution(
            rent_amount=monthly_rent,
            deposit_amount=deposit_amount,
            landlord_id=lease.landlord_id,
            listing_agent_id=lease.listing_agent_id,
            tenant_agent_id=lease.tenant_agent_id,
            platform_fee_rate=settings.platform_fee_rate,
            agent_commission_rate=settings.agent_commission_rate,
            currency=settings.currency,
        )

        payment = Payment(
            user_id=int(tenant_id),
            lease_id=lease.id,
            type="RENT",
            amount=distribution.total,
            currency=settings.currency,
            status="PENDING",
            escrow_status="HELD_IN_ESCROW",
            payment_method=method or ("checkout" if self.checkout.enabled() else "hosted"),
            description=f"Rent payment for lease {lease.id}",
            distribution_json=json.dumps(distribution.as_dict(), sort_keys=True),
            metadata_json=json.dumps({"leaseId": lease.id, "transferGroup": f"rent_{lease.id}"}),
            created_at=datetime.utcnow(),
        )
        db.add(payment)
        db.flush()

        if not self.checkout.enabled():
            url = f"{settings.public_app_url.rstrip('/')}/pay/checkout?orderId={payment.id}"
            payment.payment_url = url
            db.commit()
            return GatewayResult(success=True, payment_url=url, payment_id=str(payment.id))

        try:
            session = self.checkout.create_checkout(
                amount=distribution.total,
                currency=settings.currency,
                reference=f"LEASE-{lease.id}-PAY-{payment.id}",
                description=payment.description or "",
                metadata={"leaseId": lease.id, "paymentId": payment.id, "type": "RENT"},
            )
        except Exception as e:
            # Leave nothing behind for a failed checkout.
            db.rollback()
            log.warning("checkout provider call failed", exc_info=True, extra={"lease_id": lease.id})
            return GatewayResult(success=False, error=str(e))

        if not session.payment_url:
            db.rollback()
            return GatewayResult(success=False, error="checkout provider returned no redirect url")

        payment.transaction_id = session.intent_id
        payment.payment_url = session.payment_url
        db.commit()

        return GatewayResult(
            success=True,
            payment_url=session.payment_url,
            payment_intent_id=session.intent_id,
            payment_id=str(payment.id),
        )
