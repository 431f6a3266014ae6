# backend/rentdesk/services/escrow_payments.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse

from sqlalchemy.orm import Session

from ..domain.errors import PaymentProvisioningFailed
from ..models import AppUser, Lease
from .payment_gateway import EscrowGateway, GatewayResult, PaymentGateway

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscrowOrder:
    payment_url: Optional[str]
    payment_id: Optional[str]


def _order_id_from_url(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        qs = parse_qs(urlparse(url).query)
    except ValueError:
        return None
    for key in ("orderId", "order_id", "paymentId"):
        vals = qs.get(key)
        if vals and vals[0]:
            return vals[0]
    return None


def extract_payment_id(result: GatewayResult) -> Optional[str]:
    """Explicit id, then the transaction intent id, then an order id parsed from the url."""
    return result.payment_id or result.payment_intent_id or _order_id_from_url(result.payment_url)


class EscrowPaymentCoordinator:
    def __init__(self, gateway: Optional[PaymentGateway] = None) -> None:
        self.gateway = gateway or EscrowGateway()

    def create_escrow_order(
        self,
        db: Session,
        *,
        tenant: AppUser,
        lease: Lease,
        monthly_rent: float,
        deposit_amount: float,
        method: Optional[str] = None,
    ) -> EscrowOrder:
        try:
            result = self.gateway.create_escrow_payment(
                db,
                tenant_id=tenant.id,
                lease=lease,
                monthly_rent=monthly_rent,
                deposit_amount=deposit_amount,
                method=method,
            )
        except Exception as e:
            log.exception("escrow payment gateway raised", extra={"lease_id": lease.id})
            raise PaymentProvisioningFailed(details={"lease_id": lease.id, "reason": str(e)}) from e

        if not result.success:
            log.warning(
                "escrow payment gateway refused order: %s",
                result.error,
                extra={"lease_id": lease.id},
            )
            raise PaymentProvisioningFailed(details={"lease_id": lease.id, "reason": result.error or "unknown"})

        order = EscrowOrder(payment_url=result.payment_url, payment_id=extract_payment_id(result))
        log.info("escrow order created", extra={"lease_id": lease.id, "payment_id": order.payment_id})
        return order
