# backend/rentdesk/domain/distribution.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Optional


def _r2(x: float) -> float:
    return round(float(x), 2)


@dataclass(frozen=True)
class RentDistribution:
    """
    How the first escrow payment is split once released.

    Only the rent portion is ever released; the deposit stays in escrow until
    the lease ends, so:
        platform_fee + listing_agent_fee + tenant_agent_fee + landlord_net + deposit == total
    """

    total: float
    rent: float
    deposit: float
    platform_fee: float
    listing_agent_fee: float
    tenant_agent_fee: float
    landlord_net: float
    currency: str
    landlord_id: int
    listing_agent_id: Optional[int] = None
    tenant_agent_id: Optional[int] = None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_rent_distribution(
    *,
    rent_amount: float,
    deposit_amount: float,
    landlord_id: int,
    listing_agent_id: Optional[int],
    tenant_agent_id: Optional[int],
    platform_fee_rate: float,
    agent_commission_rate: float,
    currency: str,
) -> RentDistribution:
    rent = _r2(rent_amount)
    deposit = _r2(deposit_amount)

    platform_fee = _r2(rent * platform_fee_rate)

    listing_fee = 0.0
    tenant_fee = 0.0
    if listing_agent_id or tenant_agent_id:
        commission = _r2(rent * agent_commission_rate)
        if listing_agent_id and tenant_agent_id:
            listing_fee = _r2(commission / 2)
            tenant_fee = _r2(commission - listing_fee)
        elif listing_agent_id:
            listing_fee = commission
        else:
            tenant_fee = commission

    landlord_net = _r2(rent - platform_fee - listing_fee - tenant_fee)

    return RentDistribution(
        total=_r2(rent + deposit),
        rent=rent,
        deposit=deposit,
        platform_fee=platform_fee,
        listing_agent_fee=listing_fee,
        tenant_agent_fee=tenant_fee,
        landlord_net=landlord_net,
        currency=currency,
        landlord_id=int(landlord_id),
        listing_agent_id=listing_agent_id,
        tenant_agent_id=tenant_agent_id,
    )
