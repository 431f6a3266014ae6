from __future__ import annotations

from rentdesk.domain.distribution import compute_rent_distribution


def _dist(**kw):
    base = dict(
        rent_amount=2000.0,
        deposit_amount=2000.0,
        landlord_id=1,
        listing_agent_id=None,
        tenant_agent_id=None,
        platform_fee_rate=0.05,
        agent_commission_rate=0.50,
        currency="USD",
    )
    base.update(kw)
    return compute_rent_distribution(**base)


def _parts_sum(d) -> float:
    return round(d.platform_fee + d.listing_agent_fee + d.tenant_agent_fee + d.landlord_net + d.deposit, 2)


def test_no_agents_landlord_keeps_rent_minus_platform_fee():
    d = _dist()
    assert d.total == 4000.0
    assert d.platform_fee == 100.0
    assert d.listing_agent_fee == 0.0
    assert d.tenant_agent_fee == 0.0
    assert d.landlord_net == 1900.0
    assert _parts_sum(d) == d.total


def test_single_listing_agent_takes_full_commission():
    d = _dist(listing_agent_id=7)
    assert d.listing_agent_fee == 1000.0
    assert d.tenant_agent_fee == 0.0
    assert d.landlord_net == 900.0


def test_both_agents_split_commission():
    d = _dist(rent_amount=1999.99, deposit_amount=500.0, listing_agent_id=7, tenant_agent_id=8)
    assert round(d.listing_agent_fee + d.tenant_agent_fee, 2) == round(1999.99 * 0.5, 2)
    assert abs(d.listing_agent_fee - d.tenant_agent_fee) <= 0.011
    assert _parts_sum(d) == d.total


def test_tenant_agent_only():
    d = _dist(tenant_agent_id=8)
    assert d.tenant_agent_fee == 1000.0
    assert d.listing_agent_fee == 0.0
    assert d.as_dict()["tenant_agent_id"] == 8
