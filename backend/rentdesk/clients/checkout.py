# backend/rentdesk/clients/checkout.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config import settings


@dataclass(frozen=True)
class CheckoutSession:
    payment_url: Optional[str]
    intent_id: Optional[str]
    raw: dict[str, Any]


class CheckoutClient:
    """
    Hosted-checkout provider. Creates a manual-capture checkout so funds are
    held until the lease check-in releases them.

    Unlike read-only clients, errors propagate (httpx.HTTPError, including
    timeouts): a failed checkout must abort and compensate the approval.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base = (base_url or settings.checkout_base_url or "").rstrip("/")
        self.api_key = api_key if api_key is not None else settings.checkout_api_key
        self.timeout = float(timeout if timeout is not None else settings.checkout_timeout_seconds)
        self.transport = transport

    def enabled(self) -> bool:
        return bool(self.base)

    def create_checkout(
        self,
        *,
        amount: float,
        currency: str,
        reference: str,
        description: str,
        metadata: dict[str, Any],
    ) -> CheckoutSession:
        url = f"{self.base}/checkouts"
        payload: dict[str, Any] = {
            "amount": {"value": round(float(amount), 2), "currency": currency},
            "captureMethod": "manual",
            "requestReferenceNumber": reference,
            "description": description,
            "metadata": metadata,
            "redirectUrl": {
                "success": f"{settings.public_app_url}/dashboard/tenant/payments?status=success",
                "failure": f"{settings.public_app_url}/dashboard/tenant/payments?status=failure",
                "cancel": f"{settings.public_app_url}/dashboard/tenant/payments?status=cancel",
            },
        }

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            r = client.post(url, json=payload, headers=headers)
            r.raise_for_status()
            data = r.json()

        return CheckoutSession(
            payment_url=data.get("redirectUrl") or data.get("checkoutUrl"),
            intent_id=data.get("checkoutId") or data.get("id"),
            raw=data,
        )
