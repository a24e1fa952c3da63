from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from .gateway import BasePaymentGateway


class StubGateway(BasePaymentGateway):
    """Payment gateway stub: hands out a local checkout link and trusts webhooks."""

    def create_checkout(
        self,
        booking_id: int,
        amount: float,
        currency: str,
        description: str,
        return_url: str,
    ) -> dict[str, Any]:
        query = urlencode({"booking_id": booking_id, "amount": f"{amount:.2f}", "currency": currency})
        return {
            "booking_id": booking_id,
            "amount": amount,
            "currency": currency,
            "status": "pending",
            "checkout_url": f"{self.settings.app_base_url}/checkout/stub?{query}",
            "return_url": return_url,
            "description": description,
        }

    def parse_webhook(self, data: dict[str, Any]) -> dict[str, Any]:
        booking_id = data.get("booking_id")
        if booking_id is None:
            booking_id = (data.get("metadata") or {}).get("booking_id")
        return {
            "booking_id": int(booking_id) if booking_id is not None else None,
            "status": data.get("status", "succeeded"),
            "provider_payment_id": data.get("provider_payment_id"),
        }
