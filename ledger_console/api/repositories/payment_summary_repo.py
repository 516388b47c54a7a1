# api/repositories/payment_summary_repo.py
from __future__ import annotations

from typing import Any

from ..client import ApiClient


class PaymentSummaryRepo:
    """
    GET /customers/{id}/payment-summary

    The response shape varies between backend versions; callers pass the raw
    body to modules.customer.summary.normalize_summary().
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_summary(self, customer_id: int) -> Any:
        return await self.client.get(f"/customers/{int(customer_id)}/payment-summary")
