# api/repositories/customer_payments_repo.py
from __future__ import annotations

from typing import Any, Dict, Optional

from ..client import ApiClient


class CustomerPaymentsRepo:
    """
    Customer payments resource.

      - list_payments(): raw body (bare list, or nested under data/payments);
        see modules.customer.summary.extract_payments().
      - create_payment(): POST a request built by transaction_builder.build_request().
        Advance payments may come back with auto_applied_payments/advance_summary.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def list_payments(self, *, customer_id: int, per_page: Optional[int] = None) -> Any:
        params: Dict[str, Any] = {"customer_id": int(customer_id)}
        if per_page:
            params["per_page"] = int(per_page)
        return await self.client.get("/customer-payments", params=params)

    async def create_payment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.client.post("/customer-payments", payload)
        return data if isinstance(data, dict) else {}
