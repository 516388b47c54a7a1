# api/repositories/invoices_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..client import ApiClient


def _invoice_customer_id(invoice: Dict[str, Any]) -> Optional[int]:
    meta = invoice.get("metadata")
    if not isinstance(meta, dict):
        return None
    customer = meta.get("customer")
    raw = customer.get("id") if isinstance(customer, dict) else meta.get("customer_id")
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


class InvoicesRepo:
    def __init__(self, client: ApiClient):
        self.client = client

    async def list_invoices(
        self,
        *,
        invoice_type: str = "sale",
        customer_id: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        GET /invoices filtered by type (and customer, server-side when supported).
        The customer filter is re-applied locally against invoice metadata since
        not every backend honours the query parameter.
        """
        params: Dict[str, Any] = {"invoice_type": invoice_type}
        if customer_id is not None:
            params["customer_id"] = int(customer_id)
        if per_page:
            params["per_page"] = int(per_page)
        data = await self.client.get("/invoices", params=params)

        rows: Any = data
        if isinstance(data, dict):
            rows = data.get("invoices", data.get("data", []))
        invoices = [r for r in rows if isinstance(r, dict)] if isinstance(rows, list) else []

        if customer_id is None:
            return invoices
        return [inv for inv in invoices if _invoice_customer_id(inv) == int(customer_id)]
