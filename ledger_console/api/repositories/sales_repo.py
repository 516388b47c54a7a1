# api/repositories/sales_repo.py
from __future__ import annotations

from typing import Any, Dict, Optional

from ..client import ApiClient


class SalesRepo:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_sale(self, sale_id: int) -> Optional[Dict[str, Any]]:
        """GET /sales/{id}; accepts both {"sale": {...}} and a bare sale object."""
        data = await self.client.get(f"/sales/{int(sale_id)}")
        if not isinstance(data, dict):
            return None
        sale = data.get("sale")
        return sale if isinstance(sale, dict) else data
