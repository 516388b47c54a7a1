# api/repositories/items_repo.py
from __future__ import annotations

from typing import Any, Dict, Optional

from ..client import ApiClient


class ItemsRepo:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_item(self, item_id: int) -> Optional[Dict[str, Any]]:
        """GET /items/{id}; returns the `item` object or None."""
        data = await self.client.get(f"/items/{int(item_id)}")
        if not isinstance(data, dict):
            return None
        item = data.get("item")
        return item if isinstance(item, dict) else None
