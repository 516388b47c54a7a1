# api/repositories/accounts_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from ..cache import RequestCache
from ..client import ApiClient
from ...constants import (
    LOSS_ACCOUNT_ROOT_TYPE,
    PAYMENT_ACCOUNT_KEYWORDS,
    PAYMENT_ACCOUNT_ROOT_TYPE,
)


class AccountsRepo:
    """
    Chart-of-accounts lookups for the payment/loss account pickers.
    Responses are cached per query string in the injected RequestCache.
    """

    def __init__(self, client: ApiClient, cache: Optional[RequestCache] = None, *, company_id: int = 1):
        self.client = client
        self.cache = cache if cache is not None else RequestCache()
        self.company_id = company_id

    async def list_accounts(
        self,
        *,
        root_type: Optional[str] = None,
        is_group: Optional[bool] = None,
        per_page: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"company_id": self.company_id}
        if root_type:
            params["root_type"] = root_type
        if is_group is not None:
            params["is_group"] = "1" if is_group else "0"
        if per_page:
            params["per_page"] = int(per_page)
        path = f"/accounts?{urlencode(params)}"

        data = await self.cache.get_or_fetch(
            RequestCache.make_key(path),
            lambda: self.client.get("/accounts", params=params),
        )
        rows = data.get("data", []) if isinstance(data, dict) else data
        return [r for r in rows if isinstance(r, dict)] if isinstance(rows, list) else []

    async def list_payment_accounts(self, per_page: Optional[int] = None) -> List[Dict[str, Any]]:
        """Non-group asset accounts whose name mentions cash or bank."""
        rows = await self.list_accounts(root_type=PAYMENT_ACCOUNT_ROOT_TYPE, is_group=False, per_page=per_page)
        return [
            acc for acc in rows
            if any(k in str(acc.get("name", "")).lower() for k in PAYMENT_ACCOUNT_KEYWORDS)
        ]

    async def list_loss_accounts(self, per_page: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self.list_accounts(root_type=LOSS_ACCOUNT_ROOT_TYPE, is_group=False, per_page=per_page)

    def invalidate(self) -> None:
        self.cache.invalidate("/accounts")
