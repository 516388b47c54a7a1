# api/repositories/cheques_repo.py
from __future__ import annotations

from typing import Any, Optional

from ..client import ApiClient


class ChequesRepo:
    """Cheque lifecycle on a recorded customer payment (pending -> cleared | bounced)."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def clear_cheque(self, payment_id: int, *, deposit_account_id: int, cleared_date: str) -> Any:
        return await self.client.post(
            f"/cheques/{int(payment_id)}/clear",
            {"deposit_account_id": int(deposit_account_id), "cleared_date": cleared_date},
        )

    async def bounce_cheque(self, payment_id: int, *, notes: str, bounced_date: Optional[str] = None) -> Any:
        body = {"notes": notes}
        if bounced_date:
            body["bounced_date"] = bounced_date
        return await self.client.post(f"/cheques/{int(payment_id)}/bounce", body)
