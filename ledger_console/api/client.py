# ledger_console/api/client.py
"""
Thin async JSON client for the remote business API.

Every call opens its own httpx.AsyncClient, so an ApiClient can be shared
between event loops (tests, Qt slots running asyncio.run, the CLI).
Non-2xx responses raise ApiError; network failures raise ApiError(status=0).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

_log = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised for any failed API request. `data` is the decoded response body (if any)."""

    def __init__(self, message: str, status: int, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


def _decode_body(res: httpx.Response) -> Any:
    text = res.text
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _error_message(status: int, data: Any) -> str:
    message = f"API request failed with status {status}"
    if isinstance(data, dict):
        candidate = data.get("message") or data.get("error")
        if candidate:
            message = str(candidate)
    return message


class ApiClient:
    def __init__(
        self,
        base_url: str,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._headers = {"Accept": "application/json", **dict(headers or {})}
        # No client-side timeout by default; the API's own policy governs.
        self._timeout = httpx.Timeout(timeout)

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path if path.startswith('/') else '/' + path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Any:
        url = self._url(path)
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if body is not None:
            kwargs["json"] = body

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                headers=self._headers,
                timeout=self._timeout,
            ) as client:
                res = await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            _log.error("%s %s failed: %s", method, url, e)
            raise ApiError(f"Could not reach the server: {e}", 0, None) from e

        data = _decode_body(res)
        if res.is_error:
            raise ApiError(_error_message(res.status_code, data), res.status_code, data)
        return data

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body=body)
