# ledger_console/api/cache.py
"""
Explicit cache for GET requests.

The first caller for a key runs the fetcher; concurrent callers await the
same in-flight task; later callers get the stored result. A failed fetch
is evicted so the next call retries. Lifetime is whatever object owns the
cache (repositories receive it by injection).
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional


class RequestCache:
    def __init__(self) -> None:
        self._entries: Dict[str, "asyncio.Future[Any]"] = {}

    @staticmethod
    def make_key(path: str, extra: Optional[str] = None) -> str:
        return f"{path}::{extra}" if extra else path

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_fetch(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            entry = asyncio.ensure_future(fetcher())
            self._entries[key] = entry
        try:
            # shield: one cancelled waiter must not cancel the shared fetch
            return await asyncio.shield(entry)
        except asyncio.CancelledError:
            raise
        except Exception:
            if self._entries.get(key) is entry:
                del self._entries[key]
            raise

    def invalidate(self, prefix: Optional[str] = None) -> None:
        """Drop entries whose key starts with `prefix`; no prefix drops everything."""
        if not prefix:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()
