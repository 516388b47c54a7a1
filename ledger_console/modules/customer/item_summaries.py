# ledger_console/modules/customer/item_summaries.py
"""
Human-readable line-item summaries for sale invoices ("8 bags paidaar cement, 2 pcs tap").

Resolution order per invoice:
  1. items embedded in invoice metadata (metadata.sale.items or metadata.items);
     missing item names/brands are looked up once per item id
  2. otherwise GET /sales/{id}, at most once per sale id for the resolver's lifetime

Fetches run concurrently. A failed fetch is logged and skipped; the rest of
the batch still resolves.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from ...utils.helpers import fmt_quantity
from ...utils.validators import to_float

_log = logging.getLogger(__name__)


def _int_or_none(v: Any) -> Optional[int]:
    if v in (None, "") or isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def format_sale_items(items: Optional[List[Dict[str, Any]]], item_info: Optional[Dict[int, Dict[str, Any]]] = None) -> str:
    """
    "qty [unit] [brand] name" per line, comma-joined.
    Falls back to looked-up item info, then to "Item #<id>".
    """
    if not items:
        return ""
    item_info = item_info or {}
    parts: List[str] = []
    for line in items:
        if not isinstance(line, dict):
            continue
        item_id = _int_or_none(line.get("item_id"))
        embedded = line.get("item") if isinstance(line.get("item"), dict) else {}
        known = item_info.get(item_id, {}) if item_id is not None else {}

        name = embedded.get("name") or known.get("name") or f"Item #{item_id if item_id is not None else ''}".strip()
        brand = embedded.get("brand") or known.get("brand")
        unit = line.get("unit") or embedded.get("primary_unit") or known.get("primary_unit") or ""

        words = [fmt_quantity(to_float(line.get("quantity")))]
        if unit:
            words.append(str(unit))
        if brand:
            words.append(str(brand))
        words.append(str(name))
        text = " ".join(words).strip()
        if text:
            parts.append(text)
    return ", ".join(parts)


class InvoiceItemSummaryResolver:
    """
    Holds the set of sale ids already fetched (or satisfied from metadata) and
    the looked-up item info. Share one resolver per customer view; create a new
    one (or call reset()) to forget both.
    """

    def __init__(self, sales_repo, items_repo=None, fetched_sale_ids: Optional[Set[int]] = None):
        self.sales_repo = sales_repo
        self.items_repo = items_repo
        self.fetched_sale_ids: Set[int] = fetched_sale_ids if fetched_sale_ids is not None else set()
        self._item_info: Dict[int, Dict[str, Any]] = {}
        self._item_lookups: Dict[int, "asyncio.Future[None]"] = {}

    def reset(self) -> None:
        self.fetched_sale_ids.clear()
        self._item_info.clear()
        self._item_lookups.clear()

    # ---- internals ----

    async def _lookup_item(self, item_id: int) -> None:
        try:
            item = await self.items_repo.get_item(item_id)
        except Exception as e:
            _log.warning("Failed to fetch item %s: %s", item_id, e)
            return
        if item:
            self._item_info[item_id] = {
                k: item.get(k) for k in ("name", "brand", "primary_unit") if item.get(k) is not None
            }

    async def _fill_item_info(self, items: List[Dict[str, Any]]) -> None:
        if self.items_repo is None:
            return
        pending: List["asyncio.Future[None]"] = []
        for line in items:
            if not isinstance(line, dict):
                continue
            item_id = _int_or_none(line.get("item_id"))
            embedded = line.get("item") if isinstance(line.get("item"), dict) else {}
            if item_id is None or (embedded.get("name") and "brand" in embedded):
                continue
            # One lookup per item id; later invoices wait on the same task.
            task = self._item_lookups.get(item_id)
            if task is None:
                task = asyncio.ensure_future(self._lookup_item(item_id))
                self._item_lookups[item_id] = task
            if not task.done():
                pending.append(task)
        if pending:
            await asyncio.gather(*pending)

    async def _resolve_one(self, invoice: Dict[str, Any], out: Dict[int, str]) -> None:
        invoice_id = _int_or_none(invoice.get("id"))
        if invoice_id is None:
            return
        meta = invoice.get("metadata") if isinstance(invoice.get("metadata"), dict) else {}
        meta_sale = meta.get("sale") if isinstance(meta.get("sale"), dict) else {}
        meta_items = meta_sale.get("items") or meta.get("items")
        sale_id = (
            _int_or_none(meta.get("sale_id"))
            or _int_or_none(meta_sale.get("id"))
            or _int_or_none(invoice.get("reference_id"))
        )

        if isinstance(meta_items, list) and meta_items:
            await self._fill_item_info(meta_items)
            text = format_sale_items(meta_items, self._item_info)
            if text:
                out[invoice_id] = text
            if sale_id is not None:
                self.fetched_sale_ids.add(sale_id)
            return

        if sale_id is None or sale_id in self.fetched_sale_ids:
            return
        # Mark before awaiting so concurrent invoices for the same sale skip it.
        self.fetched_sale_ids.add(sale_id)
        try:
            sale = await self.sales_repo.get_sale(sale_id)
        except Exception as e:
            _log.warning("Failed to fetch sale items for invoice %s (sale %s): %s", invoice_id, sale_id, e)
            return
        items = (sale or {}).get("items")
        if isinstance(items, list):
            await self._fill_item_info(items)
        text = format_sale_items(items if isinstance(items, list) else None, self._item_info)
        if text:
            out[invoice_id] = text

    # ---- API ----

    async def resolve(self, invoices: Iterable[Dict[str, Any]]) -> Dict[int, str]:
        """Return {invoice_id: summary} for the invoices that could be resolved."""
        sale_invoices = [
            inv for inv in (invoices or [])
            if isinstance(inv, dict) and (inv.get("reference_type") == "sale" or inv.get("reference_id"))
        ]
        out: Dict[int, str] = {}
        await asyncio.gather(*(self._resolve_one(inv, out) for inv in sale_invoices))
        return out
