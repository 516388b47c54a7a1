# ledger_console/modules/customer/__init__.py
"""
Customer account package exports.

Widgets (CustomerAccountView, CustomerAccountDetails, table models and
CustomerAccountModule) live in their own modules and are imported from
there, so the ledger logic can be used without touching Qt.
"""

from .controller import CustomerAccountController
from .estimator import estimate_from_invoices
from .item_summaries import InvoiceItemSummaryResolver, format_sale_items
from .summary import (
    extract_payment_summary,
    extract_payments,
    has_any_payment_data,
    normalize_summary,
    sort_payments,
)

__all__ = [
    "CustomerAccountController",
    "estimate_from_invoices",
    "InvoiceItemSummaryResolver",
    "format_sale_items",
    "extract_payment_summary",
    "extract_payments",
    "has_any_payment_data",
    "normalize_summary",
    "sort_payments",
]
