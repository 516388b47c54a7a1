import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

# Qt must not try to open a display on CI.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ledger_console.api.client import ApiClient  # noqa: E402

BASE_URL = "http://ledger.test/api"


class FakeApi:
    """
    Route table for httpx.MockTransport.

    on("GET", "/customers/7/payment-summary", {...}) registers a JSON body;
    a callable receives the httpx.Request and returns (status, body).
    Every request is recorded in `calls` as (method, path, request).
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Tuple[str, str, httpx.Request]] = []

    def on(self, method: str, path: str, body: Any = None, *, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = body if callable(body) else (status, body)

    def paths(self, method: str = None) -> List[str]:
        return [p for m, p, _ in self.calls if method is None or m == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        self.calls.append((request.method, path, request))
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        status, body = route(request) if callable(route) else route
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def client(api):
    return ApiClient(BASE_URL, transport=httpx.MockTransport(api.handler))


@pytest.fixture
def summary_body() -> Callable[..., Dict[str, Any]]:
    """Factory for a flat payment-summary body; keyword overrides win."""

    def make(**overrides):
        body = {
            "customer_id": 7,
            "due_amount": 1300.0,
            "total_spent": 2500.0,
            "total_paid": 1200.0,
            "prepaid_amount": 200.0,
            "advance_balance": 200.0,
            "opening_due_amount": 0.0,
            "outstanding_invoices": [
                {
                    "invoice_id": 11,
                    "invoice_number": "INV-011",
                    "amount": 1000.0,
                    "due_amount": 1000.0,
                    "status": "issued",
                },
                {
                    "invoice_id": 12,
                    "invoice_number": "INV-012",
                    "amount": 1000.0,
                    "due_amount": 300.0,
                    "status": "partially_paid",
                },
            ],
            "advance_transactions": [
                {"id": 1, "transaction_type": "received", "amount": 500, "balance": 500},
                {"id": 2, "transaction_type": "used", "amount": 300, "balance": 200},
            ],
        }
        body.update(overrides)
        return body

    return make


@pytest.fixture
def invoice_rows() -> List[Dict[str, Any]]:
    """Sale invoices as returned by GET /invoices for customer 7."""
    return [
        {
            "id": 11,
            "invoice_number": "INV-011",
            "invoice_date": "2024-03-01",
            "total_amount": 1000.0,
            "status": "issued",
            "reference_type": "sale",
            "reference_id": 501,
            "metadata": {"customer": {"id": 7}},
        },
        {
            "id": 12,
            "invoice_number": "INV-012",
            "invoice_date": "2024-03-05",
            "total_amount": 1500.0,
            "status": "paid",
            "reference_type": "sale",
            "reference_id": 502,
            "metadata": {"customer": {"id": 7}},
        },
        {
            "id": 13,
            "invoice_number": "INV-013",
            "invoice_date": "2024-03-09",
            "total_amount": 400.0,
            "status": "cancelled",
            "metadata": {"customer": {"id": 7}},
        },
    ]
