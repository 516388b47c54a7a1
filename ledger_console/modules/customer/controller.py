from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from ...api.cache import RequestCache
from ...api.client import ApiClient, ApiError
from ...api.repositories import (
    AccountsRepo,
    ChequesRepo,
    CustomerPaymentsRepo,
    InvoicesRepo,
    ItemsRepo,
    PaymentSummaryRepo,
    SalesRepo,
)
from ...config import Settings
from ...constants import (
    DEFAULT_CURRENCY,
    DEFAULT_PAGE_SIZE,
    INVOICE_PAYMENT,
    TAB_CUSTOMER_PAYMENTS,
    TAB_TRANSACTIONS,
)
from ..payments.customer_payments import submission
from ..payments.customer_payments.auto_apply import SubmitOutcome
from ..payments.customer_payments.models import AccountSummary
from ..payments.customer_payments.submission import ActionResult
from ..payments.customer_payments.transaction_builder import PaymentFormState
from .estimator import estimate_from_invoices
from .item_summaries import InvoiceItemSummaryResolver
from .summary import extract_payments, has_any_payment_data, normalize_summary, sort_payments

_log = logging.getLogger(__name__)

Notify = Callable[[str, str], None]   # (message, level: 'success' | 'error' | 'info')


class CustomerAccountController:
    """
    Account state for one customer, without any widgets.

    Key behavior:
      - load_tab() fetches what the tab needs; the fetches are independent
        and may finish in any order.
      - effective_summary() is the server summary when it parsed, else the
        estimate built from the invoice list.
      - record_payment() awaits the submission before any refresh starts.
        An advance payment that was auto-applied is held in
        pending_advance until dismiss_advance_summary(), which refreshes.
      - teardown() sets `cancelled`; every await is followed by a check so a
        late response never writes into a closed view.
    """

    def __init__(
        self,
        customer_id: int,
        *,
        summary_repo: PaymentSummaryRepo,
        payments_repo: CustomerPaymentsRepo,
        invoices_repo: InvoicesRepo,
        accounts_repo: AccountsRepo,
        sales_repo: SalesRepo,
        items_repo: Optional[ItemsRepo] = None,
        cheques_repo: Optional[ChequesRepo] = None,
        opening_due_amount: float = 0.0,
        currency: str = DEFAULT_CURRENCY,
        page_size: int = DEFAULT_PAGE_SIZE,
        notify: Optional[Notify] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.customer_id = int(customer_id)
        self.summary_repo = summary_repo
        self.payments_repo = payments_repo
        self.invoices_repo = invoices_repo
        self.accounts_repo = accounts_repo
        self.cheques_repo = cheques_repo
        self.item_resolver = InvoiceItemSummaryResolver(sales_repo, items_repo)
        self.opening_due_amount = float(opening_due_amount or 0.0)
        self.currency = currency
        self.page_size = page_size
        self._notify = notify
        self._on_change = on_change

        self.active_tab: Optional[str] = None
        self.summary: Optional[AccountSummary] = None
        self.payments: List[Dict[str, Any]] = []
        self.invoices: List[Dict[str, Any]] = []
        self.item_summaries: Dict[int, str] = {}
        self.payment_accounts: List[Dict[str, Any]] = []
        self.loss_accounts: List[Dict[str, Any]] = []
        self.pending_advance: Optional[SubmitOutcome] = None
        self.cancelled = False

    @classmethod
    def from_settings(
        cls,
        customer_id: int,
        settings: Settings,
        *,
        client: Optional[ApiClient] = None,
        cache: Optional[RequestCache] = None,
        **kwargs: Any,
    ) -> "CustomerAccountController":
        client = client or ApiClient(settings.api_base_url)
        return cls(
            customer_id,
            summary_repo=PaymentSummaryRepo(client),
            payments_repo=CustomerPaymentsRepo(client),
            invoices_repo=InvoicesRepo(client),
            accounts_repo=AccountsRepo(client, cache, company_id=settings.company_id),
            sales_repo=SalesRepo(client),
            items_repo=ItemsRepo(client),
            cheques_repo=ChequesRepo(client),
            currency=settings.currency,
            page_size=settings.page_size,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Notifications
    # ------------------------------------------------------------------ #

    def _say(self, message: Optional[str], level: str) -> None:
        if message and self._notify is not None and not self.cancelled:
            self._notify(message, level)

    def _changed(self) -> None:
        if self._on_change is not None and not self.cancelled:
            self._on_change()

    def bind(self, *, notify: Optional[Notify] = None, on_change: Optional[Callable[[], None]] = None) -> None:
        if notify is not None:
            self._notify = notify
        if on_change is not None:
            self._on_change = on_change

    def teardown(self) -> None:
        self.cancelled = True

    # ------------------------------------------------------------------ #
    # Loading
    # ------------------------------------------------------------------ #

    async def load_tab(self, tab: str) -> None:
        self.active_tab = tab
        if tab == TAB_CUSTOMER_PAYMENTS:
            await asyncio.gather(self.refresh_summary(), self.refresh_payments(), self.refresh_invoices())
        elif tab == TAB_TRANSACTIONS:
            await asyncio.gather(self.refresh_invoices(), self.refresh_payments())

    async def refresh_summary(self) -> None:
        try:
            raw = await self.summary_repo.get_summary(self.customer_id)
        except ApiError as e:
            _log.error("Failed to fetch payment summary for customer %s: %s", self.customer_id, e)
            # 404: the endpoint is not deployed; the estimator covers it silently
            if e.status != 404:
                self._say("Failed to load payment summary", "error")
            summary = None
        else:
            summary = normalize_summary(raw, opening_due_amount=self.opening_due_amount)
        if self.cancelled:
            return
        self.summary = summary
        self._changed()

    async def refresh_payments(self) -> None:
        try:
            raw = await self.payments_repo.list_payments(customer_id=self.customer_id, per_page=self.page_size)
            payments = sort_payments(extract_payments(raw))
        except ApiError as e:
            _log.error("Failed to fetch customer payments for %s: %s", self.customer_id, e)
            payments = []
        if self.cancelled:
            return
        self.payments = payments
        self._changed()

    async def refresh_invoices(self) -> None:
        try:
            invoices = await self.invoices_repo.list_invoices(
                customer_id=self.customer_id, per_page=self.page_size
            )
        except ApiError as e:
            _log.error("Failed to fetch invoices for customer %s: %s", self.customer_id, e)
            invoices = []
        if self.cancelled:
            return
        self.invoices = invoices
        self._changed()

        found = await self.item_resolver.resolve(invoices)
        if self.cancelled or not found:
            return
        self.item_summaries.update(found)
        self._changed()

    async def load_accounts(self) -> None:
        """Payment and loss-account pickers. Cached by the accounts repo."""
        try:
            payment_accounts, loss_accounts = await asyncio.gather(
                self.accounts_repo.list_payment_accounts(per_page=self.page_size),
                self.accounts_repo.list_loss_accounts(per_page=self.page_size),
            )
        except ApiError as e:
            _log.error("Failed to fetch accounts: %s", e)
            self._say("Failed to load accounts", "error")
            return
        if self.cancelled:
            return
        self.payment_accounts = payment_accounts
        self.loss_accounts = loss_accounts
        self._changed()

    # ------------------------------------------------------------------ #
    # Derived state
    # ------------------------------------------------------------------ #

    def effective_summary(self) -> AccountSummary:
        if self.summary is not None:
            return self.summary
        return estimate_from_invoices(
            self.invoices,
            customer_id=self.customer_id,
            opening_due_amount=self.opening_due_amount,
        )

    def has_payment_data(self) -> bool:
        return has_any_payment_data(self.effective_summary(), self.payments)

    def new_payment_form(self, payment_type: str = INVOICE_PAYMENT) -> PaymentFormState:
        form = PaymentFormState(self.effective_summary(), payment_type=payment_type)
        form.apply_default_account(self.payment_accounts)
        return form

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    async def refresh_after_payment(self) -> None:
        await asyncio.gather(self.refresh_summary(), self.refresh_payments(), self.refresh_invoices())

    async def record_payment(self, payload: Dict[str, Any]) -> ActionResult:
        result = await submission.submit_payment(self.payments_repo, payload, currency=self.currency)
        if self.cancelled:
            return result
        if not result.success:
            self._say(result.message, "error")
            return result

        self._say(result.message, "success")
        if result.outcome is not None and result.outcome.hold_open:
            self.pending_advance = result.outcome
            self._changed()
            return result
        await self.refresh_after_payment()
        return result

    async def submit_form(self, form: PaymentFormState) -> ActionResult:
        """Validate and submit. Validation failures leave form.errors set and send nothing."""
        payload = form.build(self.customer_id)
        if payload is None:
            return ActionResult(success=False, message="Please correct the highlighted fields.")
        return await self.record_payment(payload)

    async def dismiss_advance_summary(self) -> None:
        self.pending_advance = None
        self._changed()
        await self.refresh_after_payment()

    async def clear_cheque(
        self, payment_id: int, *, deposit_account_id: Optional[int], cleared_date: Optional[str] = None
    ) -> ActionResult:
        result = await submission.clear_cheque(
            self.cheques_repo, payment_id, deposit_account_id=deposit_account_id, cleared_date=cleared_date
        )
        if self.cancelled:
            return result
        self._say(result.message, "success" if result.success else "error")
        if result.success:
            await asyncio.gather(self.refresh_payments(), self.refresh_summary())
        return result

    async def bounce_cheque(
        self, payment_id: int, *, notes: Optional[str], bounced_date: Optional[str] = None
    ) -> ActionResult:
        result = await submission.bounce_cheque(
            self.cheques_repo, payment_id, notes=notes, bounced_date=bounced_date
        )
        if self.cancelled:
            return result
        self._say(result.message, "success" if result.success else "error")
        if result.success:
            await self.refresh_payments()
        return result
