from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Optional

from PySide6.QtCore import QObject
from PySide6.QtWidgets import QDialog, QInputDialog, QWidget

from ...config import Settings
from ...utils.helpers import today_str
from ...utils.ui_helpers import error, info
from ..payments.ui.advance_summary_dialog import AdvanceSummaryDialog
from ..payments.ui.record_payment_form import RecordPaymentDialog
from .controller import CustomerAccountController
from .view import CustomerAccountView

_log = logging.getLogger(__name__)


class CustomerAccountModule(QObject):
    """
    Customer account page: glues CustomerAccountController to its view.

    All network work runs on one private event loop owned by this module;
    each UI action runs its coroutine to completion before returning, so a
    submission always finishes before the refresh that follows it.
    """

    def __init__(
        self,
        customer_id: int,
        settings: Settings,
        *,
        controller: Optional[CustomerAccountController] = None,
        opening_due_amount: float = 0.0,
    ):
        super().__init__()
        self.settings = settings
        self.loop = asyncio.new_event_loop()
        self.view = CustomerAccountView(currency=settings.currency)
        self.controller = controller or CustomerAccountController.from_settings(
            customer_id,
            settings,
            opening_due_amount=opening_due_amount,
        )
        self.controller.bind(notify=self._notify, on_change=self._render)
        self._wire()

    def get_widget(self) -> QWidget:
        return self.view

    # ------------------------------------------------------------------ #
    # Plumbing
    # ------------------------------------------------------------------ #

    def _run(self, coro: Awaitable[Any]) -> Any:
        return self.loop.run_until_complete(coro)

    def _wire(self) -> None:
        self.view.tabs.currentChanged.connect(lambda _i: self.load_current_tab())
        self.view.btn_refresh.clicked.connect(self.load_current_tab)
        self.view.btn_record_payment.clicked.connect(self._on_record_payment)
        self.view.btn_clear_cheque.clicked.connect(self._on_clear_cheque)
        self.view.btn_bounce_cheque.clicked.connect(self._on_bounce_cheque)

    def _notify(self, message: str, level: str) -> None:
        if level == "error":
            error(self.view, "Customer Account", message)
        elif level == "info":
            info(self.view, "Customer Account", message)
        else:
            self.view.lab_status.setText(message)

    def _render(self) -> None:
        c = self.controller
        self.view.details.set_summary(
            c.effective_summary(), has_data=c.has_payment_data(), item_summaries=c.item_summaries
        )
        self.view.payments_model.replace(c.payments)
        self.view.invoices_model.replace(c.invoices, c.item_summaries)
        self.view.payments_table.resizeColumnsToContents()
        self.view.invoices_table.resizeColumnsToContents()

    def load_current_tab(self) -> None:
        self._run(self.controller.load_tab(self.view.current_tab_id()))

    def teardown(self) -> None:
        self.controller.teardown()
        if not self.loop.is_closed():
            self.loop.close()

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def _on_record_payment(self) -> None:
        c = self.controller
        if not c.payment_accounts:
            self._run(c.load_accounts())
        form = c.new_payment_form()

        dlg = RecordPaymentDialog(
            self.view,
            form=form,
            customer_id=c.customer_id,
            payment_accounts=c.payment_accounts,
            loss_accounts=c.loss_accounts,
            currency=self.settings.currency,
        )
        # A rejected submission reopens the same dialog with every field kept.
        while True:
            if dlg.exec() != QDialog.Accepted:
                return
            result = self._run(c.record_payment(dlg.payload()))
            if result.success:
                break
            dlg.show_submit_error(result.message or "")

        if c.pending_advance is not None:
            AdvanceSummaryDialog(c.pending_advance, self.view, currency=self.settings.currency).exec()
            self._run(c.dismiss_advance_summary())

    def _selected_cheque(self) -> Optional[dict]:
        payment = self.view.selected_payment()
        if not payment or payment.get("payment_method") != "cheque":
            error(self.view, "Cheque", "Select a cheque payment first.")
            return None
        return payment

    def _on_clear_cheque(self) -> None:
        payment = self._selected_cheque()
        if payment is None:
            return
        c = self.controller
        if not c.payment_accounts:
            self._run(c.load_accounts())
        names = [str(a.get("name", "")) for a in c.payment_accounts]
        if not names:
            error(self.view, "Cheque", "No deposit accounts available.")
            return
        name, ok = QInputDialog.getItem(self.view, "Clear Cheque", "Deposit account:", names, 0, False)
        if not ok:
            return
        account = c.payment_accounts[names.index(name)]
        self._run(
            c.clear_cheque(int(payment["id"]), deposit_account_id=account.get("id"), cleared_date=today_str())
        )

    def _on_bounce_cheque(self) -> None:
        payment = self._selected_cheque()
        if payment is None:
            return
        note, ok = QInputDialog.getText(self.view, "Bounce Cheque", "Reason:")
        if not ok:
            return
        self._run(
            self.controller.bounce_cheque(int(payment["id"]), notes=note, bounced_date=today_str())
        )
