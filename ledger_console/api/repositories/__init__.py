from .accounts_repo import AccountsRepo
from .cheques_repo import ChequesRepo
from .customer_payments_repo import CustomerPaymentsRepo
from .invoices_repo import InvoicesRepo
from .items_repo import ItemsRepo
from .payment_summary_repo import PaymentSummaryRepo
from .sales_repo import SalesRepo

__all__ = [
    "AccountsRepo",
    "ChequesRepo",
    "CustomerPaymentsRepo",
    "InvoicesRepo",
    "ItemsRepo",
    "PaymentSummaryRepo",
    "SalesRepo",
]
