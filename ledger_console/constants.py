APP_NAME = "Ledger Console"

DEFAULT_API_BASE_URL = "http://localhost:8000/api"
DEFAULT_COMPANY_ID = 1
DEFAULT_CURRENCY = "PKR"
DEFAULT_PAGE_SIZE = 1000
DEFAULT_LOG_LEVEL = "INFO"

# Customer detail tabs
TAB_CUSTOMER_PAYMENTS = "customer-payments"
TAB_TRANSACTIONS = "transactions"

# Payment types
INVOICE_PAYMENT = "invoice_payment"
ADVANCE_PAYMENT = "advance_payment"
REFUND = "refund"
PAYMENT_TYPES = (INVOICE_PAYMENT, ADVANCE_PAYMENT, REFUND)

PAYMENT_TYPE_LABELS = {
    INVOICE_PAYMENT: "Invoice payment",
    ADVANCE_PAYMENT: "Advance payment",
    REFUND: "Refund",
}

# Payment methods (value, label)
METHODS = [
    ("cash", "Cash"),
    ("bank_transfer", "Bank Transfer"),
    ("cheque", "Cheque"),
    ("card", "Card"),
    ("other", "Other"),
]
METHOD_VALUES = tuple(m for m, _ in METHODS)

# Advance ledger transaction types
ADVANCE_RECEIVED = "received"
ADVANCE_USED = "used"
ADVANCE_REFUNDED = "refunded"

# Account pickers
PAYMENT_ACCOUNT_ROOT_TYPE = "asset"
LOSS_ACCOUNT_ROOT_TYPE = "expense"
PAYMENT_ACCOUNT_KEYWORDS = ("cash", "bank")
