import pytest

from ledger_console.api.client import ApiError
from ledger_console.modules.payments.customer_payments import submission
from ledger_console.modules.payments.customer_payments.submission import (
    DEFAULT_FAILURE_MESSAGE,
    GENERIC_RETRY_MESSAGE,
    NOT_FOUND_MESSAGE,
    SERVER_ERROR_MESSAGE,
    describe_api_error,
)


class FakePaymentsRepo:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.sent = []

    async def create_payment(self, payload):
        self.sent.append(payload)
        if self.error is not None:
            raise self.error
        return self.response


class FakeChequesRepo:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def clear_cheque(self, payment_id, *, deposit_account_id, cleared_date):
        self.calls.append(("clear", payment_id, deposit_account_id, cleared_date))
        if self.error is not None:
            raise self.error

    async def bounce_cheque(self, payment_id, *, notes, bounced_date=None):
        self.calls.append(("bounce", payment_id, notes, bounced_date))
        if self.error is not None:
            raise self.error


# ---------- error messages ----------

@pytest.mark.parametrize("status", [400, 422])
def test_validation_error_prefers_first_field_message(status):
    err = ApiError(
        "The given data was invalid.",
        status,
        {"message": "The given data was invalid.", "errors": {"amount": ["", "Amount exceeds due"], "x": ["y"]}},
    )
    assert describe_api_error(err) == "Amount exceeds due"


def test_validation_error_falls_back_to_body_message_then_default():
    assert describe_api_error(ApiError("m", 422, {"message": "Invoice already paid"})) == "Invoice already paid"
    assert describe_api_error(ApiError("m", 422, None)) == DEFAULT_FAILURE_MESSAGE
    assert describe_api_error(ApiError("m", 400, {"errors": {"amount": "Bad amount"}})) == "Bad amount"


def test_not_found_and_server_error_hints():
    assert describe_api_error(ApiError("nope", 404)) == NOT_FOUND_MESSAGE
    assert describe_api_error(ApiError("kaboom", 500)) == SERVER_ERROR_MESSAGE


def test_other_statuses_use_the_error_message():
    assert describe_api_error(ApiError("Could not reach the server: refused", 0)) == (
        "Could not reach the server: refused"
    )
    assert describe_api_error(ApiError("", 409), "Nope") == "Nope"


def test_non_api_errors_get_generic_retry():
    assert describe_api_error(RuntimeError("bug")) == GENERIC_RETRY_MESSAGE


# ---------- submit ----------

@pytest.mark.asyncio
async def test_successful_submit_returns_id_and_toast():
    repo = FakePaymentsRepo({"payment": {"id": "41"}})
    payload = {"payment_type": "invoice_payment", "amount": 10.0}

    result = await submission.submit_payment(repo, payload)

    assert result.success is True
    assert result.id == 41
    assert result.message == "Invoice payment recorded successfully!"
    assert result.payload is payload
    assert result.outcome.hold_open is False
    assert repo.sent == [payload]


@pytest.mark.asyncio
async def test_rejected_submit_keeps_payload_and_reports_reason():
    err = ApiError("invalid", 422, {"errors": {"payment_date": ["Date is closed"]}})
    payload = {"payment_type": "advance_payment", "amount": 10.0}

    result = await submission.submit_payment(FakePaymentsRepo(error=err), payload)

    assert result.success is False
    assert result.message == "Date is closed"
    assert result.payload is payload
    assert result.outcome is None


@pytest.mark.asyncio
async def test_unexpected_exception_is_reported_not_raised():
    result = await submission.submit_payment(FakePaymentsRepo(error=KeyError("x")), {"payment_type": "refund"})
    assert result.success is False
    assert result.message == GENERIC_RETRY_MESSAGE


# ---------- cheques ----------

@pytest.mark.asyncio
async def test_clear_cheque_requires_deposit_account():
    repo = FakeChequesRepo()
    result = await submission.clear_cheque(repo, 9, deposit_account_id=None)
    assert result.success is False
    assert result.message == "Please select a deposit account"
    assert repo.calls == []


@pytest.mark.asyncio
async def test_clear_cheque():
    repo = FakeChequesRepo()
    result = await submission.clear_cheque(repo, 9, deposit_account_id=3, cleared_date="2024-06-01")
    assert result.success is True
    assert result.message == "Cheque cleared successfully"
    assert repo.calls == [("clear", 9, 3, "2024-06-01")]


@pytest.mark.asyncio
async def test_clear_cheque_failure_uses_server_message():
    result = await submission.clear_cheque(
        FakeChequesRepo(error=ApiError("Cheque already cleared", 422)), 9, deposit_account_id=3
    )
    assert result.success is False
    assert result.message == "Cheque already cleared"


@pytest.mark.asyncio
async def test_bounce_cheque_requires_a_note():
    repo = FakeChequesRepo()
    result = await submission.bounce_cheque(repo, 9, notes="   ")
    assert result.message == "Please provide a reason/note"
    assert repo.calls == []


@pytest.mark.asyncio
async def test_bounce_cheque():
    repo = FakeChequesRepo()
    result = await submission.bounce_cheque(repo, 9, notes=" insufficient funds ")
    assert result.success is True
    assert result.message == "Cheque marked as bounced"
    assert repo.calls == [("bounce", 9, "insufficient funds", None)]


@pytest.mark.asyncio
async def test_bounce_cheque_failure_without_message():
    result = await submission.bounce_cheque(FakeChequesRepo(error=ApiError("", 500)), 9, notes="x")
    assert result.message == "Failed to bounce cheque"
