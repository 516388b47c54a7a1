# ledger_console/modules/payments/customer_payments/submission.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ....api.client import ApiError
from ....utils.helpers import today_str
from ....utils.validators import non_empty
from .auto_apply import SubmitOutcome, interpret_response

_log = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = (
    "Customer payments API endpoint not found. Please ensure the backend is properly configured."
)
SERVER_ERROR_MESSAGE = (
    "Server error while recording payment. Please check the backend logs or contact support."
)
GENERIC_RETRY_MESSAGE = "Failed to record payment. Please try again."
DEFAULT_FAILURE_MESSAGE = "Failed to record payment"


@dataclass
class ActionResult:
    success: bool
    id: Optional[int] = None                 # created payment id (if any)
    message: Optional[str] = None            # user-facing message
    payload: Optional[dict] = None           # the request body that was sent
    outcome: Optional[SubmitOutcome] = None  # set on successful payment submissions


def _first_field_error(data: Any) -> Optional[str]:
    errors = data.get("errors") if isinstance(data, dict) else None
    if not isinstance(errors, dict):
        return None
    for messages in errors.values():
        if isinstance(messages, (list, tuple)):
            for msg in messages:
                if non_empty(msg):
                    return str(msg)
        elif non_empty(messages):
            return str(messages)
    return None


def describe_api_error(err: BaseException, fallback: str = DEFAULT_FAILURE_MESSAGE) -> str:
    """
    User-facing text for a failed request:
      422/400 -> first field error, else body message, else fallback
      404     -> backend configuration hint
      500     -> server fault hint
      other   -> the error's own message
    Anything that is not an ApiError gets a generic retry message.
    """
    if not isinstance(err, ApiError):
        return GENERIC_RETRY_MESSAGE
    if err.status in (400, 422):
        field_msg = _first_field_error(err.data)
        if field_msg:
            return field_msg
        body_msg = err.data.get("message") if isinstance(err.data, dict) else None
        return str(body_msg) if non_empty(body_msg) else fallback
    if err.status == 404:
        return NOT_FOUND_MESSAGE
    if err.status == 500:
        return SERVER_ERROR_MESSAGE
    return err.message or fallback


def _created_id(response: Dict[str, Any]) -> Optional[int]:
    nested = response.get("payment") if isinstance(response.get("payment"), dict) else {}
    for candidate in (response.get("id"), nested.get("id")):
        if candidate is None:
            continue
        try:
            return int(candidate)
        except (TypeError, ValueError):
            continue
    return None


async def submit_payment(repo, payload: Dict[str, Any], *, currency: str = "PKR") -> ActionResult:
    """
    POST the built request. Failures come back as ActionResult(success=False)
    with a user-facing message; the caller keeps its form as it was.
    """
    payment_type = str(payload.get("payment_type") or "")
    try:
        response = await repo.create_payment(payload)
    except ApiError as e:
        _log.error("Recording %s failed (status %s): %s", payment_type, e.status, e.message)
        return ActionResult(success=False, message=describe_api_error(e), payload=payload)
    except Exception as e:
        _log.exception("Recording %s failed: %s", payment_type, e)
        return ActionResult(success=False, message=describe_api_error(e), payload=payload)

    outcome = interpret_response(payment_type, response, currency=currency)
    return ActionResult(
        success=True,
        id=_created_id(response or {}),
        message=outcome.toast,
        payload=payload,
        outcome=outcome,
    )


# ======================= Cheque lifecycle ====================================

async def clear_cheque(
    repo,
    payment_id: int,
    *,
    deposit_account_id: Optional[int],
    cleared_date: Optional[str] = None,
) -> ActionResult:
    """Mark a received cheque as cleared into a deposit account."""
    if deposit_account_id is None:
        return ActionResult(success=False, message="Please select a deposit account")
    try:
        await repo.clear_cheque(
            payment_id,
            deposit_account_id=deposit_account_id,
            cleared_date=cleared_date or today_str(),
        )
    except ApiError as e:
        _log.error("Clearing cheque %s failed (status %s): %s", payment_id, e.status, e.message)
        return ActionResult(success=False, id=payment_id, message=e.message or "Failed to clear cheque")
    return ActionResult(success=True, id=payment_id, message="Cheque cleared successfully")


async def bounce_cheque(
    repo,
    payment_id: int,
    *,
    notes: Optional[str],
    bounced_date: Optional[str] = None,
) -> ActionResult:
    """Mark a received cheque as bounced. A note explaining why is required."""
    if not non_empty(notes):
        return ActionResult(success=False, message="Please provide a reason/note")
    try:
        await repo.bounce_cheque(payment_id, notes=str(notes).strip(), bounced_date=bounced_date)
    except ApiError as e:
        _log.error("Bouncing cheque %s failed (status %s): %s", payment_id, e.status, e.message)
        return ActionResult(success=False, id=payment_id, message=e.message or "Failed to bounce cheque")
    return ActionResult(success=True, id=payment_id, message="Cheque marked as bounced")
