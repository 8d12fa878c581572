"""Bulk-import payloads built from parsed deposits.

The persistence layer accepts ``{accountId, deposits: [...]}`` where each
deposit carries ISO-8601 date strings. This module builds that payload from
a ParseResult and validates payloads before they are handed off, producing
indexed messages ("Deposit 3: ...") the UI can show next to each row.

Validation itself is done by the pydantic models in ``models``; this module
only turns their error entries into those messages.
"""

from typing import Any, Iterable, Mapping, Union

import pydantic
import structlog

from .exceptions import ValidationError
from .models import (
    MAX_BULK_DEPOSITS,
    BulkCreateDepositsRequest,
    BulkDepositInput,
    ParsedDeposit,
    ParseResult,
)

logger = structlog.get_logger()

INVALID_DEPOSIT = "Invalid deposit"

# (message when absent or blank, message when present but invalid)
_DEPOSIT_FIELD_MESSAGES = {
    "depositDate": ("Deposit date is required", "Invalid deposit date format"),
    "salaryMonth": ("Salary month is required", "Invalid salary month format"),
    "amount": ("Amount must be a positive number", "Amount must be a positive number"),
    "employer": ("Employer name is required", "Employer name is required"),
}


def _is_blank(error: Mapping[str, Any]) -> bool:
    if error["type"] == "missing":
        return True
    value = error.get("input")
    return value is None or (isinstance(value, str) and not value.strip())


def _deposit_message(error: Mapping[str, Any], loc: tuple) -> str:
    """Message for one error entry, ``loc`` being relative to the deposit."""
    if not loc or loc[0] not in _DEPOSIT_FIELD_MESSAGES:
        return INVALID_DEPOSIT
    required, invalid = _DEPOSIT_FIELD_MESSAGES[loc[0]]
    return required if _is_blank(error) else invalid


def _request_messages(exc: pydantic.ValidationError) -> list[str]:
    messages: list[str] = []
    for error in exc.errors():
        loc = tuple(error["loc"])
        if not loc:
            message = "Invalid bulk request"
        elif loc[0] == "accountId":
            message = "Account ID is required"
        elif len(loc) == 1:
            if error["type"] == "too_long":
                message = f"Maximum {MAX_BULK_DEPOSITS} deposits allowed per request"
            else:
                message = "At least one deposit is required"
        else:
            message = f"Deposit {loc[1] + 1}: {_deposit_message(error, loc[2:])}"

        if message not in messages:
            messages.append(message)
    return messages


def build_bulk_request(
    account_id: str,
    deposits: Union[ParseResult, Iterable[ParsedDeposit]],
) -> BulkCreateDepositsRequest:
    """
    Build the bulk-import request for an account.

    Args:
        account_id: The pension account receiving the deposits
        deposits: A ParseResult or any iterable of ParsedDeposit

    Returns:
        BulkCreateDepositsRequest with ISO dates and no raw text

    Raises:
        ValidationError: If the account is blank or there are no deposits
            (or more than the per-request maximum)
    """
    if isinstance(deposits, ParseResult):
        deposits = deposits.deposits

    try:
        return BulkCreateDepositsRequest(
            account_id=account_id,
            deposits=[d.to_bulk_input() for d in deposits],
        )
    except pydantic.ValidationError as e:
        messages = _request_messages(e)
        raise ValidationError(messages[0], messages=messages) from e


def validate_bulk_deposit(deposit: Any, index: int) -> list[str]:
    """
    Validate one deposit of a bulk payload.

    Args:
        deposit: Deposit in camelCase wire form
        index: Zero-based position in the payload

    Returns:
        Messages prefixed with the 1-based deposit number; empty if valid
    """
    try:
        BulkDepositInput.model_validate(deposit)
    except pydantic.ValidationError as e:
        messages: list[str] = []
        for error in e.errors():
            message = f"Deposit {index + 1}: {_deposit_message(error, tuple(error['loc']))}"
            if message not in messages:
                messages.append(message)
        return messages
    return []


def validate_bulk_request(
    payload: Union[BulkCreateDepositsRequest, Mapping[str, Any]],
    *,
    raise_on_error: bool = False,
) -> list[str]:
    """
    Validate a whole bulk payload.

    Args:
        payload: Request model or its camelCase dict form
        raise_on_error: Raise ValidationError instead of returning messages

    Returns:
        All validation messages; empty if the payload is valid

    Raises:
        ValidationError: If ``raise_on_error`` is set and the payload is invalid
    """
    if isinstance(payload, BulkCreateDepositsRequest):
        payload = payload.model_dump(by_alias=True)

    try:
        BulkCreateDepositsRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = _request_messages(e)
    else:
        return []

    logger.info("bulk_payload_invalid", errors=len(errors))
    if raise_on_error:
        raise ValidationError(errors[0], messages=errors)
    return errors
