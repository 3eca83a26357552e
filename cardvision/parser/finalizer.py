"""Conversion of intermediate (string) transactions into typed records."""

from datetime import date, datetime

from loguru import logger

from cardvision.models import FailureReason, IntermediateTransaction, ParseIssue, Transaction
from cardvision.parser.dates import as_datetime, match_time_description

_AMOUNT_NOISE = str.maketrans("", "", "+-$.,")


def amount_in_cents(amount: str) -> int | None:
    """Parse an amount like ``$1,234.56`` or ``+$5.00`` into signed cents.

    Charges are negative; only a leading "+" marks a credit.
    """
    digits = amount.translate(_AMOUNT_NOISE).strip()
    if not digits.isdecimal():
        return None
    cents = int(digits)
    return cents if "+" in amount else -cents


def daily_cash_value(daily_cash: str | None) -> int | None:
    """Parse a Daily Cash line like ``2%`` into percentage points."""
    if daily_cash is None:
        return None
    digits = daily_cash.replace("%", "").strip()
    if not digits.isdecimal():
        return None
    return int(digits)


def finalize(
    intermediate: IntermediateTransaction,
    screenshot_date: date | datetime,
    block_index: int = 0,
) -> tuple[Transaction, list[ParseIssue]]:
    """Build the final transaction, reporting every field that fell back to a default.

    Args:
        intermediate: Transaction fields as read from the OCR text
        screenshot_date: Reference time for relative dates
        block_index: Position of the block, used to tag issues

    Returns:
        Tuple of (transaction, issues for this block)
    """
    issues: list[ParseIssue] = []

    cents = amount_in_cents(intermediate.amount)
    if cents is None:
        issues.append(ParseIssue(
            reason=FailureReason.INVALID_AMOUNT,
            block_index=block_index,
            detail=f"could not parse amount {intermediate.amount!r}",
        ))
        cents = 0

    daily_cash = daily_cash_value(intermediate.daily_cash)
    if daily_cash is None:
        if intermediate.daily_cash is not None:
            issues.append(ParseIssue(
                reason=FailureReason.INVALID_DAILY_CASH,
                block_index=block_index,
                detail=f"could not parse Daily Cash {intermediate.daily_cash!r}",
            ))
        daily_cash = 0

    match = match_time_description(intermediate.time_description, screenshot_date)
    if match is None:
        issues.append(ParseIssue(
            reason=FailureReason.UNRESOLVED_DATE,
            block_index=block_index,
            detail=f"could not resolve {intermediate.time_description!r}, using screenshot date",
        ))
        resolved = as_datetime(screenshot_date)
    else:
        resolved = match[1]

    for issue in issues:
        logger.warning(f"Block {block_index} ({intermediate.payee}): {issue.detail}")

    transaction = Transaction(
        date=resolved.date(),
        payee=intermediate.payee,
        amount_in_cents=cents,
        daily_cash=daily_cash,
        memo=intermediate.memo,
        pending=intermediate.pending,
        declined=intermediate.declined,
    )
    return transaction, issues
