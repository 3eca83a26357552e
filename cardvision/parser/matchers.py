"""Stateless predicates used to recognise fields in the OCR line sequence."""

import re

AMOUNT_PATTERN = re.compile(r"^\+*-?\$[\d,]*\.\d\d$")

# Long payee names are truncated with an ellipsis by the card app
ELLIPSIS_PATTERN = re.compile(r"\.{3}|…")

# Patterns that indicate a line holds the transaction's time description
TIMESTAMP_PATTERNS = [
    r"[0-9]{1,2} (?:minute|hour)s{0,1} ago",  # Relative timestamp
    r"\d{1,2}/\d{1,2}/\d{2}",  # mm/dd/yy date stamp
    r"(?i)W*(?:Mon|Tues|Wednes|Thurs|Fri|Satur|Sun|Yester)day\b[sS]*",  # Day of week, or "Yesterday"
]

_TIMESTAMP_PATTERNS_COMPILED = [re.compile(p) for p in TIMESTAMP_PATTERNS]

# Payees that never earn Daily Cash
NON_DAILY_CASH_PAYEES = frozenset({"Payment", "Daily Cash Adjustment", "Balance Adjustment"})

# Memo markers for transactions that never earn Daily Cash
NON_DAILY_CASH_MEMO_MARKERS = ("Refund",)

DECLINED_MARKER = "Declined"
PENDING_MARKER = "Pending"


def is_amount(candidate: str) -> bool:
    """Check if a line is a monetary amount such as ``$1,234.56`` or ``+$5.00``."""
    return AMOUNT_PATTERN.match(candidate) is not None


def is_declined(candidate: str) -> bool:
    return DECLINED_MARKER in candidate


def is_pending(candidate: str) -> bool:
    return PENDING_MARKER in candidate


def is_timestamp(candidate: str) -> bool:
    """Check if a string contains a recognisable time description.

    Args:
        candidate: Text accumulated from one or more OCR lines

    Returns:
        True if any timestamp pattern is found anywhere in the text
    """
    return any(pattern.search(candidate) for pattern in _TIMESTAMP_PATTERNS_COMPILED)


def is_daily_cash_eligible(payee: str, memo: str) -> bool:
    """Determine if the payee and memo combination carries a Daily Cash line.

    Payments, adjustments, refunds and declined transactions never do.
    """
    if payee in NON_DAILY_CASH_PAYEES:
        return False
    if any(marker in memo for marker in NON_DAILY_CASH_MEMO_MARKERS):
        return False
    return not is_declined(memo)


def split_at_ellipsis(payee: str) -> tuple[str, str]:
    """Split a truncated payee line into (payee through ellipsis, trailing text).

    Returns the payee unchanged and an empty remainder if no ellipsis is present.
    """
    match = ELLIPSIS_PATTERN.search(payee)
    if match is None:
        return payee, ""
    return payee[: match.end()], payee[match.end():]
