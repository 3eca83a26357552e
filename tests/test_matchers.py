import pytest

from cardvision.parser.matchers import (
    is_amount,
    is_daily_cash_eligible,
    is_declined,
    is_pending,
    is_timestamp,
    split_at_ellipsis,
)


@pytest.mark.parametrize(
    "candidate, expected",
    [
        ("$12.34", True),
        ("+$5.00", True),
        ("$1,234.56", True),
        ("-$12.34", True),
        ("$.99", True),
        ("12.34", False),
        ("$12.3", False),
        ("$12.345", False),
        ("Apple Store", False),
        ("$12.34 ", False),
    ],
)
def test_is_amount(candidate, expected):
    assert is_amount(candidate) is expected


@pytest.mark.parametrize(
    "candidate, expected",
    [
        ("3 hours ago", True),
        ("1 hour ago", True),
        ("45 minutes ago", True),
        ("01/19/21", True),
        ("1/5/21", True),
        ("Tuesday", True),
        ("Yesterday", True),
        ("SATURDAY", True),
        ("Alex - Yesterday", True),
        ("3 hours", False),
        ("Apple Store", False),
        ("Cupertino CA", False),
    ],
)
def test_is_timestamp(candidate, expected):
    assert is_timestamp(candidate) is expected


def test_declined_and_pending_markers():
    assert is_declined("Declined - Insufficient funds")
    assert not is_declined("Card Number Used")
    assert is_pending("Pending - Card Number Used")
    assert not is_pending("Card Number Used")


@pytest.mark.parametrize(
    "payee, memo, expected",
    [
        ("Payment", "From checking", False),
        ("Daily Cash Adjustment", "Adjustment", False),
        ("Balance Adjustment", "Balance Adjustment", False),
        ("Apple Store", "Refund", False),
        ("Apple Store", "Declined", False),
        ("Apple Store", "Cupertino CA", True),
        ("Apple Store", "Pending - Cupertino CA", True),
    ],
)
def test_is_daily_cash_eligible(payee, memo, expected):
    assert is_daily_cash_eligible(payee, memo) is expected


def test_split_at_ellipsis_returns_fused_amount():
    assert split_at_ellipsis("Some Very Long Payee...$42.00") == ("Some Very Long Payee...", "$42.00")
    assert split_at_ellipsis("Long Payee Name...") == ("Long Payee Name...", "")
    assert split_at_ellipsis("Long Payee Name…+$1.00") == ("Long Payee Name…", "+$1.00")
    assert split_at_ellipsis("Apple Store") == ("Apple Store", "")
