from datetime import date

import pytest

from cardvision.export import (
    CSV_HEADER,
    filter_transactions,
    select_transactions,
    to_csv,
    write_csv,
)
from cardvision.models import (
    FailureReason,
    ParseIssue,
    ParseResult,
    Transaction,
    format_cents,
)
from cardvision.parser.finalizer import amount_in_cents


def make_transaction(**overrides) -> Transaction:
    fields = {
        "date": date(2021, 1, 19),
        "payee": "Apple Store",
        "amount_in_cents": -1234,
        "daily_cash": 2,
        "memo": "Cupertino CA",
    }
    fields.update(overrides)
    return Transaction(**fields)


def test_header_only_for_no_transactions():
    assert CSV_HEADER == "Date,Payee,Amount,DailyCash,Memo,Pending,Declined"
    assert to_csv([]) == CSV_HEADER


def test_rows_strip_commas_and_render_fields():
    transactions = [
        make_transaction(payee="Apple Store, Inc", memo="Cupertino, CA"),
        make_transaction(
            date=date(2021, 1, 5),
            payee="Payment",
            amount_in_cents=10000,
            daily_cash=0,
            memo="From checking",
            pending=True,
        ),
    ]

    assert to_csv(transactions) == "\n".join([
        CSV_HEADER,
        "01/19/21,Apple Store Inc,-12.34,2,Cupertino CA,false,false",
        "01/05/21,Payment,100.00,0,From checking,true,false",
    ])


def test_rows_never_contain_embedded_commas():
    tx = make_transaction(payee=",A,B,", memo="x,,y")
    row = to_csv([tx]).splitlines()[1]
    assert row.count(",") == 6


@pytest.mark.parametrize(
    "cents, expected",
    [
        (500, "5.00"),
        (5, "0.05"),
        (0, "0.00"),
        (-1234, "-12.34"),
        (-34, "0.34"),
        (-100, "-1.00"),
        (-5, "0.05"),
        (123456, "1234.56"),
    ],
)
def test_format_cents(cents, expected):
    assert format_cents(cents) == expected


@pytest.mark.parametrize("amount", ["$0.01", "$12.34", "+$5.00", "$1,234.56", "+$10,000.99"])
def test_amount_rendering_reproduces_source_magnitude(amount):
    cents = amount_in_cents(amount)
    expected = amount.lstrip("+").lstrip("$").replace(",", "")
    assert format_cents(abs(cents)) == expected


def test_filter_transactions():
    settled = make_transaction()
    pending = make_transaction(pending=True)
    declined = make_transaction(declined=True)
    transactions = [settled, pending, declined]

    assert filter_transactions(transactions, pending=False) == [settled, declined]
    assert filter_transactions(transactions, declined=True) == [declined]
    assert filter_transactions(transactions) == transactions


def test_select_transactions_drops_flagged_and_declined():
    good = make_transaction()
    bad = make_transaction(amount_in_cents=0)
    declined = make_transaction(declined=True)
    result = ParseResult(
        transactions=[good, bad, declined],
        issues=[
            ParseIssue(reason=FailureReason.INVALID_AMOUNT, block_index=1),
            ParseIssue(reason=FailureReason.TRUNCATED_BLOCK, block_index=3, dropped=True),
        ],
    )

    assert select_transactions(result) == [good, bad, declined]
    assert select_transactions(result, drop_flagged=True) == [good, declined]
    assert select_transactions(result, drop_flagged=True, exclude_declined=True) == [good]


def test_write_csv(tmp_path):
    transactions = [make_transaction()]
    output = tmp_path / "out" / "transactions.csv"

    write_csv(transactions, output)

    assert output.read_text(encoding="utf-8") == to_csv(transactions)


@pytest.mark.parametrize(
    "cents, expected",
    [(-34, "-0.34"), (-5, "-0.05"), (-1234, "-12.34"), (34, "0.34"), (0, "0.00")],
)
def test_format_cents_explicit_sign(cents, expected):
    assert format_cents(cents, explicit_sign=True) == expected


def test_to_csv_explicit_sign_only_changes_sub_dollar_charges():
    transactions = [make_transaction(amount_in_cents=-34), make_transaction(amount_in_cents=-1234)]

    default_rows = to_csv(transactions).splitlines()[1:]
    signed_rows = to_csv(transactions, explicit_sign=True).splitlines()[1:]

    assert [row.split(",")[2] for row in default_rows] == ["0.34", "-12.34"]
    assert [row.split(",")[2] for row in signed_rows] == ["-0.34", "-12.34"]
