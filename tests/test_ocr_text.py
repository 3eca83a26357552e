import json
from datetime import date

from cardvision.logging_config import DebugArtifacts
from cardvision.models import FailureReason, ParseResult, ParserSettings
from cardvision.parser import OCRTextParser

PURCHASE = ["Apple Store", "$12.34", "Cupertino CA", "2%", "Tuesday"]
PAYMENT = ["Payment", "+$100.00", "From checking", "Yesterday"]
REFUND = ["Grocer", "+$3.50", "Refund", "01/05/21"]


def test_back_to_back_blocks_keep_order(reference):
    result = OCRTextParser().parse(PURCHASE + PAYMENT + REFUND, reference)

    assert [tx.payee for tx in result.transactions] == ["Apple Store", "Payment", "Grocer"]
    assert [tx.amount_in_cents for tx in result.transactions] == [-1234, 10000, 350]
    assert [tx.daily_cash for tx in result.transactions] == [2, 0, 0]
    assert [tx.date for tx in result.transactions] == [
        date(2021, 1, 19),
        date(2021, 1, 19),
        date(2021, 1, 5),
    ]
    assert not result.has_issues


def test_negative_amount_with_minus_sign(reference):
    result = OCRTextParser().parse(["Apple Store", "-$12.34", "Cupertino CA", "1%", "Tuesday"], reference)

    (tx,) = result.transactions
    assert tx.amount_in_cents == -1234
    assert tx.daily_cash == 1
    assert tx.date == date(2021, 1, 19)


def test_wrapped_payee_credit(reference):
    lines = ["Long Payee Name...", "hing Else", "+$5.00", "Some Memo", "1%", "Yesterday"]
    (tx,) = OCRTextParser().parse(lines, reference).transactions

    assert tx.payee == "Long Payee Name... hing Else"
    assert tx.amount_in_cents == 500
    assert tx.daily_cash == 1
    assert tx.memo == "Some Memo"
    assert tx.date == date(2021, 1, 19)


def test_truncated_balance_adjustment_emits_nothing(reference):
    lines = ["Balance Adjustment", "+$1.00", "Dispute - Provisional Adjustment"]
    result = OCRTextParser().parse(lines, reference)

    assert result.transactions == []
    (issue,) = result.issues
    assert issue.reason is FailureReason.TRUNCATED_BLOCK
    assert issue.dropped
    assert issue.lines == lines


def test_trailing_fragment_keeps_earlier_transactions(reference):
    result = OCRTextParser().parse(PURCHASE + PAYMENT + ["Stray"], reference)

    assert len(result.transactions) == 2
    assert result.flagged_indices() == set()
    (issue,) = result.dropped_issues()
    assert issue.block_index == 2
    assert issue.lines == ["Stray"]


def test_unbounded_drain_is_reported(reference):
    lines = PAYMENT + ["Store", "$1.00", "Memo", "Tuesday"] + PAYMENT
    result = OCRTextParser().parse(lines, reference)

    assert [tx.payee for tx in result.transactions] == ["Payment"]
    (issue,) = result.issues
    assert issue.reason is FailureReason.UNBOUNDED_DRAIN
    assert issue.block_index == 1


def test_daily_cash_lookahead_keeps_following_blocks(reference):
    lines = ["Store", "$1.00", "Memo", "Tuesday"] + PURCHASE
    settings = ParserSettings(daily_cash_lookahead=2)
    result = OCRTextParser(settings=settings).parse(lines, reference)

    assert [tx.payee for tx in result.transactions] == ["Store", "Apple Store"]
    assert result.transactions[0].daily_cash == 0
    assert [issue.reason for issue in result.issues_for(0)] == [FailureReason.MISSING_DAILY_CASH]
    assert result.clean_transactions() == [result.transactions[1]]


def test_unresolved_date_is_flagged(reference):
    result = OCRTextParser().parse(["Store", "$1.00", "Memo", "1%", "Just now"], reference)

    (tx,) = result.transactions
    assert tx.date == reference.date()
    assert result.flagged_indices() == {0}
    assert result.issues[0].reason is FailureReason.UNRESOLVED_DATE
    assert result.clean_transactions() == []


def test_extend_rebases_block_indices(reference):
    parser = OCRTextParser()
    combined = parser.parse(PURCHASE, reference)
    combined.extend(parser.parse(PAYMENT + ["Stray"], reference))

    assert len(combined.transactions) == 2
    (issue,) = combined.issues
    assert issue.block_index == 2
    assert issue.dropped


def test_debug_artifacts_are_saved(tmp_path, reference):
    parser = OCRTextParser(debug_artifacts=DebugArtifacts(tmp_path))
    parser.parse(PURCHASE, reference, trace=True, name="shot")

    assert (tmp_path / "shot_lines.txt").read_text(encoding="utf-8") == "\n".join(PURCHASE)
    intermediate = json.loads((tmp_path / "shot_intermediate.json").read_text(encoding="utf-8"))
    assert intermediate[0]["daily_cash"] == "2%"
    saved = ParseResult.model_validate_json((tmp_path / "shot_result.json").read_text(encoding="utf-8"))
    assert saved.transactions[0].amount_in_cents == -1234


def test_lines_skipped_before_daily_cash_are_flagged(reference):
    lines = ["Store", "$1.00", "Memo", "Tuesday", "Other", "$2.00", "Memo2", "3%", "Monday"]
    result = OCRTextParser().parse(lines, reference)

    (tx,) = result.transactions
    assert tx.daily_cash == 3
    assert tx.date == date(2021, 1, 18)
    (issue,) = result.issues_for(0)
    assert issue.reason is FailureReason.SKIPPED_LINES
    assert not issue.dropped
    assert issue.lines == ["Tuesday", "Other", "$2.00", "Memo2"]
    assert result.clean_transactions() == []


def test_adjacent_daily_cash_line_is_not_flagged(reference):
    result = OCRTextParser().parse(PURCHASE + PURCHASE, reference)

    assert len(result.transactions) == 2
    assert not result.has_issues
