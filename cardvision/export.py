"""CSV rendering of final transactions."""

from collections.abc import Iterable, Sequence
from pathlib import Path

from loguru import logger

from cardvision.models import ParseResult, Transaction

CSV_FIELDS = ["Date", "Payee", "Amount", "DailyCash", "Memo", "Pending", "Declined"]
CSV_HEADER = ",".join(CSV_FIELDS)


def csv_entries(transactions: Iterable[Transaction], explicit_sign: bool = False) -> list[str]:
    """Render one comma-joined row per transaction, in order."""
    rows = []
    for tx in transactions:
        row = tx.to_csv_row(explicit_sign)
        rows.append(",".join(row[field] for field in CSV_FIELDS))
    return rows


def to_csv(transactions: Iterable[Transaction], explicit_sign: bool = False) -> str:
    """Render transactions as a CSV document with header, rows joined by newlines."""
    return "\n".join([CSV_HEADER, *csv_entries(transactions, explicit_sign)])


def filter_transactions(
    transactions: Sequence[Transaction],
    pending: bool | None = None,
    declined: bool | None = None,
) -> list[Transaction]:
    """Keep transactions whose pending/declined state matches (None = either)."""
    return [
        tx
        for tx in transactions
        if (pending is None or tx.pending == pending)
        and (declined is None or tx.declined == declined)
    ]


def select_transactions(
    result: ParseResult,
    exclude_pending: bool = False,
    exclude_declined: bool = False,
    drop_flagged: bool = False,
) -> list[Transaction]:
    """Choose which parsed transactions to export.

    Args:
        result: Parse result to export from
        exclude_pending: Leave out pending transactions
        exclude_declined: Leave out declined transactions
        drop_flagged: Leave out transactions with defaulted or unresolved fields

    Returns:
        Transactions to export, in screenshot order
    """
    transactions = result.clean_transactions() if drop_flagged else list(result.transactions)
    return filter_transactions(
        transactions,
        pending=False if exclude_pending else None,
        declined=False if exclude_declined else None,
    )


def write_csv(
    transactions: Sequence[Transaction],
    output_path: Path,
    explicit_sign: bool = False,
) -> None:
    """Write the CSV payload as UTF-8 text."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(to_csv(transactions, explicit_sign), encoding="utf-8")
    logger.info(f"Wrote {len(transactions)} transactions to {output_path}")
