"""Pydantic data models for OCR transactions, parse issues and settings."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class IntermediateTransaction(BaseModel):
    """Transaction block recognised in the OCR text, fields still unparsed."""

    model_config = ConfigDict(frozen=True)

    time_description: str
    payee: str
    amount: str
    daily_cash: str | None = None
    memo: str
    pending: bool = False
    declined: bool = False


class Transaction(BaseModel):
    """Final transaction record."""

    model_config = ConfigDict(frozen=True)

    date: date
    payee: str
    amount_in_cents: int = Field(description="Negative for charges, non-negative for credits")
    daily_cash: int = Field(default=0, description="Daily Cash percentage points")
    memo: str
    pending: bool = False
    declined: bool = False

    def to_csv_row(self, explicit_sign: bool = False) -> dict[str, str]:
        """Convert to CSV row dict.

        Commas are removed from free-text fields rather than escaped.

        Args:
            explicit_sign: Keep the minus sign on charges under one dollar
        """
        return {
            "Date": self.date.strftime("%m/%d/%y"),
            "Payee": self.payee.replace(",", ""),
            "Amount": format_cents(self.amount_in_cents, explicit_sign),
            "DailyCash": str(self.daily_cash),
            "Memo": self.memo.replace(",", ""),
            "Pending": "true" if self.pending else "false",
            "Declined": "true" if self.declined else "false",
        }


def format_cents(cents: int, explicit_sign: bool = False) -> str:
    """Render cents as a decimal dollar string, e.g. -1234 -> "-12.34".

    Dollars use truncating division and cents the absolute remainder, so by
    default -34 renders as "0.34". With ``explicit_sign`` it renders "-0.34".
    """
    dollars = abs(cents) // 100
    remainder = abs(cents) % 100
    if cents < 0 and (dollars or explicit_sign):
        return f"-{dollars}.{remainder:02d}"
    return f"{dollars}.{remainder:02d}"


class FailureReason(str, Enum):
    """Why a block was dropped or why one of its fields fell back to a default."""

    TRUNCATED_BLOCK = "truncated_block"
    UNBOUNDED_DRAIN = "unbounded_drain"
    MISSING_DAILY_CASH = "missing_daily_cash"
    SKIPPED_LINES = "skipped_lines"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_DAILY_CASH = "invalid_daily_cash"
    UNRESOLVED_DATE = "unresolved_date"


class ParseIssue(BaseModel):
    """A problem found while parsing one transaction block."""

    reason: FailureReason
    block_index: int = Field(description="Position of the block in the screenshot order")
    dropped: bool = Field(default=False, description="True when the block produced no transaction")
    detail: str = ""
    lines: list[str] = Field(default_factory=list, description="Tokens consumed by the block")


class ParseResult(BaseModel):
    """Transactions parsed from one line sequence together with their issues."""

    transactions: list[Transaction] = Field(default_factory=list)
    issues: list[ParseIssue] = Field(default_factory=list)
    failed_sources: list[str] = Field(
        default_factory=list, description="Inputs that could not be read at all"
    )

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def issues_for(self, index: int) -> list[ParseIssue]:
        """Get the issues attached to the transaction at ``index``."""
        return [
            issue for issue in self.issues
            if issue.block_index == index and not issue.dropped
        ]

    def dropped_issues(self) -> list[ParseIssue]:
        """Issues for blocks that were discarded without a transaction."""
        return [issue for issue in self.issues if issue.dropped]

    def flagged_indices(self) -> set[int]:
        """Indices of emitted transactions that carry at least one issue."""
        return {issue.block_index for issue in self.issues if not issue.dropped}

    def clean_transactions(self) -> list[Transaction]:
        """Transactions with no defaulted or unresolved fields."""
        flagged = self.flagged_indices()
        return [tx for i, tx in enumerate(self.transactions) if i not in flagged]

    def extend(self, other: "ParseResult") -> None:
        """Append another result, re-basing its block indices after ours."""
        offset = len(self.transactions)
        self.transactions.extend(other.transactions)
        self.issues.extend(
            issue.model_copy(update={"block_index": issue.block_index + offset})
            for issue in other.issues
        )
        self.failed_sources.extend(other.failed_sources)


class ParserSettings(BaseModel):
    """Tunable parser, OCR and export options."""

    daily_cash_lookahead: int | None = Field(
        default=None,
        ge=1,
        description="Max tokens scanned for a Daily Cash line (None = until found)",
    )
    ocr_lang: str = Field(default="eng", description="Tesseract language code")
    ocr_config: str = Field(default="", description="Extra tesseract CLI options")
    exclude_pending: bool = False
    exclude_declined: bool = False
    drop_flagged: bool = Field(
        default=False, description="Drop transactions that carry parse issues"
    )
    explicit_sign: bool = Field(
        default=False, description="Keep the minus sign on charges under one dollar"
    )
