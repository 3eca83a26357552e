"""Export card transactions from OCR'd transaction-list screenshots."""

from cardvision.export import to_csv
from cardvision.models import (
    FailureReason,
    IntermediateTransaction,
    ParseIssue,
    ParseResult,
    ParserSettings,
    Transaction,
)
from cardvision.parser import OCRTextParser

__all__ = [
    "FailureReason",
    "IntermediateTransaction",
    "OCRTextParser",
    "ParseIssue",
    "ParseResult",
    "ParserSettings",
    "Transaction",
    "to_csv",
]
