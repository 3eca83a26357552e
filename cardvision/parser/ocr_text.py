"""Parser for the OCR text of a card app transaction-list screenshot."""

from collections.abc import Sequence
from datetime import date, datetime

from loguru import logger

from cardvision.logging_config import DebugArtifacts
from cardvision.models import FailureReason, ParseIssue, ParseResult, ParserSettings
from cardvision.parser.base import BaseParser
from cardvision.parser.finalizer import finalize
from cardvision.parser.line_stack import LineStack
from cardvision.parser.segmenter import SegmentationError, TransactionSegmenter


class OCRTextParser(BaseParser):
    """Segments OCR lines into transactions and finalizes their fields."""

    def __init__(
        self,
        settings: ParserSettings | None = None,
        debug_artifacts: DebugArtifacts | None = None,
    ):
        super().__init__(debug_artifacts)
        self.settings = settings or ParserSettings()

    def parse(
        self,
        lines: Sequence[str],
        screenshot_date: date | datetime,
        trace: bool = False,
        name: str = "screenshot",
    ) -> ParseResult:
        """Extract transactions from an OCR line sequence.

        Parsing stops at the first block that cannot be completed; everything
        before it is still returned and the failed block is reported as a
        dropped issue.

        Args:
            lines: OCR lines in top-to-bottom order
            screenshot_date: When the screenshot was captured
            trace: Log each parsing step at debug level
            name: Label used for debug artifacts

        Returns:
            Parsed transactions with any issues found
        """
        logger.info(f"Parsing {len(lines)} OCR line(s) captured {screenshot_date}")
        self.debug_artifacts.save_text(f"{name}_lines", "\n".join(lines))

        segmenter = TransactionSegmenter(
            LineStack(lines),
            daily_cash_lookahead=self.settings.daily_cash_lookahead,
            trace=trace,
        )
        result = ParseResult()
        intermediates = []

        while True:
            index = len(result.transactions)
            try:
                intermediate = segmenter.next_transaction()
            except SegmentationError as e:
                logger.warning(f"Dropped block {index}: {e}")
                result.issues.append(ParseIssue(
                    reason=e.reason,
                    block_index=index,
                    dropped=True,
                    detail=e.detail,
                    lines=e.lines,
                ))
                break

            if intermediate is None:
                break
            intermediates.append(intermediate)

            if segmenter.missing_daily_cash:
                result.issues.append(ParseIssue(
                    reason=FailureReason.MISSING_DAILY_CASH,
                    block_index=index,
                    detail=(
                        f"no Daily Cash line within "
                        f"{self.settings.daily_cash_lookahead} line(s)"
                    ),
                ))

            if segmenter.skipped_lines:
                logger.warning(f"Block {index}: skipped lines before Daily Cash: {segmenter.skipped_lines!r}")
                result.issues.append(ParseIssue(
                    reason=FailureReason.SKIPPED_LINES,
                    block_index=index,
                    detail=(
                        f"discarded {len(segmenter.skipped_lines)} line(s) "
                        f"before the Daily Cash line"
                    ),
                    lines=segmenter.skipped_lines,
                ))

            transaction, issues = finalize(intermediate, screenshot_date, block_index=index)
            result.transactions.append(transaction)
            result.issues.extend(issues)

        self.debug_artifacts.save_json(f"{name}_intermediate", intermediates)
        self.debug_artifacts.save_json(f"{name}_result", result)

        logger.info(
            f"Extracted {len(result.transactions)} transaction(s) "
            f"with {len(result.issues)} issue(s)"
        )
        return result

    def supported_formats(self) -> list[str]:
        """Return list of supported screenshot layouts."""
        return ["apple-card"]
