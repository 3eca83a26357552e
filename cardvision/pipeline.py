"""Pipeline orchestrator for turning screenshots into exported transactions."""

import time
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path

from loguru import logger

from cardvision.export import select_transactions, write_csv
from cardvision.logging_config import DebugArtifacts
from cardvision.models import ParseResult, ParserSettings, Transaction, format_cents
from cardvision.parser.base import BaseParser
from cardvision.parser.ocr_text import OCRTextParser
from cardvision.screenshot import ScreenshotError, ScreenshotReader, capture_date


class Pipeline:
    """Orchestrates the OCR, parsing and export flow."""

    def __init__(
        self,
        settings: ParserSettings | None = None,
        debug_artifacts: DebugArtifacts | None = None,
        parser: BaseParser | None = None,
        reader: ScreenshotReader | None = None,
    ):
        """Initialize the pipeline.

        Args:
            settings: Parser, OCR and export settings
            debug_artifacts: Optional debug artifact manager
            parser: Optional custom parser (defaults to OCRTextParser)
            reader: Optional custom screenshot reader
        """
        self.settings = settings or ParserSettings()
        self.debug_artifacts = debug_artifacts or DebugArtifacts()
        self._parser = parser or OCRTextParser(
            settings=self.settings,
            debug_artifacts=self.debug_artifacts,
        )
        self._reader = reader or ScreenshotReader(
            lang=self.settings.ocr_lang,
            config=self.settings.ocr_config,
            debug_artifacts=self.debug_artifacts,
        )

    def process_lines(
        self,
        lines: Sequence[str],
        screenshot_date: date | datetime,
        trace: bool = False,
    ) -> ParseResult:
        """Parse an already-recognised OCR line sequence."""
        return self._parser.parse(lines, screenshot_date, trace=trace)

    def process(
        self,
        image_paths: list[Path],
        screenshot_date: datetime | None = None,
        trace: bool = False,
    ) -> ParseResult:
        """OCR and parse screenshots, concatenating results in argument order.

        Args:
            image_paths: Screenshot files to process
            screenshot_date: Capture time override; detected per file when None
            trace: Log each parsing step at debug level

        Returns:
            Combined parse result
        """
        pipeline_start = time.perf_counter()
        logger.info(f"Processing {len(image_paths)} screenshot(s)")

        combined = ParseResult()
        for i, image_path in enumerate(image_paths):
            logger.info(f"[{i + 1}/{len(image_paths)}] {image_path.name}")
            try:
                reference = screenshot_date or capture_date(image_path)
                lines = self._reader.read_lines(image_path)
            except (ScreenshotError, FileNotFoundError) as e:
                logger.error(f"Failed to read {image_path.name}: {e}")
                combined.failed_sources.append(str(image_path))
                continue
            combined.extend(self._parser.parse(lines, reference, trace=trace, name=image_path.stem))

        total_time = time.perf_counter() - pipeline_start
        logger.info(
            f"[TIMING] Pipeline total: {total_time:.2f}s "
            f"({len(combined.transactions)} transactions)"
        )
        return combined

    def export(self, result: ParseResult, output_path: Path) -> list[Transaction]:
        """Apply the export filters from settings and write the CSV file.

        Returns:
            The transactions written
        """
        transactions = select_transactions(
            result,
            exclude_pending=self.settings.exclude_pending,
            exclude_declined=self.settings.exclude_declined,
            drop_flagged=self.settings.drop_flagged,
        )
        skipped = len(result.transactions) - len(transactions)
        if skipped:
            logger.info(f"Filtered out {skipped} transaction(s) before export")
        write_csv(transactions, output_path, explicit_sign=self.settings.explicit_sign)
        return transactions

    def print_summary(self, result: ParseResult) -> None:
        """Print a summary of parsed transactions and issues."""
        transactions = result.transactions
        if not transactions and not result.issues and not result.failed_sources:
            print("No transactions processed.")
            return

        charges = sum(tx.amount_in_cents for tx in transactions if tx.amount_in_cents < 0)
        credits = sum(tx.amount_in_cents for tx in transactions if tx.amount_in_cents >= 0)

        print("\n" + "=" * 50)
        print("SUMMARY")
        print("=" * 50)
        print(f"Total transactions: {len(transactions)}")
        print(f"  Pending:  {sum(tx.pending for tx in transactions):4d}")
        print(f"  Declined: {sum(tx.declined for tx in transactions):4d}")
        print(f"  Charges:  ${format_cents(charges, explicit_sign=True):>12s}")
        print(f"  Credits:  ${format_cents(credits, explicit_sign=True):>12s}")

        if result.issues:
            print(f"\nIssues ({len(result.issues)}):")
            for issue in result.issues:
                status = "dropped" if issue.dropped else "flagged"
                print(f"  block {issue.block_index:3d} {status:8s} {issue.reason.value}: {issue.detail}")

        if result.failed_sources:
            print(f"\nUnreadable screenshots ({len(result.failed_sources)}):")
            for source in result.failed_sources:
                print(f"  {source}")

        print("=" * 50)
