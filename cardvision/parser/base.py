"""Abstract base class for transaction-list parsers."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, datetime

from cardvision.logging_config import DebugArtifacts
from cardvision.models import ParseResult


class BaseParser(ABC):
    """Abstract base class for transaction-list parsers.

    Subclasses should implement parsing logic for a specific
    screenshot layout.
    """

    def __init__(self, debug_artifacts: DebugArtifacts | None = None):
        self.debug_artifacts = debug_artifacts or DebugArtifacts()

    @abstractmethod
    def parse(
        self,
        lines: Sequence[str],
        screenshot_date: date | datetime,
        trace: bool = False,
        name: str = "screenshot",
    ) -> ParseResult:
        """Extract transactions from an OCR line sequence.

        Args:
            lines: OCR lines in top-to-bottom order
            screenshot_date: When the screenshot was captured
            trace: Log each parsing step at debug level
            name: Label used for debug artifacts

        Returns:
            Parsed transactions with any issues found
        """
        pass

    @abstractmethod
    def supported_formats(self) -> list[str]:
        """Return list of supported screenshot layouts."""
        pass
