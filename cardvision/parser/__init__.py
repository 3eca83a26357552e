"""OCR text parsing modules."""

from cardvision.parser.base import BaseParser
from cardvision.parser.ocr_text import OCRTextParser
from cardvision.parser.segmenter import SegmentationError, TransactionSegmenter

__all__ = ["BaseParser", "OCRTextParser", "SegmentationError", "TransactionSegmenter"]
