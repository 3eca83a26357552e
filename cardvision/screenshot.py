"""Screenshot decoding and OCR into the line sequence the parser consumes."""

from datetime import datetime
from pathlib import Path

import pytesseract
from loguru import logger
from PIL import Image, UnidentifiedImageError

from cardvision.logging_config import DebugArtifacts

EXIF_IFD = 0x8769
EXIF_DATETIME = 306
EXIF_DATETIME_ORIGINAL = 36867
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


class ScreenshotError(Exception):
    """Error decoding or recognising a screenshot."""

    pass


def split_lines(text: str) -> list[str]:
    """Split OCR output into stripped, non-empty lines in reading order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def _exif_datetime(image: Image.Image) -> datetime | None:
    exif = image.getexif()
    candidates = [exif.get_ifd(EXIF_IFD).get(EXIF_DATETIME_ORIGINAL), exif.get(EXIF_DATETIME)]
    for value in candidates:
        if not value:
            continue
        try:
            return datetime.strptime(str(value).strip("\x00 "), EXIF_DATE_FORMAT)
        except ValueError:
            logger.debug(f"Ignoring unparsable EXIF date: {value!r}")
    return None


def capture_date(image_path: Path) -> datetime:
    """Determine when a screenshot was taken.

    Uses the EXIF capture time when present, otherwise the file's
    modification time.
    """
    if not image_path.exists():
        raise FileNotFoundError(f"Screenshot not found: {image_path}")

    try:
        with Image.open(image_path) as image:
            taken = _exif_datetime(image)
    except (UnidentifiedImageError, OSError) as e:
        raise ScreenshotError(f"Cannot decode {image_path.name}: {e}") from e

    if taken is not None:
        logger.debug(f"{image_path.name}: EXIF capture time {taken}")
        return taken

    modified = datetime.fromtimestamp(image_path.stat().st_mtime)
    logger.debug(f"{image_path.name}: no EXIF capture time, using mtime {modified}")
    return modified


class ScreenshotReader:
    """Reads transaction-list screenshots into OCR line sequences using tesseract."""

    def __init__(
        self,
        lang: str = "eng",
        config: str = "",
        debug_artifacts: DebugArtifacts | None = None,
    ):
        self.lang = lang
        self.config = config
        self.debug_artifacts = debug_artifacts or DebugArtifacts()

    def _ocr_image(self, image: Image.Image) -> str:
        """Extract text from image using OCR."""
        if image.mode != "RGB":
            image = image.convert("RGB")
        return pytesseract.image_to_string(image, lang=self.lang, config=self.config)

    def read_lines(self, image_path: Path) -> list[str]:
        """OCR a screenshot into lines.

        Args:
            image_path: Path to the screenshot image

        Returns:
            Non-empty text lines, top to bottom
        """
        if not image_path.exists():
            raise FileNotFoundError(f"Screenshot not found: {image_path}")

        logger.info(f"Reading screenshot: {image_path.name}")
        try:
            with Image.open(image_path) as image:
                image.load()
                self.debug_artifacts.save_image(f"{image_path.stem}_input", image)
                text = self._ocr_image(image)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise ScreenshotError(f"OCR failed for {image_path.name}: {e}") from e
        except (UnidentifiedImageError, OSError) as e:
            raise ScreenshotError(f"Cannot decode {image_path.name}: {e}") from e

        self.debug_artifacts.save_text(f"{image_path.stem}_ocr", text)
        lines = split_lines(text)
        logger.debug(f"{image_path.name}: {len(lines)} OCR line(s)")
        return lines
