"""Logging configuration using loguru."""

import json
import sys
from pathlib import Path

from loguru import logger
from pydantic import BaseModel


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: Enable info-level logging
        debug: Enable debug-level logging (overrides verbose)
        log_file: Also write the full debug-level trace to this file
    """
    # Remove default handler
    logger.remove()

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = "WARNING"

    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    if log_file is not None:
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            encoding="utf-8",
        )


class DebugArtifacts:
    """Manage debug artifact saving."""

    def __init__(self, output_dir: Path | None = None):
        self.enabled = output_dir is not None
        self.output_dir = output_dir
        if self.enabled and output_dir:
            output_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Debug artifacts will be saved to: {output_dir}")

    def save_image(self, name: str, image) -> Path | None:
        """Save a PIL image as debug artifact.

        Args:
            name: Base name for the file (without extension)
            image: PIL Image to save

        Returns:
            Path to saved file, or None if disabled
        """
        if not self.enabled or not self.output_dir:
            return None
        path = self.output_dir / f"{name}.png"
        image.save(path)
        logger.debug(f"Saved debug image: {path}")
        return path

    def save_text(self, name: str, content: str) -> Path | None:
        """Save text content, such as raw OCR lines, as debug artifact."""
        if not self.enabled or not self.output_dir:
            return None
        path = self.output_dir / f"{name}.txt"
        path.write_text(content, encoding="utf-8")
        logger.debug(f"Saved debug text: {path}")
        return path

    def save_json(self, name: str, data: BaseModel | list | dict) -> Path | None:
        """Save JSON data as debug artifact.

        Models, such as a parse result or a list of intermediate
        transactions, are dumped in JSON mode first.

        Args:
            name: Base name for the file (without extension)
            data: Model, list of models, or plain data to serialize

        Returns:
            Path to saved file, or None if disabled
        """
        if not self.enabled or not self.output_dir:
            return None
        path = self.output_dir / f"{name}.json"
        path.write_text(json.dumps(_jsonable(data), indent=2, default=str), encoding="utf-8")
        logger.debug(f"Saved debug JSON: {path}")
        return path


def _jsonable(data: BaseModel | list | dict) -> list | dict:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [item.model_dump(mode="json") if isinstance(item, BaseModel) else item for item in data]
    return data
