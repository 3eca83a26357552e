"""CLI entry point for exporting card transactions from screenshots."""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from cardvision.logging_config import DebugArtifacts, configure_logging
from cardvision.models import ParserSettings, ParseResult
from cardvision.pipeline import Pipeline
from cardvision.screenshot import ScreenshotError

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp"}

DATE_FORMATS = ["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"]


class SettingsError(Exception):
    """Settings file missing or invalid."""

    pass


def load_settings(settings_path: Path | None) -> ParserSettings:
    """Load parser settings from a JSON file, or defaults when no path is given.

    Raises:
        SettingsError: If the file is missing or does not validate
    """
    if settings_path is None:
        return ParserSettings()

    if not settings_path.exists():
        raise SettingsError(f"Settings file not found: {settings_path}")

    try:
        with open(settings_path, encoding="utf-8") as f:
            data = json.load(f)
        return ParserSettings.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise SettingsError(f"Failed to parse settings file: {e}") from e


def parse_datetime(value: str) -> datetime:
    """argparse type for the screenshot capture time."""
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise argparse.ArgumentTypeError(
        f"invalid date {value!r} (expected YYYY-MM-DD or YYYY-MM-DD HH:MM)"
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("transactions.csv"),
        help="Output CSV file path (default: transactions.csv)",
    )
    parser.add_argument(
        "-s",
        "--settings",
        type=Path,
        default=None,
        help="Settings JSON file (default: built-in settings)",
    )
    parser.add_argument(
        "--daily-cash-lookahead",
        type=int,
        default=None,
        help="Max lines scanned for a Daily Cash percentage (default: unlimited)",
    )
    parser.add_argument(
        "--exclude-pending",
        action="store_true",
        help="Leave pending transactions out of the export",
    )
    parser.add_argument(
        "--exclude-declined",
        action="store_true",
        help="Leave declined transactions out of the export",
    )
    parser.add_argument(
        "--drop-flagged",
        action="store_true",
        help="Leave out transactions whose amount, Daily Cash or date fell back to a default",
    )
    parser.add_argument(
        "--explicit-sign",
        action="store_true",
        help="Keep the minus sign on charges under one dollar (default: -0.34 renders as 0.34)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output, parser tracing and save artifacts",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Export card transactions from transaction-list screenshots to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    convert_parser = subparsers.add_parser(
        "convert",
        help="OCR screenshots and export their transactions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s IMG_0001.png -o transactions.csv
  %(prog)s screenshots/*.png -o all.csv --exclude-declined
  %(prog)s IMG_0001.png --date "2021-01-20 09:30"
        """,
    )
    convert_parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="Screenshot image(s) to process",
    )
    convert_parser.add_argument(
        "--date",
        type=parse_datetime,
        default=None,
        help="Capture time of the screenshots (default: EXIF time or file mtime)",
    )
    convert_parser.add_argument(
        "--ocr-lang",
        default=None,
        help="Tesseract language code (default: eng)",
    )
    _add_common_arguments(convert_parser)

    text_parser = subparsers.add_parser(
        "parse-text",
        help="Parse OCR lines from a text file (one line per OCR line)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s ocr.txt --date 2021-01-20 -o transactions.csv
  cat ocr.txt | %(prog)s - --date "2021-01-20 09:30"
        """,
    )
    text_parser.add_argument(
        "input",
        help="Text file with OCR lines, or - for stdin",
    )
    text_parser.add_argument(
        "--date",
        type=parse_datetime,
        required=True,
        help="Capture time of the screenshot the lines came from",
    )
    _add_common_arguments(text_parser)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    return args


def resolve_settings(args: argparse.Namespace) -> ParserSettings:
    """Load the settings file and apply command line overrides."""
    settings = load_settings(args.settings)
    overrides: dict = {}
    if args.daily_cash_lookahead is not None:
        overrides["daily_cash_lookahead"] = args.daily_cash_lookahead
    if getattr(args, "ocr_lang", None):
        overrides["ocr_lang"] = args.ocr_lang
    for flag in ("exclude_pending", "exclude_declined", "drop_flagged", "explicit_sign"):
        if getattr(args, flag):
            overrides[flag] = True
    if overrides:
        settings = ParserSettings.model_validate({**settings.model_dump(), **overrides})
    return settings


def _finish(pipeline: Pipeline, result: ParseResult, args: argparse.Namespace) -> int:
    if not result.transactions:
        if result.issues or result.failed_sources:
            pipeline.print_summary(result)
        print("No transactions found.")
        return 1

    written = pipeline.export(result, args.output)

    if args.verbose or args.debug or result.has_issues or result.failed_sources:
        pipeline.print_summary(result)

    print(f"\n{len(written)} transaction(s) written to: {args.output}")
    return 0


def run_convert(args: argparse.Namespace) -> int:
    """Run the convert command to OCR screenshots and export transactions."""
    image_paths: list[Path] = []
    for input_path in args.inputs:
        if not input_path.exists():
            logger.error(f"File not found: {input_path}")
            return 1
        if input_path.suffix.lower() not in IMAGE_SUFFIXES:
            logger.warning(f"Skipping non-image file: {input_path}")
            continue
        image_paths.append(input_path)

    if not image_paths:
        logger.error("No valid screenshot files provided")
        return 1

    try:
        settings = resolve_settings(args)
    except (SettingsError, ValidationError) as e:
        logger.error(str(e))
        return 1

    debug_artifacts = None
    if args.debug:
        debug_artifacts = DebugArtifacts(args.output.parent / "debug")

    try:
        pipeline = Pipeline(settings=settings, debug_artifacts=debug_artifacts)
        result = pipeline.process(image_paths, screenshot_date=args.date, trace=args.debug)
        return _finish(pipeline, result, args)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except (ScreenshotError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1


def run_parse_text(args: argparse.Namespace) -> int:
    """Run the parse-text command on an existing OCR line dump."""
    try:
        if args.input == "-":
            text = sys.stdin.read()
        else:
            input_path = Path(args.input)
            if not input_path.exists():
                logger.error(f"File not found: {input_path}")
                return 1
            text = input_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        logger.error(f"Input is not UTF-8 text: {e}")
        return 1

    try:
        settings = resolve_settings(args)
    except (SettingsError, ValidationError) as e:
        logger.error(str(e))
        return 1

    debug_artifacts = None
    if args.debug:
        debug_artifacts = DebugArtifacts(args.output.parent / "debug")

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    pipeline = Pipeline(settings=settings, debug_artifacts=debug_artifacts)
    result = pipeline.process_lines(lines, args.date, trace=args.debug)
    return _finish(pipeline, result, args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    log_file = args.output.parent / "debug" / "card-vision.log" if args.debug else None
    configure_logging(verbose=args.verbose, debug=args.debug, log_file=log_file)

    if args.command == "convert":
        return run_convert(args)
    elif args.command == "parse-text":
        return run_parse_text(args)
    else:
        logger.error(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
