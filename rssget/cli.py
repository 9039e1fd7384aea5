"""Command-line interface for the rssget application."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_app_config
from .models import Order
from .renderers import RenderOptions
from .runner import RunConfig, execute

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Fetch RSS feeds concurrently and print their items."
    )
    parser.add_argument(
        "urls",
        nargs="*",
        metavar="URL",
        help="RSS feed urls. Replaces the feeds from the config file when given.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration XML file (default: ~/.config/rssget/config.xml).",
    )
    parser.add_argument(
        "--display-by",
        type=Order.parse,
        default=None,
        metavar="{date,channel}",
        help="Display ordering for RSS items. Overrides config.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum number of feeds fetched at once. Overrides config.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds. Overrides config.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show the progress bar.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )
    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_app_config(args.config)

        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        app_config = app_config.override_with(args.urls, args.display_by)

        config = RunConfig(
            sources=app_config.sources,
            order=app_config.display_by,
            concurrency=(
                args.concurrency
                if args.concurrency is not None
                else app_config.concurrency
            ),
            timeout=args.timeout if args.timeout is not None else app_config.timeout,
            progress=app_config.progress and not args.no_progress,
            render_options=RenderOptions(width=app_config.width),
        )
        logger.info(
            "Running with %d feeds ordered by %s",
            len(config.sources),
            config.order.value,
        )

        result = execute(config)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    for error in result.errors:
        print(error, file=sys.stderr)

    if not result.items:
        print("No RSS items found.", file=sys.stderr)
        return 0

    print(result.output_text)
    return 0
