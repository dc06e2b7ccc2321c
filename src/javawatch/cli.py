"""
Command line entry point.

Exit status is 0 when the archive is up to date (updated or unchanged) and 1
when the page could not be fetched, held no release, or the archive could not
be written.
"""

import argparse
import logging
from typing import List, Optional

from . import __version__, config
from .core.controller import JavaWatchController, RunConfig
from .core.errors import JavaWatchError
from .core.logger import get_logger, initialize_logging
from .utils.validators import validate_url


def _source_url(value: str) -> str:
    is_valid, normalized_url, error = validate_url(value)
    if not is_valid:
        raise argparse.ArgumentTypeError(f"invalid URL {value!r}: {error}")
    return normalized_url


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="javawatch",
        description="Scrape the Java download page and update the versioned release archive.",
    )
    parser.add_argument("-o", "--output-dir", default=config.OUTPUT_DIR,
                        help=f"Directory for {config.OUTPUT_FILENAME} (default: %(default)s)")
    parser.add_argument("-f", "--force", action="store_true",
                        help="Update the archive even if the latest version is unchanged.")
    parser.add_argument("--url", type=_source_url, default=config.SOURCE_URL,
                        help="Download page to scrape (default: %(default)s)")
    parser.add_argument("--fetcher", choices=config.FETCHERS, default="browser",
                        help="Load the page with a headless browser or a plain HTTP request.")
    parser.add_argument("--timeout", type=_positive_float, default=config.PAGE_TIMEOUT,
                        help="Page-load timeout in seconds (default: %(default)s)")
    parser.add_argument("--save-html", action="store_true",
                        help="Keep a snapshot of the fetched page in <output-dir>/snapshots.")
    parser.add_argument("--journal", action="store_true",
                        help="Append a record of this run to <output-dir>/runs.jsonl.")
    parser.add_argument("--log-dir", default=config.LOG_DIR,
                        help="Directory for log files (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output on the console.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None, fetcher_factory=None, clock=None) -> int:
    args = build_parser().parse_args(argv)

    initialize_logging(args.log_dir, logging.DEBUG if args.verbose else logging.INFO)
    logger = get_logger('cli')

    run_config = RunConfig(
        output_dir=args.output_dir,
        source_url=args.url,
        force=args.force,
        fetcher=args.fetcher,
        timeout=args.timeout,
        save_html=args.save_html,
        journal=args.journal,
    )
    controller = JavaWatchController(run_config, logger=logger, fetcher_factory=fetcher_factory, clock=clock)

    try:
        summary = controller.run()
    except JavaWatchError as e:
        logger.error(f"Run failed: {e}")
        return 1
    finally:
        counts = controller.errors.summary()
        if counts['errors'] or counts['warnings']:
            logger.info(f"Run finished with {counts['errors']} error(s) and {counts['warnings']} warning(s)")

    if summary.changed:
        logger.info(f"Done: {summary.archive_path} now lists {summary.version} as latest")
    else:
        logger.info(f"Done: {summary.version} unchanged, nothing written")
    return 0
