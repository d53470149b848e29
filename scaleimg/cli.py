from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from . import __version__
from .batch import run
from .errors import ScaleImgError
from .logging_config import configure_logging
from .report import build_report, format_summary, save_report_json
from .settings import (
    DEFAULT_IN_MULTIPLE,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_RESIZE_MULTIPLE,
    DEFAULT_UNSUITABLE_ROOT,
    RunOptions,
)


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="scaleimg",
        description="Rescale images whose dimensions sit on a grid to a new grid size.",
    )
    p.add_argument("paths", nargs="*", metavar="path", help="Files and/or folders to scan (default: current directory)")

    # Destinations
    p.add_argument(
        "--output",
        dest="output_root",
        default=DEFAULT_OUTPUT_ROOT,
        help=f"Location to store the converted images (default: {DEFAULT_OUTPUT_ROOT})",
    )
    p.add_argument(
        "--unsuitable",
        dest="unsuitable_root",
        default=DEFAULT_UNSUITABLE_ROOT,
        help=f"Location to store the images that were unsuitable for conversion (default: {DEFAULT_UNSUITABLE_ROOT})",
    )

    # Grid
    p.add_argument(
        "--in-multiple",
        "--in_multiple",
        type=int,
        default=DEFAULT_IN_MULTIPLE,
        help=f"Only process images whose dimensions are exact multiples of this value (default: {DEFAULT_IN_MULTIPLE})",
    )
    p.add_argument(
        "--resize-multiple",
        "--resize_multiple",
        type=int,
        default=DEFAULT_RESIZE_MULTIPLE,
        help=f"Resize images to a multiple of this value (default: {DEFAULT_RESIZE_MULTIPLE})",
    )
    p.add_argument(
        "--half",
        action="store_true",
        help="Also process images whose width or height is half of an exact multiple of --in-multiple",
    )

    # Run
    p.add_argument("--workers", type=int, default=None, help="Worker threads (default: 2 x CPU count)")
    p.add_argument("--report", type=Path, default=None, help="Write a JSON report of every file to this path")
    p.add_argument("--no-progress", action="store_true", help="Do not show a progress bar")
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (default: $SCALEIMG_LOG_LEVEL or WARNING)",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    opts = RunOptions(
        output_root=args.output_root,
        unsuitable_root=args.unsuitable_root,
        in_multiple=args.in_multiple,
        resize_multiple=args.resize_multiple,
        half=bool(args.half),
        workers=args.workers,
    )

    bar = None
    if not args.no_progress:
        bar = tqdm(total=0, unit="img", desc="Scaling", leave=False, file=sys.stderr)

    def on_progress(done: int, total: int) -> None:
        if bar.total != total:
            bar.total = total
        bar.update(done - bar.n)

    try:
        results, summary = run(args.paths, opts, progress_callback=on_progress if bar else None)
    except ScaleImgError as e:
        logger.debug("Run aborted", exc_info=True)
        print(f"scaleimg: {e}", file=sys.stderr)
        return EXIT_FATAL
    finally:
        if bar is not None:
            bar.close()

    for line in format_summary(summary):
        print(line)

    if args.report:
        save_report_json(build_report(results, summary, opts), args.report)
        print(f"Report written: {args.report}")

    return EXIT_OK
