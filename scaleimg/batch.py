from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence
import logging
import os

from .engine import process_image
from .results import Disposition, FileResult, RunStatus, StatusSnapshot
from .scanner import collect_images, dedupe_roots
from .settings import RunOptions


logger = logging.getLogger(__name__)

Worker = Callable[[Path, RunOptions], FileResult]


def default_workers() -> int:
    return 2 * (os.cpu_count() or 1)


def _run_one(path: Path, opts: RunOptions, status: RunStatus, worker: Worker) -> FileResult:
    status.total.increment()
    try:
        result = worker(path, opts)
    except Exception as e:
        # A fault outside the worker's own error handling; keep the pool alive.
        logger.exception("Unexpected failure while processing %s", path)
        result = FileResult(src_path=path, disposition=Disposition.ERROR, error=str(e) or type(e).__name__)
    status.record(result.disposition)
    return result


def process_batch(
    paths: Sequence[Path],
    opts: RunOptions,
    progress_callback: Optional[Callable[[int, int], None]] = None,
    worker: Worker = process_image,
) -> tuple[List[FileResult], StatusSnapshot]:
    """
    Run every path through `worker` on a bounded thread pool.

    Blocks until all tasks are done. Results come back in the order of
    `paths`, not completion order.
    """
    status = RunStatus()
    total = len(paths)
    max_workers = opts.workers or default_workers()
    logger.info("Processing %d image(s) with %d worker(s)", total, max_workers)

    by_future: Dict[Future, int] = {}
    results: List[Optional[FileResult]] = [None] * total

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="scaleimg") as executor:
        for idx, path in enumerate(paths):
            by_future[executor.submit(_run_one, Path(path), opts, status, worker)] = idx

        for done, future in enumerate(as_completed(by_future), start=1):
            results[by_future[future]] = future.result()
            if progress_callback:
                progress_callback(done, total)

    summary = status.snapshot()
    logger.info(
        "Finished: %d examined, %d converted, %d already correct, %d unsuitable, %d half suitable, %d errors",
        summary.total,
        summary.converted,
        summary.already_correct,
        summary.unsuitable,
        summary.half,
        summary.errors,
    )
    return [r for r in results if r is not None], summary


def run(
    roots: Sequence[str],
    opts: RunOptions,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> tuple[List[FileResult], StatusSnapshot]:
    """
    Validate, resolve roots, enumerate and process.

    Raises ConfigError, PathResolutionError or EnumerationError before any
    file is touched; everything after that is reported per file.
    """
    opts.validate()
    actual_roots = dedupe_roots(roots)
    for root in actual_roots:
        logger.info("Scanning %s", root)
    images = collect_images(actual_roots)
    return process_batch(images, opts, progress_callback=progress_callback)
