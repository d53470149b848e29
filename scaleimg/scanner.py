from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence, Union
import logging
import os
import re

from .errors import EnumerationError, PathResolutionError


logger = logging.getLogger(__name__)

SUPPORTED_EXTS = {".gif", ".jpg", ".jpeg", ".png"}

_DIGITS = re.compile(r"(\d+)")


def natural_key(text: Union[str, Path]) -> tuple:
    """
    Sort key that compares embedded numbers by value, case-insensitively.

    "img2.png" < "img10.png". re.split with a capture group always starts
    with a text chunk, so the int/str slots line up between keys.
    """
    s = str(text)
    parts = [int(chunk) if chunk.isdigit() else chunk.lower() for chunk in _DIGITS.split(s)]
    return (parts, s)


def _is_relative_to(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
        return True
    except ValueError:
        return False


def resolve_root(path: Union[str, Path]) -> Path:
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PathResolutionError(str(path), str(e)) from e


def dedupe_roots(paths: Sequence[Union[str, Path]]) -> List[Path]:
    """
    Canonicalise the given roots and drop any that live inside another.

    An empty sequence means the current working directory. The result is
    sorted so callers get the same order whatever order the roots came in.
    """
    if not paths:
        paths = [Path.cwd()]

    kept: set[Path] = set()
    for p in paths:
        actual = resolve_root(p)
        if actual in kept:
            continue

        add = True
        for one in list(kept):
            if _is_relative_to(actual, one):
                add = False
                break
            if _is_relative_to(one, actual):
                kept.discard(one)
        if add:
            kept.add(actual)

    return sorted(kept, key=natural_key)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _is_supported(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in SUPPORTED_EXTS


def iter_images(root: Path) -> Iterable[Path]:
    """
    Yield supported, non-hidden image files under root.

    A hidden root yields nothing, as do hidden directories and their whole
    subtree. Any error while walking aborts the scan with EnumerationError.
    """
    root = Path(root)
    if _is_hidden(root.name):
        logger.debug("Skipping hidden root %s", root)
        return

    if root.is_file():
        if _is_supported(root.name):
            yield root
        return

    def _fail(err: OSError) -> None:
        raise EnumerationError(err.filename or str(root), err.strerror or str(err)) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_fail):
        dirnames[:] = [d for d in dirnames if not _is_hidden(d)]
        for name in filenames:
            if _is_hidden(name) or not _is_supported(name):
                continue
            yield Path(dirpath) / name


def collect_images(roots: Sequence[Path]) -> List[Path]:
    """Every image under every root, in natural order."""
    found: List[Path] = []
    for root in roots:
        before = len(found)
        found.extend(iter_images(root))
        logger.debug("Found %d image(s) under %s", len(found) - before, root)

    found.sort(key=natural_key)
    return found
