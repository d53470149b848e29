from __future__ import annotations

from pathlib import Path, PurePath
from typing import Union
import os
import re

from .settings import RunOptions


HALF_GLYPH = "½"

# A dimension annotation like "1920x1080" or one written by a previous run
# ("2x3", "1½x½"). The " - " before it goes too, but only when the
# annotation ends the name, as our own suffix does.
_TOKEN = r"(?:[0-9]+½?|½)[xX](?:[0-9]+½?|½)"
_DIMENSIONS_RE = re.compile(r"(?:\s+-\s*(?=" + _TOKEN + r"\s*$))?" + _TOKEN)
_SPACES_RE = re.compile(r"\s+")


def dimension_label(size: int, multiple: int) -> str:
    """
    Express size in grid cells of `multiple`, rounding partial cells to "½".

    140/140 -> "1", 150/140 -> "1½", 70/140 -> "½".
    """
    whole, rest = divmod(size, multiple)
    if rest == 0:
        return str(whole)
    if whole == 0:
        return HALF_GLYPH
    return f"{whole}{HALF_GLYPH}"


def clean_base_name(name: str) -> str:
    name = _DIMENSIONS_RE.sub("", name)
    return _SPACES_RE.sub(" ", name).strip()


def _relative_to_anchor(path: PurePath) -> PurePath:
    # Absolute sources are mirrored below the destination root.
    if path.anchor:
        return path.relative_to(path.anchor)
    return path


def output_path_for(
    opts: RunOptions,
    src_path: Union[str, Path],
    width: int,
    height: int,
) -> Path:
    """
    Destination for an image written into output_root.

    width/height are the dimensions of the image being written. Underscores
    anywhere in the path become spaces and any old dimension annotation is
    dropped from the file name, so feeding our own output back in lands on
    the same name.
    """
    label = f"{dimension_label(width, opts.resize_multiple)}x{dimension_label(height, opts.resize_multiple)}"

    stem_path = os.path.splitext(str(src_path))[0].replace("_", " ")
    rel = _relative_to_anchor(PurePath(stem_path))
    base = clean_base_name(rel.name)

    return Path(opts.output_root) / rel.parent / f"{base} - {label}.png"


def unsuitable_path_for(opts: RunOptions, src_path: Union[str, Path]) -> Path:
    return Path(opts.unsuitable_root) / _relative_to_anchor(PurePath(src_path))
