from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence
import logging
import os
import shutil
import tempfile

from PIL import Image

from .naming import output_path_for, unsuitable_path_for
from .results import Disposition, FileResult
from .settings import RunOptions


logger = logging.getLogger(__name__)

# Cubic convolution with a = -0.5, i.e. Catmull-Rom.
RESAMPLE = Image.Resampling.BICUBIC

# Inputs are local files the user picked; no pixel-count cap.
Image.MAX_IMAGE_PIXELS = None

# Everything that means "this one file could not be handled".
FILE_ERRORS = (OSError, ValueError)


@dataclass(frozen=True)
class Plan:
    disposition: Disposition
    # Target size when the image has to be resampled, else None.
    size: Optional[tuple[int, int]] = None


Rule = Callable[[int, int, RunOptions], Optional[Plan]]


def _converted(w: int, h: int, o: RunOptions) -> Optional[Plan]:
    if w % o.in_multiple == 0 and h % o.in_multiple == 0:
        return Plan(
            Disposition.CONVERTED,
            ((w // o.in_multiple) * o.resize_multiple, (h // o.in_multiple) * o.resize_multiple),
        )
    return None


def _already_correct(w: int, h: int, o: RunOptions) -> Optional[Plan]:
    if w % o.resize_multiple == 0 and h % o.resize_multiple == 0:
        return Plan(Disposition.ALREADY_CORRECT)
    return None


def _half_suitable(w: int, h: int, o: RunOptions) -> Optional[Plan]:
    if not o.half:
        return None

    step = o.in_multiple // 2

    def fits(dim: int) -> bool:
        return dim % o.in_multiple == 0 or dim % step == 0

    if fits(w) and fits(h):
        half_resize = o.resize_multiple // 2
        # Floor division, not rounding.
        return Plan(
            Disposition.HALF_SUITABLE,
            (((w * 2) // o.in_multiple) * half_resize, ((h * 2) // o.in_multiple) * half_resize),
        )
    return None


# Order matters: the first rule that matches wins.
RULES: Sequence[Rule] = (_converted, _already_correct, _half_suitable)


def classify(width: int, height: int, opts: RunOptions) -> Plan:
    for rule in RULES:
        plan = rule(width, height, opts)
        if plan is not None:
            return plan
    return Plan(Disposition.UNSUITABLE)


def process_image(src_path: Path, opts: RunOptions) -> FileResult:
    """
    Decode one image, classify it and write whatever its disposition calls for.

    Per-file failures come back as an ERROR result rather than raising.
    """
    src_path = Path(src_path)
    src_size: Optional[tuple[int, int]] = None

    try:
        with Image.open(src_path) as im:
            im.load()
            src_size = im.size
            plan = classify(im.width, im.height, opts)

            if plan.size is not None:
                out_path = output_path_for(opts, src_path, *plan.size)
                _write_png(_rescale(im, plan.size), out_path)
                out_size = plan.size
            elif plan.disposition is Disposition.ALREADY_CORRECT:
                out_path = output_path_for(opts, src_path, im.width, im.height)
                _copy_file(src_path, out_path)
                out_size = src_size
            else:
                out_path = unsuitable_path_for(opts, src_path)
                _copy_file(src_path, out_path)
                out_size = src_size
    except FILE_ERRORS as e:
        logger.error("%s: %s", src_path, e)
        return FileResult(
            src_path=src_path,
            disposition=Disposition.ERROR,
            src_size=src_size,
            error=str(e) or type(e).__name__,
        )

    logger.debug("%s: %s -> %s", src_path, plan.disposition.value, out_path)
    return FileResult(
        src_path=src_path,
        disposition=plan.disposition,
        out_path=out_path,
        src_size=src_size,
        out_size=out_size,
    )


def _rescale(im: Image.Image, size: tuple[int, int]) -> Image.Image:
    # Drawn "over" a transparent RGBA canvas.
    rgba = im.convert("RGBA")
    if rgba.size == size:
        return rgba
    return rgba.resize(size, RESAMPLE)


def _temp_beside(out_path: Path) -> Path:
    # Temp file in the destination dir so the final rename is cheap.
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".scaleimg_", suffix=out_path.suffix, dir=str(out_path.parent))
    os.close(fd)
    return Path(tmp_name)


def _write_png(im: Image.Image, out_path: Path) -> None:
    tmp_path = _temp_beside(out_path)
    try:
        im.save(tmp_path, format="PNG")
        tmp_path.chmod(0o644)
        tmp_path.replace(out_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _copy_file(src_path: Path, out_path: Path) -> None:
    tmp_path = _temp_beside(out_path)
    try:
        shutil.copyfile(src_path, tmp_path)
        shutil.copymode(src_path, tmp_path)
        tmp_path.replace(out_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
