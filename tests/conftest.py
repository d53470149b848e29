from __future__ import annotations

from pathlib import Path
import errno
import os

import pytest
from PIL import Image

from scaleimg.settings import RunOptions


@pytest.fixture
def make_image(tmp_path):
    """Draw a solid image of `size` at tmp_path/rel; format follows the extension."""

    def _make(rel: str, size: tuple[int, int], color=(200, 30, 30)) -> Path:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path)
        return path

    return _make


@pytest.fixture
def opts(tmp_path) -> RunOptions:
    return RunOptions(
        output_root=str(tmp_path / "out"),
        unsuitable_root=str(tmp_path / "unsuitable"),
        workers=2,
    )


def files_under(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())


def deny_scandir(name: str):
    """os.scandir that refuses to list any directory called `name`."""
    real_scandir = os.scandir

    def _scandir(path="."):
        if os.path.basename(os.fspath(path)) == name:
            raise PermissionError(errno.EACCES, "Permission denied", os.fspath(path))
        return real_scandir(path)

    return _scandir
