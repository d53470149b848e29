from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError


DEFAULT_OUTPUT_ROOT = "revised_images"
DEFAULT_UNSUITABLE_ROOT = "unsuitable_images"
DEFAULT_IN_MULTIPLE = 200
DEFAULT_RESIZE_MULTIPLE = 140


@dataclass(frozen=True)
class RunOptions:
    """
    Everything a run needs to classify and place images.

    Pure data, same as the CLI sees it. Call validate() before handing
    it to the batch code.
    """

    # ----- Destinations -----
    output_root: str = DEFAULT_OUTPUT_ROOT
    unsuitable_root: str = DEFAULT_UNSUITABLE_ROOT

    # ----- Grid -----
    # Input images must line up on in_multiple; output is scaled so each
    # in_multiple cell becomes resize_multiple pixels.
    in_multiple: int = DEFAULT_IN_MULTIPLE
    resize_multiple: int = DEFAULT_RESIZE_MULTIPLE

    # Accept images that only line up on in_multiple / 2.
    half: bool = False

    # ----- Dispatcher -----
    # None -> 2 * cpu count
    workers: Optional[int] = None

    def validate(self) -> "RunOptions":
        if not self.output_root:
            raise ConfigError("output_root may not be empty")
        if not self.unsuitable_root:
            raise ConfigError("unsuitable_root may not be empty")
        if self.in_multiple < 1:
            raise ConfigError("in_multiple must be greater than 0")
        if self.resize_multiple < 1:
            raise ConfigError("resize_multiple must be greater than 0")
        if self.half:
            if self.in_multiple % 2 == 1:
                raise ConfigError("in_multiple must be even when half is set")
            if self.resize_multiple % 2 == 1:
                raise ConfigError("resize_multiple must be even when half is set")
        if self.workers is not None and self.workers < 1:
            raise ConfigError("workers must be greater than 0")
        return self
