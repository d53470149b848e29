from __future__ import annotations


class ScaleImgError(Exception):
    """Base class for errors that stop a run before any image is touched."""


class ConfigError(ScaleImgError, ValueError):
    pass


class PathResolutionError(ScaleImgError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"unable to resolve '{path}': {reason}")
        self.path = path


class EnumerationError(ScaleImgError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"unable to scan '{path}': {reason}")
        self.path = path
