"""Exception types raised by the openrfps runner and cache."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class OpenRFPsError(Exception):
    """Base class for openrfps errors."""


class ModuleLoadError(OpenRFPsError):
    """A scraper identity could not be resolved to a runnable scraper."""

    def __init__(self, identity: str, reason: str) -> None:
        self.identity = identity
        self.reason = reason
        super().__init__(f"Could not load scraper {identity!r}: {reason}")


class CorruptCacheError(OpenRFPsError):
    """A cache entry exists but does not hold a JSON array."""

    def __init__(self, identity: str, location: Union[str, Path], reason: str) -> None:
        self.identity = identity
        self.location = location
        self.reason = reason
        super().__init__(f"Corrupt cache for {identity!r} at {location}: {reason}")


class CacheWriteError(OpenRFPsError, OSError):
    """Persisting a result set to the cache failed."""

    def __init__(self, identity: str, location: Union[str, Path], cause: Optional[BaseException] = None) -> None:
        self.identity = identity
        self.location = location
        self.cause = cause
        message = f"Failed to write cache for {identity!r} at {location}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
