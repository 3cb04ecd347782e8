"""openrfps package namespace."""

from importlib import import_module
from typing import Any

__version__ = "1.0.0"

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "OpenRFPsConfig",
    "RunOptions",
    "RunResult",
    "RFPRecord",
    "ScraperRegistry",
    "ScraperRunner",
    "run_scraper",
    "validate",
    "ValidationReport",
]

_EXPORTS = {
    "CacheStore": "src.openrfps.cache",
    "InMemoryCacheStore": "src.openrfps.cache",
    "OpenRFPsConfig": "src.openrfps.config",
    "RunOptions": "src.openrfps.models",
    "RunResult": "src.openrfps.models",
    "RFPRecord": "src.openrfps.models",
    "ScraperRegistry": "src.openrfps.scrapers.registry",
    "ScraperRunner": "src.openrfps.runner",
    "run_scraper": "src.openrfps.runner",
    "validate": "src.openrfps.validation",
    "ValidationReport": "src.openrfps.validation",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(__all__)
