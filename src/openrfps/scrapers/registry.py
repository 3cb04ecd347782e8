"""Scraper registration and discovery."""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Type

from ..exceptions import ModuleLoadError
from ..logging_config import get_logger
from .base import BaseScraper, CallbackScraper, FunctionScraper, HttpClient

if TYPE_CHECKING:
    from ..config import OpenRFPsConfig

logger = get_logger("scrapers.registry")

SCRAPER_TYPES: Dict[str, Type[BaseScraper]] = {}

SCRAPER_FILE_SUFFIXES = (".py",)


def register_scraper_type(scraper_type: str) -> Callable[[Type[BaseScraper]], Type[BaseScraper]]:
    """Decorator to register a configurable scraper class."""

    def decorator(cls: Type[BaseScraper]) -> Type[BaseScraper]:
        SCRAPER_TYPES[scraper_type] = cls
        return cls

    return decorator


def _positional_arity(func: Callable[..., Any]) -> int:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return 1
    return sum(
        1
        for param in signature.parameters.values()
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD)
    )


def scraper_from_module(identity: str, module: ModuleType) -> BaseScraper:
    """Pick the scraper entry point exported by a loaded module.

    Looked up in order: a ``scraper`` instance, the first concrete
    BaseScraper subclass defined in the module, then a ``scrape`` function.
    A ``scrape`` function taking two positional arguments is treated as
    callback style (``scrape(options, done)``).
    """
    instance = getattr(module, "scraper", None)
    if isinstance(instance, BaseScraper):
        return instance

    for _, obj in inspect.getmembers(module, inspect.isclass):
        if (
            issubclass(obj, BaseScraper)
            and obj.__module__ == module.__name__
            and not inspect.isabstract(obj)
        ):
            try:
                return obj(identity)
            except TypeError as exc:
                raise ModuleLoadError(identity, f"cannot instantiate {obj.__name__}: {exc}") from exc

    func = getattr(module, "scrape", None)
    if callable(func):
        if _positional_arity(func) >= 2:
            return CallbackScraper(identity, func)
        return FunctionScraper(identity, func)

    raise ModuleLoadError(identity, "module defines no scraper, BaseScraper subclass or scrape() function")


def load_scraper_file(identity: str) -> BaseScraper:
    """Import a scraper from a Python source file."""
    path = Path(identity)
    if not path.is_file():
        raise ModuleLoadError(identity, "file not found")
    if path.suffix not in SCRAPER_FILE_SUFFIXES:
        raise ModuleLoadError(identity, f"unsupported scraper file type {path.suffix or '(none)'}")

    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
    module_name = f"openrfps_scraper_{path.stem}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(identity, "could not create import spec")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ModuleLoadError(identity, f"{type(exc).__name__}: {exc}") from exc

    logger.debug(f"Loaded scraper module {module_name} from {path}")
    return scraper_from_module(identity, module)


class ScraperRegistry:
    """Registry of scrapers keyed by identity."""

    def __init__(self, scrapers: Optional[Dict[str, BaseScraper]] = None, *, allow_files: bool = True) -> None:
        self._scrapers: Dict[str, BaseScraper] = dict(scrapers or {})
        self.allow_files = allow_files

    def register(self, scraper: BaseScraper, identity: Optional[str] = None) -> BaseScraper:
        key = identity or scraper.identity
        if key in self._scrapers and self._scrapers[key] is not scraper:
            logger.warning(f"Replacing registered scraper: {key}")
        self._scrapers[key] = scraper
        logger.debug(f"Registered scraper: {key}")
        return scraper

    def unregister(self, identity: str) -> None:
        self._scrapers.pop(identity, None)

    def get(self, identity: str) -> Optional[BaseScraper]:
        return self._scrapers.get(identity)

    def identities(self) -> List[str]:
        return sorted(self._scrapers)

    def __contains__(self, identity: object) -> bool:
        return identity in self._scrapers

    def __len__(self) -> int:
        return len(self._scrapers)

    def resolve(self, identity: str) -> BaseScraper:
        """Return the scraper for ``identity``, loading it from disk if needed.

        Raises:
            ModuleLoadError: If the identity is unknown and cannot be loaded
        """
        scraper = self._scrapers.get(identity)
        if scraper is not None:
            return scraper

        if not self.allow_files:
            raise ModuleLoadError(identity, "no scraper registered under this identity")

        scraper = load_scraper_file(identity)
        return self.register(scraper, identity)


def build_registry_from_config(
    config: "OpenRFPsConfig",
    http_client: HttpClient,
    registry: Optional[ScraperRegistry] = None,
) -> ScraperRegistry:
    """Instantiate every enabled scraper declared in the configuration."""
    registry = registry or ScraperRegistry()
    max_retries = int(config.get_setting("max_retries", 3))
    timeout = float(config.get_setting("default_timeout_seconds", 30.0))

    for scraper_config in config.get_enabled_scrapers():
        scraper_cls = SCRAPER_TYPES.get(scraper_config.scraper_type)
        if scraper_cls is None:
            logger.warning(
                f"Unknown scraper type {scraper_config.scraper_type!r} for {scraper_config.identity}, skipping"
            )
            continue

        params = {"max_retries": max_retries, "timeout": timeout, **scraper_config.params}
        scraper = scraper_cls(
            scraper_config.identity,
            http_client,
            description=scraper_config.description,
            **params,
        )
        registry.register(scraper)

    return registry
