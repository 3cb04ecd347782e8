"""Scraper runner.

Decides whether a run is served from the cache or by executing the scraper,
applies the record limit, and persists fresh results.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Callable, List, Mapping, Optional, TextIO, Union

from .cache import BaseCacheStore, CacheStore
from .exceptions import CacheWriteError
from .logging_config import get_logger
from .models import Record, RunOptions, RunResult, apply_limit
from .scrapers.registry import ScraperRegistry

logger = get_logger("runner")

MISSING_FILE_MESSAGE = "You must provide a <file> argument, e.g. `openrfps run scrapers/states/ga/rfps.py`"

OptionsLike = Union[RunOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> RunOptions:
    if options is None:
        return RunOptions()
    if isinstance(options, RunOptions):
        return options
    return RunOptions.from_mapping(options)


class ScraperRunner:
    """Run scrapers through the cache."""

    def __init__(
        self,
        registry: Optional[ScraperRegistry] = None,
        cache: Optional[BaseCacheStore] = None,
        *,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.registry = registry if registry is not None else ScraperRegistry()
        self.cache = cache if cache is not None else CacheStore()
        self.stream = stream

    async def run(self, identity: Optional[str], options: OptionsLike = None) -> Optional[RunResult]:
        """Produce the result set for ``identity``.

        Without ``force`` an existing cache entry is returned and the scraper
        is never executed. Otherwise the scraper runs and, unless
        ``skipsave`` is set, the result replaces the cache entry. The limit is
        applied after retrieval whatever the source, and the cached copy
        matches what is returned.

        Returns:
            RunResult, or None when no identity was given

        Raises:
            ModuleLoadError: The identity does not resolve to a scraper
            CorruptCacheError: The cache entry is not a JSON array
        """
        options = coerce_options(options)

        if identity is None or not str(identity).strip():
            self._report_missing_argument()
            return None

        identity = str(identity).strip()

        if not options.force and self.cache.has(identity):
            records = apply_limit(self.cache.read(identity), options.limit)
            logger.info(f"Serving {len(records)} cached records for {identity}")
            return RunResult(identity=identity, records=records, from_cache=True)

        scraper = self.registry.resolve(identity)
        logger.info(f"Running scraper {identity} (limit={options.limit}, force={options.force})")
        records = apply_limit(await scraper.scrape(options), options.limit)
        result = RunResult(identity=identity, records=records)

        if options.skipsave:
            logger.info(f"Not caching results for {identity} (skipsave)")
            return result

        try:
            self.cache.write(identity, records)
            result.cache_written = True
        except CacheWriteError as exc:
            # The scrape itself succeeded; the caller still gets the records.
            logger.error(str(exc))
            result.cache_error = str(exc)

        return result

    def _report_missing_argument(self) -> None:
        logger.error(MISSING_FILE_MESSAGE)
        stream = self.stream or sys.stdout
        print(MISSING_FILE_MESSAGE, file=stream)


def run_scraper(
    identity: Optional[str],
    options: OptionsLike,
    on_complete: Callable[[List[Record]], Any],
    runner: Optional[ScraperRunner] = None,
) -> Optional[RunResult]:
    """Blocking, callback-style front end to :meth:`ScraperRunner.run`.

    ``on_complete`` receives the records exactly once on success and is not
    called when no identity was given. Errors propagate to the caller.

    This drives its own event loop through :func:`asyncio.run`, which raises
    ``RuntimeError`` when called while a loop is already running. Async
    callers should await :meth:`ScraperRunner.run` directly.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("run_scraper() cannot be called from a running event loop; await ScraperRunner.run() instead")

    runner = runner or ScraperRunner()
    result = asyncio.run(runner.run(identity, options))
    if result is not None:
        on_complete(result.records)
    return result
