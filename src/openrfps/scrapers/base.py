"""Base classes for RFP scrapers."""

from __future__ import annotations

import asyncio
import inspect
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..logging_config import get_logger
from ..models import RFPRecord, Record, RunOptions

RawResult = Iterable[Union[Record, RFPRecord]]


@dataclass
class HttpResponse:
    """Lightweight HTTP response wrapper."""

    status_code: int
    text: str
    url: str
    headers: Dict[str, str]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpClient(Protocol):
    """Protocol for HTTP client interface."""

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
    ) -> HttpResponse:
        """Perform a GET request."""
        ...


def to_record(item: Union[Record, RFPRecord]) -> Record:
    if isinstance(item, RFPRecord):
        return item.to_dict()
    return dict(item)


class BaseScraper(ABC):
    """Abstract base class for all scrapers.

    A scraper is a single-shot producer: :meth:`scrape` returns the full
    result set for one run. Subclasses implement :meth:`_scrape`.
    """

    def __init__(self, identity: str, *, description: str = "") -> None:
        self.identity = identity
        self.description = description
        self.logger = get_logger(f"scrapers.{identity}")

    async def scrape(self, options: Optional[RunOptions] = None) -> List[Record]:
        """Run the scraper and return its records as dictionaries."""
        options = options or RunOptions()
        started = time.monotonic()
        self.logger.info(f"Starting scrape for {self.identity}")

        raw_records = await self._scrape(options)
        records = [to_record(item) for item in raw_records]

        self.logger.info(
            f"Scrape completed for {self.identity}: "
            f"{len(records)} records, {time.monotonic() - started:.2f}s"
        )
        return records

    @abstractmethod
    async def _scrape(self, options: RunOptions) -> RawResult:
        """Collect records from the source.

        Args:
            options: Run options; scrapers may honour ``limit`` themselves

        Returns:
            Iterable of records (dicts or RFPRecord instances)
        """
        pass


class SyncScraper(BaseScraper):
    """Base scraper for blocking implementations, run in a worker thread."""

    async def _scrape(self, options: RunOptions) -> RawResult:
        return await asyncio.to_thread(self._scrape_sync, options)

    @abstractmethod
    def _scrape_sync(self, options: RunOptions) -> RawResult:
        pass


class FunctionScraper(BaseScraper):
    """Adapts ``fn(options)`` returning records, or an awaitable of records."""

    def __init__(self, identity: str, func: Callable[[RunOptions], Any], *, description: str = "") -> None:
        super().__init__(identity, description=description or (inspect.getdoc(func) or ""))
        self.func = func

    async def _scrape(self, options: RunOptions) -> RawResult:
        if inspect.iscoroutinefunction(self.func):
            return await self.func(options)
        result = await asyncio.to_thread(self.func, options)
        if inspect.isawaitable(result):
            result = await result
        return result


class CallbackScraper(BaseScraper):
    """Adapts a callback-style scraper ``fn(options, done)``.

    ``done(records)`` resolves a future, so only the first call is honoured;
    later calls are logged and dropped. ``done`` may be called synchronously
    from inside ``fn`` or later from any thread.
    """

    def __init__(
        self,
        identity: str,
        func: Callable[[RunOptions, Callable[[RawResult], None]], Any],
        *,
        description: str = "",
    ) -> None:
        super().__init__(identity, description=description or (inspect.getdoc(func) or ""))
        self.func = func

    async def _scrape(self, options: RunOptions) -> RawResult:
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def resolve(records: RawResult) -> None:
            if future.done():
                self.logger.warning(f"Scraper {self.identity} completed more than once; ignoring extra result")
                return
            future.set_result(list(records))

        def done(records: RawResult) -> None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                resolve(records)
            else:
                loop.call_soon_threadsafe(resolve, records)

        outcome = self.func(options, done)
        if inspect.isawaitable(outcome):
            await outcome

        return await future


class HtmlScraper(SyncScraper):
    """Blocking scraper with HTTP and HTML parsing helpers."""

    def __init__(
        self,
        identity: str,
        http_client: HttpClient,
        *,
        description: str = "",
        rate_limit_delay: float = 1.0,
        max_retries: int = 3,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(identity, description=description)
        self.http_client = http_client
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.timeout = timeout

    def _sleep(self, seconds: Optional[float] = None) -> None:
        """Sleep for rate limiting."""
        time.sleep(seconds if seconds is not None else self.rate_limit_delay)

    def _parse_html(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "html.parser")

    def _absolute_url(self, base_url: str, relative_url: str) -> str:
        return urljoin(base_url, relative_url)

    def _safe_get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[HttpResponse]:
        """Perform HTTP GET with retry logic, returning None on failure."""
        attempts = max(1, self.max_retries)
        for attempt in range(attempts):
            try:
                response = self.http_client.get(url, params=params, headers=headers, timeout=self.timeout)
                if response.ok:
                    return response
                self.logger.warning(f"GET {url} returned HTTP {response.status_code} (attempt {attempt + 1}/{attempts})")
            except Exception as exc:
                self.logger.warning(f"GET {url} failed: {exc} (attempt {attempt + 1}/{attempts})")

            if attempt < attempts - 1:
                self._sleep(self.rate_limit_delay * (attempt + 1))

        self.logger.error(f"Giving up on {url} after {attempts} attempts")
        return None

