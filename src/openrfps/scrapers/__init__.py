"""Scraper plugins for openrfps."""

from src.openrfps.scrapers.base import (
    BaseScraper,
    CallbackScraper,
    FunctionScraper,
    HtmlScraper,
    HttpClient,
    HttpResponse,
    SyncScraper,
)
from src.openrfps.scrapers.registry import (
    SCRAPER_TYPES,
    ScraperRegistry,
    build_registry_from_config,
    load_scraper_file,
    register_scraper_type,
)
from src.openrfps.scrapers.html_listing import HtmlListingScraper

__all__ = [
    "BaseScraper",
    "CallbackScraper",
    "FunctionScraper",
    "HtmlListingScraper",
    "HtmlScraper",
    "HttpClient",
    "HttpResponse",
    "SCRAPER_TYPES",
    "ScraperRegistry",
    "SyncScraper",
    "build_registry_from_config",
    "load_scraper_file",
    "register_scraper_type",
]
