"""Configuration loader for openrfps."""

from __future__ import annotations

import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from .cache import CacheStore, cache_dir_mapping, default_cache_path


class ScraperConfig:
    """Configuration for a single configured scraper."""

    def __init__(self, identity: str, data: Dict[str, Any]) -> None:
        self.identity = identity
        self.scraper_type = data.get("type", "")
        self.enabled = data.get("enabled", True)
        self.description = data.get("description", "")
        self.params = dict(data.get("params") or {})


class OpenRFPsConfig:
    """Central configuration container."""

    DEFAULT_CONFIG_PATH = Path("config/openrfps.yaml")

    def __init__(self, config_path: Optional[Path | str] = None) -> None:
        path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        if not path.is_absolute():
            path = Path.cwd() / path
        self.config_path = path
        self._data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return {"settings": {}, "scrapers": {}}
        with open(self.config_path, "r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    def get_setting(self, key: str, default: Any = None) -> Any:
        return (self._data.get("settings") or {}).get(key, default)

    def get_scraper(self, identity: str) -> Optional[ScraperConfig]:
        scrapers = self._data.get("scrapers") or {}
        if identity not in scrapers:
            return None
        return ScraperConfig(identity, scrapers[identity] or {})

    def get_enabled_scrapers(self) -> List[ScraperConfig]:
        scrapers = self._data.get("scrapers") or {}
        return [
            ScraperConfig(identity, data or {})
            for identity, data in scrapers.items()
            if (data or {}).get("enabled", True)
        ]

    def build_cache_store(self) -> CacheStore:
        """Cache store honouring the ``cache_dir`` setting, if any."""
        cache_dir = self.get_setting("cache_dir")
        if not cache_dir:
            return CacheStore(default_cache_path)
        path = Path(cache_dir)
        if not path.is_absolute():
            path = Path.cwd() / path
        return CacheStore(cache_dir_mapping(path))
