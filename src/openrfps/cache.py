"""Result-set cache for scraper runs.

Each scraper identity maps to exactly one storage key. The default mapping
places the cache next to the scraper source with a ``.json`` suffix, so
``scrapers/states/ga/rfps.py`` is cached at ``scrapers/states/ga/rfps.json``.
Distinct identities map to distinct keys, apart from a source path and
the same path without its ``.py`` suffix. The mapping is injectable, which
lets a deployment keep every cache file under one directory or swap the
file store for another backend.
"""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

from .exceptions import CacheWriteError, CorruptCacheError
from .logging_config import get_logger
from .models import Record
from .scrapers.registry import SCRAPER_FILE_SUFFIXES

logger = get_logger("cache")

CACHE_SUFFIX = ".json"

KeyMapping = Callable[[str], Path]


def _strip_source_suffix(identity: str) -> str:
    for suffix in SCRAPER_FILE_SUFFIXES:
        if identity.endswith(suffix) and len(identity) > len(suffix):
            return identity[: -len(suffix)]
    return identity


def default_cache_path(identity: str) -> Path:
    """Derive the cache file path from a scraper's source path.

    Only a scraper source suffix is replaced, so the dotted identity
    ``states.ga.rfps`` is cached at ``states.ga.rfps.json``.
    """
    if not identity:
        raise ValueError("cannot derive a cache path from an empty identity")
    return Path(_strip_source_suffix(identity) + CACHE_SUFFIX)


def cache_dir_mapping(root: Union[str, Path]) -> KeyMapping:
    """Return a mapping that stores every cache file under ``root``.

    Path separators are flattened to ``_`` after escaping ``%`` and ``_``,
    so ``scrapers/states/ga/rfps.py`` becomes
    ``<root>/scrapers_states_ga_rfps.json`` while ``a_b.py`` becomes
    ``<root>/a%5Fb.json`` and cannot clash with ``a/b.py``.
    """
    root_path = Path(root)

    def mapping(identity: str) -> Path:
        if not identity:
            raise ValueError("cannot derive a cache path from an empty identity")
        stem = Path(_strip_source_suffix(identity)).as_posix()
        escaped = stem.replace("%", "%25").replace("_", "%5F")
        return root_path / f"{escaped.replace('/', '_')}{CACHE_SUFFIX}"

    return mapping


def serialize_result_set(records: List[Record]) -> str:
    return json.dumps(records, ensure_ascii=False, indent=2)


def parse_result_set(identity: str, location: Union[str, Path], text: str) -> List[Record]:
    """Parse cached JSON text, insisting on an array at the top level."""
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CorruptCacheError(identity, location, f"invalid JSON ({exc})") from exc

    if not isinstance(data, list):
        raise CorruptCacheError(identity, location, f"expected a JSON array, found {type(data).__name__}")

    return data


class BaseCacheStore(ABC):
    """Contract shared by cache backends."""

    @abstractmethod
    def has(self, identity: str) -> bool:
        """Return whether a cache entry exists for ``identity``."""

    @abstractmethod
    def read(self, identity: str) -> List[Record]:
        """Return the cached result set.

        Raises:
            CorruptCacheError: If the entry is not UTF-8 encoded JSON array text
        """

    @abstractmethod
    def write(self, identity: str, records: List[Record]) -> None:
        """Replace the cache entry for ``identity`` with ``records``.

        Raises:
            CacheWriteError: If the entry could not be persisted
        """

    @abstractmethod
    def delete(self, identity: str) -> bool:
        """Remove the cache entry, returning whether one existed."""


class CacheStore(BaseCacheStore):
    """File-backed cache store."""

    def __init__(self, key_for: KeyMapping = default_cache_path) -> None:
        self.key_for = key_for

    def path_for(self, identity: str) -> Path:
        return Path(self.key_for(identity))

    def has(self, identity: str) -> bool:
        return self.path_for(identity).is_file()

    def read(self, identity: str) -> List[Record]:
        path = self.path_for(identity)
        logger.debug(f"Reading cache for {identity} from {path}")
        with open(path, "rb") as handle:
            raw = handle.read()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptCacheError(identity, path, f"not valid UTF-8 ({exc})") from exc
        return parse_result_set(identity, path, text)

    def write(self, identity: str, records: List[Record]) -> None:
        path = self.path_for(identity)
        try:
            payload = serialize_result_set(records)
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(identity, path, exc) from exc

        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write next to the target so os.replace stays on one filesystem.
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise CacheWriteError(identity, path, exc) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.info(f"Cached {len(records)} records for {identity} at {path}")

    def delete(self, identity: str) -> bool:
        path = self.path_for(identity)
        if not path.exists():
            return False
        path.unlink()
        return True


class InMemoryCacheStore(BaseCacheStore):
    """Cache store keeping serialized JSON in a dictionary."""

    def __init__(self, key_for: KeyMapping = default_cache_path) -> None:
        self.key_for = key_for
        self.entries: Dict[str, str] = {}

    def _key(self, identity: str) -> str:
        return str(self.key_for(identity))

    def has(self, identity: str) -> bool:
        return self._key(identity) in self.entries

    def read(self, identity: str) -> List[Record]:
        key = self._key(identity)
        return parse_result_set(identity, key, self.entries[key])

    def write(self, identity: str, records: List[Record]) -> None:
        key = self._key(identity)
        try:
            self.entries[key] = serialize_result_set(records)
        except (TypeError, ValueError) as exc:
            raise CacheWriteError(identity, key, exc) from exc

    def delete(self, identity: str) -> bool:
        return self.entries.pop(self._key(identity), None) is not None
