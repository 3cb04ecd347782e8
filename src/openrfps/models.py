"""Data models for openrfps scrapers and runs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

Record = Dict[str, Any]


@dataclass
class RunOptions:
    """Options controlling a single scraper run.

    ``limit`` of 0 means unlimited; a positive limit keeps the first N
    records. ``force`` bypasses the cache, ``skipsave`` leaves it untouched.
    """

    limit: int = 0
    force: bool = False
    skipsave: bool = False

    def __post_init__(self) -> None:
        if self.limit is None:
            self.limit = 0
        self.limit = int(self.limit)
        if self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")
        self.force = bool(self.force)
        self.skipsave = bool(self.skipsave)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RunOptions":
        """Build options from a mapping, ignoring unrecognised keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


def apply_limit(records: List[Record], limit: int) -> List[Record]:
    """Return the first ``limit`` records, or all of them when limit is 0."""
    if limit and limit > 0:
        return list(records[:limit])
    return list(records)


@dataclass
class PrebidConference:
    """A pre-bid conference attached to an RFP."""

    attendance_mandatory: Optional[bool] = None
    datetime: Optional[str] = None
    address: Optional[str] = None

    def to_dict(self) -> Record:
        return {key: value for key, value in asdict(self).items() if value is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PrebidConference":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class RFPRecord:
    """A single RFP posting.

    Scrapers may return plain dictionaries instead; this class exists so
    scraper authors get the field names right.
    """

    id: str
    title: str
    html_url: Optional[str] = None
    department_name: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    responses_due_at: Optional[str] = None
    description: Optional[str] = None
    prebid_conferences: List[PrebidConference] = field(default_factory=list)
    downloads: List[str] = field(default_factory=list)
    nigp_codes: List[str] = field(default_factory=list)

    def to_dict(self) -> Record:
        """Convert to a JSON-compatible dictionary, dropping unset fields."""
        data: Record = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "prebid_conferences":
                value = [conf.to_dict() for conf in value]
            elif isinstance(value, list):
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RFPRecord":
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        values["prebid_conferences"] = [
            conf if isinstance(conf, PrebidConference) else PrebidConference.from_dict(conf)
            for conf in values.get("prebid_conferences") or []
        ]
        values["downloads"] = list(values.get("downloads") or [])
        values["nigp_codes"] = list(values.get("nigp_codes") or [])
        return cls(**values)


@dataclass
class RunResult:
    """Outcome of a scraper run."""

    identity: str
    records: List[Record] = field(default_factory=list)
    from_cache: bool = False
    cache_written: bool = False
    cache_error: Optional[str] = None

    @property
    def record_count(self) -> int:
        return len(self.records)
