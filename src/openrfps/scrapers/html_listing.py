"""Configurable scraper for procurement portals that list bids in HTML."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..models import Record, RunOptions
from ..parser_utils import clean_text, extract_nigp_codes, normalize_datetime, normalize_email
from .base import HtmlScraper, HttpClient
from .registry import register_scraper_type

URL_FIELDS = ("html_url",)
LIST_URL_FIELDS = ("downloads",)
DATE_FIELDS = ("created_at", "updated_at", "responses_due_at")
TEXT_FIELDS = (
    "department_name",
    "contact_name",
    "contact_phone",
    "description",
)


@dataclass
class FieldSpec:
    """How to extract one record field from a listing row."""

    selector: Optional[str] = None
    attr: Optional[str] = None
    regex: Optional[str] = None
    regex_group: Optional[int] = None
    multiple: bool = False
    default: Optional[str] = None

    @classmethod
    def from_dict(cls, options: Dict[str, Any]) -> "FieldSpec":
        return cls(
            selector=options.get("selector"),
            attr=options.get("attr"),
            regex=options.get("regex"),
            regex_group=options.get("regex_group"),
            multiple=options.get("multiple", False),
            default=options.get("default"),
        )


@register_scraper_type("html_listing")
class HtmlListingScraper(HtmlScraper):
    """Scrape RFP rows from one or more HTML listing pages.

    Rows are selected with ``item_selector``; each record field is described
    by a :class:`FieldSpec` (CSS selector, optional attribute, optional regex).
    ``nigp_codes`` are pulled from the extracted text, ``contact_email`` has
    any ``mailto:`` prefix removed, date fields are normalised to UTC, and
    URL fields are made absolute against ``base_url``.
    """

    def __init__(
        self,
        identity: str,
        http_client: HttpClient,
        *,
        list_url: str,
        fields: Dict[str, Dict[str, Any]],
        item_selector: str = "tr",
        base_url: Optional[str] = None,
        pagination: Optional[Dict[str, Any]] = None,
        id_prefix: str = "",
        timezone: str = "UTC",
        description: str = "",
        rate_limit_delay: float = 1.0,
        max_retries: int = 3,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(
            identity,
            http_client,
            description=description,
            rate_limit_delay=rate_limit_delay,
            max_retries=max_retries,
            timeout=timeout,
        )
        self.list_url = list_url
        self.item_selector = item_selector
        self.base_url = base_url or list_url
        self.pagination = pagination or {}
        self.id_prefix = id_prefix
        self.timezone = timezone
        self.field_specs = {name: FieldSpec.from_dict(options) for name, options in fields.items()}

    def _scrape_sync(self, options: RunOptions) -> List[Record]:
        records: List[Record] = []
        seen_ids = set()

        page_start = int(self.pagination.get("start", 1))
        page_count = int(self.pagination.get("pages", 1))

        for index, page in enumerate(range(page_start, page_start + page_count)):
            if index:
                self._sleep()

            page_url = self._resolve_page_url(page)
            response = self._safe_get(page_url)
            if response is None:
                break

            rows = self._parse_html(response.text).select(self.item_selector)
            if not rows:
                break

            for row in rows:
                record = self._build_record(row)
                if record is None:
                    continue
                if record["id"] in seen_ids:
                    continue
                seen_ids.add(record["id"])
                records.append(record)

                if options.limit and len(records) >= options.limit:
                    return records

        return records

    def _resolve_page_url(self, page: int) -> str:
        if "{page}" in self.list_url:
            return self.list_url.format(page=page)
        if self.pagination.get("param"):
            separator = "&" if "?" in self.list_url else "?"
            return f"{self.list_url}{separator}{self.pagination['param']}={page}"
        return self.list_url

    def _build_record(self, row: Any) -> Optional[Record]:
        record_id = self._extract_value(row, "id")
        title = self._extract_value(row, "title")
        if not record_id or not title:
            return None

        record: Record = {"id": f"{self.id_prefix}{record_id}", "title": title}

        for name in TEXT_FIELDS:
            value = self._extract_value(row, name)
            if value:
                record[name] = value

        for name in URL_FIELDS:
            value = self._extract_value(row, name)
            if value:
                record[name] = self._absolute_url(self.base_url, value)

        for name in LIST_URL_FIELDS:
            if name in self.field_specs:
                record[name] = [self._absolute_url(self.base_url, url) for url in self._extract_values(row, name)]

        for name in DATE_FIELDS:
            value = self._extract_value(row, name)
            if value:
                record[name] = normalize_datetime(value, default_timezone=self.timezone) or value

        if "contact_email" in self.field_specs:
            email = normalize_email(self._extract_value(row, "contact_email"))
            record["contact_email"] = email or ""

        if "nigp_codes" in self.field_specs:
            record["nigp_codes"] = extract_nigp_codes(self._extract_values(row, "nigp_codes"))

        return record

    def _extract_value(self, row: Any, name: str) -> Optional[str]:
        values = self._extract_values(row, name)
        return values[0] if values else None

    def _extract_values(self, row: Any, name: str) -> List[str]:
        spec = self.field_specs.get(name)
        if spec is None:
            return []

        if spec.selector:
            targets = row.select(spec.selector) if spec.multiple else [row.select_one(spec.selector)]
        else:
            targets = [row]

        values: List[str] = []
        for target in targets:
            if target is None:
                continue
            raw = target.get(spec.attr) if spec.attr else target.get_text(" ", strip=True)
            value = self._apply_regex(spec, raw)
            value = clean_text(value)
            if value:
                values.append(value)

        if not values and spec.default is not None:
            values.append(spec.default)
        return values

    def _apply_regex(self, spec: FieldSpec, value: Optional[Any]) -> Optional[str]:
        if value is None:
            return None
        if isinstance(value, list):
            value = " ".join(value)
        value = str(value)
        if not spec.regex:
            return value

        match = re.search(spec.regex, value)
        if not match:
            return None
        if spec.regex_group is not None:
            try:
                return match.group(spec.regex_group)
            except IndexError:
                return None
        return match.group(1) if match.groups() else match.group(0)
