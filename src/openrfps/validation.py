"""Validation rules for scraped RFP result sets.

Rules come in two flavours. Strict rules must hold for every record.
Tolerant rules only need to hold for more than 95% of records (see
:func:`~src.openrfps.almost_every.almost_every`), because portals routinely
publish the odd broken e-mail address or dead link. Optional fields that are
absent or empty always satisfy their rule.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

from .almost_every import almost_every
from .logging_config import get_logger
from .models import Record

logger = get_logger("validation")

EMAIL_PATTERN = re.compile(
    r'(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r"@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))"
)
URL_PATTERN = re.compile(r"(ht|f)tps?://[a-z0-9\-.]+\.[a-z]{2,4}/?([^\s<>#%\",{}\\|^\[\]`]+)?")
NIGP_CODE_PATTERN = re.compile(r"[0-9]+")


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return None


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value.strip()) is not None


def is_valid_url(value: Any) -> bool:
    return isinstance(value, str) and URL_PATTERN.fullmatch(value) is not None


def is_nigp_code(value: Any) -> bool:
    return isinstance(value, str) and NIGP_CODE_PATTERN.fullmatch(value) is not None


def _hashable(value: Any) -> Hashable:
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


# Per-record predicates


def has_id(record: Any) -> bool:
    return bool(_field(record, "id"))


def has_title(record: Any) -> bool:
    return bool(_field(record, "title"))


def contact_email_ok(record: Any) -> bool:
    email = _field(record, "contact_email")
    if not email:
        return True
    return is_valid_email(email)


def downloads_ok(record: Any) -> bool:
    downloads = _field(record, "downloads")
    if not downloads:
        return True
    if isinstance(downloads, str):
        return False
    return all(is_valid_url(url) for url in downloads)


def nigp_codes_ok(record: Any) -> bool:
    codes = _field(record, "nigp_codes")
    if not codes:
        return True
    if isinstance(codes, str):
        return False
    return all(is_nigp_code(code) for code in codes)


def html_url_ok(record: Any) -> bool:
    url = _field(record, "html_url")
    if not url:
        return True
    return is_valid_url(url)


def prebid_conferences_ok(record: Any) -> bool:
    conferences = _field(record, "prebid_conferences")
    if conferences is None:
        return True
    if not isinstance(conferences, list):
        return False
    for conference in conferences:
        if not isinstance(conference, Mapping):
            return False
        if "attendance_mandatory" in conference and not isinstance(conference["attendance_mandatory"], bool):
            return False
    return True


def ids_unique(records: Sequence[Any]) -> bool:
    ids = [_hashable(_field(record, "id")) for record in records]
    return len(ids) == len(set(ids))


@dataclass(frozen=True)
class ValidationRule:
    """A named check over a whole result set."""

    name: str
    check: Callable[[Sequence[Record]], bool]
    tolerant: bool = False

    @classmethod
    def every(cls, name: str, predicate: Callable[[Any], bool]) -> "ValidationRule":
        """Strict rule: ``predicate`` must hold for every record."""
        return cls(name, lambda records: all(predicate(record) for record in records), tolerant=False)

    @classmethod
    def almost_every(cls, name: str, predicate: Callable[[Any], bool]) -> "ValidationRule":
        """Tolerant rule: ``predicate`` must hold for more than 95% of records."""
        return cls(name, lambda records: almost_every(records, predicate), tolerant=True)


DEFAULT_RULES: List[ValidationRule] = [
    ValidationRule.every("All items have an id", has_id),
    ValidationRule("All ids are unique", ids_unique),
    ValidationRule.every("All items have a title", has_title),
    ValidationRule.almost_every("Contact emails are valid or blank", contact_email_ok),
    ValidationRule.almost_every("Download URLs are valid or empty", downloads_ok),
    ValidationRule.every("NIGP codes are numeric", nigp_codes_ok),
    ValidationRule.almost_every("html_url is valid if provided", html_url_ok),
    ValidationRule.every("Prebid conferences are well formed", prebid_conferences_ok),
]


@dataclass
class RuleResult:
    """Outcome of one rule."""

    name: str
    passed: bool
    tolerant: bool = False

    @property
    def status(self) -> str:
        return "OK" if self.passed else "Not OK"

    def to_dict(self) -> Dict[str, Any]:
        return {"rule": self.name, "passed": self.passed, "tolerant": self.tolerant}


@dataclass
class ValidationReport:
    """Ordered rule results for one result set."""

    results: List[RuleResult] = field(default_factory=list)
    record_count: int = 0

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.results)

    @property
    def failed_rules(self) -> List[str]:
        return [result.name for result in self.results if not result.passed]

    def get(self, name: str) -> Optional[RuleResult]:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def status_lines(self) -> List[str]:
        return [f"{result.status:<6} {result.name}" for result in self.results]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "record_count": self.record_count,
            "results": [result.to_dict() for result in self.results],
        }


def validate(records: Sequence[Record], rules: Optional[Sequence[ValidationRule]] = None) -> ValidationReport:
    """Score a result set against the validation rules.

    The records are only read. Every rule runs even after a failure so the
    report is complete.
    """
    rules = DEFAULT_RULES if rules is None else rules
    report = ValidationReport(record_count=len(records))

    for rule in rules:
        passed = bool(rule.check(records))
        report.results.append(RuleResult(rule.name, passed, rule.tolerant))
        if not passed:
            logger.debug(f"Rule failed: {rule.name}")

    logger.info(
        f"Validated {report.record_count} records: "
        f"{len(report.results) - len(report.failed_rules)}/{len(report.results)} rules passed"
    )
    return report
