"""Tests for the validation rule engine."""

import copy

import pytest

from src.openrfps.validation import (
    DEFAULT_RULES,
    EMAIL_PATTERN,
    URL_PATTERN,
    ValidationRule,
    is_valid_email,
    is_valid_url,
    validate,
)


def make_records(count, **fields):
    return [{"id": str(i), "title": f"RFP {i}", **fields} for i in range(count)]


def failed(report):
    return report.failed_rules


@pytest.mark.parametrize(
    "email",
    [
        "test@example.com",
        "user.name@example.co.uk",
        "first.last@subdomain.example.com",
        "email123@test-domain.org",
        "  padded@example.com  ",
    ],
)
def test_valid_emails(email):
    assert is_valid_email(email)


@pytest.mark.parametrize(
    "email",
    ["notanemail", "@example.com", "user@", "user space@example.com", "user@.com"],
)
def test_invalid_emails(email):
    assert not is_valid_email(email)


@pytest.mark.parametrize(
    "url",
    [
        "http://example.com",
        "https://example.com",
        "https://subdomain.example.com/path/to/file.pdf",
        "ftp://files.example.com/document.zip",
        "https://example.com/file?param=value",
        "http://example.co.uk",
    ],
)
def test_valid_urls(url):
    assert is_valid_url(url)


@pytest.mark.parametrize(
    "url",
    ["not a url", "example.com", "www.example.com", 'javascript:alert("xss")'],
)
def test_invalid_urls(url):
    assert not is_valid_url(url)


def test_patterns_are_compiled():
    assert EMAIL_PATTERN.fullmatch("a@b.io")
    assert URL_PATTERN.fullmatch("ftps://files.example.org/x")


def test_clean_result_set_passes_every_rule():
    records = [
        {
            "id": "GA-12345",
            "html_url": "http://ssl.doas.state.ga.us/PRSapp/PublicBidDetail?bso=12345",
            "title": "Test RFP for Services",
            "department_name": "Department of Technology",
            "contact_email": "john.doe@example.com",
            "prebid_conferences": [
                {
                    "attendance_mandatory": True,
                    "datetime": "2024-02-01 10:00 AM",
                    "address": "123 Main St\nAtlanta, GA 30303",
                }
            ],
            "downloads": ["http://example.com/rfp-document.pdf"],
            "nigp_codes": ["123", "456"],
        },
        {"id": "GA-2", "title": "Minimal Test RFP"},
    ]

    report = validate(records)

    assert report.passed is True
    assert [r.name for r in report.results] == [rule.name for rule in DEFAULT_RULES]
    assert all(line.startswith("OK") for line in report.status_lines())


def test_empty_result_set_passes():
    report = validate([])
    assert report.passed is True
    assert report.record_count == 0


def test_duplicate_id_fails_only_uniqueness():
    records = [
        {"id": "1", "title": "RFP 1"},
        {"id": "2", "title": "RFP 2"},
        {"id": "1", "title": "RFP 3"},
    ]

    report = validate(records)

    assert failed(report) == ["All ids are unique"]
    assert report.passed is False


def test_missing_id_fails_strictly():
    records = make_records(100)
    del records[50]["id"]

    report = validate(records)

    assert "All items have an id" in failed(report)


def test_missing_title_fails_strictly():
    records = make_records(100)
    records[3]["title"] = ""

    assert failed(validate(records)) == ["All items have a title"]


def test_contact_email_tolerates_a_few_failures():
    records = make_records(50, contact_email="buyer@example.gov")
    records[0]["contact_email"] = "not an email"

    report = validate(records)

    assert report.get("Contact emails are valid or blank").passed is True
    assert report.get("Contact emails are valid or blank").tolerant is True


def test_contact_email_fails_above_tolerance():
    records = make_records(50, contact_email="buyer@example.gov")
    for record in records[:3]:
        record["contact_email"] = "broken@"

    report = validate(records)

    assert failed(report) == ["Contact emails are valid or blank"]


def test_blank_contact_emails_pass():
    records = make_records(3)
    records[0]["contact_email"] = ""
    records[1]["contact_email"] = None

    assert validate(records).passed is True


def test_download_urls_tolerant_rule():
    records = make_records(3, downloads=[])
    records[0]["downloads"] = ["http://example.com/file1.pdf", "http://example.com/file2.pdf"]
    records[1]["downloads"] = ["https://example.com/doc.docx"]
    assert validate(records).passed is True

    records[2]["downloads"] = ["example.com/missing-scheme.pdf"]
    assert failed(validate(records)) == ["Download URLs are valid or empty"]


def test_nigp_codes_must_be_digits():
    records = [
        {"id": "1", "title": "A", "nigp_codes": ["123", "456", "789"]},
        {"id": "2", "title": "B", "nigp_codes": ["001", "002"]},
        {"id": "3", "title": "C", "nigp_codes": []},
    ]
    assert validate(records).passed is True

    records[1]["nigp_codes"] = ["ABC", "002"]
    assert failed(validate(records)) == ["NIGP codes are numeric"]


def test_nigp_rule_is_strict_even_for_large_sets():
    records = make_records(100, nigp_codes=["12345"])
    records[99]["nigp_codes"] = ["12-34"]

    assert failed(validate(records)) == ["NIGP codes are numeric"]


def test_html_url_rule():
    records = make_records(2, html_url="https://procurement.example.gov/bid/1")
    assert validate(records).passed is True

    records[0]["html_url"] = "javascript:void(0)"
    assert failed(validate(records)) == ["html_url is valid if provided"]


def test_prebid_conference_attendance_must_be_boolean():
    records = make_records(2)
    records[0]["prebid_conferences"] = [{"attendance_mandatory": False, "datetime": "2024-02-01"}]
    records[1]["prebid_conferences"] = [{"datetime": "2024-02-02", "address": "City Hall"}]
    assert validate(records).passed is True

    records[1]["prebid_conferences"].append({"attendance_mandatory": "yes"})
    assert failed(validate(records)) == ["Prebid conferences are well formed"]


def test_validate_does_not_mutate_records():
    records = make_records(3, downloads=["http://example.com/a.pdf"], contact_email=" a@b.com ")
    snapshot = copy.deepcopy(records)

    validate(records)

    assert records == snapshot


def test_custom_rules():
    rules = [
        ValidationRule.every("Has department", lambda r: r.get("department_name")),
        ValidationRule.almost_every("Mostly has phone", lambda r: r.get("contact_phone")),
    ]
    records = make_records(2, department_name="DOT")

    report = validate(records, rules)

    assert failed(report) == ["Mostly has phone"]
    assert report.results[1].tolerant is True


def test_report_rendering():
    records = [{"id": "1", "title": "A"}, {"id": "1", "title": "B"}]
    report = validate(records)

    lines = report.status_lines()
    assert "Not OK All ids are unique" in lines
    assert "OK     All items have an id" in lines

    data = report.to_dict()
    assert data["passed"] is False
    assert data["record_count"] == 2
    assert len(data["results"]) == len(DEFAULT_RULES)
