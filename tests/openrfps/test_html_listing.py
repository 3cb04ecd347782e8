"""Tests for the configurable HTML listing scraper."""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from src.openrfps.models import RunOptions
from src.openrfps.scrapers.base import HttpResponse
from src.openrfps.scrapers.html_listing import HtmlListingScraper
from src.openrfps.validation import validate

LISTING_PAGE_1 = """
<html><body>
<table id="bids"><tbody>
  <tr>
    <td class="title">Road   salt
      supply</td>
    <td class="agency">Department of Transportation</td>
    <td><a class="bid-link" href="PublicBidDetail?bso=1001">Details</a></td>
    <td><a class="contact" href="mailto:buyer@dot.example.gov?subject=RFP">Email</a></td>
    <td class="closing">2024-02-15 14:00</td>
    <td class="nigp">NIGP: 12345, 67890</td>
    <td>
      <a class="document" href="/docs/1001/rfp.pdf">RFP</a>
      <a class="document" href="https://files.example.gov/1001/addendum.pdf">Addendum</a>
    </td>
  </tr>
  <tr>
    <td class="title">Bridge inspection</td>
    <td><a class="bid-link" href="PublicBidDetail?bso=1002">Details</a></td>
  </tr>
  <tr>
    <td class="title">Row without an id</td>
  </tr>
</tbody></table>
</body></html>
"""

LISTING_PAGE_2 = """
<table id="bids"><tbody>
  <tr>
    <td class="title">Bridge inspection (repost)</td>
    <td><a class="bid-link" href="PublicBidDetail?bso=1002">Details</a></td>
  </tr>
  <tr>
    <td class="title">Janitorial services</td>
    <td><a class="bid-link" href="PublicBidDetail?bso=1003">Details</a></td>
  </tr>
</tbody></table>
"""

FIELDS = {
    "id": {"selector": "a.bid-link", "attr": "href", "regex": r"bso=(\d+)"},
    "title": {"selector": "td.title"},
    "html_url": {"selector": "a.bid-link", "attr": "href"},
    "department_name": {"selector": "td.agency"},
    "contact_email": {"selector": "a.contact", "attr": "href"},
    "responses_due_at": {"selector": "td.closing"},
    "downloads": {"selector": "a.document", "attr": "href", "multiple": True},
    "nigp_codes": {"selector": "td.nigp"},
}


class MockHttpClient:
    """Mock HTTP client for testing."""

    def __init__(self, responses: Dict[str, str]) -> None:
        self.responses = responses
        self.requests: list[str] = []

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 30.0,
    ) -> HttpResponse:
        self.requests.append(url)

        for pattern, content in self.responses.items():
            if pattern in url:
                return HttpResponse(status_code=200, text=content, url=url, headers={})

        return HttpResponse(status_code=404, text="Not Found", url=url, headers={})


def make_scraper(client, **overrides):
    params = dict(
        list_url="https://bids.example.gov/PRSapp/PublicBidNotice?page={page}",
        base_url="https://bids.example.gov/PRSapp/",
        item_selector="table#bids tbody tr",
        id_prefix="GA-",
        fields=FIELDS,
        rate_limit_delay=0,
        max_retries=1,
    )
    params.update(overrides)
    return HtmlListingScraper("states.ga.rfps", client, **params)


@pytest.mark.asyncio
async def test_extracts_records_from_listing():
    client = MockHttpClient({"page=1": LISTING_PAGE_1})
    scraper = make_scraper(client)

    records = await scraper.scrape(RunOptions())

    assert [r["id"] for r in records] == ["GA-1001", "GA-1002"]
    first = records[0]
    assert first["title"] == "Road salt supply"
    assert first["department_name"] == "Department of Transportation"
    assert first["html_url"] == "https://bids.example.gov/PRSapp/PublicBidDetail?bso=1001"
    assert first["contact_email"] == "buyer@dot.example.gov"
    assert first["responses_due_at"] == "2024-02-15T14:00:00Z"
    assert first["nigp_codes"] == ["12345", "67890"]
    assert first["downloads"] == [
        "https://bids.example.gov/docs/1001/rfp.pdf",
        "https://files.example.gov/1001/addendum.pdf",
    ]

    second = records[1]
    assert second["downloads"] == []
    assert second["nigp_codes"] == []
    assert second["contact_email"] == ""
    assert "department_name" not in second


@pytest.mark.asyncio
async def test_scraped_records_pass_validation():
    client = MockHttpClient({"page=1": LISTING_PAGE_1})

    records = await make_scraper(client).scrape(RunOptions())

    assert validate(records).passed is True


@pytest.mark.asyncio
async def test_paginates_and_deduplicates_by_id():
    client = MockHttpClient({"page=1": LISTING_PAGE_1, "page=2": LISTING_PAGE_2})
    scraper = make_scraper(client, pagination={"start": 1, "pages": 3})

    records = await scraper.scrape(RunOptions())

    assert [r["id"] for r in records] == ["GA-1001", "GA-1002", "GA-1003"]
    # Page 3 returns 404 and ends pagination.
    assert len(client.requests) == 3


@pytest.mark.asyncio
async def test_stops_once_limit_is_reached():
    client = MockHttpClient({"page=1": LISTING_PAGE_1, "page=2": LISTING_PAGE_2})
    scraper = make_scraper(client, pagination={"start": 1, "pages": 2})

    records = await scraper.scrape(RunOptions(limit=1))

    assert [r["id"] for r in records] == ["GA-1001"]
    assert len(client.requests) == 1


@pytest.mark.asyncio
async def test_http_failure_yields_empty_result():
    client = MockHttpClient({})
    scraper = make_scraper(client, max_retries=2)

    records = await scraper.scrape(RunOptions())

    assert records == []
    assert len(client.requests) == 2


def test_query_parameter_pagination():
    scraper = make_scraper(
        MockHttpClient({}),
        list_url="https://bids.example.gov/list?status=open",
        pagination={"param": "p"},
    )

    assert scraper._resolve_page_url(4) == "https://bids.example.gov/list?status=open&p=4"
