"""Tests for the HTTP surface in :mod:`journalfeed.api.routes`."""

from __future__ import annotations

from fastapi.testclient import TestClient

from journalfeed.api.app import create_app
from journalfeed.config import Source
from journalfeed.exceptions import FailureKind, FetchError
from journalfeed.models import FetchResult
from journalfeed.services.aggregator import ArticleAggregator, ArticleFeed

OFID = Source(identifier="ofid", display_name="Open Forum", url="https://academic.oup.com/ofid")
CID = Source(identifier="cid", display_name="Clinical", url="https://academic.oup.com/cid")


class StubFetcher:
    def __init__(self, pages: dict[str, object]) -> None:
        self.pages = pages

    def fetch(self, source: Source) -> FetchResult:
        page = self.pages[source.identifier]
        if isinstance(page, Exception):
            raise page
        return FetchResult(source=source, text=page)


PAGES = {
    "ofid": (
        '<h5 class="al-article-item-title"><a href="/ofid/article/1">COVID Update</a></h5>'
        "<p>Booster uptake in winter.</p>"
    ),
    "cid": '<h5 class="al-article-item-title"><a href="/cid/article/2">Flu Season Report</a></h5>',
}


def make_client(pages: dict[str, object] = PAGES) -> tuple[TestClient, ArticleFeed]:
    feed = ArticleFeed(aggregator=ArticleAggregator(fetcher=StubFetcher(pages)), sources=[OFID, CID])
    return TestClient(create_app(feed=feed)), feed


def test_list_sources_returns_registry_entries() -> None:
    client, _ = make_client()

    response = client.get("/api/sources")

    assert response.status_code == 200
    payload = response.json()
    assert [entry["identifier"] for entry in payload["sources"]] == ["ofid", "cid"]
    assert payload["sources"][1]["url"] == "https://academic.oup.com/cid"


def test_articles_are_empty_before_first_refresh() -> None:
    client, _ = make_client()

    payload = client.get("/api/articles").json()

    assert payload["articles"] == []
    assert payload["is_loading"] is False
    assert payload["error_message"] is None


def test_refresh_publishes_sorted_articles() -> None:
    client, _ = make_client()

    response = client.post("/api/refresh")

    assert response.status_code == 200
    payload = response.json()
    assert payload["started"] is True
    titles = [article["title"] for article in payload["state"]["articles"]]
    assert titles == ["COVID Update", "Flu Season Report"]
    assert payload["state"]["articles"][0]["url"] == "https://academic.oup.com/ofid/article/1"

    listed = client.get("/api/articles").json()
    assert [article["title"] for article in listed["articles"]] == titles


def test_refresh_reports_noop_when_already_running() -> None:
    client, feed = make_client()

    acquired = feed._refresh_lock.acquire(blocking=False)
    try:
        payload = client.post("/api/refresh").json()
    finally:
        if acquired:
            feed._refresh_lock.release()

    assert payload["started"] is False
    assert payload["state"]["articles"] == []


def test_search_filters_on_title_and_summary() -> None:
    client, _ = make_client()
    client.post("/api/refresh")

    payload = client.get("/api/articles/search", params={"topic": "covid"}).json()

    assert payload["topic"] == "covid"
    assert [article["title"] for article in payload["articles"]] == ["COVID Update"]

    by_summary = client.get("/api/articles/search", params={"topic": "BOOSTER"}).json()
    assert [article["title"] for article in by_summary["articles"]] == ["COVID Update"]


def test_status_exposes_per_source_failures() -> None:
    client, _ = make_client(
        {
            "ofid": FetchError("timed out", kind=FailureKind.TRANSPORT, source="ofid"),
            "cid": PAGES["cid"],
        }
    )
    client.post("/api/refresh")

    payload = client.get("/api/status").json()

    assert payload["error_message"] is None
    assert payload["failures"] == [{"source": "ofid", "kind": "transport", "message": "timed out"}]


def test_total_failure_sets_error_message() -> None:
    client, _ = make_client(
        {
            "ofid": FetchError("timed out", kind=FailureKind.TRANSPORT, source="ofid"),
            "cid": FetchError("HTTP 502", kind=FailureKind.HTTP_STATUS, source="cid"),
        }
    )

    payload = client.post("/api/refresh").json()

    assert payload["state"]["articles"] == []
    assert payload["state"]["error_message"].startswith("Unable to load articles:")


def test_topics_report_match_counts() -> None:
    client, _ = make_client()
    client.post("/api/refresh")

    payload = client.get("/api/topics").json()

    counts = {entry["topic"]: entry["matches"] for entry in payload["topics"]}
    assert counts["COVID"] == 1
    assert counts["Sepsis"] == 0
    assert len(counts) == 12


def test_topic_brief_composes_text() -> None:
    client, _ = make_client()
    client.post("/api/refresh")

    payload = client.get("/api/topics/COVID/brief").json()

    assert payload["matches"] == 1
    assert payload["brief"].startswith("Here's your brief on COVID. I found 1 related article.")
    assert "Booster uptake in winter." in payload["brief"]


def test_topic_brief_requires_topic() -> None:
    client, _ = make_client()

    response = client.get("/api/topics/%20/brief")

    assert response.status_code == 400
    assert response.json()["detail"]
