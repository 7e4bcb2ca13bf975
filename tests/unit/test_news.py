"""Tests for the regulatory news feed and its cache."""

from datetime import datetime
from unittest.mock import patch

from reggenie.agents.llm.client import GroundedText
from reggenie.agents.news.client import (
    ARCHIVE_DATA_KEY,
    NEWS_DATA_KEY,
    NEWS_TIME_KEY,
    displayed_news,
    filter_verified,
    get_cached_news,
    get_news_archive,
    get_regulatory_news,
    merge_archive,
)
from reggenie.models.records import current_timestamp
from reggenie.models.regulation import NewsBatch, NewsItem

NOW = datetime(2025, 3, 15)


def news(title: str, date: str, url: str = "https://www.fda.gov/news/1", summary: str = "Summary") -> NewsItem:
    return NewsItem(title=title, summary=summary, date=date, source="FDA", url=url)


class TestVerification:
    """Tests for filter_verified."""

    def test_unverified_urls_dropped(self) -> None:
        items = [
            news("Cited", "2025-03-14", url="https://www.fda.gov/a"),
            news("Invented", "2025-03-14", url="https://www.fda.gov/made-up"),
        ]

        kept = filter_verified(items, {"https://www.fda.gov/a"})

        assert [i.title for i in kept] == ["Cited"]

    def test_items_missing_fields_dropped(self) -> None:
        items = [news("", "2025-03-14"), news("No summary", "2025-03-14", summary="")]

        assert filter_verified(items, {"https://www.fda.gov/news/1"}) == []

    def test_fetch_keeps_only_cited_sources(self) -> None:
        grounded = GroundedText(text="...", sources=[{"uri": "https://www.ema.europa.eu/x", "title": "EMA"}])
        batch = NewsBatch(items=[
            news("EMA update", "2025-03-14", url="https://www.ema.europa.eu/x"),
            news("Hallucinated", "2025-03-14", url="https://example.com/fake"),
        ])

        with patch("reggenie.agents.news.client.search_web", return_value=grounded), \
                patch("reggenie.agents.news.client.generate_structured", return_value=batch):
            items = get_regulatory_news()

        assert [i.title for i in items] == ["EMA update"]

    def test_fetch_failure_is_empty(self) -> None:
        with patch("reggenie.agents.news.client.search_web", side_effect=RuntimeError("offline")):
            assert get_regulatory_news() == []


class TestDisplayWindow:
    """Tests for displayed_news and merge_archive."""

    def test_only_last_seven_days_displayed(self) -> None:
        items = [news("Fresh", "2025-03-10"), news("Stale", "2025-03-01"), news("Undated", "TBD")]

        assert [i.title for i in displayed_news(items, NOW)] == ["Fresh"]

    def test_archive_merges_and_dedupes_by_title(self) -> None:
        recent = [news("Fresh", "2025-03-14"), news("Week old", "2025-03-01")]
        history = [news("Week old", "2025-03-01"), news("Older", "2024-11-02")]

        merged = merge_archive(recent, history, NOW)

        assert [i.title for i in merged] == ["Week old", "Older"]


class TestCache:
    """Tests for get_cached_news and get_news_archive."""

    def test_fresh_cache_is_used(self, storage) -> None:
        storage.set_json(NEWS_DATA_KEY, [news("Cached", "2025-03-14").model_dump()])
        storage.set_item(NEWS_TIME_KEY, str(current_timestamp()))

        with patch("reggenie.agents.news.client.get_regulatory_news") as fetch:
            items = get_cached_news(storage)

        fetch.assert_not_called()
        assert [i.title for i in items] == ["Cached"]

    def test_stale_cache_is_refetched(self, storage) -> None:
        storage.set_json(NEWS_DATA_KEY, [news("Cached", "2025-03-14").model_dump()])
        storage.set_item(NEWS_TIME_KEY, str(current_timestamp() - 31 * 60 * 1000))

        with patch("reggenie.agents.news.client.get_regulatory_news", return_value=[news("New", "2025-03-15")]):
            items = get_cached_news(storage)

        assert [i.title for i in items] == ["New"]
        assert storage.get_json(NEWS_DATA_KEY)[0]["title"] == "New"

    def test_empty_fetch_not_cached(self, storage) -> None:
        with patch("reggenie.agents.news.client.get_regulatory_news", return_value=[]):
            assert get_cached_news(storage, force_refresh=True) == []

        assert storage.get_item(NEWS_TIME_KEY) is None

    def test_archive_cached_after_first_build(self, storage) -> None:
        with patch(
            "reggenie.agents.news.client.get_archived_regulatory_news",
            return_value=[news("Older", "2024-11-02")],
        ) as fetch:
            first = get_news_archive([], storage)
            second = get_news_archive([], storage)

        assert fetch.call_count == 1
        assert [i.title for i in first] == [i.title for i in second] == ["Older"]
        assert storage.get_json(ARCHIVE_DATA_KEY)[0]["title"] == "Older"
