"""Tests for regulation analysis, extraction, web import and the source monitor."""

from unittest.mock import MagicMock, patch

import requests

from reggenie.agents.llm.client import GroundedText
from reggenie.agents.regulations.client import (
    FALLBACK_ANALYSIS,
    analyze_regulation,
    create_entry_from_text,
    get_tmf_checklist,
    import_from_web,
    override_risk,
    parse_web_search_results,
    triage_news,
)
from reggenie.agents.regulations.prompts import build_search_prompt
from reggenie.agents.regulations.sources import RECHECK_AFTER_MS, check_regulation_sources, check_source_url
from reggenie.models.records import current_timestamp
from reggenie.models.regulation import ExtractedEntry, ExtractedEntryBatch, NewsItem, RegulationEntry

CLIENT = "reggenie.agents.regulations.client"


def extracted(title: str = "FDA Guidance on Decentralized Trials", **fields) -> ExtractedEntry:
    data = {
        "title": title,
        "agency": "FDA",
        "region": "United States (FDA)",
        "country": "United States",
        "date": "2025-02-01",
        "effective_date": "2025-08-01",
        "category": "Clinical Research & Trials",
        "summary": "Recommendations for decentralized elements in clinical trials.",
        "impact": "High",
        "status": "Final",
        "url": "https://www.fda.gov/dct",
    }
    data.update(fields)
    return ExtractedEntry(**data)


class TestAnalysis:
    """Tests for analyze_regulation."""

    def test_failure_returns_fallback(self, store) -> None:
        entry = store.get_regulation("14")

        with patch(f"{CLIENT}.generate_structured", side_effect=RuntimeError("invalid key")):
            result = analyze_regulation(entry)

        assert result == FALLBACK_ANALYSIS
        assert result is not FALLBACK_ANALYSIS

    def test_search_prompt_narrows_jurisdiction(self) -> None:
        assert "Japan" in build_search_prompt("eCOA", "Japan")
        assert "eCOA" in build_search_prompt("eCOA", "Global")


class TestExtraction:
    """Tests for entries created from text, news and web search."""

    def test_create_entry_from_text(self, store) -> None:
        with patch(f"{CLIENT}.generate_structured", return_value=extracted()):
            entry = create_entry_from_text("FDA published guidance ...", store=store)

        assert entry.id.startswith("manual-")
        assert entry.content == "FDA published guidance ..."
        assert entry.admin_approved is False
        assert store.get_regulation(entry.id).title == entry.title
        assert store.get_audit_logs()[0].action == "ENTRY_CREATED"

    def test_triage_news_is_draft_with_news_url(self, store) -> None:
        item = NewsItem(
            title="EMA consults on AI reflection paper",
            summary="Consultation opened.",
            date="2025-03-10",
            source="EMA",
            url="https://www.ema.europa.eu/news/ai",
        )

        with patch(f"{CLIENT}.generate_structured", return_value=extracted(status="Final", url="")):
            entry = triage_news(item, store=store)

        assert entry.id.startswith("news-")
        assert entry.status == "Draft"
        assert entry.url == "https://www.ema.europa.eu/news/ai"

    def test_parse_web_results(self) -> None:
        batch = ExtractedEntryBatch(entries=[extracted(), extracted("Second", url="")])

        with patch(f"{CLIENT}.generate_structured", return_value=batch):
            entries = parse_web_search_results("text", [{"uri": "https://www.fda.gov/dct", "title": "FDA"}])

        assert [e.id.rsplit("-", 1)[1] for e in entries] == ["0", "1"]
        assert all(e.effective_date == "TBD" for e in entries)
        assert entries[0].content == entries[0].summary
        assert entries[1].url is None

    def test_parse_failure_is_empty(self) -> None:
        with patch(f"{CLIENT}.generate_structured", side_effect=ValueError("bad json")):
            assert parse_web_search_results("text", []) == []

    def test_import_from_web_saves_entries(self, store) -> None:
        grounded = GroundedText(text="results", sources=[])
        batch = ExtractedEntryBatch(entries=[extracted()])

        with patch(f"{CLIENT}.search_web", return_value=grounded), \
                patch(f"{CLIENT}.generate_structured", return_value=batch):
            entries = import_from_web("decentralized trials", "United States", store=store)

        assert store.get_regulation(entries[0].id) is not None
        assert store.get_audit_logs()[0].action == "WEB_IMPORT"

    def test_tmf_failure_is_empty(self) -> None:
        with patch(f"{CLIENT}.generate_structured", side_effect=RuntimeError("down")):
            assert get_tmf_checklist("Germany") == []


class TestRiskOverride:
    """Tests for override_risk."""

    def test_override_marks_admin_approved(self, store) -> None:
        updated = override_risk("12", "Critical", "Affects all AI-assisted submissions", store=store)

        assert updated.admin_approved is True
        assert updated.risk_level == "Critical"
        assert store.get_regulation("12").risk_rationale == "Affects all AI-assisted submissions"
        assert store.get_audit_logs()[0].action == "RISK_OVERRIDE"


class TestSourceMonitor:
    """Tests for the source link monitor."""

    def test_reachable_url(self) -> None:
        response = MagicMock(status_code=200)
        with patch("reggenie.agents.regulations.sources.requests.head", return_value=response):
            assert check_source_url("https://www.fda.gov/x") is True

    def test_head_refused_falls_back_to_get(self) -> None:
        refused = MagicMock(status_code=405)
        ok = MagicMock(status_code=200)
        with patch("reggenie.agents.regulations.sources.requests.head", return_value=refused), \
                patch("reggenie.agents.regulations.sources.requests.get", return_value=ok) as get:
            assert check_source_url("https://www.ema.europa.eu/x") is True

        get.assert_called_once()

    def test_connection_error_is_unreachable(self) -> None:
        with patch(
            "reggenie.agents.regulations.sources.requests.head",
            side_effect=requests.ConnectionError("no route"),
        ):
            assert check_source_url("https://www.pmda.go.jp/x") is False

    def test_check_stamps_reachable_entries(self, store) -> None:
        store.save_regulation(RegulationEntry(id="recent", title="Recent", url="https://x", last_checked=current_timestamp()))
        store.save_regulation(RegulationEntry(id="broken", title="Broken", url="https://broken"))

        def reachable(url: str) -> bool:
            return url != "https://broken"

        with patch("reggenie.agents.regulations.sources.check_source_url", side_effect=reachable):
            counts = check_regulation_sources(store=store)

        assert counts["skipped"] == 1
        assert counts["unreachable"] == 1
        assert counts["reachable"] == counts["checked"] - 1
        assert store.get_regulation("14").last_checked is not None
        assert store.get_regulation("broken").last_checked is None

    def test_recheck_window(self) -> None:
        assert RECHECK_AFTER_MS == 24 * 60 * 60 * 1000
