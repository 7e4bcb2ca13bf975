"""Tests for dashboard derivations and the database view filters."""

import pytest

from reggenie.dashboard.charts import (
    build_dashboard,
    country_markers,
    impact_breakdown,
    kpis,
    region_breakdown,
    trend,
)
from reggenie.dashboard.filters import DatabaseFilters, apply_filters, sort_entries
from reggenie.framework.seed import INITIAL_REGULATIONS
from reggenie.models.regulation import RegulationEntry


def make_entry(entry_id: str, **fields) -> RegulationEntry:
    return RegulationEntry(id=entry_id, title=fields.pop("title", f"Regulation {entry_id}"), **fields)


@pytest.fixture
def entries() -> list[RegulationEntry]:
    return [r.model_copy(deep=True) for r in INITIAL_REGULATIONS]


class TestCharts:
    """Tests for KPI and chart data."""

    def test_kpis(self, entries) -> None:
        result = kpis(entries)

        assert result == {"total": 5, "high_impact": 3, "drafts": 2}

    def test_trend_groups_by_month_ascending(self) -> None:
        data = [
            make_entry("a", date="2025-01-06"),
            make_entry("b", date="2024-05-09"),
            make_entry("c", date="2025-01-20"),
            make_entry("d", date=""),
        ]

        assert trend(data) == [
            {"name": "May 24", "count": 1},
            {"name": "Jan 25", "count": 2},
        ]

    def test_impact_breakdown_drops_empty_buckets(self) -> None:
        data = [
            make_entry("a", impact="High"),
            make_entry("b", impact="Severe"),
            make_entry("c", impact="High"),
        ]

        result = impact_breakdown(data)

        assert [(r["name"], r["value"]) for r in result] == [("High", 2), ("Unknown", 1)]
        assert result[0]["color"] == "#ef4444"

    def test_region_breakdown_short_names_and_top_six(self) -> None:
        data = [make_entry(str(i), region=f"Region {i % 8}") for i in range(16)]
        data += [make_entry("us1", region="United States (FDA)"), make_entry("us2", region="United States (FDA)")]
        data += [make_entry("us3", region="United States (FDA)"), make_entry("none", region="")]

        result = region_breakdown(data)

        assert len(result) == 6
        assert result[0] == {"name": "US", "count": 3}

    def test_region_breakdown_missing_region_is_other(self) -> None:
        assert region_breakdown([make_entry("a", region="")]) == [{"name": "Other", "count": 1}]

    def test_country_hotspots(self) -> None:
        data = [make_entry(str(i), country="Japan") for i in range(3)] + [make_entry("x", country="France")]

        markers = {m["country"]: m for m in country_markers(data)}

        assert markers["Japan"]["hotspot"] is True
        assert markers["France"]["hotspot"] is False

    def test_build_dashboard_keys(self, entries) -> None:
        assert set(build_dashboard(entries)) == {"kpis", "trend", "impact", "regions", "countries"}


class TestFilters:
    """Tests for apply_filters."""

    def test_no_filters_returns_everything(self, entries) -> None:
        assert apply_filters(entries, DatabaseFilters()) == entries
        assert apply_filters(entries, None) == entries

    def test_values_within_facet_are_ored(self, entries) -> None:
        result = apply_filters(entries, DatabaseFilters(status=["Draft", "Consultation"]))

        assert {e.id for e in result} == {"12", "11"}

    def test_facets_are_anded(self, entries) -> None:
        result = apply_filters(entries, DatabaseFilters(status=["Final"], region=["Global (ICH/WHO)"]))

        assert [e.id for e in result] == ["14"]

    def test_search_is_case_insensitive(self, entries) -> None:
        result = apply_filters(entries, DatabaseFilters(search="pmda"))

        assert [e.id for e in result] == ["11"]

    def test_input_not_mutated(self, entries) -> None:
        before = list(entries)
        apply_filters(entries, DatabaseFilters(impact=["High"]))

        assert entries == before


class TestSort:
    """Tests for sort_entries."""

    def test_impact_order_high_first(self, entries) -> None:
        result = sort_entries(entries, "impact", descending=True)

        assert [e.impact for e in result] == ["High", "High", "High", "Medium", "Low"]

    def test_impact_ascending_reverses_rank(self, entries) -> None:
        result = sort_entries(entries, "impact", descending=False)

        assert result[0].impact == "Low"

    def test_missing_values_sort_last(self) -> None:
        data = [
            make_entry("a", url=None, date=""),
            make_entry("b", date="2024-01-01"),
            make_entry("c", date="2025-01-01"),
        ]

        for descending in (True, False):
            assert sort_entries(data, "date", descending)[-1].id == "a"

    def test_stable_for_ties(self) -> None:
        data = [make_entry(x, agency="FDA") for x in ("first", "second", "third")]

        assert [e.id for e in sort_entries(data, "agency")] == ["first", "second", "third"]

    def test_title_ignores_case(self) -> None:
        data = [make_entry("1", title="beta"), make_entry("2", title="Alpha")]

        assert [e.title for e in sort_entries(data, "title", descending=False)] == ["Alpha", "beta"]

    def test_unknown_key_raises(self, entries) -> None:
        with pytest.raises(ValueError):
            sort_entries(entries, "popularity")
