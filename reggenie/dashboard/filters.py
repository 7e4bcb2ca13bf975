"""Database view: faceted filtering and sorting of regulations.

Both operations are pure; they never mutate their input.
"""

from typing import List, Optional

from pydantic import BaseModel

from reggenie.models.regulation import RegulationEntry

IMPACT_RANK = {"High": 0, "Medium": 1, "Low": 2, "Unknown": 3}

SORT_KEYS = ("date", "title", "impact", "agency", "region", "effective_date")

SEARCH_FIELDS = ("title", "summary", "agency", "country")


class DatabaseFilters(BaseModel):
    status: Optional[List[str]] = None
    impact: Optional[List[str]] = None
    category: Optional[List[str]] = None
    region: Optional[List[str]] = None
    search: Optional[str] = None


def _matches(entry: RegulationEntry, filters: DatabaseFilters) -> bool:
    # Facets AND together; values within one facet OR together
    for facet in ("status", "impact", "category", "region"):
        allowed = getattr(filters, facet)
        if allowed and getattr(entry, facet) not in allowed:
            return False

    term = (filters.search or "").strip().lower()
    if term:
        haystack = [(getattr(entry, field) or "").lower() for field in SEARCH_FIELDS]
        if not any(term in value for value in haystack):
            return False

    return True


def apply_filters(entries: List[RegulationEntry], filters: Optional[DatabaseFilters]) -> List[RegulationEntry]:
    if filters is None:
        return list(entries)
    return [entry for entry in entries if _matches(entry, filters)]


def sort_entries(entries: List[RegulationEntry], key: str = "date", descending: bool = True) -> List[RegulationEntry]:
    """Stable sort; entries missing the key always come last."""
    if key not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key: {key}")

    present, missing = [], []
    for entry in entries:
        value = getattr(entry, key)
        if value is None or value == "":
            missing.append(entry)
        else:
            present.append(entry)

    if key == "impact":
        # Rank order already means High first
        ordered = sorted(present, key=lambda e: IMPACT_RANK.get(e.impact, len(IMPACT_RANK)), reverse=not descending)
    elif key == "title":
        ordered = sorted(present, key=lambda e: e.title.lower(), reverse=descending)
    else:
        ordered = sorted(present, key=lambda e: getattr(e, key), reverse=descending)

    return ordered + missing
