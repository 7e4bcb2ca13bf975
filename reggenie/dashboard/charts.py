"""Dashboard derivations over the regulation list."""

import logging
from collections import Counter, OrderedDict
from datetime import datetime
from typing import Any, Dict, List

from reggenie.framework.seed import REGION_SHORT_NAMES
from reggenie.models.regulation import ImpactLevel, RegulationEntry, RegulationStatus

logger = logging.getLogger(__name__)

IMPACT_COLORS = OrderedDict([
    (ImpactLevel.HIGH.value, "#ef4444"),
    (ImpactLevel.MEDIUM.value, "#f59e0b"),
    (ImpactLevel.LOW.value, "#10b981"),
    (ImpactLevel.UNKNOWN.value, "#94a3b8"),
])

TOP_REGIONS = 6
HOTSPOT_THRESHOLD = 2


def kpis(entries: List[RegulationEntry]) -> Dict[str, int]:
    pending = (RegulationStatus.DRAFT.value, RegulationStatus.CONSULTATION.value)
    return {
        "total": len(entries),
        "high_impact": sum(1 for e in entries if e.impact == ImpactLevel.HIGH.value),
        "drafts": sum(1 for e in entries if e.status in pending),
    }


def trend(entries: List[RegulationEntry]) -> List[Dict[str, Any]]:
    """Entries per publication month, oldest first, labelled like "Jan 25"."""
    counts = Counter(e.date[:7] for e in entries if e.date)

    points = []
    for month in sorted(counts):
        try:
            label = datetime.strptime(month, "%Y-%m").strftime("%b %y")
        except ValueError:
            logger.warning(f"Skipping unparseable publication month: {month}")
            continue
        points.append({"name": label, "count": counts[month]})
    return points


def impact_breakdown(entries: List[RegulationEntry]) -> List[Dict[str, Any]]:
    counts = {level: 0 for level in IMPACT_COLORS}
    for entry in entries:
        impact = entry.impact if entry.impact in counts else ImpactLevel.UNKNOWN.value
        counts[impact] += 1

    return [
        {"name": level, "value": counts[level], "color": color}
        for level, color in IMPACT_COLORS.items()
        if counts[level] > 0
    ]


def region_breakdown(entries: List[RegulationEntry]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for entry in entries:
        name = REGION_SHORT_NAMES.get(entry.region) or entry.region or "Other"
        counts[name] = counts.get(name, 0) + 1

    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"name": name, "count": count} for name, count in ranked[:TOP_REGIONS]]


def country_markers(entries: List[RegulationEntry]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for entry in entries:
        counts[entry.country] = counts.get(entry.country, 0) + 1

    return [
        {"country": country, "count": count, "hotspot": count > HOTSPOT_THRESHOLD}
        for country, count in counts.items()
    ]


def build_dashboard(entries: List[RegulationEntry]) -> Dict[str, Any]:
    return {
        "kpis": kpis(entries),
        "trend": trend(entries),
        "impact": impact_breakdown(entries),
        "regions": region_breakdown(entries),
        "countries": country_markers(entries),
    }
