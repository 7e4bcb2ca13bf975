import logging
from typing import Any, Dict, List, Optional

from reggenie.agents.llm.client import GroundedText, generate_structured, search_web
from reggenie.agents.regulations.prompts import (
    ANALYST_SYSTEM_PROMPT,
    EXTRACTION_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_extraction_prompt,
    build_search_parse_prompt,
    build_search_prompt,
    build_tmf_prompt,
)
from reggenie.database.store import DocumentStore, get_document_store
from reggenie.framework.audit import record_action
from reggenie.models.records import current_timestamp, record_id
from reggenie.models.regulation import (
    AnalysisResult,
    Category,
    ExtractedEntry,
    ExtractedEntryBatch,
    ImpactLevel,
    NewsItem,
    RegulationEntry,
    RegulationStatus,
    TMFChecklist,
    TMFDocument,
)

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = AnalysisResult(
    summary="Analysis could not be completed at this time. Ensure the API key is valid.",
    operational_impact="Analysis unavailable due to an error.",
    compliance_risk="Analysis unavailable.",
    risk_rationale="Analysis unavailable.",
    key_changes=[],
    risk_level="Unknown",
    mitigation_strategies=[],
    action_items=[],
)


def analyze_regulation(entry: RegulationEntry) -> AnalysisResult:
    """Impact assessment for one regulation; falls back to a fixed result on any failure."""
    try:
        result = generate_structured(
            build_analysis_prompt(entry),
            AnalysisResult,
            name="regulation_analysis",
            system=ANALYST_SYSTEM_PROMPT,
        )
    except Exception as e:
        logger.error(f"Error analyzing regulation {entry.id}: {e}")
        return FALLBACK_ANALYSIS.model_copy(deep=True)

    logger.info(
        "Analysis for '%s': risk=%s, key_changes=%d",
        entry.title[:50],
        result.risk_level,
        len(result.key_changes),
    )
    return result


def categorize_new_entry(raw_text: str) -> Dict[str, Any]:
    """Extract regulation metadata from free text. Raises on failure."""
    try:
        extracted = generate_structured(
            build_extraction_prompt(raw_text),
            ExtractedEntry,
            name="regulation_metadata",
            system=EXTRACTION_SYSTEM_PROMPT,
        )
    except Exception as e:
        logger.error(f"Error parsing new entry: {e}")
        raise

    return extracted.model_dump()


def search_web_for_regulations(query: str, jurisdiction: Optional[str] = None) -> GroundedText:
    try:
        return search_web(build_search_prompt(query, jurisdiction))
    except Exception as e:
        logger.error(f"Web search error: {e}")
        raise


def parse_web_search_results(search_text: str, sources: List[Dict[str, str]]) -> List[RegulationEntry]:
    """Turn grounded search text into regulation entries; [] on failure."""
    try:
        batch = generate_structured(
            build_search_parse_prompt(search_text, sources),
            ExtractedEntryBatch,
            name="regulation_search_results",
            system=EXTRACTION_SYSTEM_PROMPT,
        )
    except Exception as e:
        logger.error(f"Parsing error: {e}")
        return []

    now = current_timestamp()
    entries = []
    for index, item in enumerate(batch.entries):
        entries.append(RegulationEntry(
            id=f"web-{now}-{index}",
            title=item.title,
            agency=item.agency,
            region=item.region,
            country=item.country,
            date=item.date,
            effective_date="TBD",
            category=item.category,
            summary=item.summary,
            impact=item.impact,
            status=item.status,
            content=item.summary,
            url=item.url or None,
            admin_approved=False,
            is_new=True,
        ))
    return entries


def import_from_web(
    query: str,
    jurisdiction: Optional[str] = None,
    store: Optional[DocumentStore] = None,
) -> List[RegulationEntry]:
    """Search the web for a topic and add every parsed entry to the database."""
    store = store or get_document_store()

    grounded = search_web_for_regulations(query, jurisdiction)
    entries = parse_web_search_results(grounded.text, grounded.sources)

    for entry in entries:
        store.save_regulation(entry)

    if entries:
        record_action(
            "WEB_IMPORT",
            "regulatory-database",
            f"Imported {len(entries)} entries for '{query}' ({jurisdiction or 'Global'})",
            store=store,
        )
    logger.info(f"Imported {len(entries)} regulations from web search for '{query}'")
    return entries


def _entry_from_extraction(entry_id: str, data: Dict[str, Any], **overrides) -> RegulationEntry:
    fields = {
        "title": data.get("title") or "Untitled regulation",
        "agency": data.get("agency") or "Unknown",
        "region": data.get("region") or "Global",
        "country": data.get("country") or "Global",
        "date": data.get("date") or "",
        "effective_date": data.get("effective_date") or "TBD",
        "category": data.get("category") or Category.CLINICAL_RESEARCH.value,
        "summary": data.get("summary") or "",
        "impact": data.get("impact") or ImpactLevel.UNKNOWN.value,
        "status": data.get("status") or RegulationStatus.DRAFT.value,
        "url": data.get("url") or None,
    }
    # Only values the caller actually knows replace the extracted ones
    fields.update({k: v for k, v in overrides.items() if v})
    return RegulationEntry(id=entry_id, admin_approved=False, is_new=True, **fields)


def create_entry_from_text(raw_text: str, store: Optional[DocumentStore] = None) -> RegulationEntry:
    store = store or get_document_store()

    data = categorize_new_entry(raw_text)
    entry = _entry_from_extraction(
        record_id("manual"),
        data,
        content=raw_text,
    )

    store.save_regulation(entry)
    record_action(
        "ENTRY_CREATED",
        "regulatory-database",
        f"Added '{entry.title[:80]}' from pasted text",
        store=store,
    )
    return entry


def triage_news(item: NewsItem, store: Optional[DocumentStore] = None) -> RegulationEntry:
    """Add a news item to the database as a Draft entry for review."""
    store = store or get_document_store()

    raw_context = (
        f"Title: {item.title}\nSource: {item.source}\nDate: {item.date}\n"
        f"Summary: {item.summary}\nContent: {item.content}"
    )
    data = categorize_new_entry(raw_context)

    entry = _entry_from_extraction(
        record_id("news"),
        {
            **data,
            "title": data.get("title") or item.title,
            "agency": data.get("agency") or item.source,
            "date": data.get("date") or item.date,
            "summary": data.get("summary") or item.summary,
        },
        status=RegulationStatus.DRAFT.value,
        content=item.content or item.summary,
        url=item.url,
    )

    store.save_regulation(entry)
    record_action(
        "NEWS_TRIAGED",
        "dashboard",
        f"Triaged news item '{item.title[:80]}' from {item.source}",
        store=store,
    )
    return entry


def override_risk(
    regulation_id: str,
    risk_level: str,
    risk_rationale: str,
    store: Optional[DocumentStore] = None,
) -> RegulationEntry:
    store = store or get_document_store()

    updated = store.update_regulation(regulation_id, {
        "risk_level": risk_level,
        "risk_rationale": risk_rationale,
        "admin_approved": True,
        "last_checked": current_timestamp(),
    })

    record_action(
        "RISK_OVERRIDE",
        "regulatory-database",
        f"Risk for {regulation_id} set to {risk_level}",
        user="Admin",
        store=store,
    )
    return updated


def get_tmf_checklist(country: str) -> List[TMFDocument]:
    """DIA-zone TMF checklist for a country; [] on failure."""
    try:
        checklist = generate_structured(
            build_tmf_prompt(country),
            TMFChecklist,
            name="tmf_checklist",
        )
    except Exception as e:
        logger.error(f"Error generating TMF checklist: {e}")
        return []

    logger.info(f"Generated TMF checklist for {country}: {len(checklist.documents)} artifacts")
    return checklist.documents
