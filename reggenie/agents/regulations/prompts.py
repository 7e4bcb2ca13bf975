from typing import List, Dict, Optional
import json

from reggenie.models.regulation import Category, Region, RegulationEntry


ANALYST_SYSTEM_PROMPT = """You are a senior Regulatory Affairs expert and Risk Manager for a healthcare and life-sciences company. You assess regulatory documents (GMP, GCP, PV, medical devices, information security, data governance) and produce impact assessments and risk management plans.

RISK LEVELS:
- Low: Clarifications or minor documentation updates.
- Medium: Process changes, retraining, minor system configuration.
- High: Significant system or process redesign, new submissions or validation work.
- Critical: Potential current non-compliance or enforcement exposure requiring immediate action.

If the full content is not provided (only a summary), infer the likely operational impact and risks from the title and agency."""


EXTRACTION_SYSTEM_PROMPT = """You are a regulatory intelligence analyst. You extract structured metadata about regulatory documents from free text. If information is missing, infer it from context or use "Unknown"."""


CATEGORY_LIST = ", ".join(c.value for c in Category)
REGION_LIST = ", ".join(r.value for r in Region)
GLOBAL_AUTHORITIES = (
    "global regulatory authorities including FDA, EMA, MHRA, PMDA, NMPA, "
    "ANVISA, TGA, Health Canada, CDSCO, WHO, ICH"
)


def build_analysis_prompt(entry: RegulationEntry) -> str:
    max_content_length = 6000
    content = entry.content or entry.summary or entry.title
    if len(content) > max_content_length:
        content = content[:max_content_length] + "\n[TRUNCATED]"

    return f"""Analyze the following regulatory document and provide an Impact Assessment and Risk Management Plan.

REGULATION:
Title: {entry.title}
Agency: {entry.agency}
Category: {entry.category}

Content:
{content}

Provide:
1. summary: concise executive summary (max 50 words)
2. operational_impact: how this affects operations (manufacturing, clinical data, safety reporting, IT security, data governance, legal compliance)
3. compliance_risk: risks of non-compliance (enforcement actions, fines, delays)
4. risk_rationale: why the risk level was assigned
5. key_changes: 3-5 specific regulatory changes or new requirements
6. risk_level: Low, Medium, High or Critical
7. mitigation_strategies: 3-5 risk mitigation strategies
8. action_items: 3-5 immediate action items"""


def build_extraction_prompt(raw_text: str) -> str:
    return f"""Extract regulatory metadata from the following text to populate a database entry.

Text:
\"\"\"{raw_text}\"\"\"

Fields:
- title
- agency
- region (one of: {REGION_LIST})
- country (specific country name, e.g. United States, China, Germany, United Kingdom, Global)
- date (YYYY-MM-DD, publication date)
- effective_date (YYYY-MM-DD, or "Pending" / "TBD" if not found)
- category (the single best match from: {CATEGORY_LIST})
- summary (brief)
- impact (High, Medium or Low)
- status (Draft, Final or Consultation)
- url (source URL if present in the text, otherwise empty)"""


def build_search_prompt(query: str, jurisdiction: Optional[str] = None) -> str:
    context = GLOBAL_AUTHORITIES
    if jurisdiction and jurisdiction != "Global":
        context = f"the regulatory authority for {jurisdiction} (official government sources)"

    return f"""Find the most recent regulatory guidelines, draft guidances, regulations, or consultation papers related to "{query}" issued by {context}.

Focus on specific documents (Guidance for Industry, Regulations, Directives) with clear titles and publication dates.
Prioritize official government sources."""


def build_search_parse_prompt(search_text: str, sources: List[Dict[str, str]]) -> str:
    return f"""Analyze the following search results for regulatory documents and extract the distinct regulatory entries.

Search Result Text:
\"\"\"{search_text}\"\"\"

Available Source URLs: {json.dumps(sources)}

For each entry extract:
- title
- agency (e.g. FDA, EMA, MHRA, ANVISA, PMDA, NMPA, TGA, CDSCO)
- region (one of: {REGION_LIST})
- country (specific country name)
- date (YYYY-MM-DD, or approximate)
- effective_date (YYYY-MM-DD or TBD)
- category (best match from: {CATEGORY_LIST})
- summary (concise)
- impact (High, Medium or Low based on the text)
- status (Draft, Final or Consultation)
- url (the most relevant URL from the Available Source URLs list; empty when none matches)

If exact mappings (like region) are not clear, use your best judgment based on the agency."""


def build_tmf_prompt(country: str) -> str:
    return f"""Generate a comprehensive Trial Master File (TMF) checklist aligned with the DIA TMF Reference Model (latest version) for a clinical trial in {country}.

Structure the output strictly by the standard DIA zones (Zone 01 to Zone 11). The 'zone' field MUST start with the exact zone string (e.g. "Zone 01: Trial Management").

Include artifacts required for study start-up, conduct and close-out.
Focus on specific local requirements for {country} (local ethics committee forms, health authority submissions, translation requirements).

For each artifact provide zone, document_name (standard DIA artifact name), description, mandatory (true/false) and local_requirement (notes specific to {country}, empty when none)."""
