from typing import List, Dict
import json


RECENT_SEARCH_PROMPT = """Find 8 recent regulatory news updates from official government health agency websites (FDA, EMA, MHRA, PMDA, NMPA).

URGENT PRIORITY: strictly prioritize news published within the last 12 hours.
If 12-hour news is scarce, include updates from the last 24 hours.
Fill remaining slots with significant updates from the last 14 days only if necessary.

Criteria:
- Official press releases, guidance documents, or safety communications.
- Topics: Clinical Trials, GMP, AI in Healthcare, Medical Devices, Drug Safety.
- Every news item must have a direct, verifiable source URL.

For each item, provide the title, date (and time if available), source agency, summary, and the direct URL."""


ARCHIVE_SEARCH_PROMPT = """Find significant regulatory news, major approvals, and key guidance documents released by major health authorities (FDA, EMA, MHRA, PMDA, NMPA) over the past 12 months.

Focus on high-impact updates such as:
- New laws or acts (e.g. AI Act, modernization acts)
- Major guideline revisions (e.g. ICH revisions, Annex 1)
- Key approvals (first-in-class therapies)

Criteria:
- Timeframe: past 12 months, excluding the most recent 2 weeks.
- Every item must have a direct source URL.

Return 12-15 items."""


PARSE_SYSTEM_PROMPT = """You are a regulatory intelligence analyst. You extract distinct regulatory news items from search results and map each to one of the verified source URLs you are given. You never invent URLs."""


def build_news_parse_prompt(search_text: str, sources: List[Dict[str, str]], archive: bool = False) -> str:
    kind = "historical regulatory news items" if archive else "distinct regulatory news items"

    return f"""Extract {kind} from the provided text and map them to the verified source URLs.

Search Result Text:
\"\"\"{search_text}\"\"\"

Verified Source URLs: {json.dumps(sources)}

Instructions:
1. Identify distinct news items from the text.
2. Match each item to the most relevant URL from the Verified Source URLs list.
3. The 'url' field MUST be an exact string match from the Verified Source URLs list.
4. If an item does NOT have a matching verified URL, do not include it.
5. Dates must be in YYYY-MM-DD format.

For each item return title, date (YYYY-MM-DD), source (agency name), summary (concise), content (detailed description) and url (the matched verified URL)."""
