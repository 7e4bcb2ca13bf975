"""Source link monitor for tracked regulations.

Checks that each entry's source URL still resolves and stamps
`last_checked` on entries whose link answered.
"""

import logging
from typing import Dict, Optional

import requests

from reggenie.database.store import DocumentStore, get_document_store
from reggenie.models.records import current_timestamp

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "AIDE-RegGenie/1.8 (regulatory source monitor)"
}

RECHECK_AFTER_MS = 24 * 60 * 60 * 1000


def check_source_url(url: str) -> bool:
    """True when the URL answers with a non-error status."""
    try:
        response = requests.head(url, headers=HEADERS, timeout=30, allow_redirects=True)
        # Some agency sites refuse HEAD
        if response.status_code in (403, 405):
            response = requests.get(url, headers=HEADERS, timeout=30, stream=True)
            response.close()
        response.raise_for_status()
        return True
    except Exception as e:
        logger.warning(f"Source link check failed for {url}: {e}")
        return False


def check_regulation_sources(store: Optional[DocumentStore] = None, force: bool = False) -> Dict[str, int]:
    """Check every linked entry not verified within the last day."""
    store = store or get_document_store()
    now = current_timestamp()

    counts = {"checked": 0, "reachable": 0, "unreachable": 0, "skipped": 0}
    for entry in store.get_all_regulations():
        if not entry.url:
            continue
        if not force and entry.last_checked and now - entry.last_checked < RECHECK_AFTER_MS:
            counts["skipped"] += 1
            continue

        counts["checked"] += 1
        if check_source_url(entry.url):
            counts["reachable"] += 1
            try:
                store.update_regulation(entry.id, {"last_checked": now})
            except Exception as e:
                logger.error(f"Failed to stamp last_checked on {entry.id}: {e}")
        else:
            counts["unreachable"] += 1

    logger.info(
        "Source check complete: %d checked, %d reachable, %d unreachable, %d skipped",
        counts["checked"], counts["reachable"], counts["unreachable"], counts["skipped"],
    )
    return counts
