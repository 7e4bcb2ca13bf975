"""Audit trail helpers and the system build history."""

import logging
from typing import List, Optional

from reggenie.database.store import DocumentStore, get_document_store
from reggenie.framework.seed import SYSTEM_BUILD_HISTORY
from reggenie.models.records import AuditEntry, BuildRequirement, current_timestamp, record_id

logger = logging.getLogger(__name__)


def record_action(
    action: str,
    module: str,
    details: str,
    user: str = "Operator",
    store: Optional[DocumentStore] = None,
) -> AuditEntry:
    """Write one audit entry; the store logs and swallows remote failures."""
    store = store or get_document_store()
    now = current_timestamp()
    entry = AuditEntry(
        id=record_id("AUDIT", now),
        timestamp=now,
        action=action,
        user=user,
        module=module,
        details=details,
    )
    store.save_audit_entry(entry)
    logger.info(f"Audit {action} recorded for {module}")
    return entry


def get_build_history() -> List[BuildRequirement]:
    return sorted(SYSTEM_BUILD_HISTORY, key=lambda r: r.timestamp, reverse=True)
