"""Generic persistence helper: remote document store with a local cache.

Writes always land in the local cache first and are then mirrored to the
remote store when one is configured. Reads try remote, then local, then a
caller-supplied default list. Failures are logged and degrade to the next
tier; nothing here retries or detects conflicts (last write wins).
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from reggenie.database.client import SupabaseClient, get_supabase_client
from reggenie.database.local_store import LocalStorage, get_local_storage
from reggenie.framework.seed import INITIAL_REGULATIONS
from reggenie.models.regulation import RegulationEntry
from reggenie.models.records import AuditEntry, MonitoringReportLog
from reggenie.models.dose import DoseStudy

logger = logging.getLogger(__name__)

REGULATIONS = "regulations"
AUDIT_LOGS = "audit_logs"
MONITORING_REPORTS = "monitoring_reports"
DOSE_STUDIES = "dose_studies"


def local_key(collection: str) -> str:
    return f"local_{collection}"


class DocumentStore:
    """Keyed document collections with remote -> local -> default fallback."""

    def __init__(
        self,
        local: LocalStorage,
        remote_factory: Callable[[], Optional[SupabaseClient]] = lambda: None,
        defaults: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    ):
        self.local = local
        self._remote_factory = remote_factory
        self.defaults = defaults or {}
        # Serializes read-modify-write of the local arrays
        self.lock = threading.RLock()

    @property
    def remote(self) -> Optional[SupabaseClient]:
        try:
            return self._remote_factory()
        except Exception as e:
            logger.error(f"Remote store unavailable: {e}")
            return None

    def _default(self, collection: str, fallback: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        if fallback is not None:
            return [dict(d) for d in fallback]
        return [dict(d) for d in self.defaults.get(collection, [])]

    def get(self, collection: str, fallback: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
        """Read a collection: remote, else local cache, else the default list."""
        remote = self.remote
        if remote:
            try:
                documents = remote.get_all(collection)
                if documents:
                    return documents
                logger.info(f"Remote collection {collection} empty, falling back to local cache")
            except Exception as e:
                logger.error(f"Error fetching {collection} from remote store, falling back to local: {e}")

        cached = self.local.get_json(local_key(collection))
        if isinstance(cached, list) and cached:
            return cached

        return self._default(collection, fallback)

    def get_one(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        for document in self.get(collection):
            if document.get("id") == doc_id:
                return document
        return None

    def save(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Write a document locally (replace by id or prepend), then remotely."""
        document = {**data, "id": doc_id}
        self._update_local(collection, document)

        remote = self.remote
        if not remote:
            return

        try:
            remote.upsert(collection, doc_id, document)
            logger.info(f"Document {collection}/{doc_id} saved to remote store")
        except Exception as e:
            logger.error(f"Error saving {collection}/{doc_id} to remote store: {e}")

    def update(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """Merge a patch into the current document and save the result."""
        with self.lock:
            current = self.get_one(collection, doc_id) or {}
            merged = {**current, **patch, "id": doc_id}
            self.save(collection, doc_id, merged)
        return merged

    def _update_local(self, collection: str, document: Dict[str, Any]) -> None:
        def replace_or_prepend(current: Any) -> List[Dict[str, Any]]:
            if not isinstance(current, list):
                current = self._default(collection, None)

            index = next(
                (i for i, d in enumerate(current) if d.get("id") == document["id"]),
                None,
            )
            if index is not None:
                current[index] = document
                return current
            return [document] + current

        try:
            with self.lock:
                self.local.update_json(local_key(collection), replace_or_prepend)
        except Exception as e:
            logger.error(f"Local storage sync failed for {collection}: {e}")

    # Typed wrappers

    def get_all_regulations(self) -> List[RegulationEntry]:
        entries = [RegulationEntry(**d) for d in self.get(REGULATIONS)]
        return sorted(entries, key=lambda r: r.date or "", reverse=True)

    def get_regulation(self, regulation_id: str) -> Optional[RegulationEntry]:
        data = self.get_one(REGULATIONS, regulation_id)
        return RegulationEntry(**data) if data else None

    def save_regulation(self, entry: RegulationEntry) -> None:
        self.save(REGULATIONS, entry.id, entry.model_dump(mode="json"))

    def update_regulation(self, regulation_id: str, patch: Dict[str, Any]) -> RegulationEntry:
        return RegulationEntry(**self.update(REGULATIONS, regulation_id, patch))

    def save_audit_entry(self, entry: AuditEntry) -> None:
        self.save(AUDIT_LOGS, entry.id, entry.model_dump(mode="json"))

    def get_audit_logs(self) -> List[AuditEntry]:
        entries = [AuditEntry(**d) for d in self.get(AUDIT_LOGS, [])]
        return sorted(entries, key=lambda e: e.timestamp, reverse=True)

    def save_monitoring_report(self, report: MonitoringReportLog) -> None:
        self.save(MONITORING_REPORTS, report.id, report.model_dump(mode="json"))

    def get_all_monitoring_reports(self) -> List[MonitoringReportLog]:
        return [MonitoringReportLog(**d) for d in self.get(MONITORING_REPORTS, [])]

    def get_monitoring_report(self, report_id: str) -> Optional[MonitoringReportLog]:
        data = self.get_one(MONITORING_REPORTS, report_id)
        return MonitoringReportLog(**data) if data else None

    def save_dose_study(self, study: DoseStudy) -> None:
        self.save(DOSE_STUDIES, study.id, study.model_dump(mode="json"))

    def get_dose_study(self, study_id: str) -> Optional[DoseStudy]:
        data = self.get_one(DOSE_STUDIES, study_id)
        return DoseStudy(**data) if data else None


# Global document store instance
document_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """Get the document store (dependency injection)."""
    global document_store
    if not document_store:
        document_store = DocumentStore(
            local=get_local_storage(),
            remote_factory=get_supabase_client,
            defaults={REGULATIONS: [r.model_dump(mode="json") for r in INITIAL_REGULATIONS]},
        )
    return document_store
