"""Translation jobs and the human-in-the-loop QC state machine.

A job moves Draft -> QC Pending -> QC Finalized -> Downloaded. Every
transition appends a workflow time code. Jobs live only in the local store.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Iterator, List, Optional

from reggenie.agents.llm.client import generate_structured, generate_text
from reggenie.agents.translate.prompts import (
    SYSTEM_PROMPT,
    build_alternatives_prompt,
    build_back_translation_prompt,
    build_language_prompt,
    build_page_prompt,
    build_structural_instructions,
)
from reggenie.config.settings import settings
from reggenie.database.local_store import LocalStorage, get_local_storage
from reggenie.models.records import current_timestamp, record_id
from reggenie.models.translation import (
    MQM_SEVERITY_WEIGHTS,
    AlternativeSuggestions,
    CorrectionRationale,
    FunctionalGroup,
    MQMSeverity,
    MQMType,
    QCStatus,
    TranslationDimension,
    TranslationDocType,
    TranslationLog,
    WorkflowTimeCode,
)

logger = logging.getLogger(__name__)

METRICS_KEY = "aide_translation_metrics"

EXPORT_KINDS = ("word", "print", "certificate")


class WorkflowError(ValueError):
    """Operation not allowed for the job's current state or input."""


class ReviewerRequiredError(WorkflowError):
    """QC finalization attempted without a reviewer name."""


def count_words(text: str) -> int:
    return len(text.split())


def compute_metrics(pages: List[str]) -> Dict[str, float]:
    text = " ".join(pages)
    words = count_words(text)
    tokens = round(words * settings.token_factor)
    return {
        "word_count": words,
        "char_count": len(text),
        "page_count": len(pages),
        "token_count": tokens,
        "estimated_cost": tokens / 1_000_000 * settings.cost_per_million_tokens,
    }


def generate_tracking_id(logs: List[TranslationLog], year: Optional[int] = None) -> str:
    year = year or datetime.now().year
    same_year = [log for log in logs if log.tracking_id.startswith(str(year))]
    return f"{year}-{len(same_year) + 1:03d}"


def detect_language(text: str) -> str:
    """Primary language of a text sample; "Unknown" when detection fails."""
    if not text.strip():
        return "Unknown"
    try:
        detected = generate_text(build_language_prompt(text)).strip()
    except Exception as e:
        logger.error(f"Language detection failed: {e}")
        return "Unknown"
    return detected or "Unknown"


def mqm_penalty(rationales: List[CorrectionRationale]) -> int:
    return sum(MQM_SEVERITY_WEIGHTS[MQMSeverity(r.mqm_severity)] for r in rationales)


def quality_score(penalty: int, words: int) -> float:
    if words <= 0:
        return 0.0 if penalty else 100.0
    return round(max(0.0, 100 * (1 - penalty / words)), 2)


class TranslationRepository:
    """Translation logs stored as one JSON array in the local store."""

    def __init__(self, storage: Optional[LocalStorage] = None):
        self.storage = storage or get_local_storage()
        self.lock = threading.RLock()

    def list(self) -> List[TranslationLog]:
        raw = self.storage.get_json(METRICS_KEY, [])
        if not isinstance(raw, list):
            return []
        return [TranslationLog(**item) for item in raw]

    def get(self, log_id: str) -> Optional[TranslationLog]:
        for log in self.list():
            if log.id == log_id:
                return log
        return None

    def save(self, log: TranslationLog) -> None:
        document = log.model_dump(mode="json")

        def replace_or_prepend(raw):
            logs = raw if isinstance(raw, list) else []
            index = next((i for i, existing in enumerate(logs) if existing.get("id") == log.id), None)
            if index is not None:
                logs[index] = document
                return logs
            return [document] + logs

        with self.lock:
            self.storage.update_json(METRICS_KEY, replace_or_prepend, [])


class TranslationWorkflow:
    def __init__(self, repository: Optional[TranslationRepository] = None):
        self.repository = repository or TranslationRepository()
        self._job_locks = {}
        self._job_locks_guard = threading.Lock()

    @contextmanager
    def _job(self, log_id: str) -> Iterator[TranslationLog]:
        """Load a job and hold its lock until the caller has saved it."""
        with self._job_locks_guard:
            lock = self._job_locks.setdefault(log_id, threading.RLock())
        with lock:
            yield self._load(log_id)

    def _load(self, log_id: str) -> TranslationLog:
        log = self.repository.get(log_id)
        if log is None:
            raise KeyError(log_id)
        return log

    @staticmethod
    def _require(log: TranslationLog, *allowed: QCStatus) -> None:
        if log.status not in allowed:
            expected = " or ".join(s.value for s in allowed)
            raise WorkflowError(f"Job {log.id} is {log.status.value}; expected {expected}")

    @staticmethod
    def _stamp(log: TranslationLog, event: str) -> None:
        log.workflow_time_codes.append(WorkflowTimeCode(event=event, timestamp=current_timestamp()))

    @staticmethod
    def _stop_timer(log: TranslationLog) -> None:
        if log.qc_started_at is not None:
            elapsed = max(0, current_timestamp() - log.qc_started_at) // 1000
            log.qc_time_spent_seconds += int(elapsed)
            log.qc_started_at = None

    def list_jobs(self) -> List[TranslationLog]:
        return self.repository.list()

    def get_job(self, log_id: str) -> TranslationLog:
        return self._load(log_id)

    def start_job(
        self,
        pages: List[str],
        target_language: str,
        project_number: str = "AZ-PH1-2025",
        doc_type: TranslationDocType = TranslationDocType.ESSENTIAL_DOCUMENTS,
        dimension: TranslationDimension = TranslationDimension.MEDICAL_ACCURACY,
        functional_group: FunctionalGroup = FunctionalGroup.CLINICAL_OPERATIONS,
        cultural_nuances: bool = False,
        page_range: Optional[str] = None,
    ) -> TranslationLog:
        """Create a Draft job from source pages, with metrics and detected language."""
        if not pages or not any(page.strip() for page in pages):
            raise WorkflowError("Document contains no text")

        source_language = detect_language(pages[0])

        with self.repository.lock:
            now = current_timestamp()
            log = TranslationLog(
                id=record_id("trans", now),
                tracking_id=generate_tracking_id(self.repository.list()),
                functional_group=functional_group,
                doc_type=doc_type,
                dimension=dimension,
                cultural_nuances=cultural_nuances,
                page_range=page_range,
                project_number=project_number,
                timestamp=now,
                source_language=source_language,
                target_language=target_language,
                source_pages=list(pages),
                provider="openai",
                **compute_metrics(pages),
            )
            self._stamp(log, "JOB_CREATED")
            self.repository.save(log)

        logger.info(f"Translation job {log.id} ({log.tracking_id}) created: {log.word_count} words")
        return log

    def translate(self, log_id: str, progress: Optional[Callable[[str], None]] = None) -> TranslationLog:
        """Translate every source page; failure leaves the job in Draft and raises."""
        with self._job(log_id) as log:
            self._require(log, QCStatus.DRAFT)

            instructions = build_structural_instructions(
                log.target_language,
                log.dimension.value if log.dimension else TranslationDimension.MEDICAL_ACCURACY.value,
                log.cultural_nuances,
            )

            translated = []
            total = len(log.source_pages)
            try:
                for i, page in enumerate(log.source_pages):
                    if progress:
                        progress(f"Translating page {i + 1} of {total}")
                    if not page.strip():
                        translated.append("")
                        continue
                    translated.append(generate_text(
                        build_page_prompt(page, i + 1, total, instructions),
                        system=SYSTEM_PROMPT,
                    ))
            except Exception as e:
                logger.error(f"Translation of job {log_id} failed: {e}")
                raise

            log.target_pages = translated
            log.status = QCStatus.QC_PENDING
            self._stamp(log, "TRANSLATION_COMPLETED")
            self.repository.save(log)

        logger.info(f"Job {log_id} translated into {log.target_language}: {total} page(s)")
        return log

    def start_review(self, log_id: str) -> TranslationLog:
        with self._job(log_id) as log:
            self._require(log, QCStatus.DRAFT, QCStatus.QC_PENDING)

            if log.qc_started_at is None:
                log.qc_started_at = current_timestamp()
                self._stamp(log, "QC_STARTED")
                self.repository.save(log)
        return log

    def pause_review(self, log_id: str) -> TranslationLog:
        with self._job(log_id) as log:
            if log.qc_started_at is None:
                return log

            self._stop_timer(log)
            self._stamp(log, "QC_PAUSED")
            self.repository.save(log)
        return log

    def _target_word(self, log: TranslationLog, page_index: int, word_index: int) -> List[str]:
        if page_index < 0 or page_index >= len(log.target_pages):
            raise WorkflowError(f"Page {page_index} does not exist")
        words = log.target_pages[page_index].split()
        if word_index < 0 or word_index >= len(words):
            raise WorkflowError(f"Word {word_index} does not exist on page {page_index}")
        return words

    def suggest_alternatives(self, log_id: str, page_index: int, word_index: int) -> List[str]:
        log = self._load(log_id)
        words = self._target_word(log, page_index, word_index)

        try:
            result = generate_structured(
                build_alternatives_prompt(words[word_index], log.target_pages[page_index], log.target_language),
                AlternativeSuggestions,
                name="alternative_suggestions",
                system=SYSTEM_PROMPT,
            )
        except Exception as e:
            logger.error(f"Alternative suggestions failed for job {log_id}: {e}")
            return []
        return result.alternatives

    def commit_correction(
        self,
        log_id: str,
        page_index: int,
        word_index: int,
        replacement: str,
        mqm_severity: MQMSeverity,
        mqm_type: MQMType,
        rationale: str,
    ) -> TranslationLog:
        """Replace one target word and record exactly one rationale for it.

        The replacement must be a single word: a phrase would split into
        several words on the page and shift every later word index.
        """
        replacement = (replacement or "").strip()
        rationale = (rationale or "").strip()

        with self._job(log_id) as log:
            self._require(log, QCStatus.QC_PENDING)

            if not replacement:
                raise WorkflowError("Replacement text is required")
            if len(replacement.split()) > 1:
                raise WorkflowError("Replacement must be a single word")
            if not rationale:
                raise WorkflowError("Correction rationale is required for the audit trail")

            words = self._target_word(log, page_index, word_index)
            original = words[word_index]
            words[word_index] = replacement
            log.target_pages[page_index] = " ".join(words)

            log.rationales.append(CorrectionRationale(
                original_text=original,
                updated_text=replacement,
                rationale=rationale,
                timestamp=current_timestamp(),
                page_index=page_index,
                word_index=word_index,
                mqm_severity=mqm_severity,
                mqm_type=mqm_type,
            ))

            penalty = mqm_penalty(log.rationales)
            log.human_correction_volume = len(log.rationales)
            log.mqm_error_score = penalty
            log.quality_score = quality_score(penalty, count_words(" ".join(log.target_pages)))
            self._stamp(log, "CORRECTION_COMMITTED")
            self.repository.save(log)

        logger.info(
            "Correction on job %s page %d word %d: %s/%s, quality=%s",
            log_id, page_index, word_index,
            MQMSeverity(mqm_severity).value, MQMType(mqm_type).value, log.quality_score,
        )
        return log

    def finalize(self, log_id: str, reviewer_name: str) -> TranslationLog:
        with self._job(log_id) as log:
            self._require(log, QCStatus.QC_PENDING)

            reviewer = (reviewer_name or "").strip()
            if not reviewer:
                raise ReviewerRequiredError("Authorized reviewer name required for GxP finalization")

            self._stop_timer(log)
            log.qc_reviewer_name = reviewer
            log.certified_at = current_timestamp()
            if log.quality_score is None:
                log.quality_score = 100.0
                log.mqm_error_score = 0
            log.status = QCStatus.QC_FINALIZED
            self._stamp(log, "QC_FINALIZED")
            self.repository.save(log)

        logger.info(f"Job {log_id} finalized by {reviewer}")
        return log

    def record_export(self, log_id: str, kind: str) -> TranslationLog:
        """Mark an export; a finalized job becomes Downloaded."""
        if kind not in EXPORT_KINDS:
            raise WorkflowError(f"Unknown export kind: {kind}")

        with self._job(log_id) as log:
            if kind != "certificate" and not log.target_pages:
                raise WorkflowError("Nothing to export: job has not been translated")

            if log.status == QCStatus.QC_FINALIZED:
                log.status = QCStatus.DOWNLOADED
            self._stamp(log, f"EXPORT_{kind.upper()}")
            self.repository.save(log)
        return log

    def back_translate(self, log_id: str) -> TranslationLog:
        with self._job(log_id) as log:
            if not log.target_pages:
                raise WorkflowError("Nothing to back-translate: job has not been translated")

            try:
                log.back_translation = [
                    generate_text(build_back_translation_prompt(page, log.source_language), system=SYSTEM_PROMPT)
                    if page.strip() else ""
                    for page in log.target_pages
                ]
            except Exception as e:
                logger.error(f"Back-translation of job {log_id} failed: {e}")
                raise

            self._stamp(log, "BACK_TRANSLATION_COMPLETED")
            self.repository.save(log)
        return log

    def metrics_summary(self) -> Dict[str, object]:
        logs = self.repository.list()

        by_status = {status.value: 0 for status in QCStatus}
        by_severity = {severity.value: 0 for severity in MQMSeverity}
        by_type = {mqm_type.value: 0 for mqm_type in MQMType}
        for log in logs:
            by_status[log.status.value] += 1
            for r in log.rationales:
                by_severity[MQMSeverity(r.mqm_severity).value] += 1
                by_type[MQMType(r.mqm_type).value] += 1

        scored = [log.quality_score for log in logs if log.quality_score is not None]

        return {
            "jobs": len(logs),
            "by_status": by_status,
            "total_words": sum(log.word_count for log in logs),
            "total_tokens": sum(log.token_count for log in logs),
            "total_cost": round(sum(log.estimated_cost or 0 for log in logs), 6),
            "average_quality": round(sum(scored) / len(scored), 2) if scored else None,
            "qc_seconds": sum(log.qc_time_spent_seconds for log in logs),
            "corrections_by_severity": by_severity,
            "corrections_by_type": by_type,
        }


# Global workflow instance
translation_workflow: Optional[TranslationWorkflow] = None


def get_translation_workflow() -> TranslationWorkflow:
    """Get the translation workflow (dependency injection)."""
    global translation_workflow
    if not translation_workflow:
        translation_workflow = TranslationWorkflow()
    return translation_workflow
