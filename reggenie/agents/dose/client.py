import logging
from typing import List, Optional

from reggenie.agents.dose.prompts import SYSTEM_PROMPT, build_dose_prompt
from reggenie.agents.dose.rules import format_rule_summary, summarize_dose_levels, validate_subject
from reggenie.agents.llm.client import generate_structured
from reggenie.database.store import DOSE_STUDIES, DocumentStore, get_document_store
from reggenie.framework.audit import record_action
from reggenie.models.dose import DoseAnalysis, DoseStudy, DoseStudyCreate, DoseSubject
from reggenie.models.records import record_id

logger = logging.getLogger(__name__)

MODULE = "dose-management"


class SubjectValidationError(ValueError):
    def __init__(self, errors):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def create_study(config: DoseStudyCreate, store: Optional[DocumentStore] = None) -> DoseStudy:
    store = store or get_document_store()
    study = DoseStudy(id=record_id("DS"), **config.model_dump())
    store.save_dose_study(study)
    logger.info(f"Dose study {study.id} created for {study.project_name}")
    return study


def list_studies(store: Optional[DocumentStore] = None) -> List[DoseStudy]:
    store = store or get_document_store()
    return [DoseStudy(**d) for d in store.get(DOSE_STUDIES, [])]


def add_subject(study: DoseStudy, subject: DoseSubject, store: Optional[DocumentStore] = None) -> DoseStudy:
    """Validate and record one subject's findings, with an audit entry."""
    errors = validate_subject(subject)
    if errors:
        raise SubjectValidationError(errors)

    store = store or get_document_store()
    study.subjects.append(subject)
    store.save_dose_study(study)

    record_action(
        "SUBJECT_RECORD_CREATED",
        MODULE,
        f"Recorded subject {subject.id} findings at dose level {subject.dose}mg. "
        f"AE Grade: {subject.ae_grade}, DLT: {str(subject.dlt).lower()}",
        user="Current User",
        store=store,
    )
    return study


def analyze_dose_escalation(study: DoseStudy, store: Optional[DocumentStore] = None) -> DoseAnalysis:
    store = store or get_document_store()

    summaries = summarize_dose_levels(study)
    analysis = generate_structured(
        build_dose_prompt(study, format_rule_summary(summaries)),
        DoseAnalysis,
        name="dose_escalation_analysis",
        system=SYSTEM_PROMPT,
    )

    last_cohort = study.subjects[-1].cohort if study.subjects else "unknown"
    record_action(
        "DOSE_ANALYSIS_PERFORMED",
        MODULE,
        f"Performed AI dose escalation analysis for cohort {last_cohort}. Result: {analysis.recommendation}",
        user="Current User",
        store=store,
    )

    logger.info(f"Dose analysis for {study.id}: {analysis.recommendation}, MTD {analysis.predicted_mtd}")
    return analysis
