import logging
from typing import List, Optional

from reggenie.agents.llm.client import generate_structured, generate_text, transcribe_audio as transcribe
from reggenie.agents.monitoring.prompts import (
    SYSTEM_PROMPT,
    SynthesizedReport,
    build_confirmation_prompt,
    build_follow_up_prompt,
    build_report_prompt,
)
from reggenie.agents.translate.documents import extract_docx_text
from reggenie.database.store import DocumentStore, get_document_store
from reggenie.framework.audit import record_action
from reggenie.models.records import (
    MonitoringReportLog,
    MonitoringReportRequest,
    ReportAudit,
    current_timestamp,
    record_id,
)

logger = logging.getLogger(__name__)


def synthesize_monitoring_report(
    request: MonitoringReportRequest,
    store: Optional[DocumentStore] = None,
) -> MonitoringReportLog:
    """Generate, persist and audit a monitoring visit report."""
    inputs = request.inputs
    if not inputs.notes.strip() and not inputs.transcript.strip():
        raise ValueError("Digital notes or a voice transcript are required")

    store = store or get_document_store()
    template_context = request.template_text or f"Standard Structure: {request.template_reference}"

    result = generate_structured(
        build_report_prompt(
            request.visit_type,
            inputs,
            template_context,
            request.project_number,
            request.visit_date,
        ),
        SynthesizedReport,
        name="monitoring_report",
        system=SYSTEM_PROMPT,
        temperature=0.2,
    )

    now = current_timestamp()
    report = MonitoringReportLog(
        id=record_id("MR", now),
        project_number=request.project_number,
        sponsor=request.sponsor,
        visit_date=request.visit_date,
        visit_number=request.visit_number,
        visit_type=request.visit_type,
        content_html=result.content_html,
        raw_notes=inputs.notes,
        audit=ReportAudit(
            explainability=result.explainability,
            traceability=result.traceability,
            model_accuracy=max(0.0, min(100.0, result.model_accuracy)),
            timestamp=now,
        ),
    )

    store.save_monitoring_report(report)
    record_action(
        "REPORT_GENERATED",
        "monitoring-report",
        f"Synthesized report for {request.project_number}",
        store=store,
    )

    logger.info(f"Monitoring report {report.id} generated for {request.project_number} ({request.visit_type.value})")
    return report


def generate_follow_up_letter(report_html: str, project_number: str, visit_date: str = "") -> str:
    if not report_html.strip():
        raise ValueError("A generated report is required")
    return generate_text(
        build_follow_up_prompt(report_html, project_number, visit_date),
        system=SYSTEM_PROMPT,
    )


def generate_confirmation_letter(report_html: str, next_visit_date: str, project_number: str) -> str:
    if not report_html.strip():
        raise ValueError("A generated report is required")
    if not next_visit_date or not next_visit_date.strip():
        raise ValueError("Select next visit date")
    return generate_text(
        build_confirmation_prompt(report_html, next_visit_date, project_number),
        system=SYSTEM_PROMPT,
    )


def transcribe_visit_audio(data: bytes, filename: str) -> str:
    """Transcribe a voice note, labelled with its file name."""
    text = transcribe(data, filename)
    return f"[Transcript {filename}]:\n{text}"


def read_template(content: bytes, filename: str) -> str:
    try:
        return extract_docx_text(content)
    except Exception as e:
        logger.error(f"Failed to parse template file {filename}: {e}")
        raise ValueError("Failed to parse template file") from e


def get_report_history(store: Optional[DocumentStore] = None) -> List[MonitoringReportLog]:
    store = store or get_document_store()
    return store.get_all_monitoring_reports()
