"""
FastAPI application for the AIDE RegGenie regulatory intelligence service.
Provides the regulation database, news feed, assistant chat, translation QC,
consent form generation, monitoring reports and the Phase-1 dose workbook
over REST.
"""
import logging
import logging.config
import threading
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

import schedule
from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from fastapi.templating import Jinja2Templates

from reggenie.config.settings import settings, get_log_config
from reggenie.auth.gate import AccessGate, AccessRole, AuthError, get_access_gate
from reggenie.database.store import DocumentStore, get_document_store
from reggenie.dashboard.charts import build_dashboard
from reggenie.dashboard.filters import DatabaseFilters, apply_filters, sort_entries
from reggenie.agents.news.client import (
    displayed_news,
    get_cached_news,
    get_news_archive,
    refresh_news_cache,
)
from reggenie.agents.translate.workflow import (
    ReviewerRequiredError,
    TranslationWorkflow,
    WorkflowError,
    get_translation_workflow,
)
from reggenie.models.dose import DoseStudyCreate, DoseSubject
from reggenie.models.icf import ICFDocument, ICFRequest, ICFTranslateRequest
from reggenie.models.records import MonitoringReportRequest
from reggenie.models.regulation import NewsItem, RiskOverride
from reggenie.models.requests import (
    ChatRequest,
    ConfirmationRequest,
    FeedbackRequest,
    FollowUpRequest,
    LoginRequest,
    RegisterRequest,
    TextEntryRequest,
    UserSettingsUpdate,
    WebSearchRequest,
)
from reggenie.models.translation import (
    CorrectionRequest,
    FinalizeRequest,
    FunctionalGroup,
    SpeechBoundary,
    TranslationDimension,
    TranslationDocType,
    TranslationJobCreate,
    VoiceSelectionRequest,
)

# Configure logging
logging.config.dictConfig(get_log_config())
logger = logging.getLogger(__name__)

VERSION = "1.8.0"

# Templates
templates = Jinja2Templates(directory=Path(__file__).parent / "templates")

# Scheduler state
scheduler_running = False


def run_scheduler():
    """Run the schedule loop in a background thread."""
    while scheduler_running:
        schedule.run_pending()
        time.sleep(30)


def run_news_refresh():
    """Wrapper to refresh the news cache with error handling."""
    try:
        logger.info("Running scheduled news refresh")
        count = refresh_news_cache()
        logger.info(f"Scheduled news refresh complete: {count} items")
    except Exception as e:
        logger.error(f"Scheduled news refresh failed: {e}")


def run_source_check():
    """Wrapper to check regulation source links with error handling."""
    try:
        from reggenie.agents.regulations.sources import check_regulation_sources
        logger.info("Running scheduled source link check")
        check_regulation_sources()
    except Exception as e:
        logger.error(f"Scheduled source link check failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    global scheduler_running

    # Startup
    logger.info("Starting AIDE RegGenie")
    store = get_document_store()
    logger.info(f"Document store ready (remote: {'yes' if store.remote else 'no'})")

    schedule.every(settings.news_refresh_minutes).minutes.do(run_news_refresh)
    schedule.every().day.at("06:00").do(run_source_check)
    scheduler_running = True
    scheduler_thread = threading.Thread(target=run_scheduler, daemon=True)
    scheduler_thread.start()
    logger.info(f"News refresh scheduled every {settings.news_refresh_minutes} minutes")
    logger.info("Source link check scheduled daily at 06:00")

    yield

    # Shutdown
    logger.info("Shutting down AIDE RegGenie")
    scheduler_running = False
    schedule.clear()


app = FastAPI(
    title="AIDE RegGenie",
    description="Regulatory intelligence for clinical and healthcare compliance teams",
    version=VERSION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


def require_admin(
    x_access_code: Optional[str] = Header(None),
    gate: AccessGate = Depends(get_access_gate),
) -> None:
    """Admin-only endpoints require the registered access code."""
    if not gate.verify(x_access_code):
        raise HTTPException(status_code=403, detail="Admin access required")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "AIDE RegGenie is running!",
        "status": "healthy",
        "environment": settings.env,
        "version": VERSION
    }


@app.get("/health")
def health_check(store: DocumentStore = Depends(get_document_store)):
    """Detailed health check with remote store connectivity."""
    remote = store.remote
    if remote is None:
        db_status = "local only"
    else:
        try:
            db_status = remote.health()
        except Exception as e:
            logger.warning(f"Remote store health check failed: {e}")
            db_status = f"error: {str(e)[:100]}"

    return {
        "status": "ok",
        "service": "reggenie",
        "version": VERSION,
        "environment": settings.env,
        "database": db_status
    }


# Access gate

@app.get("/api/auth/status")
def auth_status(gate: AccessGate = Depends(get_access_gate)):
    return {"registered": gate.is_registered()}


@app.post("/api/auth/register")
def register(body: RegisterRequest, gate: AccessGate = Depends(get_access_gate)):
    try:
        role = gate.register(body.code, body.confirm)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"role": role.value}


@app.post("/api/auth/login")
def login(body: LoginRequest, gate: AccessGate = Depends(get_access_gate)):
    try:
        role = gate.login(body.code)
    except AuthError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"role": role.value}


@app.post("/api/auth/guest")
def guest_access():
    return {"role": AccessRole.GUEST.value}


@app.post("/api/auth/reset", dependencies=[Depends(require_admin)])
def reset_access_code(gate: AccessGate = Depends(get_access_gate)):
    gate.reset()
    return {"status": "ok"}


# User settings

@app.get("/api/settings", dependencies=[Depends(require_admin)])
def read_user_settings():
    from reggenie.config.user_settings import get_user_settings
    return get_user_settings()


@app.put("/api/settings", dependencies=[Depends(require_admin)])
def update_user_settings(body: UserSettingsUpdate):
    from reggenie.config.user_settings import save_user_settings, get_user_settings

    try:
        save_user_settings(body.openai_api_key, body.remote_store_config)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid remote store config: {e}")
    return get_user_settings()


# Regulation endpoints

@app.get("/api/regulations")
def get_regulations(
    status: Optional[List[str]] = Query(None),
    impact: Optional[List[str]] = Query(None),
    category: Optional[List[str]] = Query(None),
    region: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    sort: str = "date",
    descending: bool = True,
    store: DocumentStore = Depends(get_document_store)
):
    """Get regulations with faceted filtering and sorting."""
    filters = DatabaseFilters(status=status, impact=impact, category=category, region=region, search=search)
    try:
        entries = apply_filters(store.get_all_regulations(), filters)
        return sort_entries(entries, sort, descending)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/regulations/{regulation_id}")
def get_regulation(regulation_id: str, store: DocumentStore = Depends(get_document_store)):
    entry = store.get_regulation(regulation_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Regulation not found")
    return entry


@app.post("/api/regulations/{regulation_id}/analysis")
def analyze_regulation_endpoint(regulation_id: str, store: DocumentStore = Depends(get_document_store)):
    """Impact assessment for one regulation (slide-over analysis)."""
    from reggenie.agents.regulations.client import analyze_regulation

    entry = store.get_regulation(regulation_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Regulation not found")
    return analyze_regulation(entry)


@app.put("/api/regulations/{regulation_id}/risk", dependencies=[Depends(require_admin)])
def override_risk_endpoint(
    regulation_id: str,
    body: RiskOverride,
    store: DocumentStore = Depends(get_document_store)
):
    from reggenie.agents.regulations.client import override_risk

    if not store.get_regulation(regulation_id):
        raise HTTPException(status_code=404, detail="Regulation not found")
    return override_risk(regulation_id, body.risk_level, body.risk_rationale, store=store)


@app.post("/api/regulations/from-text")
def create_regulation_from_text(body: TextEntryRequest, store: DocumentStore = Depends(get_document_store)):
    """Extract a regulation entry from pasted text."""
    from reggenie.agents.regulations.client import create_entry_from_text

    try:
        return create_entry_from_text(body.text, store=store)
    except Exception as e:
        logger.error(f"Error creating regulation from text: {e}")
        raise HTTPException(status_code=502, detail="AI extraction failed")


@app.post("/api/regulations/search")
def search_regulations_endpoint(body: WebSearchRequest):
    """Grounded web search for regulations, without saving."""
    from reggenie.agents.regulations.client import search_web_for_regulations, parse_web_search_results

    try:
        grounded = search_web_for_regulations(body.query, body.jurisdiction)
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Web search failed: {e}")

    return {
        "text": grounded.text,
        "sources": grounded.sources,
        "entries": parse_web_search_results(grounded.text, grounded.sources),
    }


@app.post("/api/regulations/import", dependencies=[Depends(require_admin)])
def import_regulations_endpoint(body: WebSearchRequest, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.regulations.client import import_from_web

    try:
        entries = import_from_web(body.query, body.jurisdiction, store=store)
    except Exception as e:
        logger.error(f"Web import failed: {e}")
        raise HTTPException(status_code=502, detail=f"Web import failed: {e}")
    return {"status": "ok", "imported": len(entries), "entries": entries}


@app.post("/api/regulations/sources/check", dependencies=[Depends(require_admin)])
def check_sources_endpoint(force: bool = False, store: DocumentStore = Depends(get_document_store)):
    """Verify regulation source links now instead of waiting for the daily job."""
    from reggenie.agents.regulations.sources import check_regulation_sources
    return check_regulation_sources(store=store, force=force)


# Dashboard

@app.get("/api/dashboard")
def dashboard_data(store: DocumentStore = Depends(get_document_store)):
    return build_dashboard(store.get_all_regulations())


@app.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request, store: DocumentStore = Depends(get_document_store)):
    """Render the regulation dashboard."""
    try:
        entries = store.get_all_regulations()
        return templates.TemplateResponse(request, "dashboard.html", {
            "dashboard": build_dashboard(entries),
            "regulations": entries[:20],
            "news": displayed_news(get_cached_news()),
        })

    except Exception as e:
        logger.error(f"Error rendering dashboard: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


# News

@app.get("/api/news", response_model=List[NewsItem])
def get_news(refresh: bool = False):
    """Verified news from the last 7 days."""
    return displayed_news(get_cached_news(force_refresh=refresh))


@app.get("/api/news/archive", response_model=List[NewsItem])
def get_news_archive_endpoint():
    return get_news_archive(get_cached_news())


@app.post("/api/news/triage")
def triage_news_endpoint(item: NewsItem, store: DocumentStore = Depends(get_document_store)):
    """Add a news item to the database as a Draft entry."""
    from reggenie.agents.regulations.client import triage_news

    try:
        return triage_news(item, store=store)
    except Exception as e:
        logger.error(f"Failed to triage news item: {e}")
        raise HTTPException(status_code=502, detail="Failed to process news item")


# Chat

@app.get("/api/chat/{session_id}")
def get_chat(session_id: str):
    from reggenie.agents.chat.session import find_session
    session = find_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Chat session not found")
    return {"session_id": session.id, "messages": session.messages}


@app.post("/api/chat/{session_id}/messages")
def send_chat_message(session_id: str, body: ChatRequest):
    """Stream the assistant's reply as plain-text chunks."""
    from reggenie.agents.chat.session import get_session

    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")

    session = get_session(session_id)
    return StreamingResponse(session.send_message(body.text), media_type="text/plain")


@app.post("/api/chat/feedback")
def chat_feedback(body: FeedbackRequest):
    from reggenie.agents.chat.session import submit_feedback
    return submit_feedback(**body.model_dump())


# Translation

def _job_or_404(workflow: TranslationWorkflow, log_id: str):
    try:
        return workflow.get_job(log_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Translation job not found")


@app.get("/api/translations")
def list_translations(workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    return workflow.list_jobs()


@app.get("/api/translations/metrics")
def translation_metrics(workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    return workflow.metrics_summary()


@app.post("/api/translations")
def create_translation(body: TranslationJobCreate, workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    try:
        return workflow.start_job(
            [body.text],
            body.target_language,
            project_number=body.project_number,
            doc_type=body.doc_type,
            dimension=body.dimension,
            functional_group=body.functional_group,
            cultural_nuances=body.cultural_nuances,
            page_range=body.page_range,
        )
    except WorkflowError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/translations/upload")
def upload_translation(
    file: UploadFile = File(...),
    target_language: str = Form("Spanish"),
    project_number: str = Form("AZ-PH1-2025"),
    doc_type: TranslationDocType = Form(TranslationDocType.ESSENTIAL_DOCUMENTS),
    dimension: TranslationDimension = Form(TranslationDimension.MEDICAL_ACCURACY),
    functional_group: FunctionalGroup = Form(FunctionalGroup.CLINICAL_OPERATIONS),
    cultural_nuances: bool = Form(False),
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    """Start a translation job from a PDF, DOCX or text upload."""
    from reggenie.agents.translate.documents import ingest_document

    try:
        pages = ingest_document(file.file.read(), file.filename, file.content_type)
        return workflow.start_job(
            pages,
            target_language,
            project_number=project_number,
            doc_type=doc_type,
            dimension=dimension,
            functional_group=functional_group,
            cultural_nuances=cultural_nuances,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/translations/{log_id}")
def get_translation(log_id: str, workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    return _job_or_404(workflow, log_id)


@app.post("/api/translations/{log_id}/translate")
def run_translation(log_id: str, workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    _job_or_404(workflow, log_id)
    try:
        return workflow.translate(log_id)
    except WorkflowError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Translation failed: {e}")


@app.post("/api/translations/{log_id}/review/start")
def start_review(log_id: str, workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    _job_or_404(workflow, log_id)
    try:
        return workflow.start_review(log_id)
    except WorkflowError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/translations/{log_id}/review/pause")
def pause_review(log_id: str, workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    _job_or_404(workflow, log_id)
    return workflow.pause_review(log_id)


@app.get("/api/translations/{log_id}/alternatives")
def word_alternatives(
    log_id: str,
    page_index: int = Query(..., ge=0),
    word_index: int = Query(..., ge=0),
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    _job_or_404(workflow, log_id)
    try:
        return {"alternatives": workflow.suggest_alternatives(log_id, page_index, word_index)}
    except WorkflowError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/api/translations/{log_id}/corrections")
def commit_correction(
    log_id: str,
    body: CorrectionRequest,
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    job = _job_or_404(workflow, log_id)
    try:
        return workflow.commit_correction(log_id, **body.model_dump())
    except WorkflowError as e:
        status_code = 409 if job.status.value != "QC Pending" else 400
        raise HTTPException(status_code=status_code, detail=str(e))


@app.post("/api/translations/{log_id}/finalize")
def finalize_translation(
    log_id: str,
    body: FinalizeRequest,
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    _job_or_404(workflow, log_id)
    try:
        return workflow.finalize(log_id, body.reviewer_name)
    except ReviewerRequiredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WorkflowError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/translations/{log_id}/back-translate")
def back_translate(log_id: str, workflow: TranslationWorkflow = Depends(get_translation_workflow)):
    _job_or_404(workflow, log_id)
    try:
        return workflow.back_translate(log_id)
    except WorkflowError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Back-translation failed: {e}")


@app.get("/api/translations/{log_id}/export/{kind}")
def export_translation(
    log_id: str,
    kind: str,
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    """Word, print-ready or certificate export; finalized jobs become Downloaded."""
    from reggenie.agents.translate.export import (
        HTML_MEDIA_TYPE, WORD_MEDIA_TYPE,
        render_certificate, render_print_document, render_word_document, word_filename,
    )

    _job_or_404(workflow, log_id)
    try:
        log = workflow.record_export(log_id, kind)
    except WorkflowError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if kind == "word":
        return Response(
            content=render_word_document(log),
            media_type=WORD_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{word_filename(log)}"'},
        )
    if kind == "print":
        return Response(content=render_print_document(log), media_type=HTML_MEDIA_TYPE)
    return Response(content=render_certificate(log), media_type=HTML_MEDIA_TYPE)


def _page_text(job, page_index: int) -> str:
    if page_index >= len(job.target_pages):
        raise HTTPException(status_code=400, detail="Page does not exist")
    return job.target_pages[page_index]


@app.post("/api/translations/{log_id}/speech/voice")
def select_speech_voice(
    log_id: str,
    body: VoiceSelectionRequest,
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    """Pick the player's voice for the job's target language."""
    from reggenie.agents.translate.speech import Voice, locale_for, select_voice

    job = _job_or_404(workflow, log_id)
    voice = select_voice([Voice(v.name, v.lang) for v in body.voices], job.target_language)
    return {
        "locale": locale_for(job.target_language),
        "voice": voice.name if voice else None,
    }


@app.post("/api/translations/{log_id}/speech")
def translation_speech(
    log_id: str,
    page_index: int = Query(0, ge=0),
    start_index: Optional[int] = Query(None, ge=0),
    voice: Optional[str] = Query(None),
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    """Synthesize speech for a translated page, resuming where reading stopped."""
    from reggenie.agents.translate.speech import DEFAULT_SPEECH_VOICE, get_reader, locale_for, synthesize_page

    job = _job_or_404(workflow, log_id)
    cursor = get_reader(log_id, page_index, _page_text(job, page_index))
    offset = cursor.last_char_index if start_index is None else start_index

    text = cursor.start(offset)
    try:
        audio = synthesize_page(text, voice=voice or DEFAULT_SPEECH_VOICE)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Speech synthesis failed: {e}")

    headers = {
        "Content-Language": locale_for(job.target_language),
        "X-Reading-Offset": str(offset),
    }
    return Response(content=audio, media_type="audio/mpeg", headers=headers)


@app.post("/api/translations/{log_id}/speech/boundary")
def speech_boundary(
    log_id: str,
    body: SpeechBoundary,
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    """Map a spoken word boundary onto the page's highlighted word."""
    from reggenie.agents.translate.speech import get_reader

    job = _job_or_404(workflow, log_id)
    cursor = get_reader(log_id, body.page_index, _page_text(job, body.page_index))
    cursor.boundary(body.char_index)
    return cursor.state()


@app.post("/api/translations/{log_id}/speech/{action}")
def speech_control(
    log_id: str,
    action: str,
    page_index: int = Query(0, ge=0),
    workflow: TranslationWorkflow = Depends(get_translation_workflow)
):
    from reggenie.agents.translate.speech import get_reader

    if action not in ("pause", "end"):
        raise HTTPException(status_code=404, detail=f"Unknown speech action: {action}")

    job = _job_or_404(workflow, log_id)
    cursor = get_reader(log_id, page_index, _page_text(job, page_index))
    if action == "pause":
        cursor.pause()
    else:
        cursor.end()
    return cursor.state()


# Informed consent forms

@app.get("/api/icf/options")
def icf_options():
    from reggenie.models.icf import ICF_LANGUAGES, ICFType
    return {"types": [t.value for t in ICFType], "languages": ICF_LANGUAGES}


@app.post("/api/icf/sources")
def upload_icf_source(file: UploadFile = File(...)):
    """Extract the text of a protocol, template or regulation upload."""
    from reggenie.agents.icf.client import read_source_file

    try:
        text = read_source_file(file.file.read(), file.filename, file.content_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"filename": file.filename, "text": text}


@app.post("/api/icf", response_model=ICFDocument)
def create_icf(body: ICFRequest, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.icf.client import generate_icf

    try:
        return generate_icf(body, store=store)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"ICF generation failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate ICF.")


@app.post("/api/icf/translate", response_model=ICFDocument)
def translate_icf_document(body: ICFTranslateRequest):
    from reggenie.agents.icf.client import translate_icf

    try:
        return translate_icf(body.document, body.target_language)
    except Exception as e:
        logger.error(f"ICF translation failed: {e}")
        raise HTTPException(status_code=502, detail="Translation failed.")


@app.post("/api/icf/export")
def export_icf(body: ICFDocument):
    from reggenie.agents.icf.client import icf_filename, render_icf_word

    return Response(
        content=render_icf_word(body),
        media_type="application/msword",
        headers={"Content-Disposition": f'attachment; filename="{icf_filename(body)}"'},
    )


# Monitoring reports

@app.get("/api/monitoring/reports")
def list_monitoring_reports(store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.monitoring.client import get_report_history
    return get_report_history(store=store)


@app.post("/api/monitoring/reports")
def create_monitoring_report(body: MonitoringReportRequest, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.monitoring.client import synthesize_monitoring_report

    try:
        return synthesize_monitoring_report(body, store=store)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Monitoring report synthesis failed: {e}")
        raise HTTPException(status_code=502, detail="Report synthesis failed")


@app.post("/api/monitoring/follow-up")
def follow_up_letter(body: FollowUpRequest, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.monitoring.client import generate_follow_up_letter

    report = store.get_monitoring_report(body.report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    try:
        return {"html": generate_follow_up_letter(report.content_html, report.project_number, report.visit_date)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Letter generation failed: {e}")


@app.post("/api/monitoring/confirmation")
def confirmation_letter(body: ConfirmationRequest, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.monitoring.client import generate_confirmation_letter

    report = store.get_monitoring_report(body.report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    try:
        return {"html": generate_confirmation_letter(report.content_html, body.next_visit_date, report.project_number)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=502, detail=f"Letter generation failed: {e}")


@app.post("/api/monitoring/transcribe")
def transcribe_visit_audio_endpoint(file: UploadFile = File(...)):
    from reggenie.agents.monitoring.client import transcribe_visit_audio

    try:
        return {"transcript": transcribe_visit_audio(file.file.read(), file.filename)}
    except Exception as e:
        logger.error(f"Transcription failed: {e}")
        raise HTTPException(status_code=502, detail="Transcription failed")


@app.post("/api/monitoring/template")
def upload_report_template(file: UploadFile = File(...)):
    from reggenie.agents.monitoring.client import read_template

    try:
        text = read_template(file.file.read(), file.filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"template_reference": f"Uploaded: {file.filename}", "template_text": text}


# Phase-1 dose management

def _study_or_404(store: DocumentStore, study_id: str):
    study = store.get_dose_study(study_id)
    if not study:
        raise HTTPException(status_code=404, detail="Dose study not found")
    return study


@app.get("/api/dose/studies")
def list_dose_studies(store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.dose.client import list_studies
    return list_studies(store=store)


@app.post("/api/dose/studies")
def create_dose_study(body: DoseStudyCreate, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.dose.client import create_study
    return create_study(body, store=store)


@app.get("/api/dose/studies/{study_id}")
def get_dose_study(study_id: str, store: DocumentStore = Depends(get_document_store)):
    return _study_or_404(store, study_id)


@app.post("/api/dose/studies/{study_id}/subjects")
def add_dose_subject(study_id: str, subject: DoseSubject, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.dose.client import SubjectValidationError, add_subject

    study = _study_or_404(store, study_id)
    try:
        return add_subject(study, subject, store=store)
    except SubjectValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors)


@app.get("/api/dose/studies/{study_id}/rules")
def dose_rule_summary(study_id: str, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.dose.rules import summarize_dose_levels
    return summarize_dose_levels(_study_or_404(store, study_id))


@app.post("/api/dose/studies/{study_id}/analysis")
def dose_analysis(study_id: str, store: DocumentStore = Depends(get_document_store)):
    from reggenie.agents.dose.client import analyze_dose_escalation

    study = _study_or_404(store, study_id)
    try:
        return analyze_dose_escalation(study, store=store)
    except Exception as e:
        logger.error(f"Dose escalation analysis failed: {e}")
        raise HTTPException(status_code=502, detail="AI Analysis failed. Please check inputs.")


# Audit trail and requirement tracking

@app.get("/api/audit")
def audit_logs(store: DocumentStore = Depends(get_document_store)):
    return store.get_audit_logs()


@app.get("/api/requirements")
def build_requirements():
    from reggenie.framework.audit import get_build_history
    return get_build_history()


# TMF checklist

@app.get("/api/tmf/{country}")
def tmf_checklist(country: str):
    from reggenie.agents.regulations.client import get_tmf_checklist
    return get_tmf_checklist(country)
