"""Informed consent form generation, translation and Word export."""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from reggenie.agents.icf.prompts import SYSTEM_PROMPT, build_icf_prompt, build_icf_translation_prompt
from reggenie.agents.llm.client import generate_text, strip_code_fences
from reggenie.agents.translate.documents import (
    DOCX_CONTENT_TYPE,
    PDF_CONTENT_TYPE,
    extract_docx_text,
    extract_pdf_pages,
)
from reggenie.database.store import DocumentStore
from reggenie.framework.audit import record_action
from reggenie.models.icf import ICFDocument, ICFRequest
from reggenie.models.records import current_timestamp

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md")

env = Environment(
    loader=FileSystemLoader(Path(__file__).parent / "templates"),
    autoescape=select_autoescape(["html"]),
)


def read_source_file(content: bytes, filename: str, content_type: Optional[str] = None) -> str:
    """Text of an uploaded protocol, template or regulation file."""
    name = (filename or "").lower()

    try:
        if content_type == DOCX_CONTENT_TYPE or name.endswith(".docx"):
            return extract_docx_text(content)
        if content_type == PDF_CONTENT_TYPE or name.endswith(".pdf"):
            return "\n\n".join(page for page in extract_pdf_pages(content) if page.strip())
        if content_type == "text/plain" or name.endswith(TEXT_SUFFIXES):
            return content.decode("utf-8", errors="replace")
    except Exception as e:
        logger.error(f"Failed to read {filename}: {e}")
        raise ValueError(f"Failed to read {filename}") from e

    raise ValueError("Supported formats: .txt, .md, .pdf, .docx")


def generate_icf(request: ICFRequest, store: Optional[DocumentStore] = None) -> ICFDocument:
    if not request.protocol.strip():
        raise ValueError("Please provide the Protocol content.")

    content = generate_text(
        build_icf_prompt(
            request.protocol,
            request.template,
            request.regulations,
            request.country,
            request.icf_type,
            request.target_language,
        ),
        system=SYSTEM_PROMPT,
    )

    document = ICFDocument(
        icf_type=request.icf_type,
        country=request.country,
        target_language=request.target_language,
        content_html=strip_code_fences(content),
        generated_at=current_timestamp(),
    )

    record_action(
        "ICF_GENERATED",
        "icf-generator",
        f"{request.icf_type.value} for {request.country} in {request.target_language}",
        store=store,
    )
    logger.info(f"{request.icf_type.value} generated for {request.country} ({len(document.content_html)} chars)")
    return document


def translate_icf(document: ICFDocument, target_language: str) -> ICFDocument:
    """Translated copy of a generated form; the original is left untouched."""
    translated = generate_text(
        build_icf_translation_prompt(document.content_html, target_language),
        system=SYSTEM_PROMPT,
    )
    return document.model_copy(update={
        "content_html": strip_code_fences(translated),
        "target_language": target_language,
        "translated_from": document.target_language,
    })


def icf_filename(document: ICFDocument) -> str:
    icf_type = re.sub(r"\s+", "_", document.icf_type.value)
    country = re.sub(r"\s+", "_", document.country)
    return f"{icf_type}_{country}_{document.target_language}.doc"


def render_icf_word(document: ICFDocument, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return env.get_template("icf_word.html").render(
        document=document,
        filename=icf_filename(document),
        generated=now.strftime("%m/%d/%Y"),
    )
