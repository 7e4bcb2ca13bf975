"""HTML exports of translation jobs, rendered with Jinja2."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from reggenie.models.translation import TranslationLog

WORD_MEDIA_TYPE = "application/msword"
HTML_MEDIA_TYPE = "text/html"

DEFAULT_CERTIFIER = "Clinical AI Protocol"


def nl2br(value: str) -> Markup:
    return Markup("<br/>").join(escape(value).split("\n"))


env = Environment(
    loader=FileSystemLoader(Path(__file__).parent / "templates"),
    autoescape=select_autoescape(["html"]),
)
env.filters["nl2br"] = nl2br


def _context(log: TranslationLog, now: Optional[datetime]) -> dict:
    now = now or datetime.now()
    return {
        "log": log,
        "doc_type": log.doc_type.value,
        "date_short": now.strftime("%m/%d/%Y"),
        "date_long": now.strftime("%B %d, %Y").replace(" 0", " "),
    }


def word_filename(log: TranslationLog) -> str:
    return f"Translation_{log.project_number}_{log.target_language}.doc".replace(" ", "_")


def render_word_document(log: TranslationLog, now: Optional[datetime] = None) -> str:
    """Word-compatible HTML; pages separated by a blank line."""
    return env.get_template("word_export.html").render(
        pages=log.target_pages, **_context(log, now)
    )


def render_print_document(log: TranslationLog, now: Optional[datetime] = None) -> str:
    """Print-ready HTML with a page break between pages."""
    return env.get_template("print_export.html").render(
        pages=log.target_pages, **_context(log, now)
    )


def render_certificate(log: TranslationLog, now: Optional[datetime] = None) -> str:
    return env.get_template("certificate.html").render(
        reviewer=log.qc_reviewer_name or DEFAULT_CERTIFIER, **_context(log, now)
    )
