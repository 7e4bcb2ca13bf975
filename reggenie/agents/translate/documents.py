"""Document ingestion: uploaded files to a list of page texts."""

import io
import logging
from typing import List, Optional

from docx import Document
from pypdf import PdfReader

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def extract_pdf_pages(content: bytes) -> List[str]:
    """One string per PDF page; pages without a text layer become empty strings."""
    reader = PdfReader(io.BytesIO(content))
    pages = []
    for i, page in enumerate(reader.pages):
        text = page.extract_text() or ""
        if not text.strip():
            logger.warning(f"No text extracted from PDF page {i + 1}")
        pages.append(text)
    return pages


def extract_docx_text(content: bytes) -> str:
    """Raw text of a DOCX body, one paragraph per line."""
    doc = Document(io.BytesIO(content))
    return "\n".join(paragraph.text for paragraph in doc.paragraphs)


def ingest_document(content: bytes, filename: str, content_type: Optional[str] = None) -> List[str]:
    """Split an upload into pages: PDF per page, DOCX and text as one page."""
    name = (filename or "").lower()

    try:
        if content_type == PDF_CONTENT_TYPE or name.endswith(".pdf"):
            pages = extract_pdf_pages(content)
        elif content_type == DOCX_CONTENT_TYPE or name.endswith(".docx"):
            pages = [extract_docx_text(content)]
        else:
            pages = [content.decode("utf-8", errors="replace")]
    except Exception as e:
        logger.error(f"Failed to ingest document {filename}: {e}")
        raise ValueError(f"Failed to ingest document: {filename}") from e

    logger.info(f"Ingested {filename}: {len(pages)} page(s)")
    return pages
