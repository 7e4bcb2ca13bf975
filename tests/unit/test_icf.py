"""Tests for informed consent form generation and export."""

import io
from datetime import datetime
from unittest.mock import patch

import pytest
from docx import Document

from reggenie.agents.icf.client import (
    generate_icf,
    icf_filename,
    read_source_file,
    render_icf_word,
    translate_icf,
)
from reggenie.agents.icf.prompts import build_icf_prompt
from reggenie.models.icf import ICFDocument, ICFRequest, ICFType

CLIENT = "reggenie.agents.icf.client"


def generated(**fields) -> ICFDocument:
    data = {
        "icf_type": ICFType.PREGNANCY_PARTNER,
        "country": "United Kingdom",
        "target_language": "English",
        "content_html": "<h2>Purpose</h2><p>We ask to follow your pregnancy.</p>",
        "generated_at": 1_700_000_000_000,
    }
    data.update(fields)
    return ICFDocument(**data)


class TestSourceFiles:
    """Tests for reading uploaded protocol, template and regulation files."""

    def test_markdown_is_decoded(self) -> None:
        assert read_source_file(b"# Protocol AZ-101", "protocol.md") == "# Protocol AZ-101"

    def test_docx_raw_text(self) -> None:
        document = Document()
        document.add_paragraph("Section 1 Objectives")
        document.add_paragraph("Section 2 Design")
        buffer = io.BytesIO()
        document.save(buffer)

        text = read_source_file(buffer.getvalue(), "template.docx")

        assert text == "Section 1 Objectives\nSection 2 Design"

    def test_unsupported_format_rejected(self) -> None:
        with pytest.raises(ValueError, match="Supported formats"):
            read_source_file(b"\x89PNG", "scan.png", "image/png")

    def test_corrupt_pdf_rejected(self) -> None:
        with pytest.raises(ValueError):
            read_source_file(b"%PDF-broken", "protocol.pdf", "application/pdf")


class TestGeneration:
    """Tests for generate_icf and translate_icf."""

    def test_protocol_required(self, store) -> None:
        with pytest.raises(ValueError):
            generate_icf(ICFRequest(protocol="  ", template="Sections"), store=store)

    def test_generated_form_is_audited(self, store) -> None:
        request = ICFRequest(protocol="Phase 1 first-in-human study", country="Japan", icf_type=ICFType.GENOMIC)

        with patch(f"{CLIENT}.generate_text", return_value="```html\n<h2>Genomic research</h2>\n```") as ai:
            document = generate_icf(request, store=store)

        assert document.content_html == "<h2>Genomic research</h2>"
        assert document.icf_type == ICFType.GENOMIC
        assert document.country == "Japan"
        assert "Japan" in ai.call_args.args[0]
        assert store.get_audit_logs()[0].action == "ICF_GENERATED"

    def test_global_prompt_is_generic(self) -> None:
        prompt = build_icf_prompt("Protocol", "", "", "Global", ICFType.ASSENT, "French")

        assert "generic global form" in prompt
        assert "Assent Form in French" in prompt

    def test_translation_is_a_copy(self) -> None:
        original = generated()

        with patch(f"{CLIENT}.generate_text", return_value="<h2>Objectif</h2>"):
            translated = translate_icf(original, "French")

        assert translated.target_language == "French"
        assert translated.translated_from == "English"
        assert translated.content_html == "<h2>Objectif</h2>"
        assert original.content_html.startswith("<h2>Purpose")


class TestExport:
    """Tests for the Word export."""

    def test_filename_replaces_whitespace(self) -> None:
        assert icf_filename(generated()) == "Pregnancy_Partner_ICF_United_Kingdom_English.doc"

    def test_word_document_embeds_form_html(self) -> None:
        html = render_icf_word(generated(), now=datetime(2025, 3, 9))

        assert "<h2>Purpose</h2>" in html
        assert "Jurisdiction: United Kingdom" in html
        assert "Generated: 03/09/2025" in html
        assert "Confidential" in html
