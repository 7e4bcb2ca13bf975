"""
API Tests
=========

Tests for the RegGenie HTTP API, driven through the ASGI app with the
AI calls patched out.
"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from reggenie.models.dose import DoseAnalysis
from reggenie.models.regulation import ExtractedEntry


def fake_ai(prompt: str, system=None, temperature=0.2) -> str:
    if prompt.startswith("Identify the primary language"):
        return "English"
    return "el sujeto debe firmar el consentimiento"


@pytest.fixture
def patched_translation_ai():
    with patch("reggenie.agents.translate.workflow.generate_text", side_effect=fake_ai):
        yield


async def create_translated_job(client: AsyncClient) -> dict:
    response = await client.post("/api/translations", json={"text": "The subject must sign consent.", "target_language": "Spanish"})
    assert response.status_code == 200
    job = response.json()
    response = await client.post(f"/api/translations/{job['id']}/translate")
    assert response.status_code == 200
    return response.json()


class TestHealth:
    """Tests for health endpoints."""

    @pytest.mark.asyncio
    async def test_root(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_health_local_only(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/health")

        assert response.json()["database"] == "local only"


class TestAuth:
    """Tests for the access gate endpoints."""

    @pytest.mark.asyncio
    async def test_register_login_flow(self, api_client: AsyncClient) -> None:
        assert (await api_client.get("/api/auth/status")).json() == {"registered": False}

        response = await api_client.post("/api/auth/register", json={"code": "abcd ", "confirm": "abcd"})
        assert response.json() == {"role": "admin"}

        response = await api_client.post("/api/auth/login", json={"code": "wrong"})
        assert response.status_code == 403

        response = await api_client.post("/api/auth/login", json={"code": "abcd"})
        assert response.json() == {"role": "admin"}

    @pytest.mark.asyncio
    async def test_admin_endpoints_require_code(self, api_client: AsyncClient, admin_headers) -> None:
        assert (await api_client.get("/api/settings")).status_code == 403
        assert (await api_client.get("/api/settings", headers=admin_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_remote_config_is_400(self, api_client: AsyncClient, admin_headers) -> None:
        response = await api_client.put(
            "/api/settings",
            json={"remote_store_config": "{not json"},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestRegulations:
    """Tests for regulation endpoints."""

    @pytest.mark.asyncio
    async def test_list_with_filters_and_sort(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/regulations", params={"impact": ["High"], "sort": "title", "descending": "false"})

        titles = [r["title"] for r in response.json()]
        assert len(titles) == 3
        assert titles == sorted(titles, key=str.lower)

    @pytest.mark.asyncio
    async def test_bad_sort_key_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/regulations", params={"sort": "popularity"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_missing_is_404(self, api_client: AsyncClient) -> None:
        assert (await api_client.get("/api/regulations/nope")).status_code == 404

    @pytest.mark.asyncio
    async def test_from_text(self, api_client: AsyncClient) -> None:
        extracted = ExtractedEntry(
            title="MHRA Clinical Trials Regulations 2025",
            agency="MHRA",
            region="United Kingdom (MHRA)",
            country="United Kingdom",
            date="2025-04-10",
            effective_date="2026-04-28",
            category="Clinical Research & Trials",
            summary="New UK clinical trial legislation.",
            impact="High",
            status="Final",
            url="",
        )

        with patch("reggenie.agents.regulations.client.generate_structured", return_value=extracted):
            response = await api_client.post("/api/regulations/from-text", json={"text": "MHRA laid new regulations"})

        assert response.status_code == 200
        assert response.json()["id"].startswith("manual-")

    @pytest.mark.asyncio
    async def test_risk_override_requires_admin(self, api_client: AsyncClient, admin_headers) -> None:
        body = {"risk_level": "Critical", "risk_rationale": "Scope expanded"}

        assert (await api_client.put("/api/regulations/14/risk", json=body)).status_code == 403

        response = await api_client.put("/api/regulations/14/risk", json=body, headers=admin_headers)
        assert response.json()["admin_approved"] is True

    @pytest.mark.asyncio
    async def test_dashboard_json_and_html(self, api_client: AsyncClient) -> None:
        data = (await api_client.get("/api/dashboard")).json()
        assert data["kpis"]["total"] == 5

        with patch("reggenie.agents.news.client.get_regulatory_news", return_value=[]):
            response = await api_client.get("/dashboard")

        assert response.status_code == 200
        assert "ICH E6(R3)" in response.text

    @pytest.mark.asyncio
    async def test_audit_and_requirements(self, api_client: AsyncClient) -> None:
        assert (await api_client.get("/api/audit")).json() == []
        assert (await api_client.get("/api/requirements")).json()[0]["id"] == "BR-010"


class TestChat:
    """Tests for the chat endpoints."""

    @pytest.mark.asyncio
    async def test_streamed_reply(self, api_client: AsyncClient) -> None:
        with patch("reggenie.agents.chat.session.stream_chat", return_value=iter(["Annex 1 ", "applies."])):
            response = await api_client.post("/api/chat/s1/messages", json={"text": "Sterile GMP?"})

        assert response.text == "Annex 1 applies."
        history = (await api_client.get("/api/chat/s1")).json()["messages"]
        assert history[-1]["text"] == "Annex 1 applies."

    @pytest.mark.asyncio
    async def test_unknown_session_is_404(self, api_client: AsyncClient) -> None:
        assert (await api_client.get("/api/chat/never-opened")).status_code == 404

    @pytest.mark.asyncio
    async def test_blank_message_is_400(self, api_client: AsyncClient) -> None:
        assert (await api_client.post("/api/chat/s1/messages", json={"text": "  "})).status_code == 400

    @pytest.mark.asyncio
    async def test_feedback_rating_bounds(self, api_client: AsyncClient) -> None:
        assert (await api_client.post("/api/chat/feedback", json={"rating": 6})).status_code == 422
        assert (await api_client.post("/api/chat/feedback", json={"rating": 4})).status_code == 200


class TestTranslations:
    """Tests for the translation QC endpoints."""

    @pytest.mark.asyncio
    async def test_full_qc_flow(self, api_client: AsyncClient, patched_translation_ai) -> None:
        job = await create_translated_job(api_client)
        assert job["status"] == "QC Pending"

        response = await api_client.post(
            f"/api/translations/{job['id']}/corrections",
            json={"page_index": 0, "word_index": 1, "replacement": "participante", "rationale": "Protocol term"},
        )
        assert response.json()["human_correction_volume"] == 1

        response = await api_client.post(f"/api/translations/{job['id']}/finalize", json={"reviewer_name": ""})
        assert response.status_code == 400

        response = await api_client.post(f"/api/translations/{job['id']}/finalize", json={"reviewer_name": "Dr. QA"})
        assert response.json()["status"] == "QC Finalized"

        response = await api_client.get(f"/api/translations/{job['id']}/export/word")
        assert response.headers["content-type"].startswith("application/msword")
        assert "attachment" in response.headers["content-disposition"]
        assert (await api_client.get(f"/api/translations/{job['id']}")).json()["status"] == "Downloaded"

        response = await api_client.get(f"/api/translations/{job['id']}/export/certificate")
        assert "Dr. QA" in response.text

    @pytest.mark.asyncio
    async def test_correction_after_finalize_is_409(self, api_client: AsyncClient, patched_translation_ai) -> None:
        job = await create_translated_job(api_client)
        await api_client.post(f"/api/translations/{job['id']}/finalize", json={"reviewer_name": "Dr. QA"})

        response = await api_client.post(
            f"/api/translations/{job['id']}/corrections",
            json={"page_index": 0, "word_index": 0, "replacement": "x", "rationale": "late"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_upload_text_file(self, api_client: AsyncClient, patched_translation_ai) -> None:
        response = await api_client.post(
            "/api/translations/upload",
            files={"file": ("consent.txt", b"Informed consent text", "text/plain")},
            data={"target_language": "French"},
        )

        assert response.status_code == 200
        assert response.json()["target_language"] == "French"
        assert response.json()["source_pages"] == ["Informed consent text"]

    @pytest.mark.asyncio
    async def test_unknown_job_is_404(self, api_client: AsyncClient) -> None:
        assert (await api_client.get("/api/translations/trans-0")).status_code == 404

    @pytest.mark.asyncio
    async def test_metrics(self, api_client: AsyncClient, patched_translation_ai) -> None:
        await create_translated_job(api_client)

        metrics = (await api_client.get("/api/translations/metrics")).json()

        assert metrics["jobs"] == 1
        assert metrics["by_status"]["QC Pending"] == 1


class TestReadAloud:
    """Tests for the speech-synchronized highlighting endpoints."""

    @pytest.mark.asyncio
    async def test_voice_follows_target_language(self, api_client: AsyncClient, patched_translation_ai) -> None:
        job = await create_translated_job(api_client)
        voices = [{"name": "Daniel", "lang": "en-GB"}, {"name": "Monica", "lang": "es-ES"}]

        response = await api_client.post(f"/api/translations/{job['id']}/speech/voice", json={"voices": voices})

        assert response.json() == {"locale": "es-ES", "voice": "Monica"}

    @pytest.mark.asyncio
    async def test_boundary_pause_and_resume(self, api_client: AsyncClient, patched_translation_ai) -> None:
        job = await create_translated_job(api_client)
        url = f"/api/translations/{job['id']}/speech"

        with patch("reggenie.agents.translate.speech.synthesize_speech", return_value=b"mp3") as tts:
            response = await api_client.post(url)
            assert response.headers["content-language"] == "es-ES"
            assert response.headers["x-reading-offset"] == "0"

            state = (await api_client.post(f"{url}/boundary", json={"char_index": 10})).json()
            assert state["highlighted_word_index"] == 2

            assert (await api_client.post(f"{url}/pause")).json()["paused"] is True

            response = await api_client.post(url)
            assert response.headers["x-reading-offset"] == "10"

        assert tts.call_args.args[0] == "debe firmar el consentimiento"

    @pytest.mark.asyncio
    async def test_unknown_action_is_404(self, api_client: AsyncClient, patched_translation_ai) -> None:
        job = await create_translated_job(api_client)

        response = await api_client.post(f"/api/translations/{job['id']}/speech/rewind")

        assert response.status_code == 404


class TestDose:
    """Tests for the dose workbook endpoints."""

    @pytest.mark.asyncio
    async def test_subject_validation_errors(self, api_client: AsyncClient) -> None:
        study = (await api_client.post("/api/dose/studies", json={"max_dose": 5.0})).json()

        response = await api_client.post(f"/api/dose/studies/{study['id']}/subjects", json={"id": "", "age": 12})

        assert response.status_code == 400
        assert set(response.json()["detail"]) == {"id", "age"}

    @pytest.mark.asyncio
    async def test_rules_and_analysis(self, api_client: AsyncClient) -> None:
        study = (await api_client.post("/api/dose/studies", json={})).json()
        for i in range(3):
            await api_client.post(f"/api/dose/studies/{study['id']}/subjects", json={"id": f"S-{i}", "dose": 0.1})

        rules = (await api_client.get(f"/api/dose/studies/{study['id']}/rules")).json()
        assert rules == [{"dose": 0.1, "subjects": 3, "dlts": 0, "decision": "ESCALATE"}]

        analysis = DoseAnalysis(
            recommendation="ESCALATE",
            predicted_mtd="1 mg/kg",
            rationale="Cohort tolerated.",
            safety_warnings=[],
            next_steps=[],
        )
        with patch("reggenie.agents.dose.client.generate_structured", return_value=analysis):
            response = await api_client.post(f"/api/dose/studies/{study['id']}/analysis")

        assert response.json()["recommendation"] == "ESCALATE"

    @pytest.mark.asyncio
    async def test_missing_study_is_404(self, api_client: AsyncClient) -> None:
        assert (await api_client.get("/api/dose/studies/DS-0")).status_code == 404


class TestMonitoring:
    """Tests for the monitoring report endpoints."""

    @pytest.mark.asyncio
    async def test_report_requires_notes(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/api/monitoring/reports", json={"inputs": {"minutes": "only minutes"}})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_follow_up_for_missing_report_is_404(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/api/monitoring/follow-up", json={"report_id": "MR-0"})

        assert response.status_code == 404


class TestConsentForms:
    """Tests for the informed consent form endpoints."""

    @pytest.mark.asyncio
    async def test_options(self, api_client: AsyncClient) -> None:
        options = (await api_client.get("/api/icf/options")).json()

        assert options["types"][0] == "Master ICF"
        assert "Tamil" in options["languages"]

    @pytest.mark.asyncio
    async def test_source_upload(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/api/icf/sources",
            files={"file": ("protocol.txt", b"Randomised, double-blind", "text/plain")},
        )

        assert response.json() == {"filename": "protocol.txt", "text": "Randomised, double-blind"}

    @pytest.mark.asyncio
    async def test_unsupported_upload_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/api/icf/sources",
            files={"file": ("scan.png", b"\x89PNG", "image/png")},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_generate_translate_export(self, api_client: AsyncClient) -> None:
        body = {"protocol": "Open-label dose escalation", "country": "South Korea", "icf_type": "Assent Form"}

        with patch("reggenie.agents.icf.client.generate_text", return_value="<h2>About this study</h2>"):
            document = (await api_client.post("/api/icf", json=body)).json()
        assert document["icf_type"] == "Assent Form"

        with patch("reggenie.agents.icf.client.generate_text", return_value="<h2>연구 소개</h2>"):
            response = await api_client.post("/api/icf/translate", json={"document": document, "target_language": "Korean"})
        translated = response.json()
        assert translated["target_language"] == "Korean"

        response = await api_client.post("/api/icf/export", json=translated)
        assert response.headers["content-type"].startswith("application/msword")
        assert 'filename="Assent_Form_South_Korea_Korean.doc"' in response.headers["content-disposition"]
        assert "연구 소개" in response.text

    @pytest.mark.asyncio
    async def test_missing_protocol_is_400(self, api_client: AsyncClient) -> None:
        assert (await api_client.post("/api/icf", json={"protocol": ""})).status_code == 400

    @pytest.mark.asyncio
    async def test_generation_failure_is_502(self, api_client: AsyncClient) -> None:
        with patch("reggenie.agents.icf.client.generate_text", side_effect=RuntimeError("quota")):
            response = await api_client.post("/api/icf", json={"protocol": "Protocol text"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to generate ICF."
