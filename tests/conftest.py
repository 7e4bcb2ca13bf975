"""
Test Configuration
==================

Pytest fixtures for RegGenie tests. Every fixture works against a
temporary local store with no remote document store configured.
"""

import os
from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENV"] = "testing"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("REMOTE_STORE_CONFIG", None)

from reggenie.agents.chat.session import clear_sessions  # noqa: E402
from reggenie.agents.translate.speech import clear_readers  # noqa: E402
from reggenie.agents.translate.workflow import TranslationRepository, TranslationWorkflow  # noqa: E402
from reggenie.auth.gate import AccessGate  # noqa: E402
from reggenie.database.local_store import LocalStorage  # noqa: E402
from reggenie.database.store import REGULATIONS, DocumentStore  # noqa: E402
from reggenie.framework.seed import INITIAL_REGULATIONS  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def storage(tmp_path, monkeypatch) -> LocalStorage:
    """Temporary local store, also installed as the process-wide instance."""
    local = LocalStorage(str(tmp_path / "local_storage.json"))
    monkeypatch.setattr("reggenie.database.local_store.local_storage", local)
    # False means "no remote store configured"
    monkeypatch.setattr("reggenie.database.client.supabase_client", False)
    return local


@pytest.fixture
def store(storage: LocalStorage, monkeypatch) -> DocumentStore:
    """Document store seeded with the initial regulations, local tier only."""
    document_store = DocumentStore(
        local=storage,
        defaults={REGULATIONS: [r.model_dump(mode="json") for r in INITIAL_REGULATIONS]},
    )
    monkeypatch.setattr("reggenie.database.store.document_store", document_store)
    return document_store


@pytest.fixture
def workflow(storage: LocalStorage) -> TranslationWorkflow:
    return TranslationWorkflow(TranslationRepository(storage))


@pytest.fixture
def gate(storage: LocalStorage) -> AccessGate:
    return AccessGate(storage)


@pytest.fixture(autouse=True)
def reset_in_memory_state() -> Iterator[None]:
    yield
    clear_sessions()
    clear_readers()


@pytest_asyncio.fixture
async def api_client(store, workflow, gate) -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the RegGenie API."""
    from reggenie.api.main import app
    from reggenie.agents.translate.workflow import get_translation_workflow
    from reggenie.auth.gate import get_access_gate
    from reggenie.database.store import get_document_store

    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_translation_workflow] = lambda: workflow
    app.dependency_overrides[get_access_gate] = lambda: gate

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(gate: AccessGate) -> dict[str, str]:
    """Register an admin code and return the header that carries it."""
    gate.register("s3cret-code", "s3cret-code")
    return {"X-Access-Code": "s3cret-code"}


@pytest.fixture
def sample_pages() -> list[str]:
    return [
        "The subject must sign the informed consent form before any study procedure.",
        "Adverse events are reported to the sponsor within 24 hours.",
    ]
