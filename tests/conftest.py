"""Shared fixtures: an in-memory store, a signed-in session and a fake Gemini model."""

from types import SimpleNamespace

import pytest

from wealthai.agents import AdvisorAgent
from wealthai.audit import AuditLogger
from wealthai.auth import Identity, SessionContext
from wealthai.config import GeminiSettings
from wealthai.services.storage import InMemoryProfileStorage, StorageError


USER_ID = "user-123"
USER_EMAIL = "asha@example.com"


def profile_document(**overrides) -> dict:
    document = {
        "name": "Asha",
        "email": USER_EMAIL,
        "income": "50000",
        "expenses": "30000",
        "emi": "10000",
        "shortTermGoals": "Emergency fund",
        "longTermGoals": "Buy a house",
        "createdAt": "2025-01-01T00:00:00+00:00",
    }
    document.update(overrides)
    return document


def gemini_response(text: str):
    """Object shaped like a google-generativeai GenerateContentResponse."""
    part = SimpleNamespace(text=text)
    content = SimpleNamespace(parts=[part])
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


class FakeGeminiModel:
    """Records prompts; answers with a fixed reply or raises."""

    def __init__(self, reply: str = "Save 20% of your income.", error: Exception = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return gemini_response(self.reply)


class FailingStorage(InMemoryProfileStorage):
    """Every call fails like an unreachable backend."""

    async def create_or_merge(self, user_id, fields):
        raise StorageError("backend unavailable")

    async def read(self, user_id):
        raise StorageError("backend unavailable")

    async def update(self, user_id, fields):
        raise StorageError("backend unavailable")


@pytest.fixture
def gemini_settings():
    return GeminiSettings(
        api_key=None,
        model_name="gemini-2.5-flash",
        temperature=0.7,
        top_k=40,
        top_p=0.95,
        max_output_tokens=1024,
        history_window=5,
    )


@pytest.fixture
def session():
    context = SessionContext()
    context.sign_in(Identity(uid=USER_ID, email=USER_EMAIL))
    return context


@pytest.fixture
def empty_store():
    return InMemoryProfileStorage()


@pytest.fixture
def store():
    return InMemoryProfileStorage({USER_ID: profile_document()})


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def fake_model():
    return FakeGeminiModel()


@pytest.fixture
def assistant(gemini_settings, fake_model):
    return AdvisorAgent(settings=gemini_settings, model=fake_model)
