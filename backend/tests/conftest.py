"""Pytest configuration shared across the suite."""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from config import AnalyzerSettings, get_settings
from main import create_app
from routers.analyzers import get_client_factory

API_KEY = "test-shared-secret"


class StubCompletions:
    """Records chat.completions.create calls and replays a canned reply or error."""

    def __init__(self, reply: str = "{}", error: Exception = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class StubOpenAI:
    def __init__(self, reply: str = "{}", error: Exception = None) -> None:
        self.completions = StubCompletions(reply, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def settings() -> AnalyzerSettings:
    return AnalyzerSettings(
        shared_secret=API_KEY,
        openai_api_key="sk-test",
        model="gpt-4o-test",
        environment="development",
    )


@pytest.fixture
def stub_openai() -> StubOpenAI:
    return StubOpenAI()


@pytest.fixture
def app(settings, stub_openai):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_client_factory] = lambda: (lambda _settings: stub_openai)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
