import pytest
from fastapi.testclient import TestClient

from docintel.core.config import settings
from docintel.main import app
from docintel.observability.metrics import metrics
from docintel.state.registry import state_registry
from docintel.state.storage import MemoryStorage
from docintel.state.store import DataStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    # never fall back to keys from the developer's environment
    monkeypatch.setattr(settings, "QWEN_API_KEY", "")
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "")
    monkeypatch.setattr(settings, "SIMULATE_AI_PROCESSING", False)
    monkeypatch.setattr(settings, "CHAT_MODE", "direct")
    metrics.reset()


@pytest.fixture
def store():
    return DataStore(MemoryStorage())


@pytest.fixture
def client():
    backend = MemoryStorage()
    state_registry.reset(backend)
    with TestClient(app) as test_client:
        yield test_client
    state_registry.reset()
