import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure backend package is importable
backend_root = Path(__file__).resolve().parents[1]
if str(backend_root) not in sys.path:
    sys.path.insert(0, str(backend_root))

# The module-level app in hiremind.main is built on import; keep its DB out of the repo
os.environ.setdefault("DATABASE_URL", "sqlite:///" + str(Path(os.getenv("TMPDIR", "/tmp")) / "hiremind-import.db"))


class FakeProvider:
    """Stands in for a TextProvider: returns scripted replies or raises scripted errors."""

    def __init__(self, name, replies=None, error=None):
        self.name = name
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    async def generate(self, prompt, instruction):
        self.calls.append((prompt, instruction))
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


@pytest.fixture
def fake_provider():
    return FakeProvider("openai", replies=["# Resume"])


@pytest.fixture
def settings(tmp_path):
    from hiremind.config import Settings

    return Settings(
        openai_api_key="",
        gemini_api_key="",
        provider_priority=["openai", "gemini"],
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        session_secret="test-secret",
        cors_origins=["*"],
    )


@pytest.fixture
def make_client(settings):
    """Build a TestClient whose AI layer is backed by the given fake providers."""
    from hiremind.main import create_app

    def _make(*providers):
        app = create_app(settings, providers={p.name: p for p in providers})
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, fake_provider):
    return make_client(fake_provider)
