import asyncio
import inspect
import os
import tempfile

# Point settings at throwaway locations before the gateway package is imported
_test_tmp_dir = tempfile.mkdtemp(prefix="botgateway_test_")
os.environ.setdefault("DATABASE_PATH", os.path.join(_test_tmp_dir, "bots.db"))
os.environ["GEMINI_API_KEY"] = ""
os.environ["REDIS_URL"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from gateway.app import create_app  # noqa: E402
from gateway.config import settings  # noqa: E402
from gateway.database.db import init_db  # noqa: E402
from gateway.models import BotConfig, ChatTurn, GenerationResult  # noqa: E402
from gateway.services.bot_config import BotConfigService  # noqa: E402


class FakeGemini:
    """Stands in for GeminiService and records every generate call."""

    def __init__(self, response: str = "Happy to help!", error: str | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    @property
    def is_available(self) -> bool:
        return True

    async def generate(
        self,
        turns: list[ChatTurn],
        max_output_tokens: int,
        system_instruction: str | None = None,
    ) -> GenerationResult:
        self.calls.append({
            "turns": turns,
            "max_output_tokens": max_output_tokens,
            "system_instruction": system_instruction,
        })
        if self.error:
            return GenerationResult(success=False, error=self.error)
        return GenerationResult(success=True, response=self.response)


@pytest.fixture
def bot_config() -> BotConfig:
    return BotConfig(
        bot_id="bot_1700000000000_abc123xyz",
        company_name="Acme",
        allowed_origins=["https://a.example"],
        business_hours=None,
    )


@pytest.fixture
def bot_service(tmp_path) -> BotConfigService:
    db_path = str(tmp_path / "bots.db")
    asyncio.run(init_db(db_path))
    return BotConfigService(db_path=db_path, default_created_by="tests")


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def client(tmp_path, monkeypatch, fake_gemini):
    monkeypatch.setattr(settings, "DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setattr(settings, "TRUST_PROXY_HEADERS", False)
    app = create_app()
    with TestClient(app) as test_client:
        app.state.chat_relay_service.gemini = fake_gemini
        yield test_client


@pytest.fixture
def create_bot(client):
    def _create(**fields) -> dict:
        payload = {"companyName": "Acme", "allowedOrigins": ["https://a.example"]}
        payload.update(fields)
        response = client.post("/create-bot", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        call_kwargs = {
            name: pyfuncitem.funcargs[name]
            for name in pyfuncitem._fixtureinfo.argnames
            if name in pyfuncitem.funcargs
        }
        asyncio.run(pyfuncitem.obj(**call_kwargs))
        return True
    return None


def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as async")
