# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from flash_gateway.config import Settings
from flash_gateway.main import create_app
from flash_gateway.services.generation import GenerationGateway

_TEST_ENV = {
    "GEMINI_API_KEY": "test-gemini-key",
    "LOG_JSON": "false",
    "LOG_LEVEL": "DEBUG",
    "ALLOWED_ORIGINS": "*",
}


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing — console logs, fake key."""
    return Settings(
        gemini_api_key="test-gemini-key",
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def genai_client() -> MagicMock:
    """Stand-in for google.genai.Client; generate_content returns "hi there"."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(text="hi there")
    )
    return client


@pytest.fixture
def generate_content(genai_client: MagicMock) -> AsyncMock:
    """Shortcut to the stubbed collaborator call, for call assertions."""
    return genai_client.aio.models.generate_content  # type: ignore[no-any-return]


@pytest.fixture
def app_factory(test_settings: Settings, genai_client: MagicMock):
    """Build an app whose state holds the stubbed gateway (lifespan not run)."""
    from flash_gateway.config import get_settings

    def _make():
        get_settings.cache_clear()
        previous = {k: os.environ.get(k) for k in _TEST_ENV}
        os.environ.update(_TEST_ENV)
        try:
            app = create_app()
        finally:
            for k, v in previous.items():
                if v is None:
                    os.environ.pop(k, None)
                else:
                    os.environ[k] = v
            get_settings.cache_clear()

        app.state.settings = test_settings
        app.state.generation_gateway = GenerationGateway(genai_client)
        return app

    return _make


@pytest.fixture
def client(app_factory) -> TestClient:
    """FastAPI TestClient with the genai client stubbed out."""
    return TestClient(app_factory())
