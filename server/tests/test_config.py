# ─────────────────────────────────────────────────────────────────────────────
# Tests — Settings and the startup guard
# ─────────────────────────────────────────────────────────────────────────────

import pytest
from pydantic import ValidationError

from flash_gateway import __main__ as entrypoint
from flash_gateway.config import (
    MISSING_API_KEY_MESSAGE,
    Settings,
    get_settings,
    is_missing_api_key,
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """No ambient key, no .env from the working directory, fresh cache."""
    monkeypatch.chdir(tmp_path)
    for var in ("GEMINI_API_KEY", "PORT", "HOST"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        settings = Settings()
        assert settings.port == 3000
        assert settings.host == "0.0.0.0"
        assert settings.allowed_origins == "*"
        assert settings.gemini_api_key.get_secret_value() == "abc"

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        monkeypatch.setenv("PORT", "8081")
        assert Settings().port == 8081

    def test_key_not_leaked_in_repr(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "super-secret")
        assert "super-secret" not in repr(Settings())

    def test_reads_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("GEMINI_API_KEY=from-dotenv\n")
        assert Settings().gemini_api_key.get_secret_value() == "from-dotenv"

    def test_missing_key_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert is_missing_api_key(exc_info.value)

    def test_blank_key_fails(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "   ")
        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert is_missing_api_key(exc_info.value)

    def test_other_errors_are_not_reported_as_missing_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        monkeypatch.setenv("PORT", "not-a-port")
        with pytest.raises(ValidationError) as exc_info:
            Settings()
        assert not is_missing_api_key(exc_info.value)


class TestEntrypoint:
    def test_missing_key_exits_nonzero_with_diagnostic(self, monkeypatch):
        run_calls = []
        monkeypatch.setattr(entrypoint.uvicorn, "run", lambda *a, **kw: run_calls.append(kw))

        with pytest.raises(SystemExit) as exc_info:
            entrypoint.main()

        # sys.exit(<str>) prints the message to stderr and exits with status 1
        assert exc_info.value.code == MISSING_API_KEY_MESSAGE
        assert run_calls == []

    def test_starts_uvicorn_factory_on_configured_port(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "abc")
        monkeypatch.setenv("PORT", "4321")
        run_calls = []
        monkeypatch.setattr(
            entrypoint.uvicorn, "run", lambda app, **kw: run_calls.append((app, kw))
        )

        entrypoint.main()

        assert len(run_calls) == 1
        app_path, kwargs = run_calls[0]
        assert app_path == "flash_gateway.main:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 4321
