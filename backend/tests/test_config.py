"""Tests for application configuration."""
import pytest

from linkbox.config import Settings


class TestSettings:
    """Settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults match the documented values."""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite:///")
        assert settings.DATABASE_URL.endswith("linkbox.db")
        assert settings.SESSION_COOKIE_NAME == "linkbox_session"
        assert settings.API_KEY_HEADER == "x-api-key"
        assert settings.API_KEY_DEFAULT_EXPIRES_IN == 30 * 24 * 60 * 60
        assert settings.CACHE_STALE_TIME == 300
        assert settings.LOG_FILE is None

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Upper-case environment variables override defaults."""
        monkeypatch.setenv("CACHE_STALE_TIME", "60")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SESSION_COOKIE_SECURE", "true")

        settings = Settings(_env_file=None)
        assert settings.CACHE_STALE_TIME == 60
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.SESSION_COOKIE_SECURE is True

    def test_cors_origins_from_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """List settings are parsed from JSON."""
        monkeypatch.setenv("CORS_ORIGINS", '["https://links.example.com"]')

        settings = Settings(_env_file=None)
        assert settings.CORS_ORIGINS == ["https://links.example.com"]

    def test_test_database_is_in_memory(self) -> None:
        """The suite runs against an in-memory database."""
        assert Settings(_env_file=None).DATABASE_URL == "sqlite+aiosqlite:///:memory:"

    def test_model_config(self) -> None:
        """Env names are case-sensitive and unknown variables are ignored."""
        assert Settings.model_config["case_sensitive"] is True
        assert Settings.model_config["extra"] == "ignore"

        settings = Settings(_env_file=None, NOT_A_SETTING="x")
        assert not hasattr(settings, "NOT_A_SETTING")
