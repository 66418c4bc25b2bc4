"""Tests for settings."""

from draftable.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DRAFTABLE_PUBLISHED_AT_COLUMN", "DRAFTABLE_PUBLISHED_SCOPE_NAME", "DRAFTABLE_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.published_at_column == "published_at"
        assert settings.published_scope_name == "published"
        assert settings.log_level == "INFO"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DRAFTABLE_PUBLISHED_AT_COLUMN", "live_from")
        monkeypatch.setenv("DRAFTABLE_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.published_at_column == "live_from"
        assert settings.log_level == "DEBUG"

    def test_settings_cover_publication_and_logging_only(self):
        assert set(Settings.model_fields) == {"published_at_column", "published_scope_name", "log_level"}
