"""Tests for configuration loading."""
import os

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from circular_democracy.config import Settings, get_settings


class TestConfig:
    def test_classification_defaults(self):
        settings = get_settings()
        assert settings.min_message_length == 10
        assert settings.hint_confidence == 0.95
        assert settings.similarity_threshold == 0.70
        assert settings.similarity_floor == 0.10
        assert settings.similarity_top_k == 3
        assert settings.fallback_confidence == 0.10
        assert settings.low_confidence_threshold == 0.30

    def test_embedding_defaults(self):
        settings = get_settings()
        assert settings.embedding_dimension == 1024
        assert settings.embedding_max_chars == 8000

    def test_supabase_configured(self):
        settings = get_settings()
        assert settings.supabase_url
        assert settings.supabase_service_key

    def test_settings_cached(self):
        assert get_settings() is get_settings()

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "0.8")
        monkeypatch.setenv("CORS_ORIGINS", '["https://example.org"]')
        settings = Settings()
        assert settings.similarity_threshold == 0.8
        assert settings.cors_origins == ["https://example.org"]
