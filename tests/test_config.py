"""
Smoke tests for config / settings loading.
Run: python -m pytest tests/ -v
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from career_copilot.config import LLMProviderConfig, PolicyConfig, _is_placeholder, get_settings


class TestIsPlaceholder:
    def test_empty_string_is_placeholder(self):
        assert _is_placeholder("")

    def test_angle_bracket_is_placeholder(self):
        assert _is_placeholder("<your-groq-key>")

    def test_your_prefix_is_placeholder(self):
        assert _is_placeholder("your-api-key")

    def test_real_key_not_placeholder(self):
        assert not _is_placeholder("gsk_abc123defgh456ijkl789mnop")


class TestProviderConfig:
    def test_configured_with_real_key(self):
        cfg = LLMProviderConfig("groq", "gsk_real", "m", "https://api.groq.com/openai/v1")
        assert cfg.is_configured

    def test_not_configured_with_placeholder(self):
        cfg = LLMProviderConfig("groq", "<placeholder>", "m", "https://api.groq.com/openai/v1")
        assert not cfg.is_configured


class TestSettingsLoading:
    def test_provider_defaults(self, monkeypatch):
        for key in ("GROQ_MODEL", "GEMINI_MODEL", "GROQ_BASE_URL"):
            monkeypatch.delenv(key, raising=False)
        s = get_settings()
        assert s.groq.model == "openai/gpt-oss-20b"
        assert s.gemini.model == "gemini-2.5-flash"
        assert s.groq.base_url == "https://api.groq.com/openai/v1"

    def test_policy_defaults_match_dataclass(self, monkeypatch):
        for key in ("READINESS_THRESHOLD", "MAX_AUTO_INTERVIEWS", "RESUME_WEIGHT",
                    "SCORE_SCALE", "WEAK_TOPIC_THRESHOLD"):
            monkeypatch.delenv(key, raising=False)
        assert get_settings().policy == PolicyConfig()

    def test_policy_from_env(self, monkeypatch):
        monkeypatch.setenv("READINESS_THRESHOLD", "80")
        monkeypatch.setenv("MAX_AUTO_INTERVIEWS", "3")
        policy = get_settings().policy
        assert policy.readiness_threshold == 80
        assert policy.max_auto_interviews == 3

    def test_force_mock_defaults_false(self, monkeypatch):
        """FORCE_MOCK_MODE should default to False when env var is absent."""
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        assert not get_settings().app.force_mock_mode

    def test_log_level_uppercased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_settings().app.log_level == "DEBUG"

    def test_live_mode_false_when_forced(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_real_key")
        monkeypatch.setenv("FORCE_MOCK_MODE", "true")
        assert not get_settings().live_mode

    def test_live_mode_true_with_real_key(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_real_key")
        monkeypatch.setenv("FORCE_MOCK_MODE", "false")
        assert get_settings().live_mode

    def test_live_mode_false_without_credentials(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "<placeholder>")
        monkeypatch.setenv("GEMINI_API_KEY", "")
        monkeypatch.setenv("FORCE_MOCK_MODE", "false")
        assert not get_settings().live_mode

    def test_status_summary_keys(self):
        summary = get_settings().status_summary()
        assert any(k.startswith("Groq") for k in summary)
        assert any(k.startswith("Gemini") for k in summary)
        assert all(v == "⚪ Mock (forced)" for v in summary.values())
