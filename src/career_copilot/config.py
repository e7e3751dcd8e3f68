"""
config.py — Central settings for the Career Copilot
====================================================
All configuration is loaded from environment variables / .env file.

Two LLM providers are used, both through their OpenAI-compatible endpoints:
  Groq    fast model: profile, skill gaps, question generation, planning
  Gemini  reasoning model: interview answer evaluation

Live mode activates automatically when at least one provider key contains
a real (non-placeholder) value and FORCE_MOCK_MODE is not set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env into os.environ (no-op if already set, safe to call multiple times)
load_dotenv(override=False)


# ─── Helpers ────────────────────────────────────────────────────────────────

def _is_placeholder(value: str) -> bool:
    """Return True if the value looks like an unfilled template placeholder."""
    return not value or "<" in value or value.startswith("your-") or value == "PLACEHOLDER"


# ─── LLM providers ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LLMProviderConfig:
    provider: str
    api_key:  str
    model:    str
    base_url: str

    @property
    def is_configured(self) -> bool:
        """True when the API key is a real (non-placeholder) value."""
        return bool(self.api_key) and not _is_placeholder(self.api_key)


# ─── Orchestration policy constants ─────────────────────────────────────────

@dataclass(frozen=True)
class PolicyConfig:
    readiness_threshold:  int   = 70    # below this the policy keeps interviewing
    max_auto_interviews:  int   = 5     # hard cap on auto-suggested interview rounds
    resume_weight:        float = 0.2   # resume contribution once interviews exist
    score_scale:          int   = 10    # 0–10 rubric → 0–100 readiness
    weak_topic_threshold: float = 6     # technical depth below this marks a weak topic


# ─── App-level settings ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    force_mock_mode: bool
    demo_mode:       bool
    log_level:       str


# ─── Master settings object ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    groq:   LLMProviderConfig
    gemini: LLMProviderConfig
    policy: PolicyConfig
    app:    AppConfig

    @property
    def live_mode(self) -> bool:
        """True when a provider key is real and FORCE_MOCK_MODE is false."""
        return (self.groq.is_configured or self.gemini.is_configured) and not self.app.force_mock_mode

    def status_summary(self) -> dict[str, str]:
        """Return a dict of provider → status badge for the demo console."""
        def badge(ok: bool) -> str:
            if self.app.force_mock_mode:
                return "⚪ Mock (forced)"
            return "🟢 Live" if ok else "⚪ Mock"

        return {
            f"Groq ({self.groq.model})":     badge(self.groq.is_configured),
            f"Gemini ({self.gemini.model})": badge(self.gemini.is_configured),
        }


def get_settings() -> Settings:
    """Load all configuration from environment variables."""
    _str   = lambda k, d="": os.getenv(k, d).strip()
    _int   = lambda k, d=0: int(os.getenv(k, str(d)) or d)
    _float = lambda k, d=0.0: float(os.getenv(k, str(d)) or d)
    _bool  = lambda k, d=False: os.getenv(k, str(d)).lower() in ("1", "true", "yes")

    defaults = PolicyConfig()
    return Settings(
        groq=LLMProviderConfig(
            provider = "groq",
            api_key  = _str("GROQ_API_KEY"),
            model    = _str("GROQ_MODEL", "openai/gpt-oss-20b"),
            base_url = _str("GROQ_BASE_URL", "https://api.groq.com/openai/v1").rstrip("/"),
        ),
        gemini=LLMProviderConfig(
            provider = "gemini",
            api_key  = _str("GEMINI_API_KEY"),
            model    = _str("GEMINI_MODEL", "gemini-2.5-flash"),
            base_url = _str(
                "GEMINI_BASE_URL",
                "https://generativelanguage.googleapis.com/v1beta/openai",
            ).rstrip("/"),
        ),
        policy=PolicyConfig(
            readiness_threshold  = _int("READINESS_THRESHOLD", defaults.readiness_threshold),
            max_auto_interviews  = _int("MAX_AUTO_INTERVIEWS", defaults.max_auto_interviews),
            resume_weight        = _float("RESUME_WEIGHT", defaults.resume_weight),
            score_scale          = _int("SCORE_SCALE", defaults.score_scale),
            weak_topic_threshold = _float("WEAK_TOPIC_THRESHOLD", defaults.weak_topic_threshold),
        ),
        app=AppConfig(
            force_mock_mode = _bool("FORCE_MOCK_MODE", False),
            demo_mode       = _bool("DEMO_MODE", False),
            log_level       = _str("LOG_LEVEL", "INFO").upper(),
        ),
    )
