"""
Shared pytest fixtures for the Career Copilot test suite.
All fixtures use mock mode; no provider credentials required.
Factory helpers live in tests/factories.py so they can be imported
directly by test modules as well as being used here.
"""
import sys
import os

_tests_dir = os.path.dirname(__file__)
_src_dir   = os.path.join(_tests_dir, "..", "src")
for _p in (_tests_dir, _src_dir):
    if _p not in sys.path:
        sys.path.insert(0, _p)

# Force mock mode: never call a provider during tests
os.environ["FORCE_MOCK_MODE"] = "true"
os.environ.setdefault("GROQ_API_KEY",   "<placeholder>")
os.environ.setdefault("GEMINI_API_KEY", "<placeholder>")


import pytest

from factories import make_orchestrator, make_profile, make_store, profile_payload

from career_copilot.llm import MockLLMClient


# ─── pytest fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def store():
    return make_store()


@pytest.fixture
def google_store():
    """Store holding a Google profile with resume score 7."""
    s = make_store()
    s.update_profile(make_profile(target_company="Google", resume_score=7))
    return s


@pytest.fixture
def mock_llm():
    return MockLLMClient()


@pytest.fixture
def orchestrator():
    return make_orchestrator()


@pytest.fixture
def amazon_payload():
    return profile_payload(target_company="Amazon")
