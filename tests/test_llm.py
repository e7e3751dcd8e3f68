"""
Tests for the LLM client layer.  No network: the OpenAI SDK client is
replaced by a stub exposing chat.completions.create().
"""
import json
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from career_copilot.config import AppConfig, LLMProviderConfig, PolicyConfig, Settings
from career_copilot.llm import (
    LLMError,
    LLMNotConfiguredError,
    MockLLMClient,
    OpenAICompatibleClient,
    build_llm_client,
)


def _provider(key="gsk_real_key", name="groq"):
    return LLMProviderConfig(name, key, "test-model", "https://example.invalid/v1")


def _settings(groq_key="gsk_real_key", force_mock=False, demo=False):
    return Settings(
        groq=_provider(groq_key),
        gemini=_provider("", "gemini"),
        policy=PolicyConfig(),
        app=AppConfig(force_mock_mode=force_mock, demo_mode=demo, log_level="INFO"),
    )


class _StubCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error   = error
        self.kwargs  = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _stub_client(**kw):
    completions = _StubCompletions(**kw)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


class TestOpenAICompatibleClient:

    def test_returns_content_and_sends_sampling_params(self):
        sdk, completions = _stub_client(content='{"ok": true}')
        client = OpenAICompatibleClient(_provider(), client=sdk)
        assert client.invoke("user", "system") == '{"ok": true}'
        assert completions.kwargs["temperature"] == 0.7
        assert completions.kwargs["top_p"] == 0.9
        assert completions.kwargs["max_tokens"] == 2000
        assert completions.kwargs["messages"][0] == {"role": "system", "content": "system"}

    def test_empty_content_raises(self):
        sdk, _ = _stub_client(content="")
        with pytest.raises(LLMError):
            OpenAICompatibleClient(_provider(), client=sdk).invoke("u", "s")

    def test_sdk_error_wrapped(self):
        sdk, _ = _stub_client(error=OpenAIError("boom"))
        with pytest.raises(LLMError, match="boom"):
            OpenAICompatibleClient(_provider(), client=sdk).invoke("u", "s")

    def test_fallback_used_on_error(self):
        sdk, _ = _stub_client(error=OpenAIError("rate limited"))
        fallback = MockLLMClient()
        client = OpenAICompatibleClient(_provider(), fallback=fallback, client=sdk)
        reply = client.invoke("u", "You are the Skill Gap Analyzer Agent.")
        assert json.loads(reply)["readiness_percentage"] == 65
        assert len(fallback.calls) == 1

    def test_unconfigured_provider_rejected(self):
        with pytest.raises(LLMNotConfiguredError):
            OpenAICompatibleClient(_provider(key=""))


class TestMockLLMClient:

    @pytest.mark.parametrize("system_prompt, key, expected", [
        ("You are the Profile Analyzer Agent.", "resume_score", 7),
        ("You are the Skill Gap Analyzer Agent.", "company_alignment_score", 60),
        ("You are an internal evaluation engine.", "strength_detected", True),
        ("You are a question generator for a technical interview agent.", "topic", "Data Structures"),
        ("You are the Career Planner Agent.", "expected_readiness_after_plan", "85%"),
    ])
    def test_canned_reply_by_marker(self, system_prompt, key, expected):
        assert json.loads(MockLLMClient().invoke("p", system_prompt))[key] == expected

    def test_unknown_prompt_returns_empty_object(self):
        assert MockLLMClient().invoke("p", "Say hi") == "{}"

    def test_override_replaces_reply(self):
        mock = MockLLMClient(overrides={"plan": "not json"})
        assert mock.invoke("p", "You are the Career Planner Agent.") == "not json"

    def test_error_raised_and_call_recorded(self):
        mock = MockLLMClient(error=LLMError("down"))
        with pytest.raises(LLMError):
            mock.invoke("p", "You are the Profile Analyzer Agent.")
        assert mock.calls[0].marker == "profile"


class TestBuildLlmClient:

    def test_forced_mock(self):
        assert isinstance(build_llm_client("fast", _settings(force_mock=True)), MockLLMClient)

    def test_unconfigured_provider_gets_mock(self):
        assert isinstance(build_llm_client("reasoning", _settings()), MockLLMClient)

    def test_configured_provider_gets_live_client(self):
        client = build_llm_client("fast", _settings())
        assert isinstance(client, OpenAICompatibleClient)
        assert client.fallback is None

    def test_demo_mode_adds_mock_fallback(self):
        client = build_llm_client("fast", _settings(demo=True))
        assert isinstance(client.fallback, MockLLMClient)

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            build_llm_client("creative", _settings())
