"""
llm.py — LLM clients for the agent pipeline
============================================
Agents depend on one narrow interface: ``invoke(prompt, system_prompt) -> str``.

Clients
-------
  OpenAICompatibleClient   any OpenAI-compatible chat completions endpoint
                           (Groq and Gemini both expose one), via the
                           ``openai`` SDK.  Empty content / SDK errors raise
                           LLMError, or delegate to ``fallback`` when set.
  MockLLMClient            deterministic canned replies selected by markers
                           in the system prompt.  Used when no credentials
                           are configured, when FORCE_MOCK_MODE is on, and
                           by every test.

Routing
-------
  build_llm_client("fast")       → Groq     question generation, profile,
                                            gaps, planning
  build_llm_client("reasoning")  → Gemini   answer evaluation
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from openai import OpenAI, OpenAIError

from career_copilot.config import LLMProviderConfig, Settings, get_settings

logger = logging.getLogger(__name__)


# ─── Errors ──────────────────────────────────────────────────────────────────

class LLMError(RuntimeError):
    """An LLM call failed or returned no content."""


class LLMNotConfiguredError(EnvironmentError):
    """A live client was requested for a provider without credentials."""


# ─── Base ────────────────────────────────────────────────────────────────────

class LLMClient:
    name: str = "llm"

    def invoke(self, prompt: str, system_prompt: str) -> str:
        raise NotImplementedError


# ─── Live client ─────────────────────────────────────────────────────────────

class OpenAICompatibleClient(LLMClient):
    """Chat-completions client for a configured provider."""

    temperature = 0.7
    top_p       = 0.9
    max_tokens  = 2000

    def __init__(
        self,
        config: LLMProviderConfig,
        fallback: LLMClient | None = None,
        client: Any = None,
    ) -> None:
        if client is None and not config.is_configured:
            raise LLMNotConfiguredError(
                f"{config.provider} is not configured. "
                f"Set {config.provider.upper()}_API_KEY in your environment or .env file."
            )
        self.config   = config
        self.fallback = fallback
        self.name     = f"{config.provider} ({config.model})"
        self._client  = client or OpenAI(base_url=config.base_url, api_key=config.api_key)

    def invoke(self, prompt: str, system_prompt: str) -> str:
        logger.debug("%s call: %s", self.name, system_prompt[:60])
        try:
            response = self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user",   "content": prompt},
                ],
                temperature=self.temperature,
                top_p=self.top_p,
                max_tokens=self.max_tokens,
            )
            content = response.choices[0].message.content if response.choices else None
            if not content:
                raise LLMError(f"Empty response from {self.name}")
            return content
        except (OpenAIError, LLMError) as exc:
            if self.fallback is None:
                if isinstance(exc, LLMError):
                    raise
                raise LLMError(f"{self.name} request failed: {exc}") from exc
            logger.warning("%s failed (%s); using %s", self.name, exc, self.fallback.name)
            return self.fallback.invoke(prompt, system_prompt)


# ─── Mock client ─────────────────────────────────────────────────────────────

MOCK_PROFILE: dict[str, Any] = {
    "skills":                   ["JavaScript", "React", "Node.js", "Python"],
    "resume_score":             7,
    "project_depth_score":      6,
    "technical_maturity_score": 5,
    "missing_core_areas":       ["System Design", "Advanced DSA"],
    "inferred_strengths":       ["Frontend Development", "Scripting"],
    "risk_flags":               ["Lack of quantified results"],
}

MOCK_SKILL_GAP: dict[str, Any] = {
    "readiness_percentage":    65,
    "priority_gaps":           ["Dynamic Programming", "System Scalability"],
    "secondary_gaps":          ["CI/CD"],
    "company_alignment_score": 60,
    "critical_focus_areas":    ["LeetCode Medium/Hard", "Distributed Systems Basics"],
}

MOCK_EVALUATION: dict[str, Any] = {
    "evaluation":        {"technical_depth": 6, "clarity": 7, "structure": 6},
    "weakness_detected": False,
    "strength_detected": True,
    "suggested_phase":   "probing",
    "feedback_summary":  "Good foundational understanding. Could go deeper on implementation details.",
}

MOCK_QUESTION: dict[str, Any] = {
    "question":   "Explain the difference between a stack and a queue, and give a real-world use case for each.",
    "difficulty": "medium",
    "topic":      "Data Structures",
}

MOCK_PLAN: dict[str, Any] = {
    "daily_plan": [
        {"day": 1, "focus": "Data Structures Fundamentals",
         "tasks": ["Review array & linked list implementations (2h)",
                   "Solve 5 LeetCode Easy problems on arrays (1.5h)",
                   "Watch system design intro video (1h)"],
         "expected_outcome": "Solid array/list foundations"},
        {"day": 2, "focus": "Stacks, Queues & Hash Maps",
         "tasks": ["Implement stack and queue from scratch (1.5h)",
                   "Solve 5 hash map problems on LeetCode (2h)",
                   "Read about collision handling strategies (0.5h)"],
         "expected_outcome": "Confident with stack/queue/map"},
        {"day": 3, "focus": "Trees & Binary Search Trees",
         "tasks": ["Implement BST insert, delete, search (2h)",
                   "Solve 5 tree traversal problems (1.5h)",
                   "Study balanced trees overview (AVL, Red-Black) (1h)"],
         "expected_outcome": "Tree traversal mastery"},
        {"day": 4, "focus": "Graph Algorithms",
         "tasks": ["Implement BFS and DFS from scratch (2h)",
                   "Solve 3 graph problems (shortest path, cycle detection) (2h)",
                   "Review topological sort (0.5h)"],
         "expected_outcome": "Graph traversal confidence"},
        {"day": 5, "focus": "Dynamic Programming",
         "tasks": ["Study DP patterns (knapsack, LCS, LIS) (2h)",
                   "Solve 5 classic DP problems (2h)",
                   "Practice explaining DP approach out loud (0.5h)"],
         "expected_outcome": "DP pattern recognition"},
        {"day": 6, "focus": "System Design Basics",
         "tasks": ["Study load balancing and caching concepts (1.5h)",
                   "Design a URL shortener on paper (1h)",
                   "Review CAP theorem and database scaling (1h)"],
         "expected_outcome": "System design vocabulary"},
        {"day": 7, "focus": "Mock Interview & Review",
         "tasks": ["Take a full mock interview (1.5h)",
                   "Review all weak areas from the week (1h)",
                   "Refine resume based on learnings (0.5h)"],
         "expected_outcome": "Week 1 consolidation"},
    ],
    "weekly_mock_schedule": [
        "Monday: 30min DSA warm-up + 1h focused problem solving",
        "Tuesday: 45min system design discussion practice",
        "Wednesday: 1h timed coding challenge (3 problems)",
        "Thursday: 30min behavioral question prep + 1h technical mock",
        "Friday: 1.5h full mock interview with peer or AI",
    ],
    "project_upgrade_suggestions": [
        "Add real-time features (WebSockets) to your chat app",
        "Deploy a microservice to AWS/GCP with CI/CD pipeline",
        "Add comprehensive testing (unit + integration) to main project",
        "Build a performance dashboard with metrics and monitoring",
    ],
    "resume_improvement_actions": [
        "Quantify project impact: add metrics like '40% faster load time', '10K daily users'",
        "Add a 'Technical Skills' section organized by category (Languages, Frameworks, Tools)",
        "Include a 'Key Achievements' section with measurable results",
        "Remove generic descriptions; use action verbs (Architected, Optimized, Deployed)",
        "Add links to live demos or GitHub repos for each project",
    ],
    "expected_readiness_after_plan": "85%",
}

# Checked in order; the first marker found in the system prompt wins.
MOCK_MARKERS: tuple[tuple[str, str], ...] = (
    ("Profile Analyzer",   "profile"),
    ("Skill Gap",          "skill_gap"),
    ("evaluation engine",  "evaluation"),
    ("question generator", "question"),
    ("Career Planner",     "plan"),
)

_MOCK_REPLIES: dict[str, dict[str, Any]] = {
    "profile":    MOCK_PROFILE,
    "skill_gap":  MOCK_SKILL_GAP,
    "evaluation": MOCK_EVALUATION,
    "question":   MOCK_QUESTION,
    "plan":       MOCK_PLAN,
}


@dataclass
class MockCall:
    prompt:        str
    system_prompt: str
    marker:        str | None


class MockLLMClient(LLMClient):
    """
    Rule-based stand-in for a live model.

    ``overrides`` maps a marker key (profile, skill_gap, evaluation, question,
    plan) to a raw reply string, letting tests feed malformed or unusual
    replies.  ``error`` is raised from every invoke() when set.
    """

    def __init__(
        self,
        overrides: dict[str, str] | None = None,
        error: Exception | None = None,
        name: str = "Mock",
    ) -> None:
        self.overrides = dict(overrides or {})
        self.error     = error
        self.name      = name
        self.calls: list[MockCall] = []

    @staticmethod
    def marker_for(system_prompt: str) -> str | None:
        lowered = system_prompt.lower()
        for needle, key in MOCK_MARKERS:
            if needle.lower() in lowered:
                return key
        return None

    def invoke(self, prompt: str, system_prompt: str) -> str:
        marker = self.marker_for(system_prompt)
        self.calls.append(MockCall(prompt, system_prompt, marker))
        if self.error is not None:
            raise self.error
        if marker in self.overrides:
            return self.overrides[marker]
        if marker is None:
            return "{}"
        return json.dumps(_MOCK_REPLIES[marker])


# ─── Factory ─────────────────────────────────────────────────────────────────

def build_llm_client(role: str = "fast", settings: Settings | None = None) -> LLMClient:
    """Return the client for ``role`` ("fast" or "reasoning")."""
    settings = settings or get_settings()
    if role == "fast":
        config = settings.groq
    elif role == "reasoning":
        config = settings.gemini
    else:
        raise ValueError(f"Unknown LLM role: {role!r}")

    if settings.app.force_mock_mode or not config.is_configured:
        logger.info("%s not in use for %s role; serving mock replies", config.provider, role)
        return MockLLMClient(name=f"Mock ({config.provider})")

    fallback = MockLLMClient(name=f"Mock ({config.provider})") if settings.app.demo_mode else None
    return OpenAICompatibleClient(config, fallback=fallback)
