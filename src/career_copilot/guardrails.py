"""
guardrails.py – Input guardrails for orchestrator actions
==========================================================
Payload checks that run before an action is dispatched to its capability.

Guardrail levels
----------------
BLOCK   – Hard-stop: the action is rejected with a 400 result; no state changes.
WARN    – Soft-stop: the action proceeds; the warning is recorded in the trace.
INFO    – Advisory: informational note recorded in the trace.

Guards implemented
------------------
  G-01  ANALYZE_PROFILE needs resume text                          BLOCK
        No target company given (readiness stays 0)                WARN
  G-02  Target company not in the company directory                WARN
  G-03  ANSWER_QUESTION needs a non-empty answer                   BLOCK
  G-04  Free text longer than MAX_TEXT_CHARS                       WARN
  G-05  PII in resume text / answers (e-mail, phone, SSN, card)    WARN   [heuristic]
  G-06  Unknown interview difficulty (treated as medium)           INFO
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from career_copilot.models import AgentAction, CompanyProfile, Difficulty, get_company_profile


# ─── Enums & data models ─────────────────────────────────────────────────────

class GuardrailLevel(str, Enum):
    BLOCK = "BLOCK"
    WARN  = "WARN"
    INFO  = "INFO"


@dataclass
class GuardrailViolation:
    code:    str
    level:   GuardrailLevel
    message: str
    field:   str = ""   # which payload field triggered the violation


@dataclass
class GuardrailResult:
    passed:     bool
    violations: list[GuardrailViolation] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return any(v.level == GuardrailLevel.BLOCK for v in self.violations)

    @property
    def infos(self) -> list[GuardrailViolation]:
        return [v for v in self.violations if v.level == GuardrailLevel.INFO]

    def codes(self) -> list[str]:
        return [v.code for v in self.violations]

    def summary(self) -> str:
        if not self.violations:
            return "✅ All guardrails passed."
        icons = {GuardrailLevel.BLOCK: "🚫", GuardrailLevel.WARN: "⚠️", GuardrailLevel.INFO: "ℹ️"}
        return "\n".join(f"{icons[v.level]} [{v.code}] {v.message}" for v in self.violations)


# ─── Constants ────────────────────────────────────────────────────────────────

MAX_TEXT_CHARS = 20_000

_PII_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("Email address",
     re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b")),
    ("Phone number",
     re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]\d{3}[-.\s]\d{4}\b")),
    ("SSN",
     re.compile(r"\b\d{3}-\d{2}-\d{4}\b")),
    ("Credit card",
     re.compile(r"\b(?:4\d{3}|5[1-5]\d{2}|6011|3[47]\d{2})[\s\-]?\d{4}[\s\-]?\d{4}[\s\-]?\d{4}\b")),
]

_FREE_TEXT_FIELDS: tuple[tuple[str, str], ...] = (
    # (canonical field, camelCase alias)
    ("resume_text", "resumeText"),
    ("last_answer", "lastAnswer"),
)


def _field(payload: Mapping[str, Any], name: str, alias: str) -> Any:
    value = payload.get(name)
    return payload.get(alias) if value is None else value


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


# ─── Guardrail checks ─────────────────────────────────────────────────────────

class ActionGuardrails:
    """G-01 – G-06: validates an action payload before dispatch."""

    def __init__(
        self,
        company_lookup: Callable[[Optional[str]], Optional[CompanyProfile]] = get_company_profile,
    ) -> None:
        self._lookup = company_lookup

    def check(self, action: AgentAction, payload: Mapping[str, Any]) -> GuardrailResult:
        violations: list[GuardrailViolation] = []

        if action == AgentAction.ANALYZE_PROFILE:
            violations.extend(self._check_profile(payload))
        if action == AgentAction.ANSWER_QUESTION:
            answer = _text(_field(payload, "last_answer", "lastAnswer"))
            if not answer.strip():
                violations.append(GuardrailViolation(
                    code="G-03", level=GuardrailLevel.BLOCK,
                    field="last_answer",
                    message="An answer is required to evaluate the question.",
                ))
        if action in (AgentAction.START_INTERVIEW, AgentAction.ANSWER_QUESTION):
            violations.extend(self._check_difficulty(payload))

        for name, alias in _FREE_TEXT_FIELDS:
            violations.extend(self.check_text(_text(_field(payload, name, alias)), name))

        return GuardrailResult(
            passed=not any(v.level == GuardrailLevel.BLOCK for v in violations),
            violations=violations,
        )

    # ── G-01 / G-02 ──────────────────────────────────────────────────────────

    def _check_profile(self, payload: Mapping[str, Any]) -> list[GuardrailViolation]:
        violations: list[GuardrailViolation] = []
        resume  = _text(_field(payload, "resume_text", "resumeText"))
        company = _text(_field(payload, "target_company", "targetCompany"))

        if not resume.strip():
            violations.append(GuardrailViolation(
                code="G-01", level=GuardrailLevel.BLOCK,
                field="resume_text",
                message="Resume text must not be empty.",
            ))
        if not company.strip():
            violations.append(GuardrailViolation(
                code="G-01", level=GuardrailLevel.WARN,
                field="target_company",
                message="No target company given; readiness stays at 0 until one is known.",
            ))
        elif self._lookup(company) is None:
            violations.append(GuardrailViolation(
                code="G-02", level=GuardrailLevel.WARN,
                field="target_company",
                message=(
                    f"Company '{company}' is not in the company directory. "
                    "Readiness will stay at 0 until a known company is chosen."
                ),
            ))
        return violations

    # ── G-06 ─────────────────────────────────────────────────────────────────

    def _check_difficulty(self, payload: Mapping[str, Any]) -> list[GuardrailViolation]:
        difficulty = payload.get("difficulty")
        if difficulty is None or difficulty == "":
            return []
        known = {d.value for d in Difficulty}
        if not isinstance(difficulty, str) or difficulty.strip().lower() not in known:
            return [GuardrailViolation(
                code="G-06", level=GuardrailLevel.INFO,
                field="difficulty",
                message=f"Difficulty '{difficulty}' not recognised; using medium.",
            )]
        return []

    # ── G-04 / G-05 ──────────────────────────────────────────────────────────

    def check_text(self, text: str, field_name: str = "") -> list[GuardrailViolation]:
        if not text:
            return []
        violations: list[GuardrailViolation] = []
        if len(text) > MAX_TEXT_CHARS:
            violations.append(GuardrailViolation(
                code="G-04", level=GuardrailLevel.WARN,
                field=field_name,
                message=f"{field_name} is {len(text):,} characters; the model may truncate it.",
            ))
        for label, pattern in _PII_PATTERNS:
            if pattern.search(text):
                violations.append(GuardrailViolation(
                    code="G-05", level=GuardrailLevel.WARN,
                    field=field_name,
                    message=f"{label} detected in {field_name}; it will be sent to the model provider.",
                ))
        return violations
