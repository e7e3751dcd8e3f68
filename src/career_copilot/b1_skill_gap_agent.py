"""
Block 1: Skill Gap Analysis
============================
SkillGapAgent compares the stored profile with the expectations of the
resolved target company and records the gaps in the session.

Preconditions: a profile and a resolved company (400 otherwise).
Priority gaps are appended to the session's weak areas by the store.
"""

from __future__ import annotations

import json
import logging
import textwrap
from typing import Any, Mapping

from pydantic import ValidationError

from career_copilot.llm import LLMClient, LLMError, build_llm_client
from career_copilot.memory import SessionStore
from career_copilot.models import AgentOutput, CompanyProfile, SkillGapData, StudentProfile
from career_copilot.normalizer import parse_llm_object
from career_copilot.reconcile import reconcile_skill_gap

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "LLM Error"


def _system_prompt(company: CompanyProfile) -> str:
    return textwrap.dedent(f"""
        You are the Skill Gap Analyzer Agent.
        Goal: compare the student's skill profile against company expectations.
        Company: {company.name}
        Expectations: {", ".join(company.focus_areas)}
        Weights: Tech {company.technical_weight}, Behav {company.behavioral_weight}

        Output structured JSON ONLY. Do not include any conversational text, markdown formatting, or code blocks.
        Format: {{ "readiness_percentage": number, "priority_gaps": string[], "secondary_gaps": string[],
                  "company_alignment_score": number, "critical_focus_areas": string[] }}
    """).strip()


class SkillGapAgent:
    name = "SkillGapAgent"

    def __init__(self, store: SessionStore, llm: LLMClient | None = None) -> None:
        self.store = store
        self.llm   = llm or build_llm_client("fast")

    def _build_user_message(self, profile: StudentProfile) -> str:
        return f"Student Skills: {json.dumps(profile.model_dump(mode='json'))}"

    def process(self, payload: Mapping[str, Any]) -> AgentOutput:
        state   = self.store.get_state()
        profile = state.student_profile
        company = state.target_company_profile
        if profile is None or company is None:
            return AgentOutput(success=False, message="Missing Profile or Target Company", status_code=400)

        try:
            reply = self.llm.invoke(self._build_user_message(profile), _system_prompt(company))
        except LLMError as exc:
            logger.warning("Skill gap analysis failed: %s", exc)
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        parsed = parse_llm_object(reply)
        if parsed is None:
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        try:
            gaps = reconcile_skill_gap(parsed)
            data = SkillGapData(
                readiness_percentage = gaps.readiness_percentage,
                priority_gaps        = gaps.priority_gaps,
                secondary_gaps       = gaps.secondary_gaps,
                alignment_score      = gaps.alignment_score,
            )
        except ValidationError as exc:
            logger.warning("Skill gap reply has unusable field types: %s", exc.errors()[0]["msg"])
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        self.store.update_skill_gap(data)
        logger.info("Skill gaps for %s: %s", company.name, gaps.priority_gaps)
        return AgentOutput(success=True, data=parsed)
