"""
Block 0: Profile Analysis
==========================
ProfileAnalyzerAgent
    Sends the candidate's resume, declared skills, academic year and target
    company to the fast model and turns the reply into the canonical
    StudentProfile stored in the session.

    Reply handling:
      1. parse_llm_object()   tolerant JSON extraction
      2. reconcile_profile()  every accepted key spelling → one shape
      3. SessionStore.update_profile()

    The target company named in the reply (if any) wins over the one in the
    request.  Any failure returns success=False with "LLM Processing Failed";
    there is no safe canned profile.
"""

from __future__ import annotations

import logging
import textwrap
from typing import Any, Mapping

from pydantic import ValidationError

from career_copilot.llm import LLMClient, LLMError, build_llm_client
from career_copilot.memory import SessionStore
from career_copilot.models import AgentOutput, ProfileRequest, StudentProfile
from career_copilot.normalizer import parse_llm_object
from career_copilot.reconcile import reconcile_profile

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "LLM Processing Failed"

_SYSTEM_PROMPT = textwrap.dedent("""
    You are the Profile Analyzer Agent.
    Input: resume content, project descriptions, declared tech stack, academic year, target company.
    Tasks:
      - Extract structured skills.
      - Score the resume, project depth and technical maturity (1-10).
      - Detect missing fundamentals and weaknesses.
      - Infer strengths.
    Output structured JSON ONLY with the keys:
      skills, resume_score, project_depth_score, technical_maturity_score,
      missing_core_areas, inferred_strengths, risk_flags.
    Do not include any conversational text, markdown formatting, or code blocks.
""").strip()


class ProfileAnalyzerAgent:
    """Resume → scored StudentProfile (ANALYZE_PROFILE)."""

    name = "ProfileAnalyzerAgent"

    def __init__(self, store: SessionStore, llm: LLMClient | None = None) -> None:
        self.store = store
        self.llm   = llm or build_llm_client("fast")

    def _build_user_message(self, request: ProfileRequest) -> str:
        return textwrap.dedent(f"""
            Resume: {request.resume_text}
            Skills: {", ".join(request.declared_skills)}
            Year: {request.academic_year}
            Target: {request.target_company}
        """).strip()

    def process(self, payload: Mapping[str, Any]) -> AgentOutput:
        try:
            request = ProfileRequest.model_validate(payload)
        except ValidationError as exc:
            return AgentOutput(success=False, message=f"Invalid request: {exc.errors()[0]['msg']}", status_code=400)

        try:
            reply = self.llm.invoke(self._build_user_message(request), _SYSTEM_PROMPT)
        except LLMError as exc:
            logger.warning("Profile analysis failed: %s", exc)
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        parsed = parse_llm_object(reply)
        if parsed is None:
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        try:
            analysis = reconcile_profile(parsed)
            profile  = StudentProfile(
                resume_text              = request.resume_text,
                declared_skills          = request.declared_skills,
                academic_year            = request.academic_year,
                target_company           = analysis.target_company or request.target_company,
                resume_score             = analysis.resume_score,
                project_depth_score      = analysis.project_depth_score,
                technical_maturity_score = analysis.technical_maturity_score,
                missing_core_areas       = analysis.missing_core_areas,
                inferred_strengths       = analysis.inferred_strengths,
            )
        except ValidationError as exc:
            logger.warning("Profile reply has unusable field types: %s", exc.errors()[0]["msg"])
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        self.store.update_profile(profile)
        logger.info(
            "Profile analysed: resume=%s, %d missing areas",
            profile.resume_score, len(profile.missing_core_areas),
        )
        return AgentOutput(
            success=True,
            data={**parsed, **analysis.model_dump(exclude={"kind"}, exclude_none=True)},
        )
