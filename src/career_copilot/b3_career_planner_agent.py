"""
Block 3: Career Planning
=========================
CareerPlannerAgent turns the session (company, readiness, weak areas) into
a day-by-day preparation roadmap for the requested time horizon.

Output (after reconcile_plan):
  daily_plan                     [{day, focus, expected_outcome, tasks[]}]
  weekly_mock_schedule           [str]
  project_upgrade_suggestions    [str]
  resume_improvement_actions     [str]
  expected_readiness_after_plan  str | None

A reply that cannot be parsed or reconciled is replaced by the built-in
planner reply (success=True, fallback=True).  Only when that also fails,
or the model call itself raises, is the result success=False / "LLM Error".
"""

from __future__ import annotations

import logging
import textwrap
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from career_copilot.llm import LLMClient, LLMError, MockLLMClient, build_llm_client
from career_copilot.memory import SessionStore
from career_copilot.models import DEFAULT_FOCUS_TOPICS, AgentOutput, PlanRequest
from career_copilot.normalizer import parse_llm_object
from career_copilot.reconcile import CareerPlan, reconcile_plan

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "LLM Error"


class CareerPlannerAgent:
    name = "CareerPlannerAgent"

    def __init__(
        self,
        store: SessionStore,
        llm: LLMClient | None = None,
        fallback: LLMClient | None = None,
    ) -> None:
        self.store    = store
        self.llm      = llm or build_llm_client("fast")
        self.fallback = fallback or MockLLMClient(name="Mock (planner)")

    def process(self, payload: Mapping[str, Any]) -> AgentOutput:
        try:
            request = PlanRequest.model_validate(payload)
        except ValidationError as exc:
            return AgentOutput(success=False, message=f"Invalid request: {exc.errors()[0]['msg']}", status_code=400)

        state   = self.store.get_state()
        weak    = state.weak_areas or list(DEFAULT_FOCUS_TOPICS)
        company = state.target_company_profile.name if state.target_company_profile else "General"

        system_prompt = textwrap.dedent(f"""
            You are the Career Planner Agent.
            Goal: generate a company-oriented career improvement roadmap.
            Company: {company}
            Time Horizon: {request.time_horizon}
            Current Readiness: {state.readiness_score}
            Weak Areas: {", ".join(weak)}
            Output structured JSON ONLY, no conversational text, markdown or code blocks:
            {{ "daily_plan": [], "weekly_mock_schedule": [], "project_upgrade_suggestions": [],
               "resume_improvement_actions": [], "expected_readiness_after_plan": "" }}
        """).strip()
        prompt = "Generate a plan."

        try:
            reply = self.llm.invoke(prompt, system_prompt)
        except LLMError as exc:
            logger.warning("Career planning failed: %s", exc)
            return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        parsed, plan = _parse_plan(reply)
        fallback = False
        if plan is None:
            logger.warning("Plan reply unusable; using %s", self.fallback.name)
            fallback = True
            try:
                parsed, plan = _parse_plan(self.fallback.invoke(prompt, system_prompt))
            except LLMError as exc:
                logger.warning("Fallback planner failed: %s", exc)
            if plan is None:
                return AgentOutput(success=False, message=FAILURE_MESSAGE, status_code=502)

        logger.info("Plan generated: %d days for %s", len(plan.daily_plan), request.time_horizon)
        return AgentOutput(
            success  = True,
            fallback = fallback,
            data     = {**parsed, **plan.model_dump(exclude={"kind"}), "time_horizon": request.time_horizon},
        )


def _parse_plan(reply: str) -> tuple[dict[str, Any], Optional[CareerPlan]]:
    """(raw object, reconciled plan); the plan is None when the reply is unusable."""
    parsed = parse_llm_object(reply)
    if parsed is None:
        return {}, None
    try:
        return parsed, reconcile_plan(parsed)
    except ValidationError as exc:
        logger.warning("Plan reply has unusable field types: %s", exc.errors()[0]["msg"])
        return parsed, None
