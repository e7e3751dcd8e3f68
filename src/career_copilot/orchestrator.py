"""
orchestrator.py — Action dispatch and autonomous stepping
==========================================================
Two ways to drive a session, both through the same dispatch path:

  process_action(action, payload)   explicit: ACTION_TO_CAPABILITY picks the
                                    capability for a caller-named action
  step() / run()                    autonomous: decide_next_step() picks the
                                    next action from the session state

Dispatch path
-------------
  1. resolve action            unknown → 400 "Unknown action: X", no mutation
  2. ActionGuardrails          BLOCK → 400, capability not called
  3. capability.process()      failures come back as AgentOutput values
  4. post-processing           profile → readiness_score + student_profile
                               gaps    → skill_gap_data
                               scored answer → refreshed readiness_score
  5. AgentStep appended to the RunTrace

Any exception escaping steps 2–4 becomes a 500 result.

Policy (decide_next_step), first match wins
--------------------------------------------
  no profile                                          → ANALYZE_PROFILE   PROFILE_ANALYSIS
  no skill gap data                                   → ANALYZE_GAPS      SKILL_GAP
  readiness < threshold and interviews < max rounds   → START_INTERVIEW   INTERVIEW
  otherwise                                           → GENERATE_PLAN     PLANNING
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional

from career_copilot.agent_trace import (
    STATUS_BLOCKED,
    STATUS_FAILED,
    STATUS_FALLBACK,
    STATUS_SUCCESS,
    AgentStep,
    RunTrace,
)
from career_copilot.b0_profile_agent import ProfileAnalyzerAgent
from career_copilot.b1_skill_gap_agent import SkillGapAgent
from career_copilot.b2_interview_agent import InterviewAgent
from career_copilot.b3_career_planner_agent import CareerPlannerAgent
from career_copilot.config import PolicyConfig, Settings, get_settings
from career_copilot.guardrails import ActionGuardrails, GuardrailLevel, GuardrailResult
from career_copilot.llm import LLMClient, build_llm_client
from career_copilot.memory import SessionStore
from career_copilot.models import AgentAction, AgentOutput, NextStep, SessionStage
from career_copilot.readiness import ReadinessEngine

logger = logging.getLogger(__name__)

ACTION_TO_CAPABILITY: dict[AgentAction, str] = {
    AgentAction.ANALYZE_PROFILE: "ProfileAnalyzerAgent",
    AgentAction.ANALYZE_GAPS:    "SkillGapAgent",
    AgentAction.START_INTERVIEW: "InterviewAgent",
    AgentAction.ANSWER_QUESTION: "InterviewAgent",
    AgentAction.GENERATE_PLAN:   "CareerPlannerAgent",
}

_INTERVIEW_ACTIONS = (AgentAction.START_INTERVIEW, AgentAction.ANSWER_QUESTION)

AnswerFn = Callable[[str], str]


# ─── Policy ──────────────────────────────────────────────────────────────────

def decide_next_step(
    store: SessionStore,
    engine: ReadinessEngine | None = None,
    policy: PolicyConfig | None = None,
) -> NextStep:
    """Pick the next capability and record the advisory stage."""
    policy = policy or PolicyConfig()
    engine = engine or ReadinessEngine(policy)
    state  = store.get_state()

    if state.student_profile is None:
        store.set_session_stage(SessionStage.PROFILE_ANALYSIS)
        return NextStep("ProfileAnalyzerAgent", AgentAction.ANALYZE_PROFILE)

    if state.skill_gap_data is None:
        store.set_session_stage(SessionStage.SKILL_GAP)
        return NextStep("SkillGapAgent", AgentAction.ANALYZE_GAPS)

    score = engine.calculate(state)
    store.update_readiness_score(score)

    if score < policy.readiness_threshold and len(state.interview_history) < policy.max_auto_interviews:
        store.set_session_stage(SessionStage.INTERVIEW)
        return NextStep("InterviewAgent", AgentAction.START_INTERVIEW)

    store.set_session_stage(SessionStage.PLANNING)
    return NextStep("CareerPlannerAgent", AgentAction.GENERATE_PLAN)


# ─── Orchestrator ────────────────────────────────────────────────────────────

class Orchestrator:
    """
    Owns one session: its store, its agents and its trace.

    LLM clients default to build_llm_client(); tests pass MockLLMClient
    instances as ``fast_llm`` / ``reasoning_llm``.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        settings: Settings | None = None,
        fast_llm: LLMClient | None = None,
        reasoning_llm: LLMClient | None = None,
        guardrails: ActionGuardrails | None = None,
    ) -> None:
        self.settings   = settings or get_settings()
        self.policy     = self.settings.policy
        self.store      = store or SessionStore(policy=self.policy)
        self.engine     = ReadinessEngine(self.policy)
        self.guardrails = guardrails or ActionGuardrails()

        fast      = fast_llm or build_llm_client("fast", self.settings)
        reasoning = reasoning_llm or build_llm_client("reasoning", self.settings)
        self.agents: dict[str, Any] = {
            "ProfileAnalyzerAgent": ProfileAnalyzerAgent(self.store, fast),
            "SkillGapAgent":        SkillGapAgent(self.store, fast),
            "InterviewAgent":       InterviewAgent(self.store, fast, reasoning),
            "CareerPlannerAgent":   CareerPlannerAgent(self.store, fast),
        }
        self.trace = RunTrace(mode="live" if self.settings.live_mode else "mock")
        # Interview loop state carried between autonomous steps
        self._interview_carry: dict[str, Any] = {}

    # ── Explicit dispatch ────────────────────────────────────────────────────

    def process_action(self, action: Any, payload: Optional[Mapping[str, Any]] = None) -> AgentOutput:
        start = self.trace.now_ms()
        t0    = time.perf_counter()

        try:
            resolved = AgentAction(action)
        except ValueError:
            logger.warning("Unknown action: %s", action)
            output = AgentOutput(
                success=False, message=f"Unknown action: {action}", status_code=400, action=str(action),
            )
            self._record(output, start, t0, status=STATUS_BLOCKED)
            return output

        capability = ACTION_TO_CAPABILITY[resolved]
        checks: GuardrailResult | None = None
        blocked = False
        try:
            payload = dict(payload or {})
            checks  = self.guardrails.check(resolved, payload)
            if checks.violations:
                logger.info("Guardrails for %s:\n%s", resolved.value, checks.summary())
            if checks.blocked:
                blocked = True
                output  = AgentOutput(
                    success=False,
                    status_code=400,
                    message="; ".join(v.message for v in checks.violations if v.level == GuardrailLevel.BLOCK),
                )
            else:
                logger.info("Dispatching %s → %s", resolved.value, capability)
                output = self.agents[capability].process(payload)
                if output.success:
                    self._post_process(resolved, output)
        except Exception as exc:
            logger.exception("Dispatch of %s failed", resolved.value)
            output = AgentOutput(success=False, message=str(exc) or "Internal Server Error", status_code=500)

        output.capability = capability
        output.action     = resolved.value
        self._record(output, start, t0, checks=checks, status=STATUS_BLOCKED if blocked else None)
        return output

    def _post_process(self, action: AgentAction, output: AgentOutput) -> None:
        if action == AgentAction.ANALYZE_PROFILE:
            state = self.store.get_state()
            score = self.engine.calculate(state)
            self.store.update_readiness_score(score)
            output.data["readiness_score"] = score
            output.data["student_profile"] = state.student_profile.model_dump(mode="json")

        elif action == AgentAction.ANALYZE_GAPS:
            gaps = self.store.get_state().skill_gap_data
            output.data["skill_gap_data"] = gaps.model_dump(mode="json") if gaps else None

        elif action in _INTERVIEW_ACTIONS and output.data.get("evaluation") is not None:
            score = self.engine.calculate(self.store.get_state())
            self.store.update_readiness_score(score)
            output.data["readiness_score"] = score

    def _record(
        self,
        output: AgentOutput,
        start: float,
        t0: float,
        checks: GuardrailResult | None = None,
        status: str | None = None,
    ) -> None:
        if status is None:
            if not output.success:
                status = STATUS_FAILED
            elif output.fallback:
                status = STATUS_FALLBACK
            else:
                status = STATUS_SUCCESS

        notes    = [f"{output.action or '?'} → {output.capability or 'none'}: HTTP {output.status_code}"]
        warnings: list[str] = []
        if checks is not None:
            warnings = [f"[{v.code}] {v.message}" for v in checks.violations if v.level != GuardrailLevel.INFO]
            notes.extend(f"[{v.code}] {v.message}" for v in checks.infos)
        if output.message:
            notes.append(output.message)

        self.trace.append(AgentStep(
            capability  = output.capability,
            action      = output.action,
            start_ms    = start,
            duration_ms = (time.perf_counter() - t0) * 1000,
            status      = status,
            decisions   = notes,
            warnings    = warnings,
            detail      = {
                "status_code": output.status_code,
                "guardrails":  checks.codes() if checks is not None else [],
                "fallback":    output.fallback,
            },
        ))

    # ── Autonomous stepping ──────────────────────────────────────────────────

    def step(self, payload: Optional[Mapping[str, Any]] = None, answer_fn: AnswerFn | None = None) -> AgentOutput:
        """
        Run the capability chosen by decide_next_step().

        During the interview stage the phase / difficulty / last question of
        the previous turn are carried over; when ``answer_fn`` is given it
        answers that question and the step becomes ANSWER_QUESTION.
        """
        decision = decide_next_step(self.store, self.engine, self.policy)
        action   = decision.action
        data     = dict(payload or {})
        logger.info("Policy chose %s (%s)", action.value, decision.capability)

        if action == AgentAction.START_INTERVIEW:
            data = {**self._interview_carry, **data}
            question = data.get("last_question_id")
            if answer_fn is not None and question and not data.get("last_answer"):
                data["last_answer"] = answer_fn(question)
            if data.get("last_answer"):
                action = AgentAction.ANSWER_QUESTION

        output = self.process_action(action, data)

        if output.success and action in _INTERVIEW_ACTIONS:
            self._interview_carry = {
                "last_question_id": output.data.get("question"),
                "phase":            output.data.get("phase"),
                "difficulty":       output.data.get("difficulty"),
                "questions_asked":  output.data.get("questions_asked", 0),
            }
        if output.success and action == AgentAction.GENERATE_PLAN:
            self.store.set_session_stage(SessionStage.COMPLETED)
        return output

    def run(
        self,
        payload: Optional[Mapping[str, Any]] = None,
        max_steps: int = 20,
        answer_fn: AnswerFn | None = None,
    ) -> list[AgentOutput]:
        """Step until COMPLETED, a failed step, or ``max_steps``."""
        outputs: list[AgentOutput] = []
        for _ in range(max_steps):
            if self.store.get_state().session_stage == SessionStage.COMPLETED:
                break
            output = self.step(payload, answer_fn=answer_fn)
            outputs.append(output)
            if not output.success:
                logger.warning("Autonomous run stopped: %s", output.message)
                break
        return outputs

    def reset(self) -> None:
        self.store.reset_session()
        self.trace.clear()
        self._interview_carry = {}
