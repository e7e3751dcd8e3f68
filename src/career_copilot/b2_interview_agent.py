"""
Block 2: Agentic Interviewer
=============================
InterviewAgent runs one turn of a technical interview (START_INTERVIEW,
ANSWER_QUESTION).

Turn loop
---------
  1. Observe   topic, difficulty, phase, questions asked, last answer
  2. Evaluate  the last answer with the reasoning model (fast model if the
               reasoning model fails); store it via add_interview_result
  3. Adapt     weakness detected  → phase = deep_dive, weakness area joins
                                    the focus list
               strength detected  → phase and difficulty advance one step
  4. Ask       the next question, generated by the fast model

Phases:        warmup → probing → deep_dive
Difficulties:  easy → medium → hard

Fallbacks
---------
  unusable evaluation      neutral 5 / 5 / 5, "Answer received."
  unusable question        templated question on the first topic
  any LLM failure          canned "challenging technical problem" question
                           (success=True so the interview keeps going)
"""

from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from career_copilot.llm import LLMClient, LLMError, build_llm_client
from career_copilot.memory import SessionStore
from career_copilot.models import (
    DEFAULT_FOCUS_TOPICS,
    AgentOutput,
    Difficulty,
    InterviewEvaluation,
    InterviewPhase,
    InterviewRequest,
    InterviewResult,
)
from career_copilot.normalizer import parse_llm_object
from career_copilot.reconcile import AnswerEvaluation, reconcile_evaluation, reconcile_question

logger = logging.getLogger(__name__)

FALLBACK_QUESTION = (
    "Tell me about a challenging technical problem you've solved recently. "
    "What was your approach?"
)
FALLBACK_TOPIC = "Problem Solving"

_PHASE_INSTRUCTIONS: dict[InterviewPhase, str] = {
    InterviewPhase.WARMUP:    "Ask a foundational warm-up question. Keep it accessible but relevant.",
    InterviewPhase.PROBING:   "Ask a probing question that tests deeper understanding. "
                              "Expect specific examples or implementations.",
    InterviewPhase.DEEP_DIVE: "Ask an advanced question requiring deep technical knowledge. "
                              "Focus on edge cases, trade-offs, or system-level thinking.",
}

_PHASE_ORDER      = [InterviewPhase.WARMUP, InterviewPhase.PROBING, InterviewPhase.DEEP_DIVE]
_DIFFICULTY_ORDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]


# ─── Small helpers ───────────────────────────────────────────────────────────

def normalize_difficulty(value: Optional[str]) -> Difficulty:
    """Case-insensitive; anything unrecognised is medium."""
    try:
        return Difficulty((value or "").strip().lower())
    except ValueError:
        return Difficulty.MEDIUM


def normalize_phase(value: Optional[str]) -> InterviewPhase:
    try:
        return InterviewPhase((value or "").strip().lower())
    except ValueError:
        return InterviewPhase.WARMUP


def advance_phase(phase: InterviewPhase) -> InterviewPhase:
    return _PHASE_ORDER[min(_PHASE_ORDER.index(phase) + 1, len(_PHASE_ORDER) - 1)]


def increase_difficulty(difficulty: Difficulty) -> Difficulty:
    return _DIFFICULTY_ORDER[min(_DIFFICULTY_ORDER.index(difficulty) + 1, len(_DIFFICULTY_ORDER) - 1)]


@dataclass
class InterviewTurn:
    """Working state of one interview turn; never stored in the session."""
    topic:           str
    difficulty:      Difficulty
    phase:           InterviewPhase
    questions_asked: int
    last_answer:     Optional[str]
    weaknesses:      list[str] = field(default_factory=list)
    strengths:       list[str] = field(default_factory=list)

    @property
    def first_topic(self) -> str:
        return self.topic.split(",")[0].strip()


# ─── Agent ───────────────────────────────────────────────────────────────────

class InterviewAgent:
    """
    Dual-model interviewer.

    ``reasoning`` evaluates answers, ``fast`` generates questions (and takes
    over evaluation when the reasoning model raises).
    """

    name = "InterviewAgent"

    def __init__(
        self,
        store: SessionStore,
        fast: LLMClient | None = None,
        reasoning: LLMClient | None = None,
    ) -> None:
        self.store     = store
        self.fast      = fast or build_llm_client("fast")
        self.reasoning = reasoning or build_llm_client("reasoning")

    # ── Evaluation (reasoning model) ─────────────────────────────────────────

    def _evaluate(self, turn: InterviewTurn, company: str, skills: list[str]) -> tuple[AnswerEvaluation, bool]:
        """Return the evaluation and whether the neutral default was used."""
        system_prompt = textwrap.dedent(f"""
            You are an internal evaluation engine for a technical interview agent.
            You are evaluating a candidate's answer for a {company} interview.
            Topic: {turn.topic}
            Difficulty: {turn.difficulty.value}
            Phase: {turn.phase.value}
            Questions asked so far: {turn.questions_asked}
            Candidate skills: {", ".join(skills)}

            EVALUATE the answer. Be precise and objective.
            Award points out of 10 based on correctness, depth, and quality.
            If the answer is wrong, explain what went wrong and give the correct answer.

            CRITICAL: Output ONLY valid JSON with the keys:
              evaluation {{technical_depth, clarity, structure}} (1-10 each),
              points_awarded, max_points, is_correct, what_went_wrong, correct_answer,
              weakness_detected, weakness_area, strength_detected, suggested_phase,
              topic, feedback_summary.
        """).strip()
        prompt = f'The candidate answered: "{turn.last_answer}"\n\nEvaluate this answer.'

        try:
            reply = self.reasoning.invoke(prompt, system_prompt)
        except LLMError as exc:
            logger.warning("%s unavailable for evaluation (%s); using %s", self.reasoning.name, exc, self.fast.name)
            reply = self.fast.invoke(prompt, system_prompt)

        parsed = parse_llm_object(reply)
        if parsed is not None:
            try:
                return reconcile_evaluation(parsed), False
            except ValidationError as exc:
                logger.warning("Evaluation reply has unusable field types: %s", exc.errors()[0]["msg"])

        logger.warning("Evaluation reply unparseable; using neutral scores")
        return AnswerEvaluation(
            technical_depth  = 5,
            clarity          = 5,
            structure        = 5,
            points_awarded   = 5,
            is_correct       = True,
            suggested_phase  = turn.phase.value,
            feedback_summary = "Answer received.",
            topic            = turn.topic,
        ), True

    # ── Question generation (fast model) ─────────────────────────────────────

    def _generate_question(self, turn: InterviewTurn, company: str, skills: list[str]) -> tuple[str, str, bool]:
        """Return (question, topic, templated)."""
        system_prompt = textwrap.dedent(f"""
            You are a question generator for a technical interview agent at {company}.
            You MUST ask questions ONLY about these specific topics: {turn.topic}
            Difficulty: {turn.difficulty.value}
            Phase: {turn.phase.value}
            Questions asked so far: {turn.questions_asked}
            Candidate skills: {", ".join(skills)}
            Weaknesses detected: {", ".join(turn.weaknesses)}

            {_PHASE_INSTRUCTIONS[turn.phase]}

            Rules:
            - Ask EXACTLY ONE question, strictly about: {turn.topic}
            - No hints, feedback, explanations, multiple parts or meta commentary
            - Do NOT repeat previous questions

            CRITICAL: Output ONLY valid JSON: {{"question": "...", "topic": "..."}}
        """).strip()
        prompt = (
            f"Generate the next {turn.difficulty.value} difficulty interview question "
            f"for phase: {turn.phase.value}."
        )

        reply = self.fast.invoke(prompt, system_prompt)
        try:
            generated = reconcile_question(parse_llm_object(reply) or {})
        except ValidationError as exc:
            logger.warning("Question reply has unusable field types: %s", exc.errors()[0]["msg"])
            generated = None
        if generated is None:
            logger.warning("Question reply unparseable; using templated question")
            question = (
                f"Explain how you would approach designing a {turn.first_topic} "
                "solution for a production system."
            )
            return question, turn.first_topic, True
        return generated.question, generated.topic or turn.topic, False

    # ── Public interface ─────────────────────────────────────────────────────

    def process(self, payload: Mapping[str, Any]) -> AgentOutput:
        try:
            request = InterviewRequest.model_validate(payload)
        except ValidationError as exc:
            return AgentOutput(success=False, message=f"Invalid request: {exc.errors()[0]['msg']}", status_code=400)

        state   = self.store.get_state()
        profile = state.student_profile
        weak    = state.weak_areas or list(DEFAULT_FOCUS_TOPICS)
        skills  = list(profile.declared_skills) if profile else []
        if state.target_company_profile is not None:
            company = state.target_company_profile.name
        else:
            company = (profile.target_company if profile else "") or "General"

        turn = InterviewTurn(
            topic           = ", ".join(request.topics or weak),
            difficulty      = normalize_difficulty(request.difficulty),
            phase           = normalize_phase(request.phase),
            questions_asked = request.questions_asked,
            last_answer     = request.last_answer or None,
            weaknesses      = list(weak),
            strengths       = list(state.strengths),
        )

        scored: AnswerEvaluation | None = None
        used_fallback = False
        try:
            if turn.last_answer:
                scored, used_fallback = self._evaluate(turn, company, skills)
                if scored.rubric_found:
                    self.store.add_interview_result(InterviewResult(
                        question   = request.last_question_id or "Previous question",
                        topic      = scored.topic or turn.topic,
                        answer     = turn.last_answer,
                        evaluation = InterviewEvaluation(**scored.scores()),
                        feedback   = scored.feedback_summary or "",
                    ))

                if scored.weakness_detected:
                    turn.phase = InterviewPhase.DEEP_DIVE
                    if scored.weakness_area:
                        turn.weaknesses.append(scored.weakness_area)
                elif scored.strength_detected:
                    turn.phase      = advance_phase(turn.phase)
                    turn.difficulty = increase_difficulty(turn.difficulty)

            turn.questions_asked += 1
            question, topic, templated = self._generate_question(turn, company, skills)
        except LLMError as exc:
            logger.warning("Interview turn failed (%s); asking the fallback question", exc)
            return AgentOutput(
                success  = True,
                fallback = True,
                data     = {
                    "question":         FALLBACK_QUESTION,
                    "difficulty":       turn.difficulty.value,
                    "topic":            FALLBACK_TOPIC,
                    "phase":            turn.phase.value,
                    "questions_asked":  request.questions_asked + 1,
                    "evaluation":       None,
                    "feedback_summary": None,
                },
            )

        data: dict[str, Any] = {
            "question":         question,
            "difficulty":       turn.difficulty.value,
            "topic":            topic,
            "phase":            turn.phase.value,
            "questions_asked":  turn.questions_asked,
            "evaluation":       scored.scores() if scored is not None and scored.rubric_found else None,
            "feedback_summary": scored.feedback_summary if scored is not None else None,
        }
        if scored is not None:
            data.update(
                points_awarded  = scored.points_awarded,
                max_points      = scored.max_points,
                is_correct      = scored.is_correct,
                what_went_wrong = scored.what_went_wrong,
                correct_answer  = scored.correct_answer,
            )
        return AgentOutput(success=True, data=data, fallback=used_fallback or templated)
