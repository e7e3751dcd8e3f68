"""
reconcile.py — Canonical parsed outputs for every capability
=============================================================
Models answer the same question with different key spellings: snake_case
or camelCase, flat scores or a nested ``score`` object, gaps as a list or as
a category → list map.  Every accepted spelling is listed in FIELD_SOURCES;
the first source path that is present wins and sources are never merged.

Source paths are dotted for nested objects (``score.resume``).

Parsed outputs
--------------
  ProfileAnalysis     kind="profile"
  SkillGapAnalysis    kind="skill_gap"
  AnswerEvaluation    kind="evaluation"
  GeneratedQuestion   kind="question"
  CareerPlan          kind="plan"

ParsedCapabilityOutput is their discriminated union on ``kind``.
"""

from __future__ import annotations

import json
import math
import re
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from career_copilot.normalizer import flatten_strings

_MISSING = object()


# ─── Source tables ───────────────────────────────────────────────────────────

FIELD_SOURCES: dict[str, dict[str, tuple[str, ...]]] = {
    "profile": {
        "resume_score":             ("resume_score", "resumeScore", "score.resume", "score.resume_score"),
        "project_depth_score":      ("project_depth_score", "projectDepthScore", "score.projects"),
        "technical_maturity_score": ("technical_maturity_score", "technicalMaturityScore", "score.maturity"),
        "missing_core_areas":       ("missing_core_areas", "missingCoreAreas", "priority_gaps", "weaknesses"),
        "inferred_strengths":       ("inferred_strengths", "inferredStrengths", "recommendations"),
        "skills":                   ("skills",),
        "target_company":           ("target_company", "targetCompany"),
    },
    "skill_gap": {
        "readiness_percentage": ("readiness_percentage", "readinessPercentage"),
        "priority_gaps":        ("priority_gaps", "priorityGaps"),
        "secondary_gaps":       ("secondary_gaps", "secondaryGaps"),
        "alignment_score":      ("company_alignment_score", "alignment_score", "alignmentScore"),
        "critical_focus_areas": ("critical_focus_areas", "criticalFocusAreas"),
    },
    "evaluation": {
        "technical_depth":   ("evaluation.technical_depth", "evaluation.technicalDepth",
                              "technical_depth", "technicalDepth"),
        "clarity":           ("evaluation.clarity", "clarity"),
        "structure":         ("evaluation.structure", "structure"),
        "feedback_summary":  ("feedback_summary", "feedbackSummary", "feedback"),
        "points_awarded":    ("points_awarded", "pointsAwarded"),
        "max_points":        ("max_points", "maxPoints"),
        "is_correct":        ("is_correct", "isCorrect"),
        "what_went_wrong":   ("what_went_wrong", "whatWentWrong"),
        "correct_answer":    ("correct_answer", "correctAnswer"),
        "weakness_detected": ("weakness_detected", "weaknessDetected"),
        "weakness_area":     ("weakness_area", "weaknessArea"),
        "strength_detected": ("strength_detected", "strengthDetected"),
        "suggested_phase":   ("suggested_phase", "suggestedPhase"),
        "topic":             ("topic",),
    },
    "question": {
        "question": ("question", "next_question", "nextQuestion"),
        "topic":    ("topic",),
    },
    "plan": {
        "daily_plan":                    ("daily_plan", "dailyPlan"),
        "weekly_mock_schedule":          ("weekly_mock_schedule", "weeklyMockSchedule", "weekly_schedule"),
        "project_upgrade_suggestions":   ("project_upgrade_suggestions", "projectUpgradeSuggestions"),
        "resume_improvement_actions":    ("resume_improvement_actions", "resumeImprovementActions",
                                          "resume_actions"),
        "expected_readiness_after_plan": ("expected_readiness_after_plan", "expectedReadinessAfterPlan"),
    },
}


# ─── Lookup & coercion helpers ───────────────────────────────────────────────

def _get_path(data: Any, path: str) -> Any:
    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def first_present(data: Any, paths: tuple[str, ...], default: Any = None) -> Any:
    """Value of the first source path that exists and is not null."""
    for path in paths:
        value = _get_path(data, path)
        if value is not _MISSING and value is not None:
            return value
    return default


_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:\.\d+)?)")


def to_number(value: Any) -> Optional[float]:
    """7 → 7.0, "7/10" → 7.0, "85%" → 85.0; anything else → None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group(1))
    return None


def clamp(value: Optional[float], low: float, high: float) -> Optional[float]:
    if value is None:
        return None
    return max(low, min(high, value))


def _to_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "yes", "no"):
        return value.strip().lower() in ("true", "yes")
    return None


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


# ─── Parsed outputs ──────────────────────────────────────────────────────────

class ProfileAnalysis(BaseModel):
    kind:                     Literal["profile"] = "profile"
    resume_score:             Optional[float] = None
    project_depth_score:      Optional[float] = None
    technical_maturity_score: Optional[float] = None
    missing_core_areas:       list[str] = Field(default_factory=list)
    inferred_strengths:       list[str] = Field(default_factory=list)
    target_company:           Optional[str] = None


class SkillGapAnalysis(BaseModel):
    kind:                 Literal["skill_gap"] = "skill_gap"
    readiness_percentage: float = 0
    priority_gaps:        list[str] = Field(default_factory=list)
    secondary_gaps:       list[str] = Field(default_factory=list)
    alignment_score:      float = 0
    critical_focus_areas: list[str] = Field(default_factory=list)


class AnswerEvaluation(BaseModel):
    kind:              Literal["evaluation"] = "evaluation"
    technical_depth:   float = 0
    clarity:           float = 0
    structure:         float = 0
    feedback_summary:  Optional[str] = None
    points_awarded:    float = 0
    max_points:        float = 10
    is_correct:        bool = False
    what_went_wrong:   Optional[str] = None
    correct_answer:    Optional[str] = None
    weakness_detected: bool = False
    weakness_area:     Optional[str] = None
    strength_detected: bool = False
    suggested_phase:   Optional[str] = None
    topic:             Optional[str] = None
    rubric_found:      bool = True     # False when the reply carried no rubric score at all

    def scores(self) -> dict[str, float]:
        return {
            "technical_depth": self.technical_depth,
            "clarity":         self.clarity,
            "structure":       self.structure,
        }


class GeneratedQuestion(BaseModel):
    kind:     Literal["question"] = "question"
    question: str
    topic:    Optional[str] = None


class PlanDay(BaseModel):
    day:              Any = None
    focus:            str = ""
    expected_outcome: str = ""
    tasks:            list[str] = Field(default_factory=list)


class CareerPlan(BaseModel):
    kind:                          Literal["plan"] = "plan"
    daily_plan:                    list[PlanDay] = Field(default_factory=list)
    weekly_mock_schedule:          list[str] = Field(default_factory=list)
    project_upgrade_suggestions:   list[str] = Field(default_factory=list)
    resume_improvement_actions:    list[str] = Field(default_factory=list)
    expected_readiness_after_plan: Optional[str] = None


ParsedCapabilityOutput = Annotated[
    Union[ProfileAnalysis, SkillGapAnalysis, AnswerEvaluation, GeneratedQuestion, CareerPlan],
    Field(discriminator="kind"),
]


# ─── Reconcilers ─────────────────────────────────────────────────────────────

def reconcile_profile(data: dict[str, Any]) -> ProfileAnalysis:
    src = FIELD_SOURCES["profile"]

    strengths = flatten_strings(first_present(data, src["inferred_strengths"]))
    if not strengths:
        strengths = flatten_strings(first_present(data, src["skills"]))

    company = first_present(data, src["target_company"])
    return ProfileAnalysis(
        resume_score             = clamp(to_number(first_present(data, src["resume_score"])), 0, 10),
        project_depth_score      = clamp(to_number(first_present(data, src["project_depth_score"])), 0, 10),
        technical_maturity_score = clamp(to_number(first_present(data, src["technical_maturity_score"])), 0, 10),
        missing_core_areas       = flatten_strings(first_present(data, src["missing_core_areas"])),
        inferred_strengths       = strengths,
        target_company           = company if isinstance(company, str) and company.strip() else None,
    )


def reconcile_skill_gap(data: dict[str, Any]) -> SkillGapAnalysis:
    src = FIELD_SOURCES["skill_gap"]
    return SkillGapAnalysis(
        readiness_percentage = clamp(to_number(first_present(data, src["readiness_percentage"])), 0, 100) or 0,
        priority_gaps        = flatten_strings(first_present(data, src["priority_gaps"])),
        secondary_gaps       = flatten_strings(first_present(data, src["secondary_gaps"])),
        alignment_score      = to_number(first_present(data, src["alignment_score"])) or 0,
        critical_focus_areas = flatten_strings(first_present(data, src["critical_focus_areas"])),
    )


def reconcile_evaluation(data: dict[str, Any]) -> AnswerEvaluation:
    """Missing rubric scores count as 0; point fields default from the rubric."""
    src = FIELD_SOURCES["evaluation"]

    def score(name: str) -> float:
        return clamp(to_number(first_present(data, src[name])), 0, 10) or 0.0

    tech, clarity, structure = score("technical_depth"), score("clarity"), score("structure")
    rubric_found = any(
        first_present(data, src[name]) is not None for name in ("technical_depth", "clarity", "structure")
    )

    points = to_number(first_present(data, src["points_awarded"]))
    if points is None:
        points = float(math.floor((tech + clarity + structure) / 3 + 0.5))
    max_points = to_number(first_present(data, src["max_points"])) or 10.0
    is_correct = _to_bool(first_present(data, src["is_correct"]))
    if is_correct is None:
        is_correct = tech >= 5

    return AnswerEvaluation(
        technical_depth   = tech,
        clarity           = clarity,
        structure         = structure,
        feedback_summary  = _to_text(first_present(data, src["feedback_summary"])),
        points_awarded    = points,
        max_points        = max_points,
        is_correct        = is_correct,
        what_went_wrong   = _to_text(first_present(data, src["what_went_wrong"])),
        correct_answer    = _to_text(first_present(data, src["correct_answer"])),
        weakness_detected = bool(_to_bool(first_present(data, src["weakness_detected"]))),
        weakness_area     = _to_text(first_present(data, src["weakness_area"])),
        strength_detected = bool(_to_bool(first_present(data, src["strength_detected"]))),
        suggested_phase   = _to_text(first_present(data, src["suggested_phase"])),
        topic             = _to_text(first_present(data, src["topic"])),
        rubric_found      = rubric_found,
    )


def reconcile_question(data: dict[str, Any]) -> Optional[GeneratedQuestion]:
    """None when the reply carries no usable question text."""
    src = FIELD_SOURCES["question"]
    question = first_present(data, src["question"])
    if not isinstance(question, str) or not question.strip():
        return None
    return GeneratedQuestion(
        question = question.strip(),
        topic    = _to_text(first_present(data, src["topic"])),
    )


def _task_text(task: Any) -> str:
    if isinstance(task, str):
        return task
    if isinstance(task, dict) and task.get("task"):
        hours = task.get("time")
        return f"{task['task']} ({hours}h)" if hours else str(task["task"])
    return json.dumps(task)


def _label(value: Any) -> str:
    """Plan labels as text: lists are joined, objects become JSON."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ", ".join(flatten_strings(value))
    return json.dumps(value)


def _plan_day(raw: Any, index: int) -> PlanDay:
    if not isinstance(raw, dict):
        return PlanDay(day=index + 1, focus=_task_text(raw))
    day  = raw.get("day", index + 1)
    goal = _label(raw.get("goal"))
    tasks = raw.get("tasks") or []
    if not isinstance(tasks, list):
        tasks = [tasks]
    return PlanDay(
        day              = day,
        focus            = _label(raw.get("focus")) or goal or f"Day {day}",
        expected_outcome = _label(raw.get("expected_outcome")) or goal,
        tasks            = [_task_text(t) for t in tasks],
    )


def reconcile_plan(data: dict[str, Any]) -> CareerPlan:
    src = FIELD_SOURCES["plan"]
    days = first_present(data, src["daily_plan"], default=[])
    if not isinstance(days, list):
        days = [days]
    expected = first_present(data, src["expected_readiness_after_plan"])
    return CareerPlan(
        daily_plan                    = [_plan_day(d, i) for i, d in enumerate(days)],
        weekly_mock_schedule          = [_task_text(x) for x in _as_list(first_present(data, src["weekly_mock_schedule"]))],
        project_upgrade_suggestions   = flatten_strings(first_present(data, src["project_upgrade_suggestions"])),
        resume_improvement_actions    = flatten_strings(first_present(data, src["resume_improvement_actions"])),
        expected_readiness_after_plan = None if expected is None else str(expected),
    )


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return list(value.values())
    return [value]
