"""
Data models for the Career Copilot multi-agent system.

Session state (the only cross-agent memory), request payloads accepted by
the orchestrator, the agent result envelope, and the static company
directory used to weight readiness.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from career_copilot.normalizer import flatten_strings


# ─── Enumerations ────────────────────────────────────────────────────────────

class SessionStage(str, Enum):
    """Advisory pipeline stage, set by the orchestration policy."""
    PROFILE_ANALYSIS = "PROFILE_ANALYSIS"
    SKILL_GAP        = "SKILL_GAP"
    INTERVIEW        = "INTERVIEW"
    PLANNING         = "PLANNING"
    COMPLETED        = "COMPLETED"


class AgentAction(str, Enum):
    """Actions a caller may dispatch explicitly."""
    ANALYZE_PROFILE = "ANALYZE_PROFILE"
    ANALYZE_GAPS    = "ANALYZE_GAPS"
    START_INTERVIEW = "START_INTERVIEW"
    ANSWER_QUESTION = "ANSWER_QUESTION"
    GENERATE_PLAN   = "GENERATE_PLAN"


class InterviewPhase(str, Enum):
    WARMUP    = "warmup"      # accessible foundations
    PROBING   = "probing"     # specific examples / implementations
    DEEP_DIVE = "deep_dive"   # edge cases, trade-offs, system-level


class Difficulty(str, Enum):
    EASY   = "easy"
    MEDIUM = "medium"
    HARD   = "hard"


# ─── Company directory ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class CompanyProfile:
    """Static hiring profile of a target company (weights need not sum to 1)."""
    id:               str
    name:             str
    technical_weight: float
    behavioral_weight: float
    focus_areas:      tuple[str, ...]
    difficulty_bias:  float = 1.0    # 1.0 = neutral, >1.0 = harder


COMPANY_PROFILES: dict[str, CompanyProfile] = {
    "amazon": CompanyProfile(
        id="amazon",
        name="Amazon",
        technical_weight=0.6,
        behavioral_weight=0.4,
        focus_areas=("DSA", "Object-Oriented Programming", "Leadership Principles", "Scalability"),
        difficulty_bias=1.0,
    ),
    "google": CompanyProfile(
        id="google",
        name="Google",
        technical_weight=0.8,
        behavioral_weight=0.2,
        focus_areas=("Algorithms", "System Design", "Graph Theory", "Concurrency"),
        difficulty_bias=1.2,
    ),
    "microsoft": CompanyProfile(
        id="microsoft",
        name="Microsoft",
        technical_weight=0.7,
        behavioral_weight=0.3,
        focus_areas=("System Design", "Testing", "DSA", "Distributed Systems"),
        difficulty_bias=1.0,
    ),
    "startup": CompanyProfile(
        id="startup",
        name="High Growth Startup",
        technical_weight=0.5,
        behavioral_weight=0.5,
        focus_areas=("Full Stack Development", "Product Sense", "Speed of Execution", "Database Design"),
        difficulty_bias=0.9,
    ),
}


# Focus topics used when the session has no weak areas yet
DEFAULT_FOCUS_TOPICS: tuple[str, ...] = ("general programming", "problem solving")


def get_company_profile(name: Optional[str]) -> Optional[CompanyProfile]:
    """Case-insensitive directory lookup; unknown or empty names return None."""
    if not name:
        return None
    return COMPANY_PROFILES.get(name.strip().lower())


# ─── Session state ───────────────────────────────────────────────────────────

_id_counter = itertools.count()


def new_result_id() -> str:
    """Time-derived id; the counter suffix keeps ids unique within one ms."""
    return f"{int(time.time() * 1000)}-{next(_id_counter)}"


class StudentProfile(BaseModel):
    """Canonical profile written by the profile analysis capability."""
    resume_text:              str = ""
    declared_skills:          list[str] = Field(default_factory=list)
    academic_year:            str = ""
    target_company:           str = ""
    resume_score:             Optional[float] = Field(default=None, ge=0, le=10)
    project_depth_score:      Optional[float] = Field(default=None, ge=0, le=10)
    technical_maturity_score: Optional[float] = Field(default=None, ge=0, le=10)
    missing_core_areas:       list[str] = Field(default_factory=list)
    inferred_strengths:       list[str] = Field(default_factory=list)

    @field_validator("declared_skills", "missing_core_areas", "inferred_strengths", mode="before")
    @classmethod
    def _flatten(cls, value: Any) -> list[str]:
        return flatten_strings(value)


class SkillGapData(BaseModel):
    readiness_percentage: float = Field(default=0, ge=0, le=100)
    priority_gaps:        list[str] = Field(default_factory=list)
    secondary_gaps:       list[str] = Field(default_factory=list)
    alignment_score:      float = 0

    @field_validator("priority_gaps", "secondary_gaps", mode="before")
    @classmethod
    def _flatten(cls, value: Any) -> list[str]:
        return flatten_strings(value)


class InterviewEvaluation(BaseModel):
    technical_depth: float = Field(default=0, ge=0, le=10)
    clarity:         float = Field(default=0, ge=0, le=10)
    structure:       float = Field(default=0, ge=0, le=10)


class InterviewResult(BaseModel):
    """One evaluated answer.  Stored append-only in the session history."""
    model_config = ConfigDict(frozen=True)

    id:         str = Field(default_factory=new_result_id)
    question:   str
    topic:      str
    answer:     str
    evaluation: InterviewEvaluation
    feedback:   str = ""
    timestamp:  datetime = Field(default_factory=datetime.now)


class SessionState(BaseModel):
    """Everything the agents share.  Callers only ever see deep copies."""
    student_profile:        Optional[StudentProfile] = None
    skill_gap_data:         Optional[SkillGapData] = None
    interview_history:      list[InterviewResult] = Field(default_factory=list)
    weak_areas:             list[str] = Field(default_factory=list)
    strengths:              list[str] = Field(default_factory=list)
    readiness_score:        int = 0
    target_company_profile: Optional[CompanyProfile] = None
    session_stage:          SessionStage = SessionStage.PROFILE_ANALYSIS


# ─── Request payloads ────────────────────────────────────────────────────────
# Accept snake_case and the camelCase keys sent by browser clients.

class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ProfileRequest(_Request):
    resume_text:     str = ""
    declared_skills: list[str] = Field(default_factory=list)
    academic_year:   str = ""
    target_company:  str = ""

    @field_validator("declared_skills", mode="before")
    @classmethod
    def _split_skills(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return flatten_strings(value)


class InterviewRequest(_Request):
    last_answer:      Optional[str] = None
    last_question_id: Optional[str] = None
    difficulty:       Optional[str] = None
    topics:          list[str] = Field(default_factory=list)
    phase:            Optional[str] = None
    questions_asked:  int = 0

    @field_validator("topics", mode="before")
    @classmethod
    def _flatten_topics(cls, value: Any) -> list[str]:
        return flatten_strings(value)

    @field_validator("questions_asked", mode="before")
    @classmethod
    def _default_count(cls, value: Any) -> Any:
        return 0 if value in (None, "") else value


class PlanRequest(_Request):
    time_horizon: str = "30 days"


# ─── Agent result envelope ───────────────────────────────────────────────────

@dataclass
class AgentOutput:
    """Result of one capability call, as returned to the caller."""
    success:     bool
    data:        dict[str, Any] = field(default_factory=dict)
    message:     Optional[str] = None
    status_code: int = 200         # HTTP-equivalent: 200 | 400 | 500 | 502
    capability:  str = ""
    action:      str = ""
    fallback:    bool = False      # True when a canned result replaced the LLM

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success":  self.success,
            "data":     self.data,
            "decision": {"capability": self.capability, "action": self.action},
        }
        if self.message is not None:
            out["message"] = self.message
        return out


@dataclass(frozen=True)
class NextStep:
    """Decision produced by the orchestration policy."""
    capability: str
    action:     AgentAction
