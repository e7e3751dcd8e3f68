"""
readiness.py — Readiness score (0–100) against the target company
==================================================================
Pure function of a SessionState; never mutates it.

  no resolved company     → 0
  no interviews yet       → round(resume_score × 10), clamped to [0, 100]
  otherwise, over the whole interview history:
      avg_tech  = mean(technical_depth)
      avg_behav = mean((clarity + structure) / 2)
      readiness = avg_tech × technical_weight
                + avg_behav × behavioral_weight
                + resume_score × 0.2
      score     = min(round(readiness × 10), 100)

Rounding is half-up so x.5 scores always round the same way.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from career_copilot.config import PolicyConfig
from career_copilot.models import SessionState


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ReadinessBreakdown:
    """Intermediate values behind a score, for display and tests."""
    score:        int
    avg_tech:     float = 0.0
    avg_behav:    float = 0.0
    resume_score: float = 0.0
    interviews:   int = 0
    cold_start:   bool = False


class ReadinessEngine:
    def __init__(self, policy: PolicyConfig | None = None) -> None:
        self.policy = policy or PolicyConfig()

    def breakdown(self, state: SessionState) -> ReadinessBreakdown:
        company = state.target_company_profile
        if company is None:
            return ReadinessBreakdown(score=0)

        profile      = state.student_profile
        resume_score = (profile.resume_score if profile else None) or 0.0
        history      = state.interview_history
        scale        = self.policy.score_scale

        if not history:
            score = _round_half_up(resume_score * scale)
            return ReadinessBreakdown(
                score        = max(0, min(score, 100)),
                resume_score = resume_score,
                cold_start   = True,
            )

        avg_tech  = sum(r.evaluation.technical_depth for r in history) / len(history)
        avg_behav = sum(
            (r.evaluation.clarity + r.evaluation.structure) / 2 for r in history
        ) / len(history)

        readiness = (
            avg_tech  * company.technical_weight +
            avg_behav * company.behavioral_weight +
            resume_score * self.policy.resume_weight
        )
        return ReadinessBreakdown(
            score        = min(_round_half_up(readiness * scale), 100),
            avg_tech     = avg_tech,
            avg_behav    = avg_behav,
            resume_score = resume_score,
            interviews   = len(history),
        )

    def calculate(self, state: SessionState) -> int:
        return self.breakdown(state).score
