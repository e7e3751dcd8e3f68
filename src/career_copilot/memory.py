"""
memory.py — SessionStore, the shared memory of the agent pipeline
==================================================================
Holds the single mutable SessionState of one session.  Agents never touch
the state object directly: they read deep-copied snapshots via get_state()
and change it only through the mutation methods below.

The store is constructed explicitly and handed to every agent and to the
orchestrator (no module-level singleton), so one store == one session.

Update rules
------------
  update_profile        full replace; weak_areas / strengths re-derived from
                        the profile (flattened); company re-resolved.
  update_skill_gap      sets gap data; APPENDS priority gaps to weak_areas
                        (duplicates with profile-derived areas are kept).
  add_interview_result  append-only history; a topic scored below the weak
                        threshold on technical depth is added to weak_areas
                        unless already present.
  reset_session         wholesale replacement with the empty default.

Every mutation and every snapshot runs under one re-entrant lock, so the
read-modify-write in add_interview_result / update_skill_gap stays atomic
when requests overlap.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Optional, Union

from career_copilot.config import PolicyConfig
from career_copilot.models import (
    CompanyProfile,
    InterviewResult,
    SessionStage,
    SessionState,
    SkillGapData,
    StudentProfile,
    get_company_profile,
)

logger = logging.getLogger(__name__)

CompanyLookup = Callable[[Optional[str]], Optional[CompanyProfile]]


class SessionStore:
    """Single-session state holder with controlled mutation operations."""

    def __init__(
        self,
        company_lookup: CompanyLookup = get_company_profile,
        policy: PolicyConfig | None = None,
    ) -> None:
        self._lookup = company_lookup
        self._policy = policy or PolicyConfig()
        self._lock   = threading.RLock()
        self._state  = SessionState()

    # ── Reads ────────────────────────────────────────────────────────────────

    def get_state(self) -> SessionState:
        """Deep copy of the current state; mutating it has no effect here."""
        with self._lock:
            return self._state.model_copy(deep=True)

    # ── Mutations ────────────────────────────────────────────────────────────

    def update_profile(self, profile: Union[StudentProfile, Mapping[str, Any]]) -> None:
        if not isinstance(profile, StudentProfile):
            profile = StudentProfile.model_validate(profile)

        company = self._lookup(profile.target_company)
        with self._lock:
            self._state.student_profile        = profile.model_copy(deep=True)
            self._state.target_company_profile = company
            self._state.weak_areas             = list(profile.missing_core_areas)
            self._state.strengths              = list(profile.inferred_strengths)

        if company is None:
            logger.info("Target company %r not in directory; readiness stays 0", profile.target_company)
        logger.debug(
            "Profile stored: %d weak areas, %d strengths",
            len(profile.missing_core_areas), len(profile.inferred_strengths),
        )

    def update_skill_gap(self, data: Union[SkillGapData, Mapping[str, Any]]) -> None:
        if not isinstance(data, SkillGapData):
            data = SkillGapData.model_validate(data)

        with self._lock:
            self._state.skill_gap_data = data.model_copy(deep=True)
            self._state.weak_areas     = [*self._state.weak_areas, *data.priority_gaps]

    def add_interview_result(self, result: Union[InterviewResult, Mapping[str, Any]]) -> None:
        if not isinstance(result, InterviewResult):
            result = InterviewResult.model_validate(result)

        with self._lock:
            self._state.interview_history.append(result)
            if result.evaluation.technical_depth < self._policy.weak_topic_threshold:
                if result.topic not in self._state.weak_areas:
                    self._state.weak_areas.append(result.topic)
                    logger.info("Weak topic recorded from interview: %s", result.topic)

    def update_readiness_score(self, score: int) -> None:
        with self._lock:
            self._state.readiness_score = int(score)

    def set_session_stage(self, stage: Union[SessionStage, str]) -> None:
        with self._lock:
            self._state.session_stage = SessionStage(stage)

    def reset_session(self) -> None:
        with self._lock:
            self._state = SessionState()
        logger.info("Session reset")
