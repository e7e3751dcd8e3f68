"""
agent_trace.py — Lightweight audit log for orchestrator runs
=============================================================
Every dispatch through the Orchestrator emits an AgentStep record, collected
in the orchestrator's RunTrace.  The demo console renders it as a timeline.

Data model
----------
  AgentStep      One capability call: timing, status, decisions, warnings.
  RunTrace       All steps of a session; reset with the session.

Key fields
----------
  AgentStep.status          "success" | "fallback" | "failed" | "blocked"
  AgentStep.start_ms        Milliseconds since the trace started
  AgentStep.duration_ms     Wall-clock milliseconds for that capability
  AgentStep.decisions       Human-readable list of choices made on the way
  AgentStep.warnings        Guardrail warnings / non-fatal issues
  AgentStep.detail          status_code, guardrail codes, fallback flag
  RunTrace.mode             "live" | "mock"
"""

from __future__ import annotations

import datetime
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

STATUS_SUCCESS  = "success"
STATUS_FALLBACK = "fallback"
STATUS_FAILED   = "failed"
STATUS_BLOCKED  = "blocked"


@dataclass
class AgentStep:
    """One capability's contribution inside a session."""
    capability:  str
    action:      str
    start_ms:    float
    duration_ms: float
    status:      str               # "success" | "fallback" | "failed" | "blocked"
    decisions:   list[str] = field(default_factory=list)
    warnings:    list[str] = field(default_factory=list)
    detail:      dict[str, Any] = field(default_factory=dict)


@dataclass
class RunTrace:
    """Ordered trace of every dispatch in one session."""
    run_id:    str = field(default_factory=lambda: uuid.uuid4().hex[:8].upper())
    timestamp: str = field(default_factory=lambda: datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    mode:      str = "mock"
    steps:     list[AgentStep] = field(default_factory=list)
    _origin:   float = field(default_factory=time.perf_counter, repr=False)

    def now_ms(self) -> float:
        """Milliseconds elapsed since the trace was created."""
        return (time.perf_counter() - self._origin) * 1000

    def append(self, step: AgentStep) -> None:
        self.steps.append(step)

    @property
    def total_ms(self) -> float:
        return sum(s.duration_ms for s in self.steps)

    def by_status(self, status: str) -> list[AgentStep]:
        return [s for s in self.steps if s.status == status]

    def clear(self) -> None:
        self.steps.clear()
        self._origin = time.perf_counter()
