"""
career_copilot — Career Readiness Multi-Agent Copilot
======================================================
Package containing the shared session store, the readiness engine, the
orchestration policy, the LLM response normaliser and the four agents
that run around them.

Module map
----------
  models.py                    Session state, request payloads, enums and
                               the static company directory.
  config.py                    Settings loaded from .env (providers, policy).
  normalizer.py                JSON extraction from free-form model replies.
  reconcile.py                 Table-driven reconciliation of LLM field names
                               into the canonical parsed outputs.
  memory.py                    SessionStore: the only cross-agent memory.
  readiness.py                 ReadinessEngine: 0–100 score from state.
  llm.py                       OpenAI-compatible + mock LLM clients.
  guardrails.py                Payload guardrails run before dispatch.
  agent_trace.py               AgentStep / RunTrace audit log.

  b0_profile_agent.py          Block 0: Profile analysis.
  b1_skill_gap_agent.py        Block 1: Skill-gap analysis vs company.
  b2_interview_agent.py        Block 2: Agentic mock interviewer.
  b3_career_planner_agent.py   Block 3: Company-oriented roadmap.
  orchestrator.py              Action dispatch + autonomous stepping.

Pipeline order
--------------
  ANALYZE_PROFILE (B0) → ANALYZE_GAPS (B1)
  → START_INTERVIEW / ANSWER_QUESTION (B2) while readiness < 70,
    at most 5 rounds
  → GENERATE_PLAN (B3) → COMPLETED
"""
__version__ = "0.1.0"
