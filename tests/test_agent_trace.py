"""
Tests for AgentStep / RunTrace and the trace the orchestrator records.
"""
from factories import make_orchestrator, profile_payload

from career_copilot.agent_trace import AgentStep, RunTrace
from career_copilot.llm import LLMError, MockLLMClient


class TestRunTrace:

    def test_total_is_sum_of_steps(self):
        trace = RunTrace()
        trace.append(AgentStep("A", "X", 0, 10.0, "success"))
        trace.append(AgentStep("B", "Y", 10, 5.5, "failed"))
        assert trace.total_ms == 15.5
        assert [s.capability for s in trace.by_status("failed")] == ["B"]

    def test_run_ids_differ(self):
        assert RunTrace().run_id != RunTrace().run_id

    def test_clear(self):
        trace = RunTrace()
        trace.append(AgentStep("A", "X", 0, 1, "success"))
        trace.clear()
        assert trace.steps == []


class TestOrchestratorTrace:

    def test_success_step_recorded(self):
        orch = make_orchestrator()
        orch.process_action("ANALYZE_PROFILE", profile_payload())
        step = orch.trace.steps[-1]
        assert step.capability == "ProfileAnalyzerAgent"
        assert step.action == "ANALYZE_PROFILE"
        assert step.status == "success"
        assert step.duration_ms >= 0

    def test_blocked_step_recorded_with_warning(self):
        orch = make_orchestrator()
        orch.process_action("ANALYZE_PROFILE", profile_payload(resumeText=""))
        step = orch.trace.steps[-1]
        assert step.status == "blocked"
        assert any("G-01" in w for w in step.warnings)

    def test_unknown_action_recorded_as_blocked(self):
        orch = make_orchestrator()
        orch.process_action("BOGUS", {})
        assert orch.trace.steps[-1].status == "blocked"

    def test_fallback_status(self):
        orch = make_orchestrator(fast=MockLLMClient(error=LLMError("down")))
        orch.process_action("START_INTERVIEW", {})
        assert orch.trace.steps[-1].status == "fallback"

    def test_failed_status(self):
        orch = make_orchestrator(fast=MockLLMClient(overrides={"profile": "nope"}))
        orch.process_action("ANALYZE_PROFILE", profile_payload())
        assert orch.trace.steps[-1].status == "failed"

    def test_mode_is_mock_in_tests(self):
        assert make_orchestrator().trace.mode == "mock"

    def test_detail_carries_status_and_guardrail_codes(self):
        orch = make_orchestrator()
        orch.process_action("ANALYZE_PROFILE", profile_payload(targetCompany="Initech"))
        detail = orch.trace.steps[-1].detail
        assert detail == {"status_code": 200, "guardrails": ["G-02"], "fallback": False}

    def test_detail_marks_fallback(self):
        orch = make_orchestrator(fast=MockLLMClient(error=LLMError("down")))
        orch.process_action("START_INTERVIEW", {})
        assert orch.trace.steps[-1].detail["fallback"] is True

    def test_blocked_detail_is_400(self):
        orch = make_orchestrator()
        orch.process_action("ANALYZE_PROFILE", profile_payload(resumeText=""))
        assert orch.trace.steps[-1].detail["status_code"] == 400

    def test_info_noted_in_decisions_not_warnings(self):
        orch = make_orchestrator()
        orch.process_action("START_INTERVIEW", {"difficulty": "insane"})
        step = orch.trace.steps[-1]
        assert step.detail["guardrails"] == ["G-06"]
        assert step.warnings == []
        assert any(d.startswith("[G-06]") for d in step.decisions)
