"""
Unit tests for data models: company directory, request payloads, envelope.
"""
import pytest
from pydantic import ValidationError

from career_copilot.models import (
    COMPANY_PROFILES,
    AgentAction,
    AgentOutput,
    InterviewRequest,
    PlanRequest,
    ProfileRequest,
    StudentProfile,
    get_company_profile,
)


class TestCompanyDirectory:

    def test_four_companies(self):
        assert set(COMPANY_PROFILES) == {"amazon", "google", "microsoft", "startup"}

    def test_google_weights(self):
        google = get_company_profile("Google")
        assert (google.technical_weight, google.behavioral_weight, google.difficulty_bias) == (0.8, 0.2, 1.2)

    def test_startup_display_name(self):
        assert get_company_profile("STARTUP").name == "High Growth Startup"

    @pytest.mark.parametrize("name", [None, "", "Initech"])
    def test_unknown_returns_none(self, name):
        assert get_company_profile(name) is None

    def test_profiles_are_frozen(self):
        with pytest.raises(Exception):
            COMPANY_PROFILES["amazon"].technical_weight = 1.0


class TestRequests:

    def test_profile_request_accepts_camel_case(self):
        req = ProfileRequest.model_validate({
            "resumeText": "cv", "declaredSkills": "Python, , Go ", "targetCompany": "Amazon",
        })
        assert req.resume_text == "cv"
        assert req.declared_skills == ["Python", "Go"]
        assert req.target_company == "Amazon"

    def test_profile_request_accepts_snake_case(self):
        req = ProfileRequest.model_validate({"resume_text": "cv", "declared_skills": ["Python"]})
        assert req.declared_skills == ["Python"]

    def test_interview_request_defaults(self):
        req = InterviewRequest.model_validate({})
        assert req.questions_asked == 0
        assert req.topics == []
        assert req.last_answer is None

    def test_interview_request_null_count(self):
        assert InterviewRequest.model_validate({"questionsAsked": None}).questions_asked == 0

    def test_interview_request_bad_count_rejected(self):
        with pytest.raises(ValidationError):
            InterviewRequest.model_validate({"questions_asked": "many"})

    def test_plan_request_default_horizon(self):
        assert PlanRequest.model_validate({}).time_horizon == "30 days"

    def test_unknown_keys_ignored(self):
        assert PlanRequest.model_validate({"timeHorizon": "2 weeks", "extra": 1}).time_horizon == "2 weeks"


class TestStudentProfile:

    def test_scores_bounded(self):
        with pytest.raises(ValidationError):
            StudentProfile(resume_score=11)

    def test_lists_flattened(self):
        p = StudentProfile(missing_core_areas={"a": ["x"], "b": "y"})
        assert p.missing_core_areas == ["x", "y"]


class TestAgentOutput:

    def test_to_dict_includes_decision(self):
        out = AgentOutput(success=True, data={"q": 1}, capability="InterviewAgent",
                          action=AgentAction.START_INTERVIEW.value)
        d = out.to_dict()
        assert d["decision"] == {"capability": "InterviewAgent", "action": "START_INTERVIEW"}
        assert "message" not in d

    def test_to_dict_includes_message_when_set(self):
        d = AgentOutput(success=False, message="LLM Error").to_dict()
        assert d["message"] == "LLM Error"
        assert d["success"] is False
