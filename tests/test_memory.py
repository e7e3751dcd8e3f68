"""
Tests for SessionStore update rules and snapshot isolation.
"""
import threading

from factories import make_profile, make_result, make_store

from career_copilot.config import PolicyConfig
from career_copilot.models import SessionStage, SkillGapData


class TestSnapshots:

    def test_empty_default(self, store):
        state = store.get_state()
        assert state.student_profile is None
        assert state.interview_history == []
        assert state.readiness_score == 0
        assert state.session_stage == SessionStage.PROFILE_ANALYSIS

    def test_mutating_snapshot_does_not_touch_store(self, google_store):
        snap = google_store.get_state()
        snap.weak_areas.append("Injected")
        snap.student_profile.declared_skills.append("Cobol")
        fresh = google_store.get_state()
        assert "Injected" not in fresh.weak_areas
        assert "Cobol" not in fresh.student_profile.declared_skills


class TestUpdateProfile:

    def test_company_resolved_case_insensitively(self, store):
        store.update_profile(make_profile(target_company="  gOOgle "))
        assert store.get_state().target_company_profile.id == "google"

    def test_unknown_company_tolerated(self, store):
        store.update_profile(make_profile(target_company="Initech"))
        assert store.get_state().target_company_profile is None

    def test_weak_areas_and_strengths_derived(self, store):
        store.update_profile(make_profile(missing=["DP"], strengths=["APIs"]))
        state = store.get_state()
        assert state.weak_areas == ["DP"]
        assert state.strengths == ["APIs"]

    def test_full_replace_is_idempotent(self, store):
        profile = make_profile()
        store.update_profile(profile)
        once = store.get_state()
        store.update_profile(profile)
        twice = store.get_state()
        assert once.weak_areas == twice.weak_areas
        assert once.strengths == twice.strengths

    def test_second_profile_discards_previous_weak_areas(self, store):
        store.update_profile(make_profile(missing=["DP"]))
        store.update_skill_gap(SkillGapData(priority_gaps=["Caching"]))
        store.update_profile(make_profile(missing=["Testing"]))
        assert store.get_state().weak_areas == ["Testing"]

    def test_categorised_missing_areas_flattened(self, store):
        store.update_profile(make_profile(missing={"frontend": ["React"], "backend": ["Node"]}))
        assert store.get_state().weak_areas == ["React", "Node"]

    def test_bare_string_missing_area(self, store):
        store.update_profile(make_profile(missing="System Design"))
        assert store.get_state().weak_areas == ["System Design"]

    def test_mapping_accepted(self, store):
        store.update_profile({"target_company": "Amazon", "missing_core_areas": ["OOP"]})
        state = store.get_state()
        assert state.target_company_profile.name == "Amazon"
        assert state.weak_areas == ["OOP"]


class TestUpdateSkillGap:

    def test_priority_gaps_appended_with_duplicates(self, store):
        store.update_profile(make_profile(missing=["System Design"]))
        store.update_skill_gap(SkillGapData(priority_gaps=["System Design", "DP"]))
        assert store.get_state().weak_areas == ["System Design", "System Design", "DP"]

    def test_gap_data_stored(self, store):
        store.update_skill_gap({"readiness_percentage": 65, "priority_gaps": {"dsa": ["DP"]}})
        gaps = store.get_state().skill_gap_data
        assert gaps.readiness_percentage == 65
        assert gaps.priority_gaps == ["DP"]


class TestAddInterviewResult:

    def test_history_is_append_only(self, store):
        for i in range(3):
            store.add_interview_result(make_result(topic=f"T{i}"))
            assert len(store.get_state().interview_history) == i + 1

    def test_low_depth_topic_becomes_weak_area(self, store):
        store.add_interview_result(make_result(topic="Graphs", technical_depth=5))
        assert store.get_state().weak_areas == ["Graphs"]

    def test_weak_topic_deduplicated(self, store):
        store.add_interview_result(make_result(topic="Graphs", technical_depth=3))
        store.add_interview_result(make_result(topic="Graphs", technical_depth=2))
        assert store.get_state().weak_areas == ["Graphs"]

    def test_depth_at_threshold_not_weak(self, store):
        store.add_interview_result(make_result(topic="Graphs", technical_depth=6))
        assert store.get_state().weak_areas == []

    def test_threshold_comes_from_policy(self):
        s = make_store(PolicyConfig(weak_topic_threshold=8))
        s.add_interview_result(make_result(topic="Graphs", technical_depth=7))
        assert s.get_state().weak_areas == ["Graphs"]

    def test_result_ids_unique(self, store):
        ids = {make_result().id for _ in range(50)}
        assert len(ids) == 50

    def test_concurrent_adds_keep_every_result(self, store):
        def worker():
            for _ in range(25):
                store.add_interview_result(make_result(topic="Graphs", technical_depth=1))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        state = store.get_state()
        assert len(state.interview_history) == 100
        assert state.weak_areas == ["Graphs"]


class TestStageAndReset:

    def test_stage_accepts_string(self, store):
        store.set_session_stage("INTERVIEW")
        assert store.get_state().session_stage == SessionStage.INTERVIEW

    def test_readiness_score_cached(self, store):
        store.update_readiness_score(42)
        assert store.get_state().readiness_score == 42

    def test_reset_discards_everything(self, google_store):
        google_store.add_interview_result(make_result())
        google_store.set_session_stage(SessionStage.PLANNING)
        google_store.reset_session()
        state = google_store.get_state()
        assert state.student_profile is None
        assert state.interview_history == []
        assert state.weak_areas == []
        assert state.session_stage == SessionStage.PROFILE_ANALYSIS
