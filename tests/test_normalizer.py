"""
Tests for the JSON extraction pipeline used on every model reply.
Run: python -m pytest tests/test_normalizer.py -v
"""
import json

import pytest

from career_copilot.normalizer import (
    UNPARSEABLE,
    extract_json_text,
    find_balanced_json,
    flatten_strings,
    parse_llm_json,
    parse_llm_object,
    repair_json_text,
    strip_code_fence,
)


class TestStripCodeFence:

    def test_json_fence_removed(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_removed(self):
        assert strip_code_fence('```\n[1, 2]\n```') == "[1, 2]"

    def test_text_not_starting_with_fence_untouched(self):
        text = 'Here you go: ```json {"a": 1}```'
        assert strip_code_fence(text) == text


class TestBalancedExtraction:

    def test_object_inside_prose(self):
        text = 'Sure! {"a": {"b": 2}} Hope that helps {"c": 3}'
        assert find_balanced_json(text) == '{"a": {"b": 2}}'

    def test_braces_inside_strings_ignored(self):
        text = 'x {"msg": "use } and { freely", "n": 1} y'
        assert json.loads(find_balanced_json(text)) == {"msg": "use } and { freely", "n": 1}

    def test_escaped_quote_inside_string(self):
        text = '{"q": "say \\"}\\" now"} trailing'
        assert json.loads(find_balanced_json(text)) == {"q": 'say "}" now'}

    def test_array_opening_counts_only_brackets(self):
        text = 'list: [{"a": 1}, {"b": 2}] done'
        assert find_balanced_json(text) == '[{"a": 1}, {"b": 2}]'

    def test_unbalanced_returns_none(self):
        assert find_balanced_json('{"a": 1') is None

    def test_no_json_falls_back_to_text(self):
        assert extract_json_text("no json here") == "no json here"


class TestRepair:

    def test_bare_day_range_quoted(self):
        assert repair_json_text('{"day": 2-5, "focus": "DP"}') == '{"day": "2-5", "focus": "DP"}'

    def test_week_range_with_spaces_quoted(self):
        assert repair_json_text('{"week": 1 - 2}') == '{"week": "1-2"}'

    def test_plain_numbers_untouched(self):
        assert repair_json_text('{"day": 3}') == '{"day": 3}'

    def test_other_keys_untouched(self):
        assert repair_json_text('{"score": 2-5}') == '{"score": 2-5}'


class TestParseLlmJson:

    @pytest.mark.parametrize("value", [
        {"resume_score": 7, "skills": ["Python", "Go"]},
        [1, "two", {"three": 3}],
        {"nested": {"a": [None, True, 1.5]}},
    ])
    def test_fenced_value_with_prose_recovered(self, value):
        text = "Here is the analysis:\n```json\n" + json.dumps(value) + "\n```\nLet me know!"
        assert parse_llm_json(text) == value

    def test_plan_with_bare_range_parses(self):
        reply = '{"daily_plan": [{"day": 1-3, "focus": "Graphs"}]}'
        assert parse_llm_json(reply) == {"daily_plan": [{"day": "1-3", "focus": "Graphs"}]}

    def test_garbage_is_unparseable(self):
        assert parse_llm_json("I could not do that, sorry.") is UNPARSEABLE

    def test_scalar_parses_only_as_the_whole_reply(self):
        assert parse_llm_json("42") == 42
        assert parse_llm_json("```json\n42\n```") == 42
        assert parse_llm_json("The score is 42.") is UNPARSEABLE

    @pytest.mark.parametrize("value", [None, "", "   ", 42])
    def test_empty_or_non_string_is_unparseable(self, value):
        assert parse_llm_json(value) is UNPARSEABLE

    def test_unparseable_is_falsy(self):
        assert not UNPARSEABLE

    def test_parse_object_rejects_array(self):
        assert parse_llm_object("[1, 2, 3]") is None

    def test_parse_object_accepts_object(self):
        assert parse_llm_object('ok {"a": 1}') == {"a": 1}


class TestFlattenStrings:

    def test_category_map_flattened_in_order(self):
        value = {"frontend": ["React"], "backend": ["Node"]}
        assert flatten_strings(value) == ["React", "Node"]

    def test_bare_string_wrapped(self):
        assert flatten_strings("System Design") == ["System Design"]

    def test_nested_lists_and_strings(self):
        assert flatten_strings(["a", ["b", {"x": "c"}]]) == ["a", "b", "c"]

    @pytest.mark.parametrize("value", [None, "", "  ", True, object()])
    def test_unusable_values_give_empty_list(self, value):
        assert flatten_strings(value) == []

    def test_numbers_become_strings(self):
        assert flatten_strings([1, 2.5]) == ["1", "2.5"]
