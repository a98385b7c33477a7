"""Tests for rule-based retrieval."""

import re

import pytest

from knowledge import CONTENT_EN, CONTENT_IS
from retrieval.rule_matcher import RuleMatcher
from retrieval.rules import Rule


@pytest.fixture
def matcher(content_store):
    return RuleMatcher(content_store)


class TestRuleMatcher:
    def test_pricing_question_returns_packages_once(self, matcher, context):
        fragments = matcher.match("How much does the Saman package cost?", context)
        assert [f.type for f in fragments] == ["packages"]
        assert fragments[0].content == CONTENT_EN["packages"]
        assert fragments[0].metadata["rule"] == "pricing"

    def test_comparison_is_exclusive(self, matcher, context):
        fragments = matcher.match("What is the difference between Saman and Sér? How much are they?", context)
        assert len(fragments) == 1
        assert fragments[0].subtype == "comparison"
        assert set(fragments[0].content) == {"packages", "facilities.changing_rooms"}

    def test_same_input_same_output(self, matcher, context):
        message = "What are your opening hours and is there a bus?"
        first = [f.to_dict() for f in matcher.match(message, context)]
        second = [f.to_dict() for f in matcher.match(message, context)]
        assert first == second
        assert [f["type"] for f in first] == ["opening_hours", "transportation"]

    def test_late_arrival_from_context(self, matcher, context):
        context.late_arrival_context.is_late = True
        fragments = matcher.match("Will I still get in?", context)
        assert fragments[0].subtype == "late_arrival"
        assert "policies.late_arrival" in fragments[0].content

    def test_icelandic_session_uses_icelandic_content(self, matcher, context):
        context.language = "is"
        fragments = matcher.match("Hvað kostar?", context)
        assert fragments[0].content == CONTENT_IS["packages"]
        assert fragments[0].metadata["locale"] == "is"

    def test_missing_icelandic_section_falls_back_to_english(self, matcher, context):
        context.language = "is"
        fragments = matcher.match("Do you take group bookings?", context)
        assert "group_bookings" not in CONTENT_IS
        assert fragments[0].type == "group_bookings"
        assert fragments[0].content == CONTENT_EN["group_bookings"]

    def test_no_match(self, matcher, context):
        assert matcher.match("hello there", context) == []

    def test_missing_section_is_skipped(self, content_store, context):
        rules = [Rule(name="ghost", sections=("nonexistent",), fragment_type="ghost",
                      pattern=re.compile("boo"))]
        assert RuleMatcher(content_store, rules=rules).match("boo", context) == []

    def test_rule_without_pattern_or_predicate_never_matches(self, context):
        assert not Rule(name="empty", sections=("packages",), fragment_type="packages").matches("x", context)
