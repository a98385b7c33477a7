"""Tests for booking-change intent handling."""

import asyncio
from datetime import datetime, timezone

from conversation.booking_change import (
    BookingChangeTracker,
    BookingSignal,
    KeywordBookingChangeDetector,
    is_comparison_question,
    is_pricing_question,
)


# ── Detector ──────────────────────────────────────────

class TestKeywordDetector:
    def test_change_with_booking_object(self, context):
        signal = asyncio.run(
            KeywordBookingChangeDetector().detect("Can I change my booking to Friday?", context)
        )
        assert signal.should_show_form
        assert signal.confidence == 0.9

    def test_comparison_is_confident_negative(self, context):
        signal = asyncio.run(
            KeywordBookingChangeDetector().detect("What's the difference between Saman and Sér?", context)
        )
        assert not signal.should_show_form
        assert signal.confidence == 0.9

    def test_change_verb_alone_is_weak(self, context):
        signal = asyncio.run(KeywordBookingChangeDetector().detect("I might cancel", context))
        assert not signal.should_show_form
        assert signal.confidence == 0.5

    def test_change_verb_with_prior_booking_intent(self, context):
        context.booking_context.has_intent = True
        signal = asyncio.run(KeywordBookingChangeDetector().detect("I need to postpone", context))
        assert signal.should_show_form
        assert signal.confidence == 0.75

    def test_agent_hours(self):
        detector = KeywordBookingChangeDetector()
        # 2026-10-19 is a Monday, 2026-10-17 a Saturday
        assert detector.is_within_agent_hours(datetime(2026, 10, 19, 10, tzinfo=timezone.utc))
        assert detector.is_within_agent_hours(datetime(2026, 10, 19, 17, tzinfo=timezone.utc))
        assert not detector.is_within_agent_hours(datetime(2026, 10, 17, 17, tzinfo=timezone.utc))
        assert not detector.is_within_agent_hours(datetime(2026, 10, 19, 8, tzinfo=timezone.utc))

    def test_question_helpers(self):
        assert is_comparison_question("Which one is better, Saman or Sér?")
        assert is_pricing_question("How much does it cost?")
        assert not is_pricing_question("How much does it cost to change my booking?")


# ── Merge & gate ──────────────────────────────────────

class TestBookingChangeTracker:
    def test_explicit_signal_sets_intent_and_shows_form(self, context):
        tracker = BookingChangeTracker()
        signal = BookingSignal(should_show_form=True, confidence=0.9)
        message = "I need to change my booking"

        assert tracker.merge(context, message, signal)
        decision = tracker.decide(context, signal, message)

        assert decision.should_show
        assert decision.reason == "explicit_signal"
        assert "booking_change" in context.topics

    def test_weak_signal_preserves_intent(self, context):
        tracker = BookingChangeTracker()
        tracker.merge(context, "I need to change my booking", BookingSignal(True, 0.9))

        weak = BookingSignal(False, 0.3)
        assert tracker.merge(context, "ok thanks", weak)
        decision = tracker.decide(context, weak, "ok thanks")
        assert decision.should_show
        assert decision.reason == "sustained_intent"

    def test_comparison_question_clears_intent(self, context):
        tracker = BookingChangeTracker()
        tracker.merge(context, "I need to change my booking", BookingSignal(True, 0.9))

        message = "What's the difference between Saman and Sér?"
        signal = BookingSignal(False, 0.9)
        assert not tracker.merge(context, message, signal)
        decision = tracker.decide(context, signal, message)
        assert not decision.should_show
        assert decision.reason == "no_intent"
        assert decision.confidence == 0.0

    def test_pricing_question_clears_even_weak_signal(self, context):
        tracker = BookingChangeTracker()
        tracker.merge(context, "I need to change my booking", BookingSignal(True, 0.9))
        assert not tracker.merge(context, "How much does it cost?", BookingSignal(False, 0.3))

    def test_package_discussion_vetoes(self, context):
        context.topics.append("packages")
        decision = BookingChangeTracker().decide(
            context, BookingSignal(True, 0.9), "Can I change to the Sér package?"
        )
        assert not decision.should_show
        assert decision.reason == "package_discussion"

    def test_pricing_message_vetoes_explicit_signal(self, context):
        decision = BookingChangeTracker().decide(context, BookingSignal(True, 0.9), "What are the prices?")
        assert not decision.should_show
        assert decision.reason == "pricing_question"

    def test_sustained_intent_below_threshold(self, context):
        tracker = BookingChangeTracker(show_confidence=0.8)
        tracker.merge(context, "I need to postpone", BookingSignal(True, 0.75))
        decision = tracker.decide(context, BookingSignal(False, 0.3), "ok")
        assert not decision.should_show

    def test_agent_hours_passed_through(self, context):
        decision = BookingChangeTracker().decide(
            context, BookingSignal(True, 0.9, is_within_agent_hours=False), "Change my booking please"
        )
        assert decision.should_show
        assert not decision.to_dict()["is_within_agent_hours"]

    def test_cleared_intent_stays_cleared_until_strong_positive(self, context):
        tracker = BookingChangeTracker()
        tracker.merge(context, "I need to change my booking", BookingSignal(True, 0.9))
        tracker.merge(context, "What's the difference between Saman and Sér?", BookingSignal(False, 0.9))

        for message in ("ok", "and the Sér one?", "thanks"):
            assert not tracker.merge(context, message, BookingSignal(False, 0.4))

        assert tracker.merge(context, "Please move my booking to Sunday", BookingSignal(True, 0.9))
