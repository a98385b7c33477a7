"""Tests for topic and intent tracking."""

from conversation.topic_tracker import TopicTracker


class TestTopicTracker:
    def test_first_topic(self, context):
        tracker = TopicTracker()
        new = tracker.update_topics(context, "Tell me about the ritual")
        assert new == ["ritual"]
        assert context.primary_intent == "ritual"
        assert context.last_topic == "ritual"

    def test_topics_are_added_once(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "Tell me about the ritual")
        new = tracker.update_topics(context, "Is the ritual included?")
        assert new == []
        assert context.topics == ["ritual"]

    def test_primary_intent_follows_table_order(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "How much is the ritual?")
        assert context.topics == ["ritual", "pricing"]
        assert context.primary_intent == "ritual"
        assert context.last_topic == "pricing"

    def test_no_match_clears_primary_intent(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "Tell me about the ritual")
        tracker.update_topics(context, "sounds nice")
        assert context.primary_intent is None
        assert context.last_topic == "ritual"

    def test_follow_up_builds_topic_chain(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "Tell me about the ritual")
        tracker.update_topics(context, "what about the steps?")
        assert context.active_topic_chain == ["ritual", "steps"]

    def test_chain_reset_when_topic_changes(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "Tell me about the ritual")
        tracker.update_topics(context, "what about the steps?")
        tracker.update_topics(context, "Do you have a restaurant?")
        assert context.last_topic == "dining"
        assert context.active_topic_chain == []

    def test_reference_memory_is_bounded(self, context):
        tracker = TopicTracker(reference_memory_size=2)
        for topic in ("ritual", "pricing", "dining"):
            tracker.set_last_topic(context, topic)
        assert context.reference_memory == ["pricing", "dining"]

    def test_contextual_reference(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "Tell me about the ritual")
        tracker.update_topics(context, "You mentioned something earlier")
        assert context.contextual_reference is not None
        assert context.contextual_reference.topic == "ritual"

    def test_time_context(self, context):
        tracker = TopicTracker()
        tracker.update_topics(context, "We booked for 18:00 and want dinner after the lagoon")
        assert context.time_context.booking_time == "18:00"
        assert context.time_context.last_discussed_time == "18:00"
        assert context.time_context.sequence == ["dinner", "lagoon"]

    def test_add_topic(self, context):
        tracker = TopicTracker()
        tracker.add_topic(context, "booking_change")
        tracker.add_topic(context, "booking_change")
        assert context.topics == ["booking_change"]
        assert context.last_topic == "booking_change"
