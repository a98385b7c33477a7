"""Tests for language detection."""

import pytest

from conversation.language_detector import LanguageDetector
from conversation.models import Confidence


@pytest.fixture
def detector():
    return LanguageDetector()


class TestLanguageDetector:
    def test_icelandic_characters_are_high_confidence(self, detector):
        decision = detector.detect("Hvað kostar að fara í lónið?")
        assert decision.is_target_language
        assert decision.confidence == Confidence.HIGH
        assert decision.language_code == "is"

    def test_english_sentence(self, detector):
        decision = detector.detect("What is the price of the Saman package?")
        assert not decision.is_target_language
        assert decision.confidence == Confidence.HIGH
        assert decision.language_code == "en"

    def test_brand_names_do_not_force_icelandic(self, detector):
        decision = detector.detect("Tell me about the Sér pass and Skjól ritual")
        assert not decision.is_target_language
        assert not detector.has_target_characters("Tell me about the Sér pass and Skjól ritual")

    def test_place_name_alone_is_undetermined(self, detector):
        decision = detector.detect("Kópavogur")
        assert decision.language_code == "auto"
        assert decision.confidence == Confidence.LOW

    def test_icelandic_acknowledgment_without_accents(self, detector):
        decision = detector.detect("takk!")
        assert decision.is_target_language
        assert decision.reason == "target_acknowledgment"

    def test_short_english_fragment_is_not_decided(self, detector):
        decision = detector.detect("ok")
        assert decision.language_code == "auto"
        assert not decision.is_high_confidence

    def test_strip_vocabulary_prefers_longest_name(self, detector):
        assert detector.strip_vocabulary("Is Sky Lagoon open?") == "is open?"

    def test_empty_message(self, detector):
        decision = detector.detect("")
        assert decision.language_code == "auto"
