"""Tests for the closed-vocabulary matcher and technical patterns."""
import logging

import pytest

from promptspans.labeling.errors import VocabularyError
from promptspans.labeling.types import SpanSource
from promptspans.labeling.vocab.matcher import ClosedVocabularyMatcher, fold_case
from promptspans.labeling.vocab.patterns import extract_technical_spans


@pytest.fixture(scope="module")
def matcher():
    from promptspans.labeling.taxonomy.registry import load_default_taxonomy

    return ClosedVocabularyMatcher(load_default_taxonomy())


def _found(spans):
    return {(s.text, s.role) for s in spans}


class TestClosedVocabulary:
    """Whole-word, case-insensitive term matching."""

    def test_case_insensitive_offsets_from_source(self, matcher):
        text = "A GOLDEN HOUR close-up"
        spans = matcher.find_terms(text)
        assert ("GOLDEN HOUR", "lighting.timeOfDay") in _found(spans)
        hit = next(s for s in spans if s.role == "lighting.timeOfDay")
        assert text[hit.start:hit.end] == hit.text
        assert hit.confidence == 1.0
        assert hit.source is SpanSource.CLOSED_VOCABULARY

    def test_rejects_substring_of_larger_word(self, matcher):
        assert not any(s.text.lower() == "rain" for s in matcher.find_terms("Rainbow over the bay"))
        assert not any(s.text.lower() == "night" for s in matcher.find_terms("nightly news"))

    def test_all_overlapping_terms_reported(self, matcher):
        spans = matcher.find_terms("extreme close-up of an eye")
        texts = {s.text for s in spans}
        assert {"extreme close-up", "close-up"} <= texts

    def test_ambiguous_camera_term_needs_context(self, matcher):
        assert not any(s.role == "camera.movement" for s in matcher.find_terms("Fry eggs in a pan"))
        spans = matcher.find_terms("Slow pan across the city skyline, cinematic shot")
        assert ("pan", "camera.movement") in _found(spans)

    def test_ambiguous_camera_term_after_cooking_word(self, matcher):
        spans = matcher.find_terms("frying pan on the stove, video shot")
        assert ("pan", "camera.movement") not in _found(spans)

    def test_sorted_by_position(self, matcher, sample_prompt):
        spans = matcher.match(sample_prompt)
        keys = [(s.start, -s.end) for s in spans]
        assert keys == sorted(keys)

    def test_empty_text(self, matcher):
        assert matcher.match("") == []

    def test_unregistered_vocabulary_role(self, taxonomy):
        with pytest.raises(VocabularyError):
            ClosedVocabularyMatcher(taxonomy, {"camera.gimbal": ["gimbal"]})

    def test_duplicate_term_keeps_first_category(self, taxonomy, caplog):
        with caplog.at_level(logging.WARNING, logger="promptspans"):
            m = ClosedVocabularyMatcher(taxonomy, {"camera.lens": ["macro"], "shot.type": ["Macro"]})
        assert "Macro" in caplog.text
        assert m.vocabulary_stats()["byCategory"] == {"camera.lens": 1, "shot.type": 0}
        assert _found(m.find_terms("macro view")) == {("macro", "camera.lens")}

    def test_empty_vocabulary_matches_nothing(self, taxonomy):
        m = ClosedVocabularyMatcher(taxonomy, {})
        assert m.find_terms("golden hour") == []

    def test_estimate_coverage(self, matcher):
        assert matcher.estimate_coverage("golden hour") == 100
        assert matcher.estimate_coverage("a man at golden hour") == 40
        assert matcher.estimate_coverage("nothing known here") == 0
        assert matcher.estimate_coverage("") == 0
        assert matcher.estimate_coverage("   ") == 0

    def test_vocabulary_stats(self, matcher):
        stats = matcher.vocabulary_stats()
        assert stats["totalTerms"] == sum(stats["byCategory"].values())
        assert stats["byCategory"]["shot.type"] > 0
        assert "frame_rate" in stats["patterns"]

    def test_fold_case_keeps_length(self):
        text = "İstanbul STREET"
        assert len(fold_case(text)) == len(text)
        assert fold_case("ABC") == "abc"


class TestTechnicalPatterns:
    """Numeric/technical spec extraction."""

    def _roles(self, text):
        return {(text[s:e], role) for s, e, role, _ in extract_technical_spans(text)}

    def test_frame_rate(self):
        assert ("24fps", "technical.frameRate") in self._roles("shot at 24fps")
        assert ("30 frames per second", "technical.frameRate") in self._roles("30 frames per second")

    def test_duration(self):
        assert ("5 seconds", "technical.duration") in self._roles("a 5 seconds clip")
        assert ("8s", "technical.duration") in self._roles("8s loop")

    @pytest.mark.parametrize("text", [
        "1990s fashion",
        "a 90s aesthetic",
        "80s synth-pop vibe",
        "neon signs from the 80s",
        "a '70s film look",
        "mid-60s decor",
    ])
    def test_decade_is_not_a_duration(self, text):
        assert not any(r == "technical.duration" for _, r in self._roles(text))

    def test_round_seconds_still_a_duration(self):
        assert ("30s", "technical.duration") in self._roles("a 30s clip")
        assert ("90s", "technical.duration") in self._roles("loop for 90s")

    def test_resolution(self):
        roles = self._roles("Render in 4K, 1080p or 1920x1080")
        assert ("4K", "technical.resolution") in roles
        assert ("1080p", "technical.resolution") in roles
        assert ("1920x1080", "technical.resolution") in roles

    def test_aspect_ratio_whitelist(self):
        assert ("16:9", "technical.aspectRatio") in self._roles("16:9")
        assert ("2.39:1", "technical.aspectRatio") in self._roles("2.39:1 scope")

    def test_aspect_ratio_needs_cue_when_uncommon(self):
        assert not any(r == "technical.aspectRatio" for _, r in self._roles("meet at 10:30 tomorrow"))
        assert ("5:3", "technical.aspectRatio") in self._roles("a 5:3 aspect")

    def test_lens_rejected_before_film(self):
        assert ("50mm", "camera.lens") in self._roles("50mm lens")
        assert not any(r == "camera.lens" for _, r in self._roles("shot on 35mm film"))

    def test_aperture(self):
        assert ("f/1.8", "camera.focus") in self._roles("wide open at f/1.8")

    def test_color_temperature_range(self):
        assert ("5600K", "lighting.colorTemp") in self._roles("5600K daylight")
        assert not any(r == "lighting.colorTemp" for _, r in self._roles("a 50000K star"))

    def test_pattern_confidence(self):
        found = extract_technical_spans("24fps, 3 seconds")
        confidences = {role: conf for _, _, role, conf in found}
        assert confidences["technical.frameRate"] == 0.95
        assert confidences["technical.duration"] == 0.85

    def test_matcher_pattern_spans(self, matcher):
        spans = matcher.find_technical("24fps")
        assert len(spans) == 1
        assert spans[0].source is SpanSource.PATTERN
        assert spans[0].text == "24fps"
