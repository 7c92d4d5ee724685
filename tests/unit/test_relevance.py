"""Tests for the visual-relevance filters."""
import pytest

from promptspans.labeling.processing.relevance import (
    RelevanceRules,
    filter_headers,
    filter_non_visual_spans,
    filter_visual_relevance,
    is_likely_header,
)
from promptspans.labeling.types import DropReason


def _at(make_span, text, needle, role="style", occurrence=0):
    start = -1
    for _ in range(occurrence + 1):
        start = text.index(needle, start + 1)
    return make_span(needle, start, role, 0.8, source_text=text)


class TestHeaderDetection:

    @pytest.mark.parametrize("text", ["## Camera", "Camera:", "**Lighting**", "__Style__:", "a", "  ", "Shot type:"])
    def test_headers(self, text):
        assert is_likely_header(text)

    @pytest.mark.parametrize("text", ["Soft lighting", "Lighting", "A man walks along the beach:"])
    def test_not_headers(self, text):
        assert not is_likely_header(text)

    def test_label_word_limit_is_configurable(self):
        assert not is_likely_header("Main camera setup:", RelevanceRules(label_word_limit=2))
        assert is_likely_header("Main camera setup:")


class TestFilterHeaders:

    def test_standalone_header_word_on_own_line(self, make_span):
        text = "Lighting\nSoft lighting falls across the room."
        spans = [
            _at(make_span, text, "Lighting", "lighting"),
            _at(make_span, text, "Soft lighting", "lighting.quality"),
        ]
        result = filter_headers(spans, text)
        assert [s.text for s in result.spans] == ["Soft lighting"]
        assert result.notes == ['Dropped header/label "Lighting"']
        assert result.dropped[0].reason is DropReason.HEADER

    def test_header_word_inside_sentence_kept(self, make_span):
        text = "Soft lighting falls across the room."
        span = _at(make_span, text, "lighting", "lighting")
        assert filter_headers([span], text).spans == [span]

    def test_without_text_only_shape_checks(self, make_span):
        span = make_span("Lighting", 0, "lighting")
        assert len(filter_headers([span]).spans) == 1

    def test_bold_marker_context(self, make_span):
        text = "**Camera:** slow dolly in"
        spans = [_at(make_span, text, "Camera", "camera"), _at(make_span, text, "slow dolly in", "camera.movement")]
        assert [s.text for s in filter_headers(spans, text).spans] == ["slow dolly in"]

    def test_markdown_heading_span(self, make_span):
        text = "## Camera\nHandheld."
        span = _at(make_span, text, "## Camera", "camera")
        assert filter_headers([span], text).spans == []


class TestNonVisual:

    def test_variation_label_dropped(self, make_span):
        text = "A hero stands tall.\n\nVariation 1 (Alternate Angle): low angle view of the hero."
        spans = [
            _at(make_span, text, "Alternate Angle", "camera.angle"),
            _at(make_span, text, "low angle", "camera.angle"),
        ]
        result = filter_non_visual_spans(spans, text)
        assert [s.text for s in result.spans] == ["low angle"]
        assert result.notes == ['Dropped variation-header span "Alternate Angle"']
        assert result.dropped[0].reason is DropReason.VARIATION_HEADER

    def test_dashed_variation_label(self, make_span):
        text = "Variation 2 - Night: glowing neon signs"
        spans = [_at(make_span, text, "Night", "lighting.timeOfDay"), _at(make_span, text, "glowing neon", "lighting.source")]
        assert [s.text for s in filter_non_visual_spans(spans, text).spans] == ["glowing neon"]

    def test_style_reference_dropped(self, make_span):
        text = "A sunset inspired by Wes Anderson, pastel tones."
        spans = [_at(make_span, text, "Wes Anderson", "style.aesthetic"), _at(make_span, text, "pastel tones", "style.colorGrade")]
        result = filter_non_visual_spans(spans, text)
        assert [s.text for s in result.spans] == ["pastel tones"]
        assert result.notes == ['Dropped style-reference span "Wes Anderson"']
        assert result.dropped[0].reason is DropReason.STYLE_REFERENCE

    def test_lowercase_after_cue_kept(self, make_span):
        text = "Lighting in the style of film noir."
        span = _at(make_span, text, "film noir", "style.aesthetic")
        assert filter_non_visual_spans([span], text).spans == [span]

    def test_meta_label_dropped(self, make_span):
        text = "Main Action: a dog running fast through tall grass."
        spans = [_at(make_span, text, "Main Action", "action"), _at(make_span, text, "running fast", "action.movement")]
        result = filter_non_visual_spans(spans, text)
        assert [s.text for s in result.spans] == ["running fast"]
        assert result.dropped[0].reason is DropReason.NON_VISUAL

    def test_meta_label_in_alternatives_section_kept(self, make_span):
        text = "A cat naps.\n\nAlternatives:\n1. The cat wakes and stretches, main action centered."
        span = _at(make_span, text, "main action", "action")
        assert filter_non_visual_spans([span], text).spans == [span]

    def test_meta_label_outside_alternatives_dropped(self, make_span):
        text = "A cat naps, main action centered."
        span = _at(make_span, text, "main action", "action")
        assert filter_non_visual_spans([span], text).spans == []

    def test_empty(self):
        result = filter_non_visual_spans([], "anything")
        assert result.spans == []
        assert result.notes == []


def test_filter_visual_relevance_combines_stages(make_span):
    text = "Main Action: a dog running fast, inspired by Wes Anderson.\nVariation 1 (Wide): glowing neon"
    spans = [
        _at(make_span, text, "Main Action", "action"),
        _at(make_span, text, "running fast", "action.movement"),
        _at(make_span, text, "Wes Anderson", "style.aesthetic"),
        _at(make_span, text, "Wide", "shot.type"),
        _at(make_span, text, "glowing neon", "lighting.source"),
    ]
    result = filter_visual_relevance(spans, text)
    assert [s.text for s in result.spans] == ["running fast", "glowing neon"]
    assert [d.reason for d in result.dropped] == [
        DropReason.HEADER,
        DropReason.STYLE_REFERENCE,
        DropReason.VARIATION_HEADER,
    ]
    assert len(result.notes) == 3
