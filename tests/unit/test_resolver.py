"""Tests for deduplication and overlap resolution."""
import random

from promptspans.labeling.processing.resolver import (
    OverlapStrategy,
    TieBreakOrder,
    deduplicate_spans,
    merge_span_lists,
    resolve_overlaps,
)
from promptspans.labeling.types import SpanSource


class TestDeduplicate:

    def test_duplicate_removed_with_note(self, make_span):
        result = deduplicate_spans([make_span("alpha", 0), make_span("alpha", 0)])
        assert len(result.spans) == 1
        assert result.notes == ["span[1] ignored: duplicate span"]

    def test_non_adjacent_duplicate(self, make_span):
        result = deduplicate_spans([make_span("alpha", 0), make_span("beta", 6), make_span("alpha", 0)])
        assert [s.text for s in result.spans] == ["alpha", "beta"]
        assert result.notes == ["span[2] ignored: duplicate span"]

    def test_keeps_highest_confidence_in_first_position(self, make_span):
        result = deduplicate_spans([
            make_span("alpha", 0, confidence=0.3),
            make_span("beta", 6),
            make_span("alpha", 0, confidence=0.9),
        ])
        assert [(s.text, s.confidence) for s in result.spans] == [("alpha", 0.9), ("beta", 0.5)]

    def test_same_text_different_position_kept(self, make_span):
        assert len(deduplicate_spans([make_span("alpha", 0), make_span("alpha", 10)]).spans) == 2


class TestResolveOverlaps:

    def test_allow_overlaps_returns_input_list(self, make_span):
        spans = [make_span("Hero", 0, "subject")]
        result = resolve_overlaps(spans, allow_overlaps=True)
        assert result.spans is spans
        assert result.notes == []

    def test_different_parents_coexist(self, make_span):
        spans = [make_span("Hero", 0, "subject.identity"), make_span("runs", 1, "action.movement", 0.6)]
        result = resolve_overlaps(spans)
        assert len(result.spans) == 2
        assert result.notes == []

    def test_specificity_beats_confidence(self, make_span):
        # "man" as subject (0.9) vs subject.identity (0.2)
        spans = [make_span("man", 0, "subject", 0.9), make_span("man", 0, "subject.identity", 0.2)]
        result = resolve_overlaps(spans)
        assert [s.role for s in result.spans] == ["subject.identity"]

    def test_longest_match_same_specificity(self, make_span):
        spans = [make_span("blue", 0, "style", 0.2), make_span("blue light", 0, "style", 0.9)]
        assert [s.text for s in resolve_overlaps(spans).spans] == ["blue light"]

    def test_overlap_note(self, make_span):
        spans = [make_span("cat", 0, "subject", 0.4), make_span("cat portrait", 0, "subject", 0.8)]
        result = resolve_overlaps(spans)
        assert len(result.spans) == 1
        assert len(result.notes) == 1
        assert 'kept "cat portrait"' in result.notes[0]

    def test_highest_confidence_strategy(self, make_span):
        spans = [make_span("blue", 0, "style", 0.9), make_span("blue light", 0, "style", 0.4)]
        longest = resolve_overlaps(spans, strategy=OverlapStrategy.LONGEST_MATCH)
        confident = resolve_overlaps(spans, strategy=OverlapStrategy.HIGHEST_CONFIDENCE)
        assert [s.text for s in longest.spans] == ["blue light"]
        assert [s.text for s in confident.spans] == ["blue"]

    def test_source_priority(self, make_span):
        spans = [
            make_span("dolly", 0, "camera.movement", 1.0, SpanSource.CLOSED_VOCABULARY),
            make_span("dolly in", 0, "camera.movement", 0.9, SpanSource.ML_TAGGER),
        ]
        assert [s.text for s in resolve_overlaps(spans).spans] == ["dolly"]
        off = resolve_overlaps(spans, closed_vocab_priority=False)
        assert [s.text for s in off.spans] == ["dolly in"]

    def test_tie_break_order(self, make_span):
        spans = [
            make_span("camera", 0, "camera", 1.0, SpanSource.PATTERN),
            make_span("camera", 0, "camera.angle", 0.5, SpanSource.FALLBACK),
        ]
        source_first = resolve_overlaps(spans, tie_break_order=TieBreakOrder.SOURCE_FIRST)
        specificity_first = resolve_overlaps(spans, tie_break_order=TieBreakOrder.SPECIFICITY_FIRST)
        assert [s.role for s in source_first.spans] == ["camera"]
        assert [s.role for s in specificity_first.spans] == ["camera.angle"]

    def test_earlier_start_wins_full_tie(self, make_span):
        spans = [make_span("bcd", 1, "style", 0.5), make_span("abc", 0, "style", 0.5)]
        assert [s.text for s in resolve_overlaps(spans).spans] == ["abc"]

    def test_longer_span_beats_contained_spans(self, make_span):
        spans = [
            make_span("red", 0, "style", 0.9),
            make_span("car", 4, "style", 0.9),
            make_span("red car chase", 0, "style", 0.5),
        ]
        result = resolve_overlaps(spans)
        assert [s.text for s in result.spans] == ["red car chase"]
        assert len(result.notes) == 2

    def test_empty(self):
        result = resolve_overlaps([])
        assert result.spans == []
        assert result.notes == []


def _random_spans(make_span, seed):
    rng = random.Random(seed)
    roles = ["subject", "subject.identity", "camera", "camera.movement", "style.aesthetic"]
    spans = []
    for _ in range(30):
        start = rng.randrange(0, 60)
        length = rng.randrange(1, 12)
        spans.append(make_span(
            "x" * length, start, rng.choice(roles), round(rng.random(), 2),
            rng.choice(list(SpanSource)), source_text="fixed",
        ))
    return spans


class TestResolverProperties:

    def test_no_same_parent_overlaps(self, make_span):
        for seed in range(20):
            resolved = resolve_overlaps(_random_spans(make_span, seed)).spans
            for i, a in enumerate(resolved):
                for b in resolved[i + 1:]:
                    if a.parent == b.parent:
                        assert a.end <= b.start or b.end <= a.start

    def test_sorted_output(self, make_span):
        for seed in range(20):
            resolved = resolve_overlaps(_random_spans(make_span, seed)).spans
            keys = [(s.start, -s.end) for s in resolved]
            assert keys == sorted(keys)

    def test_idempotent(self, make_span):
        for seed in range(20):
            once = resolve_overlaps(_random_spans(make_span, seed)).spans
            twice = resolve_overlaps(once)
            assert twice.spans == once
            assert twice.notes == []

    def test_order_independent(self, make_span):
        spans = _random_spans(make_span, 7)
        shuffled = list(spans)
        random.Random(1).shuffle(shuffled)
        assert resolve_overlaps(spans).spans == resolve_overlaps(shuffled).spans


def test_merge_span_lists(make_span):
    vocab = [make_span("golden hour", 10, "lighting.timeOfDay", 1.0, SpanSource.CLOSED_VOCABULARY)]
    tagged = [
        make_span("golden hour", 10, "lighting.timeOfDay", 0.7),
        make_span("golden", 10, "lighting", 0.9),
        make_span("man", 0, "subject", 0.8),
    ]
    result = merge_span_lists(vocab, tagged)
    assert [(s.text, s.role) for s in result.spans] == [("man", "subject"), ("golden hour", "lighting.timeOfDay")]
    assert result.notes[0] == "span[1] ignored: duplicate span"
