"""Confidence threshold and span-count cap."""

from __future__ import annotations

from ..types import DropReason, DroppedSpan, Span, StageResult
from .resolver import position_key


def filter_by_confidence(spans: list[Span], min_confidence: float) -> StageResult:
    """Keep spans with confidence >= *min_confidence*; unscored spans count as 0."""
    kept: list[Span] = []
    notes: list[str] = []
    dropped: list[DroppedSpan] = []
    for span in spans:
        if span.score >= min_confidence:
            kept.append(span)
            continue
        notes.append(
            f'Dropped "{span.text}" ({span.role}): confidence {span.score:.2f} '
            f"below threshold {min_confidence:g}"
        )
        dropped.append(DroppedSpan(span, DropReason.LOW_CONFIDENCE))
    return StageResult(spans=kept, notes=notes, dropped=dropped)


def truncate_to_max_spans(spans: list[Span], max_spans: int) -> StageResult:
    """Keep the *max_spans* highest-confidence spans, re-sorted by position.

    Within the limit the input list object is returned as-is. Confidence
    ties go to the earlier span.
    """
    if max_spans < 0:
        raise ValueError(f"max_spans must be non-negative, got {max_spans}")
    if len(spans) <= max_spans:
        return StageResult(spans=spans)

    ranked = sorted(spans, key=lambda s: (-s.score, s.start, s.end, s.id))
    kept = sorted(ranked[:max_spans], key=position_key)
    removed = ranked[max_spans:]
    return StageResult(
        spans=kept,
        notes=[f"Truncated to {max_spans} spans: removed {len(removed)} spans"],
        dropped=[DroppedSpan(s, DropReason.TRUNCATED) for s in removed],
    )
