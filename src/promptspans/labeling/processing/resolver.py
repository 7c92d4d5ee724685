"""Deduplication and overlap resolution across candidate sources.

Spans under different parent categories never conflict. Among same-parent
spans that overlap, one winner is chosen by an ordered tie-break:

    source priority (optional) / specificity   (order set by TieBreakOrder)
    -> overlap strategy (length vs confidence)
    -> earlier start
    -> smaller id
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from ..types import SOURCE_PRIORITY, Span, StageResult


class OverlapStrategy(str, Enum):
    LONGEST_MATCH = "longest-match"
    HIGHEST_CONFIDENCE = "highest-confidence"


class TieBreakOrder(str, Enum):
    SOURCE_FIRST = "source-first"
    SPECIFICITY_FIRST = "specificity-first"


def position_key(span: Span) -> tuple[int, int, str]:
    return (span.start, -span.end, span.id)


def deduplicate_spans(spans: list[Span]) -> StageResult:
    """Collapse spans identical in ``(start, end, role)``.

    The highest-confidence copy survives, in the first copy's position.
    """
    by_key: dict[tuple[int, int, str], int] = {}
    kept: list[Span] = []
    notes: list[str] = []
    for i, span in enumerate(spans):
        key = (span.start, span.end, span.role)
        slot = by_key.get(key)
        if slot is None:
            by_key[key] = len(kept)
            kept.append(span)
            continue
        notes.append(f"span[{i}] ignored: duplicate span")
        if span.score > kept[slot].score:
            kept[slot] = span
    return StageResult(spans=kept, notes=notes)


def _rank(
    span: Span,
    strategy: OverlapStrategy,
    closed_vocab_priority: bool,
    tie_break_order: TieBreakOrder,
) -> tuple:
    """Sort key where a greater tuple wins."""
    source = SOURCE_PRIORITY[span.source] if closed_vocab_priority else 0
    if tie_break_order is TieBreakOrder.SOURCE_FIRST:
        head = (source, span.depth)
    else:
        head = (span.depth, source)
    if strategy is OverlapStrategy.LONGEST_MATCH:
        body = (span.length, span.score)
    else:
        body = (span.score, span.length)
    return head + body


def _beats(challenger: Span, incumbent: Span, rank) -> bool:
    a, b = rank(challenger), rank(incumbent)
    if a != b:
        return a > b
    if challenger.start != incumbent.start:
        return challenger.start < incumbent.start
    return challenger.id < incumbent.id


def resolve_overlaps(
    spans: list[Span],
    strategy: OverlapStrategy = OverlapStrategy.LONGEST_MATCH,
    closed_vocab_priority: bool = True,
    tie_break_order: TieBreakOrder = TieBreakOrder.SOURCE_FIRST,
    allow_overlaps: bool = False,
) -> StageResult:
    """Resolve same-parent overlaps with a left-to-right sweep.

    A candidate that beats every accepted span it conflicts with replaces
    them all; otherwise it is discarded. ``allow_overlaps`` returns the input
    list object unchanged.
    """
    if allow_overlaps:
        return StageResult(spans=spans)
    if not spans:
        return StageResult(spans=[])

    def rank(span: Span) -> tuple:
        return _rank(span, strategy, closed_vocab_priority, tie_break_order)

    ordered = sorted(spans, key=lambda s: (s.start, -s.end, -s.score, s.id, s.source.value))
    accepted: list[Span] = []
    notes: list[str] = []

    for cand in ordered:
        conflicts = [a for a in accepted if a.parent == cand.parent and a.overlaps(cand)]
        if not conflicts:
            accepted.append(cand)
            continue
        if all(_beats(cand, c, rank) for c in conflicts):
            for loser in conflicts:
                accepted.remove(loser)
                notes.append(f'Overlap: kept "{cand.text}" ({cand.role}) over "{loser.text}" ({loser.role})')
            accepted.append(cand)
        else:
            winner = next(c for c in conflicts if not _beats(cand, c, rank))
            notes.append(f'Overlap: kept "{winner.text}" ({winner.role}) over "{cand.text}" ({cand.role})')

    accepted.sort(key=position_key)
    return StageResult(spans=accepted, notes=notes)


def merge_span_lists(
    *span_lists: Iterable[Span],
    strategy: OverlapStrategy = OverlapStrategy.LONGEST_MATCH,
    closed_vocab_priority: bool = True,
    tie_break_order: TieBreakOrder = TieBreakOrder.SOURCE_FIRST,
    allow_overlaps: bool = False,
) -> StageResult:
    """Concatenate candidate lists, drop exact duplicates, resolve overlaps."""
    combined = [span for spans in span_lists for span in spans]
    deduped = deduplicate_spans(combined)
    resolved = resolve_overlaps(
        deduped.spans,
        strategy=strategy,
        closed_vocab_priority=closed_vocab_priority,
        tie_break_order=tie_break_order,
        allow_overlaps=allow_overlaps,
    )
    return StageResult(spans=resolved.spans, notes=deduped.notes + resolved.notes)
