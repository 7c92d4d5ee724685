"""Join neighbouring spans of one category family ("Action" + "Shot")."""

from __future__ import annotations

import re

from ..types import SOURCE_PRIORITY, Span, StageResult, make_span_id
from .resolver import position_key

# Whitespace, hyphens and en dashes only.
MERGEABLE_GAP = re.compile(r"^[\s\-–]*$")


def roles_compatible(a: str, b: str) -> bool:
    """Same role, or one role is an ancestor of the other."""
    return a == b or b.startswith(a + ".") or a.startswith(b + ".")


def _merge_pair(left: Span, right: Span, source_text: str) -> Span:
    role = right.role if right.depth > left.depth else left.role
    if left.confidence is None and right.confidence is None:
        confidence = None
    else:
        confidence = (left.score + right.score) / 2
    source = right.source if SOURCE_PRIORITY[right.source] > SOURCE_PRIORITY[left.source] else left.source
    return Span(
        text=source_text[left.start:right.end],
        start=left.start,
        end=right.end,
        role=role,
        confidence=confidence,
        source=source,
        id=make_span_id(source_text, left.start, right.end, role),
    )


def can_merge(left: Span, right: Span, source_text: str, max_merged_words: int | None = None) -> bool:
    if left.parent != right.parent or not roles_compatible(left.role, right.role):
        return False
    if left.end > right.start:
        return False
    if not MERGEABLE_GAP.match(source_text[left.end:right.start]):
        return False
    if max_merged_words is not None:
        if len(source_text[left.start:right.end].split()) > max_merged_words:
            return False
    return True


def merge_adjacent_spans(
    spans: list[Span],
    source_text: str,
    max_merged_words: int | None = None,
) -> StageResult:
    """Single left-to-right pass; a merged span is not merged again.

    Output is sorted by ``(start, -end, id)``.
    """
    if len(spans) < 2:
        return StageResult(spans=list(spans))

    ordered = sorted(spans, key=position_key)
    merged: list[Span] = []
    notes: list[str] = []
    i = 0
    while i < len(ordered):
        left = ordered[i]
        if i + 1 < len(ordered) and can_merge(left, ordered[i + 1], source_text, max_merged_words):
            span = _merge_pair(left, ordered[i + 1], source_text)
            merged.append(span)
            notes.append(f'Merged 2 adjacent {span.parent} spans into "{span.text}" ({span.role})')
            i += 2
            continue
        merged.append(left)
        i += 1

    merged.sort(key=position_key)
    return StageResult(spans=merged, notes=notes)
