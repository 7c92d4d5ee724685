"""Boundary validation: untyped candidate records -> typed ``Span`` list.

Each malformed candidate is skipped with a diagnostic note; one bad record
never aborts the batch.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from ..taxonomy.registry import TaxonomyRegistry
from ..types import CandidateSpan, Span, SpanSource, StageResult, coerce_source, make_span_id
from ..vocab.matcher import fold_case, is_whole_word


def _occurrences(needle: str, haystack: str) -> list[int]:
    found = []
    idx = haystack.find(needle)
    while idx != -1:
        found.append(idx)
        idx = haystack.find(needle, idx + 1)
    return found


def locate_text(needle: str, haystack: str, near: int | None = None) -> tuple[int, int] | None:
    """Find *needle* as a whole word in *haystack*: exact first, then case-insensitive.

    Occurrences inside a longer word never count. With *near*, the
    occurrence closest to that offset wins (earlier on a tie); otherwise
    the first occurrence.
    """
    if not needle:
        return None
    size = len(needle)
    starts = [s for s in _occurrences(needle, haystack) if is_whole_word(haystack, s, s + size)]
    if not starts:
        starts = [
            s for s in _occurrences(fold_case(needle), fold_case(haystack))
            if is_whole_word(haystack, s, s + size)
        ]
    if not starts:
        return None
    if near is None:
        start = starts[0]
    else:
        start = min(starts, key=lambda s: (abs(s - near), s))
    return start, start + size


def coerce_confidence(value: Any) -> tuple[float | None, bool]:
    """Return ``(confidence, is_numeric)``; numeric values are clamped to [0, 1]."""
    if value is None:
        return None, True
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None, False
    value = float(value)
    if math.isnan(value):
        return 0.0, True
    return max(0.0, min(1.0, value)), True


def _as_record(entry: Any) -> Mapping[str, Any] | None:
    if isinstance(entry, Span):
        return {
            "text": entry.text,
            "start": entry.start,
            "end": entry.end,
            "role": entry.role,
            "confidence": entry.confidence,
            "source": entry.source,
        }
    if isinstance(entry, Mapping):
        return entry
    return None


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or "record"
    return f"{field} ({err.get('msg', 'invalid')})"


def normalize_candidates(
    candidates: Iterable[Any],
    source_text: str,
    taxonomy: TaxonomyRegistry,
    strict: bool = False,
    default_source: SpanSource = SpanSource.ML_TAGGER,
) -> StageResult:
    """Validate candidate spans against *source_text* and *taxonomy*.

    Args:
        candidates: Mappings with ``text, start, end, role, confidence, source``
            (any field may be missing or malformed) or ``Span`` objects.
        source_text: The prompt the offsets index into.
        taxonomy: Registry used to resolve and validate roles.
        strict: Drop unknown roles instead of substituting the fallback role.
        default_source: Provenance for candidates that carry none.

    Returns:
        StageResult with the surviving spans in input order.

    Raises:
        TypeError: *candidates* is ``None`` or *source_text* is not a string.
    """
    if candidates is None:
        raise TypeError("candidates must be a list of spans (pass [] for none)")
    if not isinstance(source_text, str):
        raise TypeError(f"source_text must be str, got {type(source_text).__name__}")

    spans: list[Span] = []
    notes: list[str] = []

    for i, entry in enumerate(candidates):
        record = _as_record(entry)
        if record is None:
            notes.append(f"span[{i}] ignored: not a span object")
            continue

        try:
            cand = CandidateSpan.model_validate(record)
        except ValidationError as exc:
            notes.append(f"span[{i}] ignored: invalid {_first_error(exc)}")
            continue

        role = taxonomy.resolve(cand.role)
        if not taxonomy.is_valid(role):
            if strict:
                notes.append(f'span[{i}] ignored: unknown role "{cand.role}"')
                continue
            notes.append(f'span[{i}] unknown role "{cand.role}" replaced by "{taxonomy.fallback_role}"')
            role = taxonomy.fallback_role

        text = cand.text.strip() if cand.text else ""
        start, end = cand.start, cand.end
        if start is None or end is None:
            if not text:
                notes.append(f"span[{i}] ignored: no offsets and no text")
                continue
            located = locate_text(text, source_text)
            if located is None:
                notes.append(f'span[{i}] ignored: "{text}" not found in source text')
                continue
            start, end = located
        else:
            if not 0 <= start < end <= len(source_text):
                notes.append(f"span[{i}] ignored: invalid offsets {start}-{end}")
                continue
            if text and fold_case(source_text[start:end].strip()) != fold_case(text):
                located = locate_text(text, source_text, near=start)
                if located is None:
                    notes.append(f'span[{i}] ignored: "{text}" not found in source text')
                    continue
                notes.append(f'span[{i}] re-anchored "{text}" from {start}-{end} to {located[0]}-{located[1]}')
                start, end = located

        while start < end and source_text[start].isspace():
            start += 1
        while end > start and source_text[end - 1].isspace():
            end -= 1
        if start >= end:
            notes.append(f"span[{i}] ignored: blank span")
            continue

        sliced = source_text[start:end]
        raw_conf = record.get("confidence")
        confidence, numeric = coerce_confidence(raw_conf)
        if not numeric:
            notes.append(f'span[{i}] "{sliced}": non-numeric confidence treated as 0.00')
        elif confidence is not None and confidence != raw_conf:
            notes.append(f'span[{i}] "{sliced}": confidence {raw_conf} clamped to {confidence:.2f}')

        spans.append(Span(
            text=sliced,
            start=start,
            end=end,
            role=role,
            confidence=confidence,
            source=coerce_source(cand.source, default_source),
            id=make_span_id(source_text, start, end, role),
        ))

    return StageResult(spans=spans, notes=notes)
