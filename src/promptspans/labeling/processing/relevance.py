"""Visual-relevance filter: drop spans that label document structure.

Prompts produced by templates carry section headers ("**Camera:**"),
variation labels ("Variation 1 (Alternate Angle):") and meta markers
("Main Action:"). Spans over those are artifacts, not prompt content.
These are string heuristics; the patterns live in ``RelevanceRules`` so
callers can tune them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..types import DropReason, DroppedSpan, Span, StageResult

HEADER_WORDS = frozenset({
    "alternatives", "variations", "notes", "scene", "subject", "action",
    "main action", "environment", "setting", "location", "lighting", "camera",
    "camera movement", "shot", "shot type", "framing", "composition", "style",
    "mood", "color", "technical", "technical specs", "specs", "audio", "sound",
    "duration", "aspect ratio", "frame rate", "resolution", "cinematography",
})

META_LABELS = frozenset({
    "alternatives", "alternative", "variations", "variation", "main action",
    "action", "subject", "main subject", "environment", "setting", "lighting",
    "camera", "camera movement", "shot type", "style", "technical specs",
    "technical", "audio", "mood", "composition", "scene", "notes",
})

SECTION_PATTERN = re.compile(
    r"^[ \t>#*_]*(?:alternatives|alternative prompts|variations)\b[^\n]*$",
    re.IGNORECASE | re.MULTILINE,
)
VARIATION_LABEL_PATTERN = re.compile(
    r"^[ \t>#*_]*(?:variation|alternative|option)[ \t]*\d+[ \t]*"
    r"(?:\([^)\n]*\)|[-–][^:\n]*(?=:))?[ \t]*:?[*_]*",
    re.IGNORECASE | re.MULTILINE,
)
STYLE_CUE_PATTERN = re.compile(
    r"(?:inspired by|in the style of|in the vein of|reminiscent of|homage to|à la|a la)\s*$",
    re.IGNORECASE,
)

MARKDOWN_HEADING = re.compile(r"^#{1,6}\s")
BOLD_ONLY = re.compile(r"^(\*\*|__)[^*_\n]+(\*\*|__):?$")
MARKER_CHARS = " \t*_#>"


@dataclass(frozen=True)
class RelevanceRules:
    header_words: frozenset[str] = HEADER_WORDS
    meta_labels: frozenset[str] = META_LABELS
    section_pattern: re.Pattern = SECTION_PATTERN
    variation_label_pattern: re.Pattern = VARIATION_LABEL_PATTERN
    style_cue_pattern: re.Pattern = STYLE_CUE_PATTERN
    max_header_words: int = 2
    style_cue_window: int = 40
    label_word_limit: int = 3


DEFAULT_RELEVANCE_RULES = RelevanceRules()


def _label_key(text: str) -> str:
    return text.strip().strip(MARKER_CHARS).rstrip(":").strip(MARKER_CHARS).lower()


def is_likely_header(text: str, rules: RelevanceRules = DEFAULT_RELEVANCE_RULES) -> bool:
    """True for text that reads as a header or label on its own."""
    stripped = text.strip()
    if len(stripped) <= 1:
        return True
    if MARKDOWN_HEADING.match(stripped):
        return True
    if BOLD_ONLY.match(stripped):
        return True
    if stripped.endswith(":") and len(stripped[:-1].split()) <= rules.label_word_limit:
        return True
    return False


def _line_bounds(text: str, start: int, end: int) -> tuple[int, int]:
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    return line_start, len(text) if line_end == -1 else line_end


def _followed_by_colon(text: str, end: int) -> bool:
    return text[end:].lstrip(" \t*_").startswith(":")


def _in_heading_context(span: Span, text: str) -> bool:
    line_start, line_end = _line_bounds(text, span.start, span.end)
    before = text[line_start:span.start]
    after = text[span.end:line_end]
    if not before.strip() and not after.strip():
        return True
    if _followed_by_colon(text, span.end):
        return True
    if before and not before.strip(MARKER_CHARS) and before.strip():
        return True
    return after.startswith("**") or after.startswith("__")


def filter_headers(
    spans: list[Span],
    text: str | None = None,
    rules: RelevanceRules = DEFAULT_RELEVANCE_RULES,
) -> StageResult:
    """Drop spans that are section headers or standalone labels."""
    kept: list[Span] = []
    notes: list[str] = []
    dropped: list[DroppedSpan] = []
    for span in spans:
        header = is_likely_header(span.text, rules)
        if not header and text is not None:
            key = _label_key(span.text)
            header = (
                len(key.split()) <= rules.max_header_words
                and key in rules.header_words
                and _in_heading_context(span, text)
            )
        if header:
            notes.append(f'Dropped header/label "{span.text}"')
            dropped.append(DroppedSpan(span, DropReason.HEADER))
        else:
            kept.append(span)
    return StageResult(spans=kept, notes=notes, dropped=dropped)


def _ranges(pattern: re.Pattern, text: str, to_end: bool = False) -> list[tuple[int, int]]:
    return [(m.start(), len(text) if to_end else m.end()) for m in pattern.finditer(text)]


def _within(span: Span, ranges: list[tuple[int, int]]) -> bool:
    return any(lo <= span.start and span.end <= hi for lo, hi in ranges)


def _is_style_reference(span: Span, text: str, rules: RelevanceRules) -> bool:
    if not span.text[:1].isupper():
        return False
    before = text[max(0, span.start - rules.style_cue_window):span.start]
    return rules.style_cue_pattern.search(before) is not None


def filter_non_visual_spans(
    spans: list[Span],
    text: str,
    rules: RelevanceRules = DEFAULT_RELEVANCE_RULES,
) -> StageResult:
    """Drop variation labels, meta markers and style references.

    Meta labels inside an alternatives section are kept unless they are
    used as markers (followed by a colon); the variation bodies there are
    genuine alternative prompts.
    """
    if not spans:
        return StageResult(spans=spans)

    label_ranges = _ranges(rules.variation_label_pattern, text)
    section_ranges = _ranges(rules.section_pattern, text, to_end=True)

    kept: list[Span] = []
    notes: list[str] = []
    dropped: list[DroppedSpan] = []

    for span in spans:
        reason = None
        if _within(span, label_ranges):
            reason = DropReason.VARIATION_HEADER
            notes.append(f'Dropped variation-header span "{span.text}"')
        elif _is_style_reference(span, text, rules):
            reason = DropReason.STYLE_REFERENCE
            notes.append(f'Dropped style-reference span "{span.text}"')
        elif _label_key(span.text) in rules.meta_labels:
            in_alternatives = any(lo <= span.start < hi for lo, hi in section_ranges)
            if not in_alternatives or _followed_by_colon(text, span.end):
                reason = DropReason.NON_VISUAL
                notes.append(f'Dropped non-visual span "{span.text}"')

        if reason is None:
            kept.append(span)
        else:
            dropped.append(DroppedSpan(span, reason))

    return StageResult(spans=kept, notes=notes, dropped=dropped)


def filter_visual_relevance(
    spans: list[Span],
    text: str,
    rules: RelevanceRules = DEFAULT_RELEVANCE_RULES,
) -> StageResult:
    headers = filter_headers(spans, text, rules)
    non_visual = filter_non_visual_spans(headers.spans, text, rules)
    return StageResult(
        spans=non_visual.spans,
        notes=headers.notes + non_visual.notes,
        dropped=headers.dropped + non_visual.dropped,
    )
