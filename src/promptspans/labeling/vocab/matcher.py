"""Closed-vocabulary matcher over an Aho-Corasick automaton.

The automaton is built once per matcher from a ``{category: [terms]}`` table
and is only read afterwards, so one matcher can serve concurrent calls.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping

import ahocorasick

from ..errors import VocabularyError
from ..taxonomy.registry import TaxonomyRegistry
from ..types import Span, SpanSource, make_span_id
from .patterns import TECHNICAL_PATTERNS, TechnicalPattern, extract_technical_spans
from .terms import DEFAULT_VOCABULARY

logger = logging.getLogger(__name__)

AMBIGUOUS_CAMERA_TERMS = frozenset({"pan", "roll", "tilt", "zoom", "drone", "crane", "boom", "truck"})
CAMERA_CONTEXT = re.compile(r"(camera|shot|lens|frame|cinematography|cinematic|filming|video|footage)")
NON_CAMERA_PREFIX = re.compile(r"(frying|sauté|sauce|iron|bread|dinner|hair)\s*$")
CAMERA_CONTEXT_RADIUS = 50
PREFIX_WINDOW = 20


def fold_case(text: str) -> str:
    """Lower-case *text* without changing its length.

    Characters whose lower-case form is longer than one code point (``İ``)
    are left as-is so match offsets index the original string.
    """
    out = []
    for ch in text:
        low = ch.lower()
        out.append(low if len(low) == 1 else ch)
    return "".join(out)


def is_whole_word(text: str, start: int, end: int) -> bool:
    if start > 0 and text[start - 1].isalnum():
        return False
    if end < len(text) and text[end].isalnum():
        return False
    return True


def _has_camera_context(folded: str, start: int, end: int) -> bool:
    lo = max(0, start - CAMERA_CONTEXT_RADIUS)
    hi = min(len(folded), end + CAMERA_CONTEXT_RADIUS)
    return CAMERA_CONTEXT.search(folded[lo:hi]) is not None


class ClosedVocabularyMatcher:
    """Finds exact vocabulary terms and technical specs in prompt text."""

    def __init__(
        self,
        taxonomy: TaxonomyRegistry,
        vocabulary: Mapping[str, list[str]] | None = None,
        patterns: tuple[TechnicalPattern, ...] = TECHNICAL_PATTERNS,
    ) -> None:
        self.taxonomy = taxonomy
        self.patterns = patterns
        vocabulary = DEFAULT_VOCABULARY if vocabulary is None else vocabulary

        unknown = sorted(role for role in vocabulary if not taxonomy.is_valid(role))
        if unknown:
            raise VocabularyError(f"Vocabulary uses unregistered categories: {', '.join(unknown)}")

        self._automaton = ahocorasick.Automaton()
        self._term_counts: dict[str, int] = {}
        owners: dict[str, str] = {}
        for role, terms in vocabulary.items():
            count = 0
            for term in terms:
                key = fold_case(term.strip())
                if not key:
                    continue
                if key in owners:
                    if owners[key] != role:
                        logger.warning(
                            "Vocabulary term %r listed under %s and %s; keeping %s",
                            term, owners[key], role, owners[key],
                        )
                    continue
                owners[key] = role
                self._automaton.add_word(key, (key, role))
                count += 1
            self._term_counts[role] = count

        if len(self._automaton) > 0:
            self._automaton.make_automaton()
        logger.debug("Built vocabulary automaton with %d terms", len(self._automaton))

    def find_terms(self, text: str) -> list[Span]:
        """Whole-word vocabulary hits, confidence 1.0."""
        if not text or len(self._automaton) == 0:
            return []

        folded = fold_case(text)
        spans = []
        for end_index, (term, role) in self._automaton.iter(folded):
            start = end_index - len(term) + 1
            end = end_index + 1
            if not is_whole_word(folded, start, end):
                continue
            if role == "camera.movement" and term in AMBIGUOUS_CAMERA_TERMS:
                prefix = folded[max(0, start - PREFIX_WINDOW):start]
                if NON_CAMERA_PREFIX.search(prefix):
                    continue
                if not _has_camera_context(folded, start, end):
                    continue
            spans.append(Span(
                text=text[start:end],
                start=start,
                end=end,
                role=role,
                confidence=1.0,
                source=SpanSource.CLOSED_VOCABULARY,
                id=make_span_id(text, start, end, role),
            ))
        spans.sort(key=lambda s: (s.start, -s.end))
        return spans

    def find_technical(self, text: str) -> list[Span]:
        """Numeric/technical pattern hits with per-pattern confidence."""
        if not text:
            return []
        spans = []
        for start, end, role, confidence in extract_technical_spans(text, self.patterns):
            if not self.taxonomy.is_valid(role):
                continue
            spans.append(Span(
                text=text[start:end],
                start=start,
                end=end,
                role=role,
                confidence=confidence,
                source=SpanSource.PATTERN,
                id=make_span_id(text, start, end, role),
            ))
        return spans

    def match(self, text: str) -> list[Span]:
        """All closed-vocabulary and pattern spans, sorted by position."""
        spans = self.find_terms(text) + self.find_technical(text)
        spans.sort(key=lambda s: (s.start, -s.end))
        return spans

    def estimate_coverage(self, text: str) -> int:
        """Percent of the words in *text* covered by vocabulary and pattern spans."""
        words = len(text.split())
        if not words:
            return 0
        covered = sum(len(span.text.split()) for span in self.match(text))
        return min(100, round(covered * 100 / words))

    def vocabulary_stats(self) -> dict[str, object]:
        return {
            "totalTerms": sum(self._term_counts.values()),
            "totalCategories": len(self._term_counts),
            "byCategory": dict(self._term_counts),
            "patterns": [p.name for p in self.patterns],
        }
