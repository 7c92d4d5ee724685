"""Span labeling pipeline.

    candidates --normalise--> typed spans
    text --closed vocabulary--> exact/pattern spans
    both --dedup + overlap resolution--> --adjacent merge--> --confidence filter-->
    --visual-relevance filter--> --truncation--> final spans (+ optional audit)

Every stage is a pure function over a span list; the labeler only holds the
immutable taxonomy, vocabulary automaton and relevance rules, so one
instance can serve concurrent calls.
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any, Iterable

from promptspans.shared.logger import PipelineLogger

from .config import LABELING_PRESETS, LabelingConfig
from .processing.adjacent import merge_adjacent_spans
from .processing.filters import filter_by_confidence, truncate_to_max_spans
from .processing.normalize import normalize_candidates
from .processing.relevance import DEFAULT_RELEVANCE_RULES, RelevanceRules, filter_visual_relevance
from .processing.resolver import merge_span_lists, position_key
from .taxonomy.registry import TaxonomyRegistry, load_default_taxonomy
from .taxonomy.validator import TaxonomyValidator, ValidationReport
from .types import DroppedSpan, Span, StageResult
from .vocab.matcher import ClosedVocabularyMatcher

logger = logging.getLogger(__name__)


@dataclass
class LabelingResult:
    spans: list[Span]
    notes: list[str] = field(default_factory=list)
    dropped: list[DroppedSpan] = field(default_factory=list)
    validation: ValidationReport | None = None
    stats: dict[str, int] = field(default_factory=dict)
    preset: str = "default"
    taxonomy_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "spans": [s.to_dict() for s in self.spans],
            "notes": list(self.notes),
            "dropped": [{"span": d.span.to_dict(), "reason": d.reason.value} for d in self.dropped],
            "validation": self.validation.to_dict() if self.validation else None,
            "meta": {
                "preset": self.preset,
                "taxonomyVersion": self.taxonomy_version,
                "stats": dict(self.stats),
            },
        }


class SpanLabeler:
    """Resolves candidate spans for a prompt into the final labeled set."""

    def __init__(
        self,
        taxonomy: TaxonomyRegistry | None = None,
        matcher: ClosedVocabularyMatcher | None = None,
        relevance_rules: RelevanceRules = DEFAULT_RELEVANCE_RULES,
        run_logger: PipelineLogger | None = None,
    ) -> None:
        self.taxonomy = taxonomy or load_default_taxonomy()
        self.matcher = matcher or ClosedVocabularyMatcher(self.taxonomy)
        self.relevance_rules = relevance_rules
        self.validator = TaxonomyValidator(self.taxonomy)
        self.run_logger = run_logger

    def _stage(self, name: str):
        if self.run_logger is None:
            return nullcontext()
        return self.run_logger.timer(f"labeling.{name}")

    def _record(self, name: str, result: StageResult, notes: list[str]) -> None:
        notes.extend(result.notes)
        logger.debug("%s: %d spans, %d notes", name, len(result.spans), len(result.notes))
        if self.run_logger is not None:
            self.run_logger.metric(f"spans.{name}", len(result.spans))
            self.run_logger.notes(name, result.notes)

    def label(
        self,
        text: str,
        candidates: Iterable[Any] = (),
        config: LabelingConfig | None = None,
    ) -> LabelingResult:
        """Run the full pipeline over *text* and the external *candidates*.

        Raises:
            TypeError: *text* is not a string or *candidates* is ``None``.
        """
        if not isinstance(text, str):
            raise TypeError(f"text must be str, got {type(text).__name__}")
        if candidates is None:
            raise TypeError("candidates must be a list of spans (pass [] for none)")
        config = config or LABELING_PRESETS["default"]
        candidates = list(candidates)

        notes: list[str] = []
        dropped: list[DroppedSpan] = []
        stats: dict[str, int] = {"candidates": len(candidates)}

        with self._stage("normalize"):
            normalized = normalize_candidates(
                candidates, text, self.taxonomy,
                strict=config.strict_mode,
                default_source=config.default_source,
            )
        self._record("normalize", normalized, notes)
        stats["normalized"] = len(normalized.spans)

        vocabulary: list[Span] = []
        if config.use_closed_vocabulary:
            with self._stage("vocabulary"):
                vocabulary = self.matcher.match(text)
        stats["vocabulary"] = len(vocabulary)

        with self._stage("resolve"):
            resolved = merge_span_lists(
                vocabulary, normalized.spans,
                strategy=config.overlap_strategy,
                closed_vocab_priority=config.closed_vocab_priority,
                tie_break_order=config.tie_break_order,
                allow_overlaps=config.allow_overlaps,
            )
        self._record("resolve", resolved, notes)
        stats["resolved"] = len(resolved.spans)

        current = resolved
        if config.merge_adjacent:
            with self._stage("adjacent"):
                current = merge_adjacent_spans(current.spans, text, config.max_merged_words)
            self._record("adjacent", current, notes)
        stats["merged"] = len(current.spans)

        with self._stage("confidence"):
            current = filter_by_confidence(current.spans, config.min_confidence)
        self._record("confidence", current, notes)
        dropped.extend(current.dropped)
        stats["afterConfidence"] = len(current.spans)

        if config.filter_visual_relevance:
            with self._stage("relevance"):
                current = filter_visual_relevance(current.spans, text, self.relevance_rules)
            self._record("relevance", current, notes)
            dropped.extend(current.dropped)
        stats["afterRelevance"] = len(current.spans)

        with self._stage("truncate"):
            current = truncate_to_max_spans(current.spans, config.max_spans)
        self._record("truncate", current, notes)
        dropped.extend(current.dropped)

        spans = sorted(current.spans, key=position_key)
        stats["final"] = len(spans)

        validation = None
        if config.validate_taxonomy:
            validation = self.validator.validate_spans(spans, strict=config.strict_mode)
            if self.run_logger is not None and validation.issues:
                self.run_logger.warn(f"taxonomy: {len(validation.issues)} issue(s) in final span set")

        return LabelingResult(
            spans=spans,
            notes=notes,
            dropped=dropped,
            validation=validation,
            stats=stats,
            preset=config.name,
            taxonomy_version=self.taxonomy.version,
        )
