"""Span processing stages: normalise, resolve, merge, filter, truncate."""

from .adjacent import can_merge, merge_adjacent_spans, roles_compatible
from .filters import filter_by_confidence, truncate_to_max_spans
from .normalize import coerce_confidence, locate_text, normalize_candidates
from .relevance import (
    DEFAULT_RELEVANCE_RULES,
    RelevanceRules,
    filter_headers,
    filter_non_visual_spans,
    filter_visual_relevance,
    is_likely_header,
)
from .resolver import (
    OverlapStrategy,
    TieBreakOrder,
    deduplicate_spans,
    merge_span_lists,
    resolve_overlaps,
)

__all__ = [
    # Boundary
    "normalize_candidates",
    "coerce_confidence",
    "locate_text",
    # Resolution
    "OverlapStrategy",
    "TieBreakOrder",
    "deduplicate_spans",
    "resolve_overlaps",
    "merge_span_lists",
    # Adjacency
    "merge_adjacent_spans",
    "can_merge",
    "roles_compatible",
    # Filters
    "filter_by_confidence",
    "truncate_to_max_spans",
    "RelevanceRules",
    "DEFAULT_RELEVANCE_RULES",
    "is_likely_header",
    "filter_headers",
    "filter_non_visual_spans",
    "filter_visual_relevance",
]
