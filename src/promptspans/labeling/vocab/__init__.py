"""Candidate producers: closed vocabulary, technical patterns, tagger adapter."""

from .matcher import ClosedVocabularyMatcher, fold_case
from .patterns import TECHNICAL_PATTERNS, TechnicalPattern, extract_technical_spans
from .taggers import (
    TAGGER_LABEL_MAP,
    calibrate_tagger_confidence,
    candidates_from_tagger,
    map_tagger_label,
)
from .terms import DEFAULT_VOCABULARY

__all__ = [
    # Closed vocabulary
    "ClosedVocabularyMatcher",
    "DEFAULT_VOCABULARY",
    "fold_case",
    # Technical patterns
    "TechnicalPattern",
    "TECHNICAL_PATTERNS",
    "extract_technical_spans",
    # External tagger
    "TAGGER_LABEL_MAP",
    "map_tagger_label",
    "calibrate_tagger_confidence",
    "candidates_from_tagger",
]
