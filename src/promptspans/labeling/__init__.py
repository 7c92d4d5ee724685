"""Prompt span labeling pipeline."""
from .config import (
    LABELING_PRESETS,
    LabelingConfig,
    LabelingOptions,
    get_labeling_config,
)
from .errors import LabelingError, TaxonomyError, VocabularyError
from .pipeline import LabelingResult, SpanLabeler
from .processing import OverlapStrategy, TieBreakOrder
from .taxonomy import TaxonomyRegistry, TaxonomyValidator, load_default_taxonomy
from .types import DropReason, Span, SpanSource, StageResult
from .vocab import ClosedVocabularyMatcher

__all__ = [
    "SpanLabeler",
    "LabelingResult",
    "LabelingConfig",
    "LabelingOptions",
    "LABELING_PRESETS",
    "get_labeling_config",
    "OverlapStrategy",
    "TieBreakOrder",
    "Span",
    "SpanSource",
    "StageResult",
    "DropReason",
    "TaxonomyRegistry",
    "TaxonomyValidator",
    "load_default_taxonomy",
    "ClosedVocabularyMatcher",
    "LabelingError",
    "TaxonomyError",
    "VocabularyError",
]
