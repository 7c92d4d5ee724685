"""Labeling configuration and presets."""

from __future__ import annotations

from dataclasses import dataclass, replace

from pydantic import BaseModel, ConfigDict, Field

from .processing.resolver import OverlapStrategy, TieBreakOrder
from .types import SpanSource


@dataclass(frozen=True)
class LabelingConfig:
    name: str = "default"

    min_confidence: float = 0.5
    max_spans: int = 60
    strict_mode: bool = False

    overlap_strategy: OverlapStrategy = OverlapStrategy.LONGEST_MATCH
    closed_vocab_priority: bool = True
    tie_break_order: TieBreakOrder = TieBreakOrder.SOURCE_FIRST
    allow_overlaps: bool = False

    merge_adjacent: bool = True
    # None = no word cap on merged spans
    max_merged_words: int | None = None

    filter_visual_relevance: bool = True
    use_closed_vocabulary: bool = True
    validate_taxonomy: bool = False

    default_source: SpanSource = SpanSource.ML_TAGGER


LABELING_PRESETS: dict[str, LabelingConfig] = {
    "default": LabelingConfig(name="default"),

    "strict": LabelingConfig(
        name="strict",
        min_confidence=0.6,
        strict_mode=True,
        validate_taxonomy=True,
    ),

    "precise": LabelingConfig(
        name="precise",
        min_confidence=0.7,
        overlap_strategy=OverlapStrategy.HIGHEST_CONFIDENCE,
        tie_break_order=TieBreakOrder.SPECIFICITY_FIRST,
        max_merged_words=4,
    ),

    "permissive": LabelingConfig(
        name="permissive",
        min_confidence=0.0,
        max_spans=200,
        closed_vocab_priority=False,
    ),
}


def get_labeling_config(name: str) -> LabelingConfig:
    if name not in LABELING_PRESETS:
        raise ValueError(f"Unknown preset: {name}. Available: {list(LABELING_PRESETS.keys())}")
    return LABELING_PRESETS[name]


class LabelingOptions(BaseModel):
    """Per-call knobs as sent by API callers (camelCase)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    min_confidence: float | None = Field(default=None, alias="minConfidence", ge=0)
    max_spans: int | None = Field(default=None, alias="maxSpans", ge=0)
    strict_mode: bool | None = Field(default=None, alias="strictMode")
    overlap_strategy: OverlapStrategy | None = Field(default=None, alias="overlapStrategy")
    closed_vocab_priority: bool | None = Field(default=None, alias="closedVocabPriority")
    tie_break_order: TieBreakOrder | None = Field(default=None, alias="tieBreakOrder")
    allow_overlaps: bool | None = Field(default=None, alias="allowOverlaps")
    max_merged_words: int | None = Field(default=None, alias="maxMergedWords", ge=1)
    validate_taxonomy: bool | None = Field(default=None, alias="validateTaxonomy")

    def to_config(self, base: LabelingConfig | None = None) -> LabelingConfig:
        """Overlay the knobs that were set onto *base* (default preset)."""
        base = base or LABELING_PRESETS["default"]
        return replace(base, **self.model_dump(exclude_none=True))
