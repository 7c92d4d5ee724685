"""Typed records shared by every labeling stage.

Transformation chain:
    raw candidate (mapping) -> CandidateSpan (validated) -> Span -> StageResult

Spans are frozen: a stage that changes a span builds a new one, so no
span is ever mutated after creation.
"""

from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class SpanSource(str, Enum):
    """Provenance of a span. Used only for tie-breaking, never displayed."""

    CLOSED_VOCABULARY = "closed-vocabulary"
    PATTERN = "pattern"
    ML_TAGGER = "ml-tagger"
    LLM = "llm"
    HEURISTIC = "heuristic"
    FALLBACK = "fallback"


# Higher wins. Exact/pattern > heuristic/ML > ambiguous fallback.
SOURCE_PRIORITY: dict[SpanSource, int] = {
    SpanSource.CLOSED_VOCABULARY: 3,
    SpanSource.PATTERN: 3,
    SpanSource.ML_TAGGER: 2,
    SpanSource.LLM: 2,
    SpanSource.HEURISTIC: 2,
    SpanSource.FALLBACK: 1,
}

_missing = set(SpanSource) - set(SOURCE_PRIORITY)
if _missing:
    raise RuntimeError(f"SOURCE_PRIORITY is missing entries for {sorted(s.value for s in _missing)}")

# Provenance strings emitted by upstream extractors.
SOURCE_ALIASES: dict[str, SpanSource] = {
    "aho-corasick": SpanSource.CLOSED_VOCABULARY,
    "closed-vocab": SpanSource.CLOSED_VOCABULARY,
    "vocabulary": SpanSource.CLOSED_VOCABULARY,
    "exact": SpanSource.CLOSED_VOCABULARY,
    "regex": SpanSource.PATTERN,
    "gliner": SpanSource.ML_TAGGER,
    "ner": SpanSource.ML_TAGGER,
    "nlp": SpanSource.ML_TAGGER,
    "model": SpanSource.ML_TAGGER,
    "dictionary": SpanSource.HEURISTIC,
}


def coerce_source(value: Any, default: SpanSource = SpanSource.ML_TAGGER) -> SpanSource:
    """Map a raw provenance tag onto the closed ``SpanSource`` set.

    Missing tags take *default*; unrecognised tags are ranked as fallback.
    """
    if value is None or value == "":
        return default
    if isinstance(value, SpanSource):
        return value
    key = str(value).strip().lower()
    try:
        return SpanSource(key)
    except ValueError:
        return SOURCE_ALIASES.get(key, SpanSource.FALLBACK)


def parent_role(role: str) -> str:
    """Top-level category of a role (``camera.movement`` -> ``camera``)."""
    return role.split(".", 1)[0]


def role_depth(role: str) -> int:
    """Number of dot-separated segments; attributes are deeper than parents."""
    return role.count(".") + 1 if role else 0


def make_span_id(source_text: str, start: int, end: int, role: str) -> str:
    digest = hashlib.sha1(f"{source_text}\x00{start}:{end}:{role}".encode("utf-8")).hexdigest()
    return f"span_{digest[:16]}"


@dataclass(frozen=True)
class Span:
    """A labeled substring of the prompt text.

    ``confidence`` is ``None`` when the producer gave no score; stages rank
    and filter such spans as if they scored 0.0.
    """

    text: str
    start: int
    end: int
    role: str
    confidence: float | None = None
    source: SpanSource = SpanSource.ML_TAGGER
    id: str = ""

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def parent(self) -> str:
        return parent_role(self.role)

    @property
    def depth(self) -> int:
        return role_depth(self.role)

    @property
    def score(self) -> float:
        if isinstance(self.confidence, (int, float)) and not isinstance(self.confidence, bool):
            return float(self.confidence)
        return 0.0

    def overlaps(self, other: Span) -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        return data


class DropReason(str, Enum):
    HEADER = "header"
    VARIATION_HEADER = "variation-header"
    NON_VISUAL = "non-visual"
    STYLE_REFERENCE = "style-reference"
    LOW_CONFIDENCE = "low-confidence"
    TRUNCATED = "truncated"


@dataclass(frozen=True)
class DroppedSpan:
    span: Span
    reason: DropReason


@dataclass
class StageResult:
    """Output of a single stage: surviving spans plus diagnostic notes.

    Notes are for observability only; nothing downstream reads them to make
    a decision.
    """

    spans: list[Span]
    notes: list[str] = field(default_factory=list)
    dropped: list[DroppedSpan] = field(default_factory=list)


class CandidateSpan(BaseModel):
    """Boundary schema for one externally supplied candidate span.

    Confidence is not part of the schema: it is coerced separately so that a
    non-numeric value degrades to "unscored" instead of rejecting the span.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=False)

    text: str | None = None
    start: int | None = None
    end: int | None = None
    role: str
    source: Any = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _reject_bool_offsets(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("offset must be an integer")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError("offset must be an integer")
        return value

    @field_validator("role")
    @classmethod
    def _role_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("role is empty")
        return value
