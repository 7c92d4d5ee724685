"""Regex extractors for numeric/technical prompt specs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator

# Regex patterns
FRAME_RATE = re.compile(r"\b\d{1,3}(?:\.\d{1,3})?\s?(?:fps|frames?\s+per\s+second)\b", re.IGNORECASE)
DURATION = re.compile(
    r"\b\d{1,3}(?:\.\d+)?\s?(?:seconds?|secs?|minutes?|mins?|s)\b", re.IGNORECASE
)
RESOLUTION = re.compile(
    r"\b(?:\d{3,4}\s?[x×]\s?\d{3,4}|\d{3,4}p|[248]k|uhd|full\s+hd|hd)\b", re.IGNORECASE
)
ASPECT_RATIO = re.compile(r"\b\d{1,2}(?:\.\d{1,2})?:\d{1,2}\b")
LENS = re.compile(r"\b\d{1,3}(?:\.\d)?\s?mm\b(?!\s*film)", re.IGNORECASE)
APERTURE = re.compile(r"\b[fF]/\d{1,2}(?:\.\d{1,2})?\b")
COLOR_TEMP = re.compile(r"\b(\d{4,5})\s?[kK]\b")

ASPECT_CUE = re.compile(
    r"(ratio|aspect|frame|format|widescreen|letterbox|vertical|portrait|landscape)",
    re.IGNORECASE,
)
COMMON_ASPECT_RATIOS = frozenset({
    "16:9", "9:16", "4:3", "3:4", "1:1", "21:9",
    "2.39:1", "2.35:1", "1.85:1", "4:5", "2:1", "2.40:1",
})
ASPECT_CONTEXT_RADIUS = 30
DECADE = re.compile(r"^[2-9]0s$", re.IGNORECASE)
DECADE_PREFIX = re.compile(r"(?:['’]|\bthe\s+|\b(?:early|mid|late)[\s-]+)$", re.IGNORECASE)
DECADE_SUFFIX = re.compile(
    r"^(?:['’]\s*|[\s-]+)?(?:[a-z]+[\s-]+)?"
    r"(?:aesthetic|style|fashion|vibe|look|era|music|film|movie|vintage|retro|decor|"
    r"nostalgia|synth\w*|disco|punk|grunge|rock|pop|sitcom|tv|colou?rs?|tones?|palette|vhs|cinema)\b",
    re.IGNORECASE,
)
DECADE_CONTEXT_RADIUS = 20


def _aspect_ratio_in_context(text: str, match: re.Match) -> bool:
    if match.group() in COMMON_ASPECT_RATIOS:
        return True
    lo = max(0, match.start() - ASPECT_CONTEXT_RADIUS)
    hi = min(len(text), match.end() + ASPECT_CONTEXT_RADIUS)
    return ASPECT_CUE.search(text[lo:hi]) is not None


def _not_a_decade(text: str, match: re.Match) -> bool:
    """Reject decade references such as "90s fashion", "the 80s" or "'70s"."""
    if not DECADE.match(match.group()):
        return True
    before = text[max(0, match.start() - DECADE_CONTEXT_RADIUS):match.start()]
    after = text[match.end():match.end() + DECADE_CONTEXT_RADIUS]
    return not (DECADE_PREFIX.search(before) or DECADE_SUFFIX.match(after))


def _color_temp_in_range(text: str, match: re.Match) -> bool:
    return 1000 <= int(match.group(1)) <= 20000


@dataclass(frozen=True)
class TechnicalPattern:
    name: str
    role: str
    confidence: float
    regex: re.Pattern
    accept: Callable[[str, re.Match], bool] | None = None


TECHNICAL_PATTERNS: tuple[TechnicalPattern, ...] = (
    TechnicalPattern("frame_rate", "technical.frameRate", 0.95, FRAME_RATE),
    TechnicalPattern("duration", "technical.duration", 0.85, DURATION, _not_a_decade),
    TechnicalPattern("resolution", "technical.resolution", 0.9, RESOLUTION),
    TechnicalPattern("aspect_ratio", "technical.aspectRatio", 0.9, ASPECT_RATIO, _aspect_ratio_in_context),
    TechnicalPattern("lens", "camera.lens", 0.9, LENS),
    TechnicalPattern("aperture", "camera.focus", 0.95, APERTURE),
    TechnicalPattern("color_temp", "lighting.colorTemp", 0.9, COLOR_TEMP, _color_temp_in_range),
)


def extract_pattern(pattern: TechnicalPattern, text: str) -> Iterator[tuple[int, int, str]]:
    """Yield ``(start, end, role)`` for each accepted match of *pattern*."""
    for match in pattern.regex.finditer(text):
        if pattern.accept is not None and not pattern.accept(text, match):
            continue
        yield match.start(), match.end(), pattern.role


def extract_technical_spans(
    text: str,
    patterns: tuple[TechnicalPattern, ...] = TECHNICAL_PATTERNS,
) -> list[tuple[int, int, str, float]]:
    """Run every technical pattern; returns ``(start, end, role, confidence)``."""
    found = []
    for pattern in patterns:
        for start, end, role in extract_pattern(pattern, text):
            found.append((start, end, role, pattern.confidence))
    found.sort(key=lambda item: (item[0], -item[1]))
    return found
