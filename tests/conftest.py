"""Shared test fixtures."""
import pytest

from promptspans.labeling.taxonomy.registry import load_default_taxonomy
from promptspans.labeling.types import Span, SpanSource, make_span_id


@pytest.fixture(scope="session")
def taxonomy():
    return load_default_taxonomy()


@pytest.fixture
def labeler(taxonomy):
    from promptspans.labeling.pipeline import SpanLabeler

    return SpanLabeler(taxonomy)


@pytest.fixture
def make_span():
    """Build a Span whose end follows from its text."""

    def _make(text, start, role="style", confidence=0.5, source=SpanSource.ML_TAGGER, source_text=None):
        end = start + len(text)
        return Span(
            text=text,
            start=start,
            end=end,
            role=role,
            confidence=confidence,
            source=source,
            id=make_span_id(source_text if source_text is not None else text, start, end, role),
        )

    return _make


@pytest.fixture
def sample_prompt():
    return (
        "Low angle tracking shot of a weathered fisherman on a foggy pier at golden hour. "
        "Shot on 35mm film with a 50mm lens at f/1.8, soft light, shallow depth of field. "
        "24fps, 16:9, 5 seconds."
    )
