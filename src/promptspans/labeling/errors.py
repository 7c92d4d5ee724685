"""Exceptions raised for programmer-level misuse of the labeling pipeline.

Data-quality problems in candidate spans never raise; they are reported as
diagnostic notes on the stage result instead.
"""


class LabelingError(Exception):
    """Base class for labeling pipeline errors."""


class TaxonomyError(LabelingError, ValueError):
    """Raised when a taxonomy definition is malformed."""


class VocabularyError(LabelingError, ValueError):
    """Raised when a closed vocabulary references unknown categories."""
