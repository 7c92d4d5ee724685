"""Span category taxonomy: registry and hierarchy validator."""

from .registry import (
    LEGACY_ALIASES,
    TAXONOMY_DEFINITION,
    TAXONOMY_VERSION,
    Category,
    TaxonomyRegistry,
    load_default_taxonomy,
)
from .validator import (
    IssueType,
    Severity,
    TaxonomyValidator,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    # Registry
    "Category",
    "TaxonomyRegistry",
    "load_default_taxonomy",
    "TAXONOMY_DEFINITION",
    "TAXONOMY_VERSION",
    "LEGACY_ALIASES",
    # Validation
    "TaxonomyValidator",
    "ValidationIssue",
    "ValidationReport",
    "IssueType",
    "Severity",
]
