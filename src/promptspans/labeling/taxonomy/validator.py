"""Read-only taxonomy audit over a finished span set.

An attribute span (``subject.wardrobe``) is an orphan when no span in the
set carries one of its ancestor roles (``subject``). The validator only
reports; it never drops or edits spans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from ..types import Span
from .registry import TaxonomyRegistry


class IssueType(str, Enum):
    ORPHANED_ATTRIBUTE = "orphaned_attribute"
    INVALID_CATEGORY = "invalid_category"


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationIssue:
    type: IssueType
    severity: Severity
    message: str
    affected_spans: tuple[Span, ...] = ()
    missing_parent: str | None = None
    suggested_fix: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "affectedSpans": [s.to_dict() for s in self.affected_spans],
            "missingParent": self.missing_parent,
            "suggestedFix": self.suggested_fix,
        }


@dataclass
class ValidationReport:
    is_valid: bool
    has_warnings: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def orphans(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.type is IssueType.ORPHANED_ATTRIBUTE]

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "hasWarnings": self.has_warnings,
            "issues": [i.to_dict() for i in self.issues],
        }


class TaxonomyValidator:
    """Hierarchy checks for span sets, bound to one taxonomy registry."""

    def __init__(self, taxonomy: TaxonomyRegistry) -> None:
        self.taxonomy = taxonomy

    def _present_roles(self, spans: Iterable[Span]) -> set[str]:
        return {self.taxonomy.resolve(s.role) for s in spans}

    def _has_parent(self, role: str, present: set[str]) -> bool:
        return any(a in present for a in self.taxonomy.ancestors(role))

    def _orphan_groups(self, spans: list[Span]) -> dict[str, list[Span]]:
        present = self._present_roles(spans)
        groups: dict[str, list[Span]] = {}
        for span in spans:
            role = self.taxonomy.resolve(span.role)
            if not self.taxonomy.is_valid(role) or not self.taxonomy.is_attribute(role):
                continue
            if self._has_parent(role, present):
                continue
            groups.setdefault(self.taxonomy.parent_of(role) or role, []).append(span)
        return groups

    def validate_spans(self, spans: list[Span], strict: bool = False) -> ValidationReport:
        """Audit *spans*; in strict mode any warning also marks the set invalid."""
        issues: list[ValidationIssue] = []

        invalid = [s for s in spans if not self.taxonomy.is_valid(self.taxonomy.resolve(s.role))]
        for span in invalid:
            issues.append(ValidationIssue(
                type=IssueType.INVALID_CATEGORY,
                severity=Severity.ERROR,
                message=f'Span "{span.text}" has unregistered category "{span.role}"',
                affected_spans=(span,),
                suggested_fix=f'Relabel with a registered category or "{self.taxonomy.fallback_role}"',
            ))

        for missing, orphans in self._orphan_groups(spans).items():
            label = self.taxonomy.label_for(missing) or missing
            noun = "attribute" if len(orphans) == 1 else "attributes"
            issues.append(ValidationIssue(
                type=IssueType.ORPHANED_ATTRIBUTE,
                severity=Severity.WARNING,
                message=f"Found {len(orphans)} {label} {noun} without a {missing} span",
                affected_spans=tuple(orphans),
                missing_parent=missing,
                suggested_fix=f'Add a "{missing}" span before labelling its attributes',
            ))

        has_errors = any(i.severity is Severity.ERROR for i in issues)
        has_warnings = any(i.severity is Severity.WARNING for i in issues)
        return ValidationReport(
            is_valid=not has_errors and not (strict and has_warnings),
            has_warnings=has_warnings,
            issues=issues,
        )

    def has_orphaned_attributes(self, spans: list[Span]) -> bool:
        """Boolean-only orphan check for interactive callers."""
        present = self._present_roles(spans)
        for span in spans:
            role = self.taxonomy.resolve(span.role)
            if self.taxonomy.is_valid(role) and self.taxonomy.is_attribute(role):
                if not self._has_parent(role, present):
                    return True
        return False

    def get_missing_parents(self, spans: list[Span]) -> list[str]:
        return sorted(self._orphan_groups(spans))

    def validate_before_add(self, category: str, spans: list[Span]) -> ValidationIssue | None:
        """Would adding a span of *category* create an orphan given *spans*?"""
        role = self.taxonomy.resolve(category)
        if not self.taxonomy.is_valid(role):
            return ValidationIssue(
                type=IssueType.INVALID_CATEGORY,
                severity=Severity.ERROR,
                message=f'"{category}" is not a registered category',
            )
        if not self.taxonomy.is_attribute(role):
            return None
        if self._has_parent(role, self._present_roles(spans)):
            return None
        parent = self.taxonomy.parent_of(role)
        return ValidationIssue(
            type=IssueType.ORPHANED_ATTRIBUTE,
            severity=Severity.WARNING,
            message=f'Adding "{role}" without a "{parent}" span creates an orphan',
            missing_parent=parent,
            suggested_fix=f'Add a "{parent}" span first',
        )

    def get_validation_stats(self, spans: list[Span]) -> dict[str, Any]:
        resolved = [self.taxonomy.resolve(s.role) for s in spans]
        groups = self._orphan_groups(spans)
        return {
            "totalSpans": len(spans),
            "parentSpans": sum(1 for r in resolved if self.taxonomy.is_valid(r) and "." not in r),
            "attributeSpans": sum(1 for r in resolved if self.taxonomy.is_valid(r) and "." in r),
            "invalidSpans": sum(1 for r in resolved if not self.taxonomy.is_valid(r)),
            "orphanedAttributes": sum(len(g) for g in groups.values()),
            "missingParents": sorted(groups),
        }
