"""
Improvement suggestions: one per non-passing aggregated finding, errors first.
"""
from __future__ import annotations

from config import FIX_EXAMPLES
from models import AggregatedFinding, ImprovementSuggestion, Severity


def build_suggestions(aggregated: list[AggregatedFinding]) -> list[ImprovementSuggestion]:
    suggestions: list[ImprovementSuggestion] = []
    for finding in aggregated:
        if finding.severity == Severity.PASS:
            continue
        suggestions.append(ImprovementSuggestion(
            id=f"sug-{len(suggestions) + 1}",
            title=finding.title,
            severity=finding.severity,
            category=finding.category,
            recommendation=finding.recommendation or finding.message,
            fix_example=FIX_EXAMPLES.get(finding.title),
            affected_count=len(finding.affected_pages),
        ))

    # sorted() is stable: warnings keep their relative order
    return sorted(suggestions, key=lambda s: 0 if s.severity == Severity.ERROR else 1)
