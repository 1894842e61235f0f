"""
Score calculator.

Scoring model:
- A score is the share of passing findings: round(100 * passes / total),
  0 when there is nothing to score. Halves round up.
- Page scores count that page's findings; the site score counts aggregated
  groups, so one rule failing on 500 pages weighs the same as on one page.
- Category counts follow the same unit as the score they sit beside.
"""
from __future__ import annotations

import math
from typing import Iterable

from models import CategoryCounts, Finding, Severity


def percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return int(math.floor(100 * part / whole + 0.5))


def compute_score(findings: list[Finding]) -> int:
    """Returns 0–100."""
    passed = sum(1 for f in findings if f.severity == Severity.PASS)
    return percent(passed, len(findings))


def count_by_category(findings: Iterable[Finding]) -> dict[str, CategoryCounts]:
    counts: dict[str, CategoryCounts] = {}
    for finding in findings:
        counts.setdefault(finding.category, CategoryCounts()).add(finding.severity)
    return counts


def score_label(score: float) -> str:
    if score >= 90:
        return "Excellent"
    elif score >= 75:
        return "Good"
    elif score >= 50:
        return "Needs Work"
    else:
        return "Poor"
