"""
Base class for all page analyzers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from models import Finding, PageData, Severity, finding_id


class BaseAnalyzer(ABC):
    """All analyzers inherit from this class."""

    category: str = "Uncategorized"

    @abstractmethod
    def analyze(self, page: PageData) -> list[Finding]:
        """Analyze a single page and return its findings, passes included."""
        ...

    # ── Convenience factory ───────────────────────────────────────────────────

    def _finding(
        self,
        page: PageData,
        severity: str,
        title: str,
        message: str,
        value: Optional[str] = None,
        recommendation: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Finding:
        category = category or self.category
        return Finding(
            id=finding_id(category, title),
            category=category,
            severity=severity,
            title=title,
            message=message,
            value=value,
            recommendation=recommendation,
            page_url=page.url,
        )

    def error(self, page, title, message, recommendation=None, value=None, category=None) -> Finding:
        return self._finding(page, Severity.ERROR, title, message, value, recommendation, category)

    def warning(self, page, title, message, recommendation=None, value=None, category=None) -> Finding:
        return self._finding(page, Severity.WARNING, title, message, value, recommendation, category)

    def passed(self, page, title, message, value=None, category=None) -> Finding:
        return self._finding(page, Severity.PASS, title, message, value, None, category)
