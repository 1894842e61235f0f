"""
Converts SiteReport data to Pandas DataFrames and CSV bytes for export.
"""
from __future__ import annotations

import io

import pandas as pd

from config import CATEGORY_PILLARS, DEFAULT_PILLAR
from models import AggregatedFinding, ImprovementSuggestion, PageReport, Severity

_FINDING_COLUMNS = [
    "Severity", "Pillar", "Category", "Finding", "Pages", "Affected",
    "Detail", "Value", "Recommendation",
]


def pillar_for(category: str) -> str:
    return CATEGORY_PILLARS.get(category, DEFAULT_PILLAR)


# ── Findings DataFrame ─────────────────────────────────────────────────────────

def findings_to_df(findings: list[AggregatedFinding], include_passed: bool = True) -> pd.DataFrame:
    rows = []
    for finding in findings:
        if not include_passed and finding.severity == Severity.PASS:
            continue
        rows.append({
            "Severity":       finding.severity.upper(),
            "Pillar":         pillar_for(finding.category),
            "Category":       finding.category,
            "Finding":        finding.title,
            "Pages":          finding.page_url or "",
            "Affected":       len(finding.affected_pages),
            "Detail":         finding.message,
            "Value":          finding.value or "",
            "Recommendation": finding.recommendation or "",
        })

    if not rows:
        return pd.DataFrame(columns=_FINDING_COLUMNS)

    df = pd.DataFrame(rows, columns=_FINDING_COLUMNS)

    # Severity sort order; ties keep aggregation order
    df["_sev_order"] = df["Severity"].str.lower().map(Severity.RANK)
    df = df.sort_values(["_sev_order", "Pillar"], kind="stable").drop(columns=["_sev_order"])
    return df.reset_index(drop=True)


def pages_to_df(pages: list[PageReport]) -> pd.DataFrame:
    if not pages:
        return pd.DataFrame()

    rows = []
    for page in pages:
        trust = page.trust
        rows.append({
            "URL":                page.url,
            "Score":              page.score,
            "Errors":             sum(1 for f in page.findings if f.severity == Severity.ERROR),
            "Warnings":           sum(1 for f in page.findings if f.severity == Severity.WARNING),
            "Passed":             sum(1 for f in page.findings if f.severity == Severity.PASS),
            "Images Without Alt": len(page.images_without_alt),
            "Word Count":         trust.word_count if trust else 0,
            "Author":             (trust.author or "") if trust else "",
        })

    return pd.DataFrame(rows)


def suggestions_to_df(suggestions: list[ImprovementSuggestion]) -> pd.DataFrame:
    if not suggestions:
        return pd.DataFrame()

    return pd.DataFrame([
        {
            "ID":             s.id,
            "Severity":       s.severity.upper(),
            "Category":       s.category,
            "Title":          s.title,
            "Affected Pages": s.affected_count,
            "Recommendation": s.recommendation,
            "Fix Example":    s.fix_example or "",
        }
        for s in suggestions
    ])


# ── Summary table ──────────────────────────────────────────────────────────────

def category_summary_df(findings: list[AggregatedFinding]) -> pd.DataFrame:
    """Distinct rules per pillar, category and severity."""
    if not findings:
        return pd.DataFrame()

    df = findings_to_df(findings)
    summary = (
        df.groupby(["Pillar", "Category", "Severity"], sort=False)
        .size()
        .reset_index(name="Count")
    )
    summary["_order"] = summary["Severity"].str.lower().map(Severity.RANK)
    summary = summary.sort_values(["_order", "Pillar", "Category"]).drop(columns=["_order"])
    return summary.reset_index(drop=True)


# ── CSV export ─────────────────────────────────────────────────────────────────

def to_csv_bytes(df: pd.DataFrame) -> bytes:
    buf = io.StringIO()
    df.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")
