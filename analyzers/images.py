"""
Image analyzer: missing alt text and missing width/height attributes.
"""
from __future__ import annotations

from models import Category, Finding, PageData
from analyzers.base import BaseAnalyzer

_MAX_LISTED = 5


def images_without_alt(page: PageData) -> list[str]:
    return [
        img.src or "unknown source"
        for img in page.images
        if img.alt is None or not img.alt.strip()
    ]


class ImageAnalyzer(BaseAnalyzer):
    category = Category.IMAGES

    def analyze(self, page: PageData) -> list[Finding]:
        total = len(page.images)
        if total == 0:
            return []

        findings: list[Finding] = []

        # ── Alt text ──────────────────────────────────────────────────────────
        missing = images_without_alt(page)
        if missing:
            listed = ", ".join(missing[:_MAX_LISTED])
            if len(missing) > _MAX_LISTED:
                listed += f" ... (+{len(missing) - _MAX_LISTED} more)"
            findings.append(self.error(
                page, "Images without alt text",
                f"{len(missing)} of {total} images have no alt text.",
                "Add alt text to every image.",
                value=listed,
            ))
        else:
            findings.append(self.passed(page, "Alt text on images", f"All {total} images have alt text."))

        # ── Dimensions ────────────────────────────────────────────────────────
        without_dims = sum(1 for img in page.images if not img.width and not img.height)
        if without_dims == total:
            findings.append(self.warning(
                page, "Images without dimensions",
                "Width/height attributes reduce layout shift (CLS).",
                "Consider setting width/height on <img>.",
            ))
        elif without_dims > 0:
            findings.append(self.passed(
                page, "Image dimensions", f"{total - without_dims} images have dimensions.",
            ))

        return findings
