"""Waste category classifier — maps free-text SBAZV summaries to categories.

Rules are evaluated top to bottom; the first rule with a matching keyword
decides. A rule whose category is None recognizes a collection that the
portal deliberately does not track (Christmas-tree pickup).
"""

from __future__ import annotations

import unicodedata

from wastecal.data.models import WasteCategory

CATEGORY_RULES: tuple[tuple[tuple[str, ...], WasteCategory | None], ...] = (
    (("restmüll", "restmuell", "restabfall"), WasteCategory.RESTMUELL),
    (("papier", "altpapier"), WasteCategory.PAPIER),
    (("gelb", "wertstoff", "verpackung"), WasteCategory.GELBESACK),
    (("bio", "biomüll"), WasteCategory.BIO),
    (("laub", "grün"), WasteCategory.LAUBSAECKE),
    (("weihnacht",), None),
)


def classify(summary: str) -> WasteCategory | None:
    """Return the waste category named in `summary`, or None."""
    text = unicodedata.normalize("NFC", summary).lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in text for keyword in keywords):
            return category
    return None
