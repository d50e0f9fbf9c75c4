"""Map free-text feed categories onto the pulse taxonomy."""

from __future__ import annotations

from pulse.models import PulseCategory

# Evaluated top to bottom, first match wins.
DEFAULT_CATEGORY_RULES: tuple[tuple[tuple[str, ...], PulseCategory], ...] = (
    (("arxiv", "paper", "journal"), PulseCategory.PAPER),
    (("report", "whitepaper"), PulseCategory.REPORT),
    (("news", "reuters", "ap"), PulseCategory.NEWS),
    (("analysis", "review", "hbr"), PulseCategory.ANALYSIS),
)

FALLBACK_CATEGORY = PulseCategory.TREND


class CategoryMapper:
    """Case-insensitive substring classifier over an ordered rule table."""

    def __init__(
        self,
        rules: tuple[tuple[tuple[str, ...], PulseCategory], ...] = DEFAULT_CATEGORY_RULES,
        fallback: PulseCategory = FALLBACK_CATEGORY,
    ):
        self.rules = tuple(
            (tuple(k.lower() for k in keywords), category) for keywords, category in rules
        )
        self.fallback = fallback

    def map(self, raw_category: str | None) -> PulseCategory:
        if not raw_category:
            return self.fallback
        label = raw_category.lower()
        for keywords, category in self.rules:
            if any(keyword in label for keyword in keywords):
                return category
        return self.fallback
