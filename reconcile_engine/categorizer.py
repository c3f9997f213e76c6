"""
Keyword-based transaction categorization.

The category table is ordered: "Income" keywords are checked first so that
income signals win over merchant names, then the remaining categories in
declaration order. The first category with a keyword contained in the
description wins.
"""

import logging

from .config import DEFAULT_CATEGORY_PATTERNS, FALLBACK_CATEGORY, INCOME_CATEGORY
from .similarity import normalize_string

logger = logging.getLogger(__name__)

class Categorizer:
    """Assigns one category label to a transaction description."""

    def __init__(self, patterns=None, fallback=FALLBACK_CATEGORY):
        if patterns is None:
            patterns = DEFAULT_CATEGORY_PATTERNS
        self.fallback = fallback

        # Income goes first, the rest keeps table order
        ordered = []
        if INCOME_CATEGORY in patterns:
            ordered.append((INCOME_CATEGORY, tuple(patterns[INCOME_CATEGORY])))
        ordered.extend((label, tuple(keywords)) for label, keywords in patterns.items()
                       if label != INCOME_CATEGORY)
        self.rules = tuple(ordered)

    @property
    def labels(self):
        return [label for label, _ in self.rules] + [self.fallback]

    def categorize(self, description):
        """Return the category label for ``description``.

        Args:
            description (str or None): Free-text transaction description

        Returns:
            str: Matching category, or the fallback label when nothing matches
        """
        desc = normalize_string(description)
        if not desc:
            return self.fallback

        for label, keywords in self.rules:
            for keyword in keywords:
                if keyword and keyword in desc:
                    logger.debug(f"Categorized {description!r} as {label} (keyword {keyword!r})")
                    return label
        return self.fallback

_default_categorizer = Categorizer()

def categorize(description):
    return _default_categorizer.categorize(description)
