from typing import Dict, Iterable, List, Optional, Sequence

from pocket_tracker.categorization.base import CategorizationRule
from pocket_tracker.domain.models import Transaction


class KeywordRule(CategorizationRule):
    """
    Rule that matches keywords in descriptions.

    Features:
    - Case-insensitive substring matching
    - Can match multiple keywords per category
    - Categories are tried in table order, so the table order is the tie-break

    Example:
        ```
        # Match "coffee" or "lunch" -> "Food"
        rule = KeywordRule({
            "Food": ["coffee", "lunch"]
        })
        ```
    """

    def __init__(self, keyword_map: Dict[str, List[str]]):
        """
        Initialize keyword rule

        Args:
            keyword_map: Ordered dict mapping categories to list of keywords.
                Example: `{"Transport": ["uber", "taxi", "parking"]}`
        """
        super().__init__()
        self.keyword_map = keyword_map

        # Pre-process keywords to lowercase for case-insensitive matching
        self._normalized_map: Dict[str, List[str]] = {}
        for category, keywords in keyword_map.items():
            self._normalized_map[category] = [kw.lower() for kw in keywords if kw]

    def _find(self, description: str) -> Optional[str]:
        for category, keywords in self._normalized_map.items():
            if any(keyword in description for keyword in keywords):
                return category
        return None

    def _matches(self, description: str, history: Sequence[Transaction]) -> bool:
        """Check if any keyword matches the description"""
        return self._find(description) is not None

    def _get_category(self, description: str, history: Sequence[Transaction]) -> str:
        """Return the category for the first matched keyword."""
        category = self._find(description)
        if category is None:
            raise RuntimeError("_get_category called but no match found")
        return category

    def __repr__(self):
        return f"KeywordRule({len(self.keyword_map)} categories)"


class HistoryRule(CategorizationRule):
    """
    Rule that reuses the category of a similar past transaction.

    A past transaction is similar when its description is a substring of,
    or contains, the description being categorized (case-insensitive).
    The first similar transaction in history order wins.

    Only categories from `allowed_categories` are reused, so a history entry
    such as an "Income" record never leaks into expense categorization.
    """

    def __init__(self, allowed_categories: Iterable[str]):
        super().__init__()
        self.allowed_categories = set(allowed_categories)

    def _find(self, description: str, history: Sequence[Transaction]) -> Optional[Transaction]:
        for txn in history:
            if txn.category not in self.allowed_categories:
                continue
            past = txn.description.lower()
            if past in description or description in past:
                return txn
        return None

    def _matches(self, description: str, history: Sequence[Transaction]) -> bool:
        return self._find(description, history) is not None

    def _get_category(self, description: str, history: Sequence[Transaction]) -> str:
        match = self._find(description, history)
        if match is None:
            raise RuntimeError("_get_category called but no match found")
        return match.category

    def __repr__(self) -> str:
        return f"HistoryRule({len(self.allowed_categories)} categories)"


class DefaultRule(CategorizationRule):
    """
    Fallback rule that always matches.

    Should be the last rule in the chain.
    Returns the defined default category for every description.
    """

    def __init__(self, default_category = 'Other'):
        """
        Initialize the default rule.

        Args:
            default_category: The default category to return
        """
        super().__init__()
        self.default_category = default_category

    def _matches(self, description: str, history: Sequence[Transaction]) -> bool:
        """Always matches"""
        return True

    def _get_category(self, description: str, history: Sequence[Transaction]) -> str:
        """Only returns the default category."""
        return self.default_category

    def __repr__(self) -> str:
        return f"DefaultRule('{self.default_category}')"
