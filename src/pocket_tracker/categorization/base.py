from abc import ABC, abstractmethod
from typing import Optional, Sequence

from pocket_tracker.domain.models import Transaction

class CategorizationRule(ABC):
    """
    Abstract base class for all categorization rules.

    Implements Chain of Responsibility:
    - Each rule tries to categorize a description
    - If it can't it passes to the next rule
    - Rules are tried in priority order

    Usage:
        Create chain: keywords -> history -> default
        ```
        keyword_rule = KeywordRule(...)
        history_rule = HistoryRule(...)
        default_rule = DefaultRule()

        keyword_rule.set_next(history_rule).set_next(default_rule)

        category = keyword_rule.categorize("coffee", history)
        ```
    """

    def __init__(self):
        self._next_rule: Optional['CategorizationRule'] = None


    def set_next(self, rule: 'CategorizationRule') -> 'CategorizationRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)

        Example:
            `rule1.set_next(rule2).set_next(rule3)`
        """
        self._next_rule = rule
        return rule

    @abstractmethod
    def _matches(self, description: str, history: Sequence[Transaction]) -> bool:
        """
        Check if this rule matches the description.

        Subclasses implement their specific matching logic here.

        Args:
            description: Lower-cased description to check
            history: Previously recorded transactions

        Returns:
            True if this rule can categorize this description
        """
        pass


    @abstractmethod
    def _get_category(self, description: str, history: Sequence[Transaction]) -> str:
        """
        Get the category for the description.

        Called only if _matches() returns True.

        Args:
            description: Lower-cased description to categorize
            history: Previously recorded transactions

        Returns:
            Category name
        """
        pass


    def categorize(self, description: str, history: Sequence[Transaction] = ()) -> Optional[str]:
        """
        Attempt to categorize a description.

        This is the main method called by clients. It:
        1. Checks if a rule matches
        2. If yes, returns the category
        3. If no, tries the next rule in the chain

        Args:
            description: Lower-cased description to categorize
            history: Previously recorded transactions

        Returns:
            Category name, or None if no rules matched
        """
        if self._matches(description, history):
            return self._get_category(description, history)

        if self._next_rule:
            return self._next_rule.categorize(description, history)

        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
