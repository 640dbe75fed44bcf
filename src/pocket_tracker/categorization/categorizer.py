import logging
from typing import Any, Dict, List, Optional, Sequence

from pocket_tracker.categorization.base import CategorizationRule
from pocket_tracker.categorization.rules import (
    KeywordRule,
    HistoryRule,
    DefaultRule
)
from pocket_tracker.categorization.categories import (
    category_names,
    load_categories,
)
from pocket_tracker.domain.models import Transaction

logger = logging.getLogger(__name__)


class CategorizationEngine:
    """
    Main engine for classifying free-text descriptions.

    Builds a chain of rules in priority order:
    1. Keyword rules (from the categories config, in table order)
    2. History rule (category of the first similar past transaction)
    3. Default (the config's "fallback", "Other" unless set)

    Usage:
        # Production - loads from ConfigLoader
        engine = CategorizationEngine()

        # Testing - inject custom config
        test_config = {"categories": [{"name": "Food", "keywords": ["coffee"]}]}
        engine = CategorizationEngine(config=test_config)

        category = engine.classify("Morning coffee", history)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        use_history: bool = True
    ):
        """
        Initialize categorization engine.

        Args:
            config: Optional categories config dict. If None, loads from ConfigLoader.
                Useful for testing with custom configs.
            use_history: Whether to fall back to similar past transactions
        """
        self.use_history = use_history
        self.keyword_table, self.fallback = load_categories(config)
        self.categories: List[str] = category_names(self.keyword_table, self.fallback)
        self._rule_chain: Optional[CategorizationRule] = None

        # Build the rule chain
        self._build_rule_chain()

    def _build_rule_chain(self) -> None:
        rules: List[CategorizationRule] = []

        if self.keyword_table:
            rules.append(KeywordRule(self.keyword_table))

        if self.use_history:
            rules.append(HistoryRule(self.categories))

        rules.append(DefaultRule(self.fallback))

        self._rule_chain = rules[0]
        for i in range(len(rules) - 1):
            rules[i].set_next(rules[i+1])

    def classify(
        self,
        description: str,
        history: Sequence[Transaction] = ()
    ) -> str:
        """
        Classify a single description.

        Args:
            description: Free-text description (e.g. "Uber to airport")
            history: Past transactions, in stored order

        Returns:
            Category name, always one of `self.categories`

        Example:
            ```
            >>> engine = CategorizationEngine()
            >>> engine.classify("Morning coffee")
            'Food'
            ```
        """
        if not self._rule_chain:
            raise RuntimeError("Rule chain not initialized")

        normalized = description.strip().lower()
        if not normalized:
            return self.fallback

        category = self._rule_chain.categorize(normalized, history)

        assert category is not None, "Rule chain should never return None"

        logger.debug("Classified %r as %s", description, category)
        return category

    def get_rule_chain_info(self) -> str:
        """
        Get information about the current rule chain.

        Useful for debugging and understanding which rules are active.
        """
        if not self._rule_chain:
            return "No rules loaded"

        rules = []
        current = self._rule_chain
        priority = 1

        while current:
            rules.append(f"{priority}. {current}")
            current = current._next_rule
            priority += 1

        return "\n".join(rules)

    def __repr__(self) -> str:
        num_rules = 0
        current = self._rule_chain
        while current:
            num_rules += 1
            current = current._next_rule

        return f"CategorizationEngine({num_rules} rules in chain)"
