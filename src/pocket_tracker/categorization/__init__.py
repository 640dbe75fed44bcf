"""
Categorization system for the tracker.

Classifies free-text descriptions using a chain of responsibility:
ordered keyword table, then similar past transactions, then "Other".

Quick Start:
    >>> from pocket_tracker.categorization import CategorizationEngine
    >>>
    >>> engine = CategorizationEngine()
    >>> category = engine.classify("Uber home", history)
    >>> print(f"Categorized as: {category}")
"""
from pocket_tracker.categorization.categorizer import CategorizationEngine
from pocket_tracker.categorization.base import CategorizationRule
from pocket_tracker.categorization.rules import (
    KeywordRule,
    HistoryRule,
    DefaultRule
)
from pocket_tracker.categorization import categories

__all__ = [
    "CategorizationEngine",
    "CategorizationRule",
    "KeywordRule",
    "HistoryRule",
    "DefaultRule",
    "categories",
]
