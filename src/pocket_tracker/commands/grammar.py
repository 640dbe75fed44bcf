"""
Text command grammar.

Commands arrive as plain text (typed, or already transcribed from speech)
and are matched against an ordered table of rules. The first rule whose
pattern matches wins; its extractor turns the match into arguments.

Supported phrases:
    add coffee 5 dollars        expense
    income salary 1000          income
    add milk to shopping        shopping item
    shopping bread              shopping item
    remind me to call doctor    task
    how are my budgets          budget status
"""
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, Sequence

HELP_TEXT = 'Command not recognized. Try: "add coffee 5 dollars"'


class InputMalformedError(ValueError):
    """Raised when a command cannot be parsed. Nothing is applied."""
    pass


class CommandAction(Enum):
    ADD_EXPENSE = "add-expense"
    ADD_INCOME = "add-income"
    ADD_SHOPPING = "add-shopping"
    ADD_TASK = "add-task"
    SHOW_BUDGET = "show-budget"


@dataclass(frozen=True)
class ParsedCommand:
    action: CommandAction
    args: Dict[str, Any] = field(default_factory=dict)


Extractor = Callable[[re.Match], Dict[str, Any]]


@dataclass(frozen=True)
class GrammarRule:
    """One (pattern, extractor, handler) row of the grammar table"""
    pattern: re.Pattern
    extractor: Extractor
    action: CommandAction


def parse_amount(text: str) -> Decimal:
    """
    Raises:
        InputMalformedError: If `text` is not a non-negative amount
    """
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InputMalformedError(f"Invalid amount: {text!r}")
    if not amount.is_finite() or amount < 0:
        raise InputMalformedError(f"Invalid amount: {text!r}")
    return amount


def _description_and_amount(match: re.Match) -> Dict[str, Any]:
    description = match.group("description").strip()
    if not description:
        raise InputMalformedError("Missing description")
    return {
        "description": description,
        "amount": parse_amount(match.group("amount")),
    }


def _item(match: re.Match) -> Dict[str, Any]:
    return {"item": (match.group("item") or match.group("item2")).strip()}


def _title(match: re.Match) -> Dict[str, Any]:
    return {"title": match.group("title").strip()}


def _nothing(match: re.Match) -> Dict[str, Any]:
    return {}


# An amount never runs on into further digits or a second decimal point
AMOUNT = r"(?P<amount>\d+(?:\.\d{1,2})?)(?![\d.])"

DEFAULT_RULES: List[GrammarRule] = [
    GrammarRule(
        re.compile(
            rf"\b(?:add|expense|spent?)\s+(?P<description>.+?)\s+{AMOUNT}\s*(?:dollars?|bucks?|rupees?)?",
            re.IGNORECASE,
        ),
        _description_and_amount,
        CommandAction.ADD_EXPENSE,
    ),
    GrammarRule(
        re.compile(rf"\bincome\s+(?P<description>.+?)\s+{AMOUNT}", re.IGNORECASE),
        _description_and_amount,
        CommandAction.ADD_INCOME,
    ),
    GrammarRule(
        re.compile(
            r"^(?:add\s+(?P<item>.+?)\s+to\s+(?:the\s+|my\s+)?(?:shopping(?:\s+list)?|list)"
            r"|shopping\s+(?P<item2>.+))$",
            re.IGNORECASE,
        ),
        _item,
        CommandAction.ADD_SHOPPING,
    ),
    GrammarRule(
        re.compile(r"\b(?:task|todo|remind\s+me\s+to)\s+(?P<title>.+)$", re.IGNORECASE),
        _title,
        CommandAction.ADD_TASK,
    ),
    GrammarRule(
        re.compile(r"budget|spending", re.IGNORECASE),
        _nothing,
        CommandAction.SHOW_BUDGET,
    ),
]


class CommandGrammar:
    """
    Ordered grammar table.

    Usage:
        grammar = CommandGrammar()
        command = grammar.parse("add coffee 5 dollars")
        # ParsedCommand(ADD_EXPENSE, {"description": "coffee", "amount": Decimal("5")})
    """

    def __init__(self, rules: Sequence[GrammarRule] = tuple(DEFAULT_RULES)):
        self.rules = list(rules)

    def parse(self, text: str) -> ParsedCommand:
        """
        Match `text` against the rules in order.

        Raises:
            InputMalformedError: If no rule matches, or the matching rule
                cannot extract valid arguments
        """
        normalized = " ".join(text.split())
        if not normalized:
            raise InputMalformedError(HELP_TEXT)

        for rule in self.rules:
            match = rule.pattern.search(normalized)
            if match:
                return ParsedCommand(rule.action, rule.extractor(match))

        raise InputMalformedError(HELP_TEXT)
