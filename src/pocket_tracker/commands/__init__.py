"""Text command parsing for typed or transcribed input."""
from pocket_tracker.commands.grammar import (
    CommandAction,
    CommandGrammar,
    GrammarRule,
    InputMalformedError,
    ParsedCommand,
)

__all__ = [
    "CommandAction",
    "CommandGrammar",
    "GrammarRule",
    "InputMalformedError",
    "ParsedCommand",
]
