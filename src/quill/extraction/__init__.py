"""Structured extraction for every content type.

Each type has a result dataclass, a heuristic parser and an AI prompt;
the engine composes them into two-tier extractors.
"""

from .base import AIStrategy, Extractor, HeuristicStrategy
from .contact import ContactResult
from .email import EmailResult
from .engine import AnyResult, ExtractionEngine
from .event import EventResult
from .expense import ExpenseResult
from .general import GeneralResult
from .meeting import MeetingResult
from .recipe import RecipeResult
from .todo import Priority, TodoItem, TodoResult

__all__ = [
    "AIStrategy",
    "AnyResult",
    "ContactResult",
    "EmailResult",
    "EventResult",
    "ExpenseResult",
    "ExtractionEngine",
    "Extractor",
    "GeneralResult",
    "HeuristicStrategy",
    "MeetingResult",
    "Priority",
    "RecipeResult",
    "TodoItem",
    "TodoResult",
]
