"""Task list extraction."""

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from quill.llm.response import optional_bool, optional_str

TODO_PROMPT = """Extract all todo items from this text. Return valid JSON only, no other text.

Format:
{{
    "items": [
        {{
            "text": "Task description",
            "completed": false,
            "priority": "normal",
            "due_date": "2024-12-25" or "tomorrow" or null
        }}
    ]
}}

Rules:
- Extract ALL tasks, even if not explicitly marked
- Set completed=true if task has checkmark [x] or is marked done
- Priority: "high" (urgent/critical), "medium" (important), "normal" (default)
- Extract dates in natural language ("tomorrow", "next week") or ISO format
- If no todos found, return an empty array

Text:
{content}"""


class Priority(Enum):
    """Task priority."""

    HIGH = "high"
    MEDIUM = "medium"
    NORMAL = "normal"


# Tried in order; group 1 is the task text
TODO_LINE_PATTERNS = [
    re.compile(r"^[\[(]([ xX✓]?)[\])]\s*(.+)$"),
    re.compile(r"^[-*•]\s*\[([ xX✓]?)\]\s*(.+)$"),
    re.compile(r"^[-*•]\s*()(.+)$"),
    re.compile(r"^\d+[.)]\s*()(.+)$"),
    re.compile(r"^todo:?\s*()(.+)$", re.IGNORECASE),
]

DUE_DATE_PATTERNS = [
    re.compile(r"\bdue\s+(\d{1,2}/\d{1,2}(?:/\d{2,4})?)", re.IGNORECASE),
    re.compile(r"\bby\s+((?:next\s+)?[A-Za-z]+(?:\s+\d{1,2})?)\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,2}/\d{1,2}/\d{2,4})\b"),
    re.compile(r"\b(today|tomorrow|tonight)\b", re.IGNORECASE),
]


@dataclass(frozen=True)
class TodoItem:
    """A single task."""

    text: str
    completed: bool = False
    priority: Priority = Priority.NORMAL
    due_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["priority"] = self.priority.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TodoItem":
        try:
            priority = Priority(str(data.get("priority") or "normal").lower())
        except ValueError:
            priority = Priority.NORMAL
        return cls(
            text=str(data["text"]).strip(),
            completed=optional_bool(data.get("completed")),
            priority=priority,
            due_date=optional_str(data.get("due_date") or data.get("dueDate")),
        )


@dataclass(frozen=True)
class TodoResult:
    """Structured task list."""

    items: list[TodoItem] = field(default_factory=list)

    @property
    def has_minimum_data(self) -> bool:
        return len(self.items) > 0

    def to_dict(self) -> dict[str, Any]:
        return {"items": [item.to_dict() for item in self.items]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TodoResult":
        raw_items = data.get("items", data.get("todos", []))
        if not isinstance(raw_items, list):
            raise ValueError("items is not a list")
        items = []
        for raw in raw_items:
            if isinstance(raw, str) and raw.strip():
                items.append(TodoItem(text=raw.strip()))
            elif isinstance(raw, dict) and str(raw.get("text", "")).strip():
                items.append(TodoItem.from_dict(raw))
        return cls(items=items)


def detect_priority(text: str) -> Priority:
    lowered = text.lower()
    if "!!!" in text or "urgent" in lowered or "asap" in lowered:
        return Priority.HIGH
    if "!!" in text or "important" in lowered:
        return Priority.MEDIUM
    return Priority.NORMAL


def detect_due_date(text: str) -> str | None:
    for pattern in DUE_DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def parse_todo_line(line: str) -> TodoItem | None:
    """Parse one checkbox, bullet, numbered or 'TODO:' line."""
    stripped = line.strip()
    if not stripped:
        return None
    for pattern in TODO_LINE_PATTERNS:
        match = pattern.match(stripped)
        if match:
            text = match.group(2).strip()
            if not text:
                return None
            return TodoItem(
                text=text,
                completed=match.group(1) in ("x", "X", "✓"),
                priority=detect_priority(text),
                due_date=detect_due_date(text),
            )
    return None


def parse_todos(content: str) -> TodoResult:
    """Collect list-shaped lines as tasks.

    When no line looks like a list item, every short non-empty line is
    taken as a task, since a marked todo note is often a bare list.
    """
    items = [item for line in content.splitlines() if (item := parse_todo_line(line))]
    if not items:
        items = [
            TodoItem(text=line, priority=detect_priority(line), due_date=detect_due_date(line))
            for line in (raw.strip() for raw in content.splitlines())
            if line and len(line) <= 120
        ]
    return TodoResult(items=items)


__all__ = [
    "Priority",
    "TODO_PROMPT",
    "TodoItem",
    "TodoResult",
    "detect_due_date",
    "detect_priority",
    "parse_todo_line",
    "parse_todos",
]
