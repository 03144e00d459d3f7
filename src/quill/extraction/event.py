"""Calendar event extraction."""

import re
from dataclasses import asdict, dataclass
from typing import Any

from quill.llm.response import optional_bool, optional_str
from quill.patterns import find_date, find_email, find_phone, find_time, non_empty_lines

EVENT_PROMPT = """Extract calendar event information from this handwritten note. Return valid JSON with this exact structure:
{{
    "title": "event title",
    "date": "date as written or YYYY-MM-DD, or null",
    "time": "time as written, or null",
    "location": "location or null",
    "description": "extra details or null",
    "organizer": "organizer name or null",
    "contact_info": "phone or email for the event, or null",
    "is_recurring": true/false,
    "recurrence_pattern": "daily|weekly|monthly|yearly or null"
}}

Note content:
{content}"""

LOCATION_LABEL = re.compile(r"^(?:location|venue|address|where|place)\s*:\s*(.+)$", re.IGNORECASE)
LOCATION_KEYWORDS = re.compile(r"\b(?:at|location|venue|address|where)\b", re.IGNORECASE)
ORGANIZER_LABEL = re.compile(r"^(?:organizer|organiser|host(?:ed by)?|by)\s*:?\s*(.+)$", re.IGNORECASE)

RECURRENCE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(?:every\s*day|daily)\b", re.IGNORECASE), "daily"),
    (re.compile(r"\b(?:every\s+(?:week|mon|tue|wed|thu|fri|sat|sun)\w*|weekly)\b", re.IGNORECASE), "weekly"),
    (re.compile(r"\b(?:every\s+month|monthly)\b", re.IGNORECASE), "monthly"),
    (re.compile(r"\b(?:every\s+year|yearly|annually)\b", re.IGNORECASE), "yearly"),
]


@dataclass(frozen=True)
class EventResult:
    """Structured calendar event."""

    title: str | None = None
    date: str | None = None
    time: str | None = None
    location: str | None = None
    description: str | None = None
    organizer: str | None = None
    contact_info: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None

    @property
    def has_minimum_data(self) -> bool:
        return self.title is not None and (self.date is not None or self.time is not None)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventResult":
        return cls(
            title=optional_str(data.get("title")),
            date=optional_str(data.get("date")),
            time=optional_str(data.get("time")),
            location=optional_str(data.get("location")),
            description=optional_str(data.get("description")),
            organizer=optional_str(data.get("organizer")),
            contact_info=optional_str(data.get("contact_info") or data.get("contactInfo")),
            is_recurring=optional_bool(data.get("is_recurring") or data.get("isRecurring")),
            recurrence_pattern=optional_str(
                data.get("recurrence_pattern") or data.get("recurrencePattern")
            ),
        )


def _find_location(lines: list[str]) -> str | None:
    """Inline 'Location: X', else the line after a location-keyword line."""
    for line in lines:
        match = LOCATION_LABEL.match(line)
        if match:
            return match.group(1).strip()

    for index, line in enumerate(lines[:-1]):
        if LOCATION_KEYWORDS.search(line):
            return lines[index + 1]
    return None


def parse_event(content: str) -> EventResult:
    """Pull the title from the first line and date/time via regex."""
    lines = non_empty_lines(content)
    if not lines:
        return EventResult()

    recurrence = next(
        (name for pattern, name in RECURRENCE_PATTERNS if pattern.search(content)),
        None,
    )

    organizer = None
    for line in lines[1:]:
        match = ORGANIZER_LABEL.match(line)
        if match:
            organizer = match.group(1).strip()
            break

    location = _find_location(lines)
    consumed = {lines[0], location}
    description_lines = [
        line for line in lines[1:] if line not in consumed and not LOCATION_LABEL.match(line)
    ]

    return EventResult(
        title=lines[0].strip(":#- ") or None,
        date=find_date(content),
        time=find_time(content),
        location=location,
        description="\n".join(description_lines) or None,
        organizer=organizer,
        contact_info=find_phone(content) or find_email(content),
        is_recurring=recurrence is not None,
        recurrence_pattern=recurrence,
    )


__all__ = ["EVENT_PROMPT", "EventResult", "parse_event"]
