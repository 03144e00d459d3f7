"""Meeting notes extraction."""

import re
from dataclasses import asdict, dataclass, field
from typing import Any

from quill.llm.response import normalize_strings, optional_str
from quill.patterns import find_date, find_time, non_empty_lines

MEETING_PROMPT = """Extract meeting information from these handwritten meeting notes. Return valid JSON with this exact structure:
{{
    "subject": "meeting subject or null",
    "attendees": ["name 1", "name 2"],
    "date": "date as written or null",
    "time": "time as written or null",
    "location": "location or null",
    "agenda": ["agenda item 1"],
    "action_items": ["action item 1"],
    "notes": "discussion notes or null"
}}

Guidelines:
- Write action items as complete sentences that keep who and what
- Return empty arrays when nothing was found

Notes:
{content}"""

# Label -> field name. Longer labels first so "action items" beats "action".
SECTION_LABELS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^(?:attendees|participants|present|people)\s*:\s*(.*)$", re.IGNORECASE), "attendees"),
    (re.compile(r"^agenda\s*:?\s*(.*)$", re.IGNORECASE), "agenda"),
    (re.compile(r"^(?:action items?|actions|next steps|to-?dos?)\s*:?\s*(.*)$", re.IGNORECASE), "action_items"),
    (re.compile(r"^(?:notes|discussion|summary|minutes)\s*:\s*(.*)$", re.IGNORECASE), "notes"),
    (re.compile(r"^(?:location|where|room)\s*:\s*(.*)$", re.IGNORECASE), "location"),
    (re.compile(r"^(?:date|when)\s*:\s*(.*)$", re.IGNORECASE), "date"),
    (re.compile(r"^time\s*:\s*(.*)$", re.IGNORECASE), "time"),
]

SUBJECT_PREFIX = re.compile(r"^(?:meeting|minutes|subject|topic|re)\s*:\s*", re.IGNORECASE)
ITEM_PREFIX = re.compile(r"^(?:[-*•]|\[[ xX]?\]|\d+[.)])\s*")
ACTION_HINT = re.compile(r"^(?:ai|action|todo|follow[- ]up)\s*:\s*", re.IGNORECASE)


@dataclass(frozen=True)
class MeetingResult:
    """Structured meeting notes."""

    subject: str | None = None
    attendees: list[str] = field(default_factory=list)
    date: str | None = None
    time: str | None = None
    location: str | None = None
    agenda: list[str] = field(default_factory=list)
    action_items: list[str] = field(default_factory=list)
    notes: str | None = None

    @property
    def has_minimum_data(self) -> bool:
        return self.subject is not None or bool(self.attendees) or bool(self.action_items)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MeetingResult":
        return cls(
            subject=optional_str(data.get("subject") or data.get("title")),
            attendees=normalize_strings(data.get("attendees")),
            date=optional_str(data.get("date")),
            time=optional_str(data.get("time")),
            location=optional_str(data.get("location")),
            agenda=normalize_strings(data.get("agenda")),
            action_items=normalize_strings(data.get("action_items") or data.get("actionItems")),
            notes=optional_str(data.get("notes")),
        )


def split_names(text: str) -> list[str]:
    """Split an attendee run on commas, 'and' or line breaks."""
    names: list[str] = []
    for part in re.split(r",|;|\band\b|\n|&", text):
        name = re.sub(r"\s+", " ", ITEM_PREFIX.sub("", part.strip())).strip(" .")
        if 2 <= len(name) <= 40 and name[0].isalpha() and name.lower() not in (n.lower() for n in names):
            names.append(name)
    return names


def parse_meeting(content: str) -> MeetingResult:
    """Group lines under the most recent section label.

    The first unlabeled line becomes the subject. Lines under no label go
    to notes, except "AI:"/"Action:" lines which are action items.
    """
    subject = None
    scalars: dict[str, str | None] = {"location": None, "date": None, "time": None}
    lists: dict[str, list[str]] = {"attendees": [], "agenda": [], "action_items": []}
    notes: list[str] = []
    current: str | None = None

    for line in non_empty_lines(content):
        labeled = False
        for pattern, name in SECTION_LABELS:
            match = pattern.match(line)
            if not match:
                continue
            labeled = True
            rest = match.group(1).strip()
            if name in scalars:
                scalars[name] = rest or None
                current = None
            else:
                current = name
                if rest:
                    _append(lists, notes, name, rest)
            break
        if labeled:
            continue

        if ACTION_HINT.match(line):
            lists["action_items"].append(ACTION_HINT.sub("", line).strip())
            continue

        if subject is None and current is None and not notes:
            subject = SUBJECT_PREFIX.sub("", line).strip(":#- ") or None
            continue

        _append(lists, notes, current or "notes", line)

    return MeetingResult(
        subject=subject,
        attendees=lists["attendees"],
        date=scalars["date"] or find_date(content),
        time=scalars["time"] or find_time(content),
        location=scalars["location"],
        agenda=lists["agenda"],
        action_items=lists["action_items"],
        notes="\n".join(notes) or None,
    )


def _append(lists: dict[str, list[str]], notes: list[str], name: str, text: str) -> None:
    if name == "attendees":
        for person in split_names(text):
            if person.lower() not in (n.lower() for n in lists["attendees"]):
                lists["attendees"].append(person)
    elif name in lists:
        item = ITEM_PREFIX.sub("", text).strip()
        if item:
            lists[name].append(item)
    else:
        notes.append(text)


__all__ = ["MEETING_PROMPT", "MeetingResult", "parse_meeting", "split_names"]
