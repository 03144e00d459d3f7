"""Inline trigger marker detection.

Markers are hash-delimited keywords such as ``#todo#`` that name a content
type explicitly. Parsing is synchronous and has no side effects.
"""

import re
from dataclasses import dataclass, field

from .models import ContentType

# Marker vocabulary per content type. GENERAL has no marker.
TRIGGER_MARKERS: dict[ContentType, list[str]] = {
    ContentType.TODO: ["#todo#", "#to-do#", "#tasks#", "#task#"],
    ContentType.EMAIL: ["#email#", "#mail#"],
    ContentType.MEETING: ["#meeting#", "#notes#", "#minutes#"],
    ContentType.EVENT: ["#event#", "#appointment#", "#schedule#", "#appt#"],
    ContentType.EXPENSE: ["#expense#", "#receipt#", "#spent#", "#paid#"],
    ContentType.RECIPE: ["#recipe#", "#cook#", "#bake#"],
    ContentType.CONTACT: ["#contact#", "#person#", "#phone#"],
}

_MARKER_TYPES: dict[str, ContentType] = {
    marker: content_type
    for content_type, markers in TRIGGER_MARKERS.items()
    for marker in markers
}

# Longest first so "#to-do#" is never shadowed by a shorter alternative
_MARKER_PATTERN = re.compile(
    "|".join(re.escape(m) for m in sorted(_MARKER_TYPES, key=len, reverse=True)),
    re.IGNORECASE,
)
_DIVIDER_PATTERN = re.compile(r"^-{3,}$")
_HASHTAG_PATTERN = re.compile(r"(?<![\w#])#([A-Za-z][\w-]*)\b(?!#)")


@dataclass(frozen=True)
class TriggerMatch:
    """A single marker occurrence in the source text."""

    content_type: ContentType
    start: int
    end: int
    marker: str


@dataclass(frozen=True)
class TriggerParseResult:
    """Outcome of scanning text for trigger markers.

    Attributes:
        matches: Every marker occurrence, ordered by position
        content_type: Type of the earliest marker, or None without markers
        cleaned_text: Text with all markers of ``content_type`` removed
        has_divider: True when a line consisting only of dashes was found
        suggested_tags: Free-form hashtags that are not markers
    """

    matches: list[TriggerMatch]
    content_type: ContentType | None
    cleaned_text: str
    has_divider: bool
    suggested_tags: list[str] = field(default_factory=list)

    @property
    def has_trigger(self) -> bool:
        return self.content_type is not None

    @property
    def distinct_types(self) -> list[ContentType]:
        """Marker types in order of first appearance."""
        seen: list[ContentType] = []
        for match in self.matches:
            if match.content_type not in seen:
                seen.append(match.content_type)
        return seen


def find_markers(text: str) -> list[TriggerMatch]:
    """Find every marker occurrence in text, ordered by position."""
    return [
        TriggerMatch(
            content_type=_MARKER_TYPES[m.group(0).lower()],
            start=m.start(),
            end=m.end(),
            marker=m.group(0),
        )
        for m in _MARKER_PATTERN.finditer(text)
    ]


def remove_markers(text: str, content_type: ContentType | None = None) -> str:
    """Remove markers from text.

    Args:
        text: Source text
        content_type: Only remove markers of this type (all types when None)

    Returns:
        Text with the selected markers removed and surrounding space tidied
    """

    def _replace(match: re.Match[str]) -> str:
        if content_type is None or _MARKER_TYPES[match.group(0).lower()] == content_type:
            return ""
        return match.group(0)

    lines = []
    for line in text.split("\n"):
        stripped = _MARKER_PATTERN.sub(_replace, line)
        if stripped != line:
            # Tidy only the lines a marker was taken out of, keeping their indent
            indent = line[: len(line) - len(line.lstrip())]
            body = re.sub(r"[ \t]{2,}", " ", stripped).strip()
            stripped = indent + body if body else ""
        lines.append(stripped)
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()


def has_divider(text: str) -> bool:
    """Check whether any line consists solely of three or more dashes."""
    return any(_DIVIDER_PATTERN.match(line.strip()) for line in text.splitlines())


def extract_hashtags(text: str) -> list[str]:
    """Collect free-form hashtags that are not trigger markers.

    Returns:
        Lowercased tag names without the leading '#', first-seen order
    """
    masked = _MARKER_PATTERN.sub(lambda m: " " * len(m.group(0)), text)
    tags: list[str] = []
    for match in _HASHTAG_PATTERN.finditer(masked):
        tag = match.group(1).lower()
        if tag not in tags:
            tags.append(tag)
    return tags


class TriggerParser:
    """Detects explicit content-type markers in captured text."""

    def parse(self, text: str) -> TriggerParseResult:
        """Scan text for markers.

        The earliest marker decides the type. Every occurrence of that
        type's markers is removed; markers of other types are left in place.

        Args:
            text: Raw recognized text

        Returns:
            TriggerParseResult describing matches and cleaned text
        """
        matches = find_markers(text)
        content_type = matches[0].content_type if matches else None
        cleaned = remove_markers(text, content_type) if content_type else text.strip()

        return TriggerParseResult(
            matches=matches,
            content_type=content_type,
            cleaned_text=cleaned,
            has_divider=has_divider(text),
            suggested_tags=extract_hashtags(text),
        )


__all__ = [
    "TRIGGER_MARKERS",
    "TriggerMatch",
    "TriggerParseResult",
    "TriggerParser",
    "extract_hashtags",
    "find_markers",
    "has_divider",
    "remove_markers",
]
