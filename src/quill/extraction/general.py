"""Free-form note extraction."""

from dataclasses import asdict, dataclass, field
from typing import Any

from quill.llm.response import normalize_strings, optional_str
from quill.notes.triggers import extract_hashtags
from quill.patterns import non_empty_lines

GENERAL_PROMPT = """Summarize the structure of this handwritten note. Return valid JSON with this exact structure:
{{
    "title": "short title (max 8 words) or null",
    "body": "the note text, with OCR mistakes corrected",
    "tags": ["tag1", "tag2"]
}}

Note content:
{content}"""

MAX_TITLE_LENGTH = 80


@dataclass(frozen=True)
class GeneralResult:
    """Structured free-form note."""

    title: str | None = None
    body: str | None = None
    tags: list[str] = field(default_factory=list)

    @property
    def has_minimum_data(self) -> bool:
        return self.body is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneralResult":
        return cls(
            title=optional_str(data.get("title")),
            body=optional_str(data.get("body")),
            tags=[t.lower().lstrip("#") for t in normalize_strings(data.get("tags"))],
        )


def parse_general(content: str) -> GeneralResult:
    lines = non_empty_lines(content)
    if not lines:
        return GeneralResult()
    title = lines[0] if len(lines[0]) <= MAX_TITLE_LENGTH else lines[0][:MAX_TITLE_LENGTH].rstrip()
    return GeneralResult(title=title, body=content.strip(), tags=extract_hashtags(content))


__all__ = ["GENERAL_PROMPT", "GeneralResult", "parse_general"]
