"""Email draft extraction."""

from dataclasses import asdict, dataclass
from typing import Any

from quill.llm.response import optional_str

EMAIL_PROMPT = """Extract email information from this handwritten note. Return valid JSON with this exact structure:
{{
    "to": "recipient@example.com or null",
    "cc": "cc@example.com or null",
    "bcc": "bcc@example.com or null",
    "subject": "email subject or null",
    "body": "email body text or null"
}}

Guidelines:
- Extract recipient email addresses (support multiple comma-separated)
- Extract CC and BCC if mentioned
- Extract subject line (often after "Subject:", "Re:", "Subj:")
- Extract body text (main content)
- Preserve paragraph breaks in body

Note content:
{content}"""

# Label vocabularies, checked in this order on every line
TO_PREFIXES = ["to:", "recipient:", "send to:"]
CC_PREFIXES = ["cc:", "copy:"]
BCC_PREFIXES = ["bcc:"]
SUBJECT_PREFIXES = ["subject:", "subj:", "re:", "regarding:"]
GREETINGS = ["dear ", "hi ", "hello", "hey "]


@dataclass(frozen=True)
class EmailResult:
    """Structured email draft."""

    to: str | None = None
    cc: str | None = None
    bcc: str | None = None
    subject: str | None = None
    body: str | None = None

    @property
    def has_minimum_data(self) -> bool:
        return self.to is not None or self.subject is not None or self.body is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EmailResult":
        return cls(
            to=optional_str(data.get("to")),
            cc=optional_str(data.get("cc")),
            bcc=optional_str(data.get("bcc")),
            subject=optional_str(data.get("subject")),
            body=optional_str(data.get("body")),
        )


def _field(line: str, prefixes: list[str]) -> str | None:
    lowered = line.lower()
    for prefix in prefixes:
        if lowered.startswith(prefix):
            return line[len(prefix) :].strip() or None
    return None


def parse_email(content: str) -> EmailResult:
    """Read header labels, then treat everything after the subject as body.

    A greeting line ("Dear", "Hi") also starts the body when no subject
    has been seen. Blank lines inside the body are kept.
    """
    to = cc = bcc = subject = None
    body_lines: list[str] = []
    in_body = False

    for raw in content.splitlines():
        line = raw.strip()
        if not line:
            if in_body:
                body_lines.append("")
            continue

        if to is None and (value := _field(line, TO_PREFIXES)):
            to = value
            continue
        if cc is None and (value := _field(line, CC_PREFIXES)):
            cc = value
            continue
        if bcc is None and (value := _field(line, BCC_PREFIXES)):
            bcc = value
            continue
        if subject is None and (value := _field(line, SUBJECT_PREFIXES)):
            subject = value
            in_body = True
            continue

        if not in_body and any(line.lower().startswith(g) for g in GREETINGS):
            in_body = True
        if in_body:
            body_lines.append(line)

    body = "\n".join(body_lines).strip()
    return EmailResult(to=to, cc=cc, bcc=bcc, subject=subject, body=body or None)


__all__ = ["EMAIL_PROMPT", "EmailResult", "parse_email"]
