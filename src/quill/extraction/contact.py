"""Contact and business card extraction."""

import re
from dataclasses import asdict, dataclass
from typing import Any

from quill.llm.response import optional_str
from quill.patterns import find_email, find_phone, find_url, non_empty_lines

CONTACT_PROMPT = """Extract contact information from this business card or note. Return valid JSON with this exact structure:
{{
    "first_name": "first name or null",
    "last_name": "last name or null",
    "job_title": "job title or null",
    "company": "company or null",
    "phone": "phone number or null",
    "email": "email address or null",
    "website": "website or null",
    "street_address": "street address or null",
    "city": "city or null",
    "state": "state or null",
    "zip_code": "zip code or null",
    "notes": "anything else or null"
}}

Note content:
{content}"""

JOB_TITLE_WORDS = [
    "ceo",
    "cto",
    "cfo",
    "coo",
    "cmo",
    "president",
    "vice president",
    "vp",
    "director",
    "manager",
    "supervisor",
    "engineer",
    "developer",
    "designer",
    "architect",
    "analyst",
    "consultant",
    "specialist",
    "coordinator",
    "executive",
    "administrator",
    "associate",
    "founder",
    "co-founder",
    "partner",
    "owner",
    "sales",
    "marketing",
    "senior",
    "junior",
    "lead",
    "head of",
    "chief",
]

COMPANY_WORDS = [
    "inc",
    "llc",
    "ltd",
    "corp",
    "corporation",
    "company",
    "co.",
    "group",
    "holdings",
    "solutions",
    "services",
    "consulting",
    "partners",
    "technologies",
    "tech",
    "systems",
    "enterprises",
    "industries",
    "associates",
    "agency",
    "studio",
    "labs",
    "ventures",
    "capital",
    "media",
]

STREET_PATTERN = re.compile(
    r"\b(?:street|st|avenue|ave|boulevard|blvd|road|rd|drive|dr|lane|ln|court|ct|way|"
    r"place|pl|circle|suite|ste|floor|fl|apt|unit)\b\.?",
    re.IGNORECASE,
)
CITY_STATE_ZIP = re.compile(r"^([A-Za-z][A-Za-z\s.]*?),\s*([A-Z]{2})\s*(\d{5}(?:-\d{4})?)$")
ZIP_PATTERN = re.compile(r"\b\d{5}(?:-\d{4})?\b")
LABEL_PREFIX = re.compile(r"^(?:tel|phone|cell|mobile|m|t|p|email|e|web|w)\s*[:.]\s*", re.IGNORECASE)


@dataclass(frozen=True)
class ContactResult:
    """Structured contact."""

    first_name: str | None = None
    last_name: str | None = None
    job_title: str | None = None
    company: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    notes: str | None = None

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def has_minimum_data(self) -> bool:
        return bool(self.display_name) or self.phone is not None or self.email is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContactResult":
        def get(snake: str, camel: str) -> str | None:
            return optional_str(data.get(snake) or data.get(camel))

        return cls(
            first_name=get("first_name", "firstName"),
            last_name=get("last_name", "lastName"),
            job_title=get("job_title", "jobTitle"),
            company=get("company", "company"),
            phone=get("phone", "phone"),
            email=get("email", "email"),
            website=get("website", "website"),
            street_address=get("street_address", "streetAddress"),
            city=get("city", "city"),
            state=get("state", "state"),
            zip_code=get("zip_code", "zipCode"),
            notes=get("notes", "notes"),
        )


def _has_word(text: str, words: list[str]) -> bool:
    lowered = text.lower()
    return any(re.search(rf"(?<![a-z]){re.escape(w)}(?![a-z])", lowered) for w in words)


def looks_like_address(line: str) -> bool:
    return bool(
        CITY_STATE_ZIP.match(line)
        or ZIP_PATTERN.search(line)
        or (line[:1].isdigit() and STREET_PATTERN.search(line))
    )


def parse_contact(content: str) -> ContactResult:
    """Pull contact fields from card-shaped text.

    Phone, email and website are taken by pattern; a line mostly made of one
    of them is consumed. Address lines are recognised next, then the first
    remaining line is the name, followed by job title and company.
    """
    phone = email = website = None
    street: list[str] = []
    city = state = zip_code = None
    remaining: list[str] = []

    for line in non_empty_lines(content):
        bare = LABEL_PREFIX.sub("", line)

        if phone is None and (found := find_phone(bare)):
            phone = found
            if len(found) > len(bare) / 2:
                continue
        if email is None and (found := find_email(bare)):
            email = found
            if len(found) > len(bare) / 2:
                continue
        if website is None and (found := find_url(bare)):
            website = found.rstrip(".,)")
            if len(website) > len(bare) / 2:
                continue

        match = CITY_STATE_ZIP.match(line)
        if match:
            city, state, zip_code = match.group(1).strip(), match.group(2), match.group(3)
            continue
        if looks_like_address(line):
            if line[:1].isdigit():
                street.append(line)
            elif zip_match := ZIP_PATTERN.search(line):
                zip_code = zip_match.group(0)
                before = line[: zip_match.start()].strip(" ,")
                parts = [p.strip() for p in before.split(",") if p.strip()]
                if len(parts) >= 2:
                    city, state = parts[0], parts[1]
                elif parts:
                    city = parts[0]
            continue

        remaining.append(line)

    first_name = last_name = job_title = company = None
    if remaining:
        name_parts = remaining.pop(0).split()
        first_name = name_parts[0]
        last_name = " ".join(name_parts[1:]) or None

    for line in list(remaining):
        if job_title is None and _has_word(line, JOB_TITLE_WORDS):
            job_title = line
            remaining.remove(line)
        elif company is None and _has_word(line, COMPANY_WORDS):
            company = line
            remaining.remove(line)

    if remaining and len(remaining[0]) < 50 and not re.search(r"[.!?]", remaining[0]):
        if company is None:
            company = remaining.pop(0)
        elif job_title is None:
            job_title = remaining.pop(0)

    return ContactResult(
        first_name=first_name,
        last_name=last_name,
        job_title=job_title,
        company=company,
        phone=phone,
        email=email,
        website=website,
        street_address=", ".join(street) or None,
        city=city,
        state=state,
        zip_code=zip_code,
        notes="\n".join(remaining) or None,
    )


__all__ = ["CONTACT_PROMPT", "ContactResult", "looks_like_address", "parse_contact"]
