"""Structural heuristics for content-type detection.

Each rule inspects the shape of the text (header prefixes, bullet density,
measurement units, money amounts) and may emit a type with a confidence.
Rules are pure functions; evaluation order doubles as the tie-breaker.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from quill.patterns import (
    BULLET_PATTERN,
    CHECKBOX_PATTERN,
    CITY_STATE_ZIP_PATTERN,
    MEASUREMENT_PATTERN,
    find_amount,
    find_date,
    find_email,
    find_phone,
    find_time,
    find_url,
    non_empty_lines,
)

from .models import ContentType
from .triggers import find_markers

logger = logging.getLogger(__name__)

EMAIL_HEADER_PREFIXES = ["to:", "from:", "subject:", "subj:", "cc:", "bcc:", "re:"]

MEETING_INDICATORS = [
    "attendees:",
    "agenda",
    "action items",
    "minutes",
    "meeting",
    "call with",
    "discussion:",
]

RECIPE_INGREDIENT_HEADERS = re.compile(r"^\s*ingredients?\s*:?\s*$", re.IGNORECASE | re.MULTILINE)
RECIPE_STEP_HEADERS = re.compile(
    r"^\s*(?:directions|instructions|steps|method|preparation)\s*:?\s*$",
    re.IGNORECASE | re.MULTILINE,
)

EXPENSE_KEYWORDS = re.compile(
    r"\b(?:total|subtotal|receipt|paid|amount due|balance|tax|tip|invoice)\b",
    re.IGNORECASE,
)

LOCATION_KEYWORDS = re.compile(r"\b(?:at|location|where|venue|room|address)\b\s*:?", re.IGNORECASE)

COMPANY_INDICATORS = [
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
]

JOB_TITLE_INDICATORS = [
    "ceo",
    "cto",
    "cfo",
    "president",
    "director",
    "manager",
    "engineer",
    "designer",
    "developer",
    "consultant",
    "analyst",
    "specialist",
    "coordinator",
    "founder",
    "partner",
    "owner",
    "vp",
    "vice president",
]

BUSINESS_CARD_THRESHOLD = 40
SHORT_LINE_LENGTH = 60


@dataclass(frozen=True)
class HeuristicMatch:
    """A single rule's verdict."""

    content_type: ContentType
    confidence: float
    reasoning: str


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"(?<![a-z]){re.escape(word)}(?![a-z])", text) is not None


def business_card_score(text: str) -> int:
    """Score how much text looks like a business card.

    Args:
        text: Text to score

    Returns:
        Integer score; 40 or more reads as a business card. Text carrying
        markers for another type scores -100.
    """
    if any(m.content_type != ContentType.CONTACT for m in find_markers(text)):
        return -100

    lines = non_empty_lines(text)
    lowered = text.lower()
    score = 0

    if len(lines) > 15:
        score -= 20

    words = text.split()
    if len(words) > 50 and len(words) / max(len(lines), 1) > 10:
        score -= 50

    if find_phone(text):
        score += 20
    if find_email(text):
        score += 20
    if find_url(text):
        score += 15
    if CITY_STATE_ZIP_PATTERN.search(text):
        score += 15
    if 2 <= len(lines) <= 10:
        score += 10
    if any(_contains_word(lowered, word) for word in COMPANY_INDICATORS):
        score += 10

    total_chars = sum(len(line) for line in lines)
    if lines and total_chars // len(lines) < 40:
        score += 5

    if any(_contains_word(lowered, word) for word in JOB_TITLE_INDICATORS):
        score += 5

    if lines:
        first_words = lines[0].split()
        if 2 <= len(first_words) <= 4 and all(w[0].isupper() for w in first_words):
            score += 5

    return score


def detect_email(text: str) -> HeuristicMatch | None:
    """Repeated header prefixes such as 'To:' and 'Subject:'."""
    prefixes = set()
    for line in non_empty_lines(text):
        lowered = line.lower()
        for prefix in EMAIL_HEADER_PREFIXES:
            if lowered.startswith(prefix):
                prefixes.add(prefix)
                break

    if len(prefixes) >= 2:
        return HeuristicMatch(
            ContentType.EMAIL,
            0.9,
            f"Found email headers: {', '.join(sorted(prefixes))}",
        )
    if len(prefixes) == 1 and find_email(text):
        return HeuristicMatch(ContentType.EMAIL, 0.75, "Email header with address")
    return None


def detect_contact(text: str) -> HeuristicMatch | None:
    """Business-card shaped text."""
    score = business_card_score(text)
    if score < BUSINESS_CARD_THRESHOLD:
        return None
    return HeuristicMatch(
        ContentType.CONTACT,
        min(0.95, 0.6 + score / 200),
        f"Business card score {score}",
    )


def detect_todo(text: str) -> HeuristicMatch | None:
    """Checkboxes, or a dense run of short bullet lines."""
    lines = non_empty_lines(text)
    if any(CHECKBOX_PATTERN.match(line) for line in lines):
        return HeuristicMatch(ContentType.TODO, 0.85, "Checkbox markers found")

    if len(lines) < 3:
        return None
    short_bullets = [
        line for line in lines if BULLET_PATTERN.match(line) and len(line) <= SHORT_LINE_LENGTH
    ]
    if len(short_bullets) / len(lines) >= 0.6:
        return HeuristicMatch(
            ContentType.TODO,
            0.75,
            f"{len(short_bullets)} of {len(lines)} lines are short list items",
        )
    return None


def detect_meeting(text: str) -> HeuristicMatch | None:
    """Meeting vocabulary such as 'Attendees:' and 'Action items'."""
    lowered = text.lower()
    found = [indicator for indicator in MEETING_INDICATORS if indicator in lowered]
    if len(found) >= 2:
        return HeuristicMatch(ContentType.MEETING, 0.8, f"Meeting indicators: {', '.join(found)}")
    if len(found) == 1:
        return HeuristicMatch(ContentType.MEETING, 0.55, f"Meeting indicator: {found[0]}")
    return None


def detect_recipe(text: str) -> HeuristicMatch | None:
    """Ingredient/direction headers or measurement-unit lines."""
    if RECIPE_INGREDIENT_HEADERS.search(text) and RECIPE_STEP_HEADERS.search(text):
        return HeuristicMatch(ContentType.RECIPE, 0.9, "Ingredients and directions headers")

    measured = [line for line in non_empty_lines(text) if MEASUREMENT_PATTERN.match(line)]
    if len(measured) >= 2:
        return HeuristicMatch(ContentType.RECIPE, 0.7, f"{len(measured)} measured ingredient lines")
    return None


def detect_expense(text: str) -> HeuristicMatch | None:
    """A money amount, stronger with receipt vocabulary."""
    amount = find_amount(text)
    if amount is None or amount[1] is None:
        return None
    if EXPENSE_KEYWORDS.search(text):
        return HeuristicMatch(ContentType.EXPENSE, 0.8, "Currency amount with receipt keyword")
    return HeuristicMatch(ContentType.EXPENSE, 0.55, "Currency amount")


def detect_event(text: str) -> HeuristicMatch | None:
    """A date together with a time."""
    if not (find_date(text) and find_time(text)):
        return None
    if LOCATION_KEYWORDS.search(text):
        return HeuristicMatch(ContentType.EVENT, 0.8, "Date, time and location")
    return HeuristicMatch(ContentType.EVENT, 0.75, "Date and time")


# Order matters: on equal confidence the earlier rule wins
HEURISTIC_RULES: list[Callable[[str], HeuristicMatch | None]] = [
    detect_email,
    detect_contact,
    detect_todo,
    detect_meeting,
    detect_recipe,
    detect_expense,
    detect_event,
]


def evaluate(text: str) -> list[HeuristicMatch]:
    """Run every rule and collect the verdicts in rule order."""
    if not text.strip():
        return []
    return [match for rule in HEURISTIC_RULES if (match := rule(text)) is not None]


def best_match(text: str) -> HeuristicMatch | None:
    """Highest-confidence verdict, ties resolved by rule order."""
    best: HeuristicMatch | None = None
    for match in evaluate(text):
        if best is None or match.confidence > best.confidence:
            best = match
    if best is not None:
        logger.debug(
            "Heuristic match: %s (%.2f) %s",
            best.content_type.value,
            best.confidence,
            best.reasoning,
        )
    return best


__all__ = [
    "HEURISTIC_RULES",
    "HeuristicMatch",
    "best_match",
    "business_card_score",
    "detect_contact",
    "detect_email",
    "detect_event",
    "detect_expense",
    "detect_meeting",
    "detect_recipe",
    "detect_todo",
    "evaluate",
]
