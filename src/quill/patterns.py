"""Shared regex patterns for heuristic classification and extraction.

Patterns are compiled once at import time. Each helper returns the first
match (or None) so callers stay deterministic.
"""

import re

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

PHONE_PATTERN = re.compile(r"(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")

URL_PATTERNS = [
    re.compile(r"https?://[^\s]+", re.IGNORECASE),
    re.compile(r"www\.[A-Za-z0-9.-]+\.[A-Za-z]{2,}", re.IGNORECASE),
    re.compile(r"\b[A-Za-z0-9-]+\.(?:com|org|net|io|co)\b", re.IGNORECASE),
]

CITY_STATE_ZIP_PATTERN = re.compile(r"([A-Za-z][A-Za-z\s.]*),\s*([A-Z]{2})\s*(\d{5}(?:-\d{4})?)")

# Amounts, tried in priority order: prefix symbol, suffix symbol, bare decimal
AMOUNT_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"([$€£¥])\s*(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"), "prefix"),
    (re.compile(r"(?<![\d.,])(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)\s*([$€£¥]|USD|EUR|GBP)(?![A-Za-z])"), "suffix"),
    (re.compile(r"(?<![\d.])(\d+\.\d{2})(?![\d.])"), "bare"),
]

CURRENCY_SYMBOLS: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "USD": "USD",
    "EUR": "EUR",
    "GBP": "GBP",
}

_MONTHS = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
_WEEKDAYS = r"(?:mon|tues?|wed(?:nes)?|thu(?:rs?)?|fri|sat(?:ur)?|sun)(?:day)?"

DATE_PATTERNS = [
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"),
    re.compile(rf"\b{_MONTHS}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?(?:,?\s+\d{{4}})?\b", re.IGNORECASE),
    re.compile(rf"\b\d{{1,2}}(?:st|nd|rd|th)?\s+{_MONTHS}(?:\s+\d{{4}})?\b", re.IGNORECASE),
    re.compile(rf"\b(?:next\s+)?{_WEEKDAYS}\b", re.IGNORECASE),
    re.compile(r"\b(?:today|tomorrow|tonight)\b", re.IGNORECASE),
]

TIME_PATTERNS = [
    re.compile(r"\b\d{1,2}:\d{2}\s*(?:[ap]\.?m\.?)?", re.IGNORECASE),
    re.compile(r"\b\d{1,2}\s*[ap]\.?m\.?(?![A-Za-z])", re.IGNORECASE),
    re.compile(r"\b(?:noon|midnight)\b", re.IGNORECASE),
]

MEASUREMENT_PATTERN = re.compile(
    r"^\s*(?:[-*•]\s*)?(?:\d+(?:[./]\d+)?|[½¼¾⅓⅔]|a|an|one|two|three)\s*"
    r"(?:cups?|c\.|tbsp|tablespoons?|tsp|teaspoons?|oz|ounces?|lbs?|pounds?|g|grams?|kg|"
    r"ml|l|liters?|litres?|pinch(?:es)?|dash(?:es)?|cloves?|cans?|sticks?|slices?|pieces?|"
    r"large|medium|small|whole)\b",
    re.IGNORECASE,
)

BULLET_PATTERN = re.compile(r"^\s*(?:[-*•·]|\[[ xX]?\]|\(\s?\)|\d+[.)])\s+")
CHECKBOX_PATTERN = re.compile(r"^\s*(?:[-*]\s*)?\[([ xX✓]?)\]\s*")


def first_match(patterns: list[re.Pattern[str]], text: str) -> str | None:
    """Return the first match of the first pattern that matches."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0).strip()
    return None


def find_email(text: str) -> str | None:
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else None


def find_phone(text: str) -> str | None:
    match = PHONE_PATTERN.search(text)
    return match.group(0).strip() if match else None


def find_url(text: str) -> str | None:
    """Find a website, ignoring domains that only appear in an email."""
    without_emails = EMAIL_PATTERN.sub(" ", text)
    return first_match(URL_PATTERNS, without_emails)


def find_date(text: str) -> str | None:
    return first_match(DATE_PATTERNS, text)


def find_time(text: str) -> str | None:
    return first_match(TIME_PATTERNS, text)


def find_amount(text: str) -> tuple[float, str | None] | None:
    """Find a money amount.

    Args:
        text: Text to scan

    Returns:
        ``(amount, currency_code)`` or None. The currency code is None for
        bare decimals without a symbol.
    """
    for pattern, kind in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        if kind == "prefix":
            symbol, raw = match.group(1), match.group(2)
        elif kind == "suffix":
            raw, symbol = match.group(1), match.group(2)
        else:
            raw, symbol = match.group(1), None
        try:
            amount = float(raw.replace(",", ""))
        except ValueError:
            continue
        return amount, CURRENCY_SYMBOLS.get(symbol) if symbol else None
    return None


def non_empty_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


__all__ = [
    "AMOUNT_PATTERNS",
    "BULLET_PATTERN",
    "CHECKBOX_PATTERN",
    "CITY_STATE_ZIP_PATTERN",
    "CURRENCY_SYMBOLS",
    "DATE_PATTERNS",
    "EMAIL_PATTERN",
    "MEASUREMENT_PATTERN",
    "PHONE_PATTERN",
    "TIME_PATTERNS",
    "URL_PATTERNS",
    "find_amount",
    "find_date",
    "find_email",
    "find_phone",
    "find_time",
    "find_url",
    "first_match",
    "non_empty_lines",
]
