"""Expense extraction from receipts and spending notes."""

import re
from dataclasses import asdict, dataclass
from typing import Any

from quill.llm.response import optional_float, optional_str
from quill.patterns import find_amount

EXPENSE_PROMPT = """Extract expense information from this handwritten note or receipt. Return valid JSON with this exact structure:
{{
    "merchant": "merchant name or null",
    "amount": 123.45 or null,
    "currency": "USD" or null,
    "date": "YYYY-MM-DD or null",
    "category": "category or null",
    "payment_method": "payment method or null",
    "notes": "additional notes or null"
}}

Guidelines:
- Extract merchant/vendor name
- Parse amount as number (e.g., "$123.45" -> 123.45)
- Detect currency (default USD if $ symbol)
- Parse date in YYYY-MM-DD format
- Categorize: food, transport, shopping, utilities, entertainment, health, travel, other
- Detect payment method: cash, card, credit, debit, mobile
- Include any notes about the expense

Note content:
{content}"""

# Checked in order; the first keyword hit wins
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "food": ["restaurant", "food", "dining", "lunch", "dinner", "breakfast", "cafe", "coffee"],
    "transport": ["uber", "lyft", "taxi", "fuel", "parking", "transit", "metro", "bus"],
    "shopping": ["store", "amazon", "shop", "retail", "purchase"],
    "utilities": ["electric", "water bill", "internet", "utility"],
    "entertainment": ["movie", "concert", "game", "ticket", "theater"],
    "health": ["pharmacy", "doctor", "hospital", "medical", "health", "clinic"],
    "travel": ["hotel", "flight", "airline", "booking", "airbnb"],
}

PAYMENT_KEYWORDS: dict[str, list[str]] = {
    "mobile": ["apple pay", "google pay", "venmo", "paypal", "zelle", "cashapp"],
    "cash": ["cash"],
    "credit": ["credit"],
    "debit": ["debit"],
    "card": ["card", "visa", "mastercard", "amex"],
}

_DATE_FORMATS = [
    (re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b"), "ymd"),
    (re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b"), "mdy"),
    (re.compile(r"\b(\d{1,2})-(\d{1,2})-(\d{4})\b"), "dmy"),
]
_AMOUNT_HINT = re.compile(r"[$€£¥]|\d+\.\d{2}")


@dataclass(frozen=True)
class ExpenseResult:
    """Structured expense."""

    merchant: str | None = None
    amount: float | None = None
    currency: str | None = None
    date: str | None = None
    category: str | None = None
    payment_method: str | None = None
    notes: str | None = None

    @property
    def has_minimum_data(self) -> bool:
        return self.merchant is not None or self.amount is not None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExpenseResult":
        amount = optional_float(data.get("amount"))
        currency = optional_str(data.get("currency"))
        return cls(
            merchant=optional_str(data.get("merchant")),
            amount=amount,
            currency=(currency or "USD").upper() if amount is not None else None,
            date=optional_str(data.get("date")),
            category=optional_str(data.get("category")),
            payment_method=optional_str(data.get("payment_method") or data.get("paymentMethod")),
            notes=optional_str(data.get("notes")),
        )


def _lookup(lowered: str, table: dict[str, list[str]]) -> str | None:
    for name, keywords in table.items():
        if any(re.search(rf"\b{re.escape(k)}\b", lowered) for k in keywords):
            return name
    return None


def _parse_date(line: str) -> str | None:
    """Normalize a receipt date to YYYY-MM-DD."""
    for pattern, layout in _DATE_FORMATS:
        match = pattern.search(line)
        if not match:
            continue
        a, b, c = match.groups()
        if layout == "ymd":
            return f"{a}-{b}-{c}"
        if layout == "mdy":
            return f"{c}-{int(a):02d}-{int(b):02d}"
        return f"{c}-{int(b):02d}-{int(a):02d}"
    return None


def parse_expense(content: str) -> ExpenseResult:
    """Fill expense fields line by line.

    The first amount-bearing line gives amount and currency, the first
    other line of sensible length is the merchant, then date, category and
    payment method are taken from the remaining lines in that order.
    """
    merchant = amount = currency = date = category = payment_method = None
    notes: list[str] = []

    for line in (raw.strip() for raw in content.splitlines()):
        if not line:
            continue
        lowered = line.lower()

        if amount is None:
            found = find_amount(line)
            if found is not None:
                amount, currency = found[0], found[1] or "USD"
                continue

        if merchant is None and not _AMOUNT_HINT.search(line):
            cleaned = line.strip(":#- ")
            if 3 <= len(cleaned) <= 60:
                merchant = cleaned
                continue

        if date is None and (parsed := _parse_date(line)):
            date = parsed
            continue
        if category is None and (found_category := _lookup(lowered, CATEGORY_KEYWORDS)):
            category = found_category
            continue
        if payment_method is None and (method := _lookup(lowered, PAYMENT_KEYWORDS)):
            payment_method = method
            continue

        if merchant is not None and amount is not None:
            notes.append(line)

    return ExpenseResult(
        merchant=merchant,
        amount=amount,
        currency=currency,
        date=date,
        category=category,
        payment_method=payment_method,
        notes="\n".join(notes) or None,
    )


__all__ = ["EXPENSE_PROMPT", "ExpenseResult", "parse_expense"]
