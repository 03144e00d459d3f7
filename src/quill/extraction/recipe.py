"""Recipe extraction."""

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from quill.llm.response import normalize_strings, optional_str
from quill.patterns import MEASUREMENT_PATTERN

RECIPE_PROMPT = """Extract recipe information from this handwritten note. Return valid JSON with this exact structure:
{{
    "title": "recipe name or null",
    "ingredients": ["ingredient 1", "ingredient 2"],
    "steps": ["step 1", "step 2"],
    "servings": "serving count or null",
    "cook_time": "cooking time or null",
    "prep_time": "prep time or null",
    "notes": "additional notes or null"
}}

Guidelines:
- Extract all ingredients with quantities (e.g., "2 cups flour")
- Extract steps in order
- Parse serving count (e.g., "serves 4" -> "4", "makes 12 cookies" -> "12")
- Parse times as written (e.g., "30 minutes", "1 hour")
- Include any tips, variations, or notes at the end
- Return empty arrays if no ingredients or steps found

Note content:
{content}"""

INGREDIENT_HEADER = re.compile(r"^\s*ingredients?\b", re.IGNORECASE)
STEP_HEADER = re.compile(r"^\s*(?:directions?|instructions?|steps|method|preparation)\b", re.IGNORECASE)
NOTES_HEADER = re.compile(r"^\s*(?:notes?|tips?)\s*:?\s*$", re.IGNORECASE)

STEP_NUMBER = re.compile(r"^\s*(?:\d+\s*[.):]|step\s+\d+\s*:?)\s*", re.IGNORECASE)
LEADING_BULLET = re.compile(r"^\s*[-•*]\s*")

COOKING_VERBS = [
    "mix",
    "stir",
    "bake",
    "cook",
    "heat",
    "add",
    "combine",
    "whisk",
    "pour",
    "fold",
    "beat",
    "melt",
    "boil",
    "simmer",
    "fry",
    "sauté",
    "roast",
    "grill",
    "blend",
    "chop",
    "dice",
    "slice",
    "preheat",
    "serve",
]

SERVING_PATTERNS = [
    re.compile(r"serves?\s+(\d+)", re.IGNORECASE),
    re.compile(r"makes?\s+(\d+)", re.IGNORECASE),
    re.compile(r"yields?\s+(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)\s+servings?", re.IGNORECASE),
    re.compile(r"(\d+)\s+portions?", re.IGNORECASE),
]

_DURATION = r"(\d+(?:\.\d+)?\s*(?:-\s*\d+\s*)?(?:hours?|hrs?|minutes?|mins?))"
COOK_TIME_PATTERN = re.compile(rf"(?:cook|bake|roast)(?:ing)?\s*(?:time)?\s*:?\s*{_DURATION}", re.IGNORECASE)
PREP_TIME_PATTERN = re.compile(rf"prep(?:aration)?\s*(?:time)?\s*:?\s*{_DURATION}", re.IGNORECASE)


class _Mode(Enum):
    UNKNOWN = "unknown"
    INGREDIENTS = "ingredients"
    STEPS = "steps"
    NOTES = "notes"


@dataclass(frozen=True)
class RecipeResult:
    """Structured recipe."""

    title: str | None = None
    ingredients: list[str] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    servings: str | None = None
    cook_time: str | None = None
    prep_time: str | None = None
    notes: str | None = None

    @property
    def has_minimum_data(self) -> bool:
        return bool(self.ingredients) or bool(self.steps)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecipeResult":
        return cls(
            title=optional_str(data.get("title")),
            ingredients=normalize_strings(data.get("ingredients")),
            steps=normalize_strings(data.get("steps")),
            servings=optional_str(data.get("servings")),
            cook_time=optional_str(data.get("cook_time") or data.get("cookTime")),
            prep_time=optional_str(data.get("prep_time") or data.get("prepTime")),
            notes=optional_str(data.get("notes")),
        )


def is_ingredient_line(line: str) -> bool:
    """Measured quantities or bullet points read as ingredients."""
    if STEP_NUMBER.match(line):
        return False
    return bool(MEASUREMENT_PATTERN.match(line) or LEADING_BULLET.match(line))


def is_step_line(line: str) -> bool:
    """Numbered lines or lines led by a cooking verb read as steps."""
    if STEP_NUMBER.match(line):
        return True
    lowered = line.lower()
    return any(lowered.startswith(verb + " ") or f" {verb} " in lowered for verb in COOKING_VERBS)


def _first_group(patterns: list[re.Pattern[str]], line: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(line)
        if match:
            return match.group(1).strip()
    return None


def parse_recipe(content: str) -> RecipeResult:
    """Walk the lines, letting section headers switch the parsing mode.

    Before any header, measured or bulleted lines start the ingredient list
    and numbered or verb-led lines start the steps. The first other line is
    the title.
    """
    title = servings = cook_time = prep_time = None
    ingredients: list[str] = []
    steps: list[str] = []
    notes: list[str] = []
    mode = _Mode.UNKNOWN

    for line in (raw.strip() for raw in content.splitlines()):
        if not line:
            continue

        if INGREDIENT_HEADER.match(line) and len(line) <= 30:
            mode = _Mode.INGREDIENTS
            continue
        if STEP_HEADER.match(line) and len(line) <= 30:
            mode = _Mode.STEPS
            continue
        if NOTES_HEADER.match(line):
            mode = _Mode.NOTES
            continue

        servings = servings or _first_group(SERVING_PATTERNS, line)
        cook_time = cook_time or _first_group([COOK_TIME_PATTERN], line)
        prep_time = prep_time or _first_group([PREP_TIME_PATTERN], line)

        if title is None and mode == _Mode.UNKNOWN:
            if not is_ingredient_line(line) and not is_step_line(line):
                cleaned = line.strip(":#- ")
                if 3 <= len(cleaned) <= 60:
                    title = cleaned
                    continue

        if mode == _Mode.NOTES:
            notes.append(line)
            continue

        # The ingredient list ends at the first step-shaped line
        if mode == _Mode.INGREDIENTS and is_step_line(line) and not is_ingredient_line(line):
            mode = _Mode.STEPS

        if mode == _Mode.INGREDIENTS or (mode == _Mode.UNKNOWN and is_ingredient_line(line)):
            mode = _Mode.INGREDIENTS
            cleaned = LEADING_BULLET.sub("", line).strip()
            if cleaned:
                ingredients.append(cleaned)
            continue

        if mode == _Mode.STEPS or (mode == _Mode.UNKNOWN and is_step_line(line)):
            mode = _Mode.STEPS
            cleaned = STEP_NUMBER.sub("", LEADING_BULLET.sub("", line)).strip()
            if cleaned:
                steps.append(cleaned)

    return RecipeResult(
        title=title,
        ingredients=ingredients,
        steps=steps,
        servings=servings,
        cook_time=cook_time,
        prep_time=prep_time,
        notes="\n".join(notes) or None,
    )


__all__ = [
    "RECIPE_PROMPT",
    "RecipeResult",
    "is_ingredient_line",
    "is_step_line",
    "parse_recipe",
]
