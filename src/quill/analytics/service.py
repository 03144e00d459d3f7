"""Aggregation over recorded classification decisions.

Read-only: nothing here feeds back into the classifier cascade.
"""

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from quill.notes.models import ClassificationMethod, ClassificationRecord

from .log import ClassificationLog

logger = logging.getLogger(__name__)

MAX_WINDOW_DAYS = 365
RECOMMENDATION_WINDOW_DAYS = 90
LOW_USAGE_PERCENT = 5.0
HIGH_USAGE_PERCENT = 20.0


def _percent(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return part / whole * 100.0


@dataclass(frozen=True)
class ClassificationStats:
    """Record counts per classification method."""

    total: int = 0
    explicit_count: int = 0
    heuristic_count: int = 0
    llm_count: int = 0
    unknown_count: int = 0

    @property
    def explicit_percentage(self) -> float:
        return _percent(self.explicit_count, self.total)

    @property
    def heuristic_percentage(self) -> float:
        return _percent(self.heuristic_count, self.total)

    @property
    def llm_percentage(self) -> float:
        return _percent(self.llm_count, self.total)

    @property
    def unknown_percentage(self) -> float:
        return _percent(self.unknown_count, self.total)

    @classmethod
    def from_records(cls, records: list[ClassificationRecord]) -> "ClassificationStats":
        counts = Counter(r.method for r in records)
        return cls(
            total=len(records),
            explicit_count=counts[ClassificationMethod.EXPLICIT],
            heuristic_count=counts[ClassificationMethod.HEURISTIC],
            llm_count=counts[ClassificationMethod.LLM],
            unknown_count=counts[ClassificationMethod.UNKNOWN],
        )

    def to_dict(self) -> dict[str, float | int]:
        return {
            "total": self.total,
            "explicit": self.explicit_count,
            "heuristic": self.heuristic_count,
            "llm": self.llm_count,
            "unknown": self.unknown_count,
            "explicit_percentage": round(self.explicit_percentage, 1),
            "heuristic_percentage": round(self.heuristic_percentage, 1),
            "llm_percentage": round(self.llm_percentage, 1),
            "unknown_percentage": round(self.unknown_percentage, 1),
        }


@dataclass(frozen=True)
class TrendPoint:
    """Explicit-marker usage for one UTC calendar day."""

    day: date
    explicit_count: int
    total: int

    @property
    def explicit_percentage(self) -> float:
        return _percent(self.explicit_count, self.total)


@dataclass(frozen=True)
class TypeBreakdown:
    """Method counts for one content type."""

    content_type: str
    stats: ClassificationStats

    @property
    def total(self) -> int:
        return self.stats.total

    @property
    def explicit_count(self) -> int:
        return self.stats.explicit_count

    @property
    def explicit_percentage(self) -> float:
        return self.stats.explicit_percentage

    def to_dict(self) -> dict[str, float | int | str]:
        return {"content_type": self.content_type, **self.stats.to_dict()}


class ClassificationAnalytics:
    """Answers how captures are being classified over time."""

    def __init__(
        self,
        log: ClassificationLog,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize analytics.

        Args:
            log: Source of classification records
            clock: Returns the current UTC time; defaults to ``datetime.now(UTC)``
        """
        self._log = log
        self._clock = clock or (lambda: datetime.now(UTC))

    @staticmethod
    def _validate_days(days: int) -> None:
        if not 1 <= days <= MAX_WINDOW_DAYS:
            raise ValueError(f"days must be between 1 and {MAX_WINDOW_DAYS}, got {days}")

    def _records(self, days: int) -> list[ClassificationRecord]:
        self._validate_days(days)
        return self._log.records_since(self._clock() - timedelta(days=days))

    def stats(self, days: int = 30) -> ClassificationStats:
        """Counts per method over the last ``days`` days.

        Raises:
            ValueError: If days is outside 1-365
        """
        return ClassificationStats.from_records(self._records(days))

    def trend(self, days: int = 30) -> list[TrendPoint]:
        """Daily explicit-vs-total points, oldest day first.

        Days without records are included with zero counts.

        Raises:
            ValueError: If days is outside 1-365
        """
        self._validate_days(days)
        today = self._clock().astimezone(UTC).date()
        first_day = today - timedelta(days=days - 1)
        since = datetime.combine(first_day, datetime.min.time(), tzinfo=UTC)

        explicit: Counter[date] = Counter()
        totals: Counter[date] = Counter()
        for record in self._log.records_since(since):
            day = record.created_at.astimezone(UTC).date()
            totals[day] += 1
            if record.method == ClassificationMethod.EXPLICIT:
                explicit[day] += 1

        return [
            TrendPoint(day=day, explicit_count=explicit[day], total=totals[day])
            for day in (first_day + timedelta(days=offset) for offset in range(days))
        ]

    def type_breakdown(self, days: int = 30) -> list[TypeBreakdown]:
        """Method counts and shares per content type, largest type first.

        Raises:
            ValueError: If days is outside 1-365
        """
        by_type: dict[str, list[ClassificationRecord]] = {}
        for record in self._records(days):
            by_type.setdefault(record.content_type.value, []).append(record)

        return sorted(
            (
                TypeBreakdown(content_type=name, stats=ClassificationStats.from_records(records))
                for name, records in by_type.items()
            ),
            key=lambda b: (-b.total, b.content_type),
        )

    def recommendation(self) -> str:
        """Advice on the future of trigger markers, from 90 days of usage."""
        stats = self.stats(RECOMMENDATION_WINDOW_DAYS)
        if stats.total == 0:
            return "Insufficient data to make a recommendation."

        usage = stats.explicit_percentage
        logger.debug("Explicit marker usage over %d days: %.1f%%", RECOMMENDATION_WINDOW_DAYS, usage)
        if usage < LOW_USAGE_PERCENT:
            return (
                "Marker usage is very low (<5%). Consider removing UI hints "
                "and moving towards deprecation."
            )
        if usage > HIGH_USAGE_PERCENT:
            return "Marker usage is significant (>20%). Keep as a documented power-user feature."
        return (
            "Marker usage is moderate (5-20%). Continue monitoring trends "
            "before making deprecation decisions."
        )


__all__ = [
    "ClassificationAnalytics",
    "ClassificationStats",
    "TrendPoint",
    "TypeBreakdown",
]
