"""Classification analytics: which cascade stage is deciding content types."""

from .log import ClassificationLog, InMemoryClassificationLog
from .service import ClassificationAnalytics, ClassificationStats, TrendPoint, TypeBreakdown

__all__ = [
    "ClassificationAnalytics",
    "ClassificationLog",
    "ClassificationStats",
    "InMemoryClassificationLog",
    "TrendPoint",
    "TypeBreakdown",
]
