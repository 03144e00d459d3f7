"""Notes module for Quill.

Trigger markers, classification and section splitting for captured text.
"""

from .classifier import ClassifierCascade
from .models import (
    ClassificationMethod,
    ClassificationRecord,
    ContentType,
    NoteSection,
    RawCapture,
)
from .sections import SectionSplit, SectionSplitter, SplitMethod
from .triggers import TriggerParser, TriggerParseResult

__all__ = [
    "ClassificationMethod",
    "ClassificationRecord",
    "ClassifierCascade",
    "ContentType",
    "NoteSection",
    "RawCapture",
    "SectionSplit",
    "SectionSplitter",
    "SplitMethod",
    "TriggerParseResult",
    "TriggerParser",
]
