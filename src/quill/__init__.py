"""Quill - turns recognized handwriting or speech into typed, structured notes.

Quill takes free-form text from OCR or transcription and:
- Classifies it (explicit #markers#, structural heuristics, then an AI model)
- Splits multi-topic captures into typed sections
- Extracts structured data per type (todo, meeting, email, expense, ...)
- Queues AI clean-up for later when the service is unreachable

Every AI step has a deterministic fallback, so a capture always produces a
result even with no credential or network.

Usage:
    python -m quill process "#todo# buy milk"
    python -m quill --profile dev stats --days 30
"""

__version__ = "0.1.0"
__author__ = "MPS Inc"

from .config import QuillConfig
from .config.loader import load_config
from .notes.models import ClassificationMethod, ClassificationRecord, ContentType, NoteSection, RawCapture
from .pipeline import CapturePipeline, ProcessedSection

__all__ = [
    "CapturePipeline",
    "ClassificationMethod",
    "ClassificationRecord",
    "ContentType",
    "NoteSection",
    "ProcessedSection",
    "QuillConfig",
    "RawCapture",
    "__version__",
    "load_config",
]
