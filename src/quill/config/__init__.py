"""Configuration module for Quill.

Typed configuration sections, loaded from YAML profiles by
``quill.config.loader``.
"""

from dataclasses import dataclass, field

from .credentials import CredentialProvider, EnvironmentCredentials, StaticCredentials


@dataclass
class LLMConfig:
    """Remote text service configuration."""

    model: str = "claude-3-5-haiku-latest"
    temperature: float = 0.2
    timeout_seconds: float = 30.0
    classification_max_tokens: int = 256
    section_max_tokens: int = 2048
    extraction_max_tokens: int = 1024
    enhancement_max_tokens: int = 2048
    prompt_version: str = "v1"


@dataclass
class ClassificationConfig:
    """Classifier cascade configuration."""

    heuristic_threshold: float = 0.7
    use_llm: bool = True


@dataclass
class SectionsConfig:
    """Section splitting configuration."""

    ai_split_enabled: bool = True
    min_length_for_ai_split: int = 100
    min_section_length: int = 10


@dataclass
class ExtractionConfig:
    """Structured extraction configuration."""

    use_llm: bool = True
    max_content_length: int = 20000


@dataclass
class QueueConfig:
    """Enhancement queue configuration."""

    max_attempts: int = 3
    item_timeout_seconds: float = 30.0


@dataclass
class StorageConfig:
    """MongoDB storage configuration."""

    enabled: bool = False
    uri: str = "mongodb://localhost:27017"
    database: str = "quill"
    server_selection_timeout_ms: int = 5000


@dataclass
class ConnectivityConfig:
    """Connectivity monitoring configuration."""

    check_hosts: list[str] = field(default_factory=lambda: ["8.8.8.8:53", "1.1.1.1:53"])
    check_interval_seconds: float = 30.0
    timeout_seconds: float = 3.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"


@dataclass
class QuillConfig:
    """Main Quill configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    sections: SectionsConfig = field(default_factory=SectionsConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    queue: QueueConfig = field(default_factory=QueueConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    connectivity: ConnectivityConfig = field(default_factory=ConnectivityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Public API
__all__ = [
    "ClassificationConfig",
    "ConnectivityConfig",
    "CredentialProvider",
    "EnvironmentCredentials",
    "ExtractionConfig",
    "LLMConfig",
    "LoggingConfig",
    "QueueConfig",
    "QuillConfig",
    "SectionsConfig",
    "StaticCredentials",
    "StorageConfig",
]
