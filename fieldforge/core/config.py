"""
Unified configuration for the FieldForge toolkit.

Consolidates generation, reduction, document and logging options into a
single, well-documented configuration class with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "FIELDFORGE_"

SUPPORTED_PROVIDERS = ("openai", "anthropic", "google")


@dataclass
class ForgeConfig:
    """
    Unified configuration for generation and export.

    The reduction thresholds default to the values the text pipeline was
    tuned with; change them only when a corpus of documents calls for it.
    """

    # === LLM Configuration ===
    provider: str = "openai"
    """Generation provider: openai, anthropic or google"""

    model: str = "gpt-4.1-mini"
    """Model identifier passed to the provider"""

    temperature: float = 0.2
    """LLM temperature (0.0-2.0)"""

    max_tokens: int = 16000
    """Maximum tokens for LLM output"""

    api_key: Optional[str] = None
    """Provider API key (None = read the provider's environment variable)"""

    base_url: Optional[str] = None
    """Base URL for OpenAI-compatible endpoints"""

    json_mode: bool = True
    """Ask the provider for a JSON-only response"""

    # === Reduction Configuration ===
    extraction_threshold: int = 3000
    """Documents shorter than this are not section-scored"""

    min_extraction_length: int = 100
    """Extractions shorter than this fall back to the full text"""

    cutoff_grace_lines: int = 15
    """Lines after the last field header that are never cut"""

    # === Documents ===
    max_document_bytes: int = 10 * 1024 * 1024
    """Size ceiling for AI-input documents"""

    # === Output ===
    default_object_name: str = "Custom_Object__c"
    """Object name used when a payload does not carry one"""

    enable_progress_bar: bool = True
    """Show a progress bar while exporting many fields"""

    # === Logging Configuration ===
    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"""

    log_dir: Optional[str] = None
    """Directory for log files (None = no file logging)"""

    # === Validation ===
    def __post_init__(self):
        """Validate configuration values after initialization."""
        if self.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"provider must be one of {', '.join(SUPPORTED_PROVIDERS)}, got {self.provider!r}"
            )

        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be between 0.0 and 2.0, got {self.temperature}")

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

        if self.extraction_threshold < 0:
            raise ValueError(f"extraction_threshold must be non-negative, got {self.extraction_threshold}")

        if self.min_extraction_length < 0:
            raise ValueError(f"min_extraction_length must be non-negative, got {self.min_extraction_length}")

        if self.cutoff_grace_lines < 0:
            raise ValueError(f"cutoff_grace_lines must be non-negative, got {self.cutoff_grace_lines}")

        if self.max_document_bytes <= 0:
            raise ValueError(f"max_document_bytes must be positive, got {self.max_document_bytes}")

    @classmethod
    def for_development(cls) -> 'ForgeConfig':
        """Create configuration optimized for development."""
        return cls(
            temperature=0.0,            # Reproducible generations
            enable_progress_bar=False,  # Quiet test output
            log_level="DEBUG"
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> 'ForgeConfig':
        """Create configuration from ``FIELDFORGE_*`` environment variables.

        A ``.env`` file is loaded first (without overriding variables that
        are already set). Unset variables keep their defaults.
        """
        load_dotenv(dotenv_path)

        overrides = {}
        for name, cast in (
            ("provider", str),
            ("model", str),
            ("temperature", float),
            ("max_tokens", int),
            ("api_key", str),
            ("base_url", str),
            ("default_object_name", str),
            ("log_level", str),
            ("log_dir", str),
            ("max_document_bytes", int),
        ):
            raw = os.environ.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[name] = cast(raw)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{name.upper()} has an invalid value: {raw!r}")

        json_mode = os.environ.get(ENV_PREFIX + "JSON_MODE")
        if json_mode:
            overrides["json_mode"] = json_mode.strip().lower() in ("1", "true", "yes", "on")

        return cls(**overrides)
