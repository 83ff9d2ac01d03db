"""Codebook ingestion settings loaded from environment variables.

``Settings`` holds deployment-level defaults; ``RunParameters`` is the
validated, read-only configuration handed to one ingestion run.
"""

from enum import StrEnum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codebook_ingest.models.common import (
    SUPPORTED_LANGUAGES,
    CodebookBase,
    StatusCode,
)


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RunParameters(CodebookBase):
    """Parameters for one ingestion run.

    The ingestion core reads ``codebook_directory``, ``languages`` and
    ``status_code``. ``default_language`` and the project fields are carried
    through unchanged for the publication stage; ``default_language`` must be
    one of ``languages``.
    """

    model_config = {**CodebookBase.model_config, "frozen": True}

    codebook_directory: str
    languages: tuple[str, ...] = Field(..., min_length=1)
    default_language: str | None = None
    status_code: StatusCode = StatusCode.DRAFT
    output_path: str = ""

    project_id: str = ""
    project_prefix: str = ""
    experimental: bool = False
    author: str = ""
    copyright: str = ""
    project_names: dict[str, str] = Field(default_factory=dict)
    project_descriptions: dict[str, str] = Field(default_factory=dict)

    @field_validator("languages", mode="before")
    @classmethod
    def _normalize_languages(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set)):
            seen: list[str] = []
            for item in value:
                lang = str(item).strip().lower()
                if lang and lang not in seen:
                    seen.append(lang)
            return tuple(seen)
        return value

    @field_validator("languages")
    @classmethod
    def _known_languages(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        unknown = [lang for lang in value if lang not in SUPPORTED_LANGUAGES]
        if unknown:
            raise ValueError(
                f"Unsupported language(s): {unknown}. "
                f"Supported: {list(SUPPORTED_LANGUAGES)}"
            )
        return value

    @field_validator("default_language", mode="before")
    @classmethod
    def _normalize_default_language(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @model_validator(mode="after")
    def _default_language_is_active(self) -> "RunParameters":
        lang = self.default_language
        if lang is not None and lang not in self.languages:
            raise ValueError(
                f"Default language '{lang}' is not one of "
                f"the active languages {list(self.languages)}"
            )
        return self

    def project_name(self, language: str) -> str:
        return self.project_names.get(language, "")

    def project_description(self, language: str) -> str:
        return self.project_descriptions.get(language, "")


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Ingestion ---
    CODEBOOK_DIRECTORY: str = Field(
        default="./codebooks",
        description="Directory scanned for .xlsx codebook workbooks.",
    )
    LANGUAGES: str = Field(
        default="nl",
        description="Comma-separated active language codes, e.g. 'nl,en'.",
    )
    DEFAULT_LANGUAGE: str | None = Field(
        default=None,
        description="Language the publication stage falls back to; one of LANGUAGES.",
    )
    STATUS_CODE: StatusCode = Field(
        default=StatusCode.DRAFT,
        description="Status code stamped on every ingested concept.",
    )
    OUTPUT_PATH: str = Field(
        default="",
        description="Destination for the publication stage (not written here).",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    def to_run_parameters(self, **overrides: object) -> RunParameters:
        """Build validated RunParameters, applying explicit overrides last."""
        values: dict[str, object] = {
            "codebook_directory": self.CODEBOOK_DIRECTORY,
            "languages": self.LANGUAGES,
            "default_language": self.DEFAULT_LANGUAGE,
            "status_code": self.STATUS_CODE,
            "output_path": self.OUTPUT_PATH,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return RunParameters(**values)


def get_settings() -> Settings:
    """Factory function for settings construction."""
    return Settings()
