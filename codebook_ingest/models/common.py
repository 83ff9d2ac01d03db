"""Shared types, enums, and base models used across codebook domain models."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class StatusCode(StrEnum):
    """Publication status stamped on every concept of a run."""

    DRAFT = "draft"
    FINAL = "final"


class DiagnosticSeverity(StrEnum):
    """Severity of an ingestion diagnostic, aligned with logging level names."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# Language codes a codebook may be authored in.
SUPPORTED_LANGUAGES: tuple[str, ...] = ("nl", "en", "de", "fr")


# --- Base model ---


class CodebookBase(BaseModel):
    """Base model with common configuration for all codebook Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }
