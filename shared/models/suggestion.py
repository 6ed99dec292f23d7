"""Pydantic models for suggestion requests and results.

Hierarchy:
  SuggestionRequest: the unit of work of one orchestration call.
  Suggestion: one validated finding returned by the model.
  EvidenceSnippet: a similarity hit enriched with citable file metadata.
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shared.clients.rag.models.Chunk import SimilarityHit


class SuggestionType(str, Enum):
    """Closed tag set of suggestion kinds. Anything else fails validation."""

    SUPPORT = "support"
    CONTRADICTION = "contradiction"
    QUESTION = "question"
    ELABORATE = "elaborate"


class Suggestion(BaseModel):
    """A single critical-thinking suggestion.

    A suggestion citing file_id should also carry location and quote, but
    that is advisory and not enforced.
    """

    model_config = ConfigDict(extra="ignore")

    type: SuggestionType
    text: str = Field(min_length=1)
    file_id: str | None = Field(default=None, validation_alias=AliasChoices("file_id", "fileId"))
    location: str | None = None
    quote: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("text", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("file_id", "location", "quote", mode="before")
    @classmethod
    def _stringify(cls, value):
        # models sometimes emit page numbers or ids as bare numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SuggestionRequest(BaseModel):
    """Everything one orchestration call needs once the project goal is known."""

    project_id: str
    current_text: str
    project_goal: str


class EvidenceSnippet(SimilarityHit):
    """A SimilarityHit enriched with the file name and a human-readable location.

    Attributes:
        file_name:      Name of the source file, "Unknown file" if the lookup failed.
        location_label: "Page N", "Timestamp MM:SS" or "Unknown location".
    """

    file_name: str
    location_label: str
