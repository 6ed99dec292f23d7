from pydantic import BaseModel, Field

from shared.models.suggestion import Suggestion


class SuggestionsResponse(BaseModel):
    """The one response shape of the service, also on every degraded outcome."""

    suggestions: list[Suggestion] = Field(default_factory=list)
