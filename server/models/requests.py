from pydantic import AliasChoices, BaseModel, Field, field_validator


class SuggestionsRequest(BaseModel):
    """Body of POST /suggestions. Accepts snake_case and the product's camelCase keys."""

    project_id: str = Field(validation_alias=AliasChoices("project_id", "projectId"))
    current_text: str = Field(validation_alias=AliasChoices("current_text", "currentText"))

    @field_validator("project_id", "current_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value
