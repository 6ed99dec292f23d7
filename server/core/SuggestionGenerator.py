import json
import re

from pydantic import ValidationError as PydanticValidationError

from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors import ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.models.suggestion import Suggestion

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


class SuggestionGenerator:
    """Calls the generative model and turns its answer into validated suggestions."""

    def __init__(self, helper_config: HelperConfig, llm_client: LLMClientInterface, system_instruction: str | None = None) -> None:
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client
        self._system_instruction = system_instruction

    ##########################################
    ################ CORE ####################
    ##########################################

    async def generate(self, prompt: str) -> list[Suggestion]:
        """Generate suggestions for a rendered prompt.

        Transport, HTTP and empty-envelope failures propagate as GenerationError.
        A malformed model answer is a soft outcome and yields an empty list;
        individually invalid suggestions are dropped.

        Args:
            prompt (str): The rendered prompt.

        Returns:
            list[Suggestion]: The valid suggestions, in model order.

        Raises:
            GenerationError: If the model call fails or returns no content.
        """
        text = await self._llm_client.do_generate(prompt, system_instruction=self._system_instruction, json_output=True)
        try:
            items = self.parse_items(text)
        except ValidationError as e:
            self.logging.warning("Discarding model response: %s", e)
            return []
        return self.validate_items(items)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def parse_items(self, text: str) -> list:
        """Parse the model's text into the raw list under the 'suggestions' key.

        Raises:
            ValidationError: If the text is not JSON or has no 'suggestions' list.
        """
        fenced = _CODE_FENCE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Model response is not valid JSON: {e}") from e

        items = payload.get("suggestions") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise ValidationError("Model response has no 'suggestions' array.")
        return items

    def validate_items(self, items: list) -> list[Suggestion]:
        suggestions: list[Suggestion] = []
        for index, item in enumerate(items):
            try:
                suggestions.append(Suggestion.model_validate(item))
            except PydanticValidationError as e:
                self.logging.debug("Dropping invalid suggestion #%d: %s", index, e.errors(include_url=False))
        dropped = len(items) - len(suggestions)
        if dropped:
            self.logging.info("Dropped %d of %d suggestion(s) that failed validation.", dropped, len(items))
        return suggestions
