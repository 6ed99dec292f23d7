from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors import GenerationError, SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # generation config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default="gemini-2.5-pro")
        self.temperature = float(helper_config.get_number_val(f"{self.get_client_type().upper()}_TEMPERATURE", default=0.2))
        self.max_output_tokens = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_MAX_OUTPUT_TOKENS", default=4096))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    def _get_error_class(self) -> type[SuggestionPipelineError]:
        return GenerationError

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_generate(self) -> str:
        """Returns the endpoint path for content generation requests (e.g. ".../models/m:generateContent")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_generate_payload(self, prompt: str, system_instruction: str | None = None, json_output: bool = True) -> dict:
        """Build the backend-specific request body for a generation request.

        Args:
            prompt (str): The user prompt.
            system_instruction (str | None): Optional system instruction.
            json_output (bool): Constrain the response mime type to JSON.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_generated_text(self, response_data: dict) -> str:
        """Extract the model's text from a raw generation response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            str: The generated text.

        Raises:
            GenerationError: If the envelope has no content part.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_generate(self, prompt: str, system_instruction: str | None = None, json_output: bool = True) -> str:
        """Send a generation request and return the model's text.

        Args:
            prompt (str): The user prompt.
            system_instruction (str | None): Optional system instruction.
            json_output (bool): Ask the backend for a JSON response.

        Returns:
            str: The generated text.

        Raises:
            GenerationError: On transport failure, non-2xx status or an empty/missing content part.
        """
        body = self.get_generate_payload(prompt, system_instruction=system_instruction, json_output=json_output)
        response = await self.do_request(
            method="POST",
            endpoint=self._get_endpoint_generate(),
            json=body,
            raise_on_error=True,
        )
        try:
            response_data = response.json()
        except ValueError as e:
            raise GenerationError("Generation response is not valid JSON.") from e
        if not isinstance(response_data, dict):
            raise GenerationError("Generation response is not a JSON object.")
        return self.extract_generated_text(response_data)
