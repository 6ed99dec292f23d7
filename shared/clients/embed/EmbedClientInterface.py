from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.errors import EmbeddingDimensionError, EmbeddingError, SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and embedding config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default="text-embedding-004")
        self.embed_dimension = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_DIMENSION", default=768))

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def check_dimension(self, vector: list[float]) -> None:
        """
        Enforces the system-wide embedding dimensionality.

        Raises:
            EmbeddingDimensionError: If the vector length differs from the configured dimension.
        """
        if len(vector) != self.embed_dimension:
            raise EmbeddingDimensionError(
                f"Embedding model '{self.embed_model}' returned {len(vector)} dimensions, "
                f"expected {self.embed_dimension}. Check {self.get_client_type().upper()}_MODEL and {self.get_client_type().upper()}_DIMENSION."
            )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "embed"

    def _get_error_class(self) -> type[SuggestionPipelineError]:
        return EmbeddingError

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/v1/projects/p/.../models/m:predict")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, text: str) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            text (str): The text to embed.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the embedding vector from a raw embedding API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[float]: The embedding vector.

        Raises:
            EmbeddingError: If the response does not contain a vector.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, text: str) -> list[float]:
        """Send one embedding request and return the validated vector.

        No caching and no retries: the text changes with every request.

        Args:
            text (str): The text to embed.

        Returns:
            list[float]: A vector with exactly embed_dimension entries.

        Raises:
            EmbeddingError: On blank input, transport failure, non-2xx status or an empty response.
            EmbeddingDimensionError: If the vector has the wrong dimensionality.
        """
        if not text or not text.strip():
            raise EmbeddingError("Text is required for embedding generation.")

        response = await self.do_request(
            method="POST",
            endpoint=self.get_endpoint_embedding(),
            json=self.get_embed_payload(text),
        )
        if not response.is_success:
            self.logging.error(
                "Embedding request failed: status %d, body: %s",
                response.status_code,
                response.text[:200],
            )
            raise EmbeddingError("Embedding request failed with status %d." % response.status_code)

        try:
            response_data = response.json()
        except ValueError as e:
            raise EmbeddingError("Embedding response is not valid JSON.") from e
        if not isinstance(response_data, dict):
            raise EmbeddingError("Embedding response is not a JSON object.")

        vector = self.extract_embedding_from_response(response_data)
        self.check_dimension(vector)
        return vector
