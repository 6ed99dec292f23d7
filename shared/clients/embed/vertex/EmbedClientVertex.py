from shared.clients.auth.TokenProvider import TokenProvider
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.errors import EmbeddingError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientVertex(EmbedClientInterface):
    def __init__(self, helper_config: HelperConfig, token_provider: TokenProvider):
        super().__init__(helper_config=helper_config)
        self._token_provider = token_provider
        self._location = self.get_config_val("LOCATION", default="us-central1", val_type="string")
        self._project_id = self.get_config_val("PROJECT_ID", default="", val_type="string")
        self._base_url = self.get_config_val("BASE_URL", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Vertex"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="LOCATION", val_type="string", default="us-central1"),
            EnvConfig(env_key="PROJECT_ID", val_type="string", default=""),
            EnvConfig(env_key="BASE_URL", val_type="string", default=""),
        ]

    ################ AUTH ##################
    async def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {await self._token_provider.get_token()}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url or f"https://{self._location}-aiplatform.googleapis.com"

    def _get_endpoint_healthcheck(self) -> str:
        return ""

    def get_endpoint_embedding(self) -> str:
        project_id = self._project_id or self._token_provider.get_project_id()
        if not project_id:
            raise EmbeddingError("No GCP project id configured (EMBED_VERTEX_PROJECT_ID or credentials project_id).")
        return (
            f"/v1/projects/{project_id}/locations/{self._location}"
            f"/publishers/google/models/{self.embed_model}:predict"
        )

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        """Build the Vertex AI predict body.

        Returns:
            dict: {"instances": [{"content": "..."}]}
        """
        return {"instances": [{"content": text}]}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        predictions = response_data.get("predictions") or []
        try:
            values = predictions[0]["embeddings"]["values"] if predictions else None
            vector = [float(v) for v in values] if values else []
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise EmbeddingError(f"Malformed Vertex embedding response: {e!r}") from e
        if not vector:
            raise EmbeddingError(
                "Vertex response does not contain valid embeddings. "
                f"Response keys: {list(response_data.keys())}"
            )
        return vector
