from pydantic import ValidationError as PydanticValidationError

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.Chunk import SimilarityHit
from shared.errors import RetrievalError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientSupabase(RAGClientInterface):
    """Similarity search through the match_chunks Postgres function (pgvector) exposed via PostgREST.

    The function filters on project_id and namespace, keeps
    1 - (embedding <=> query) > match_threshold and orders by cosine distance.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")
        self._match_function = self.get_config_val("MATCH_FUNCTION", default="match_chunks", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Supabase"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
            EnvConfig(env_key="MATCH_FUNCTION", val_type="string", default="match_chunks"),
        ]

    ################ AUTH ##################
    async def _get_auth_header(self) -> dict:
        return {"apikey": self._api_key, "Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/rest/v1/"

    def _get_endpoint_search(self) -> str:
        return f"/rest/v1/rpc/{self._match_function}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_search_payload(self, query_embedding: list[float], project_id: str, namespaces: list[str], threshold: float, top_k: int) -> dict:
        return {
            "query_embedding": query_embedding,
            "match_threshold": threshold,
            "match_count": top_k,
            "p_project_id": project_id,
            "p_namespaces": namespaces,
        }

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_search_hits(self, raw_response: dict | list, project_id: str) -> list[SimilarityHit]:
        # rows carry no project_id, the function's WHERE clause is the scope guarantee
        if not isinstance(raw_response, list):
            raise RetrievalError(f"{self._match_function} did not return a row list.")
        try:
            return [
                SimilarityHit(
                    chunk_id=str(row.get("id")),
                    content=row.get("content") or "",
                    file_id=str(row.get("file_id")),
                    similarity=row.get("similarity"),
                    metadata=row.get("metadata") or {},
                )
                for row in raw_response
            ]
        except (PydanticValidationError, AttributeError) as e:
            raise RetrievalError(f"Malformed {self._match_function} row: {e}") from e
