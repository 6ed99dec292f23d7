from pydantic import ValidationError as PydanticValidationError

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.rag.models.Chunk import SimilarityHit
from shared.errors import RetrievalError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class RAGClientQdrant(RAGClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default=None)
        ]

    ################ AUTH ##################
    async def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_search(self) -> str:
        return f"/collections/{self._collection_name}/points/search"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_search_payload(self, query_embedding: list[float], project_id: str, namespaces: list[str], threshold: float, top_k: int) -> dict:
        # the collection is created with Cosine distance, so score == 1 - cosine distance
        return {
            "vector": query_embedding,
            "filter": {
                "must": [
                    {"key": "project_id", "match": {"value": project_id}},
                    {"key": "namespace", "match": {"any": namespaces}},
                ]
            },
            "limit": top_k,
            "score_threshold": threshold,
            "with_payload": True,
            "with_vector": False,
        }

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_search_hits(self, raw_response: dict | list, project_id: str) -> list[SimilarityHit]:
        if not isinstance(raw_response, dict) or not isinstance(raw_response.get("result"), list):
            raise RetrievalError("Qdrant search response does not contain a result list.")

        hits: list[SimilarityHit] = []
        for point in raw_response["result"]:
            payload = point.get("payload") or {}
            if str(payload.get("project_id")) != str(project_id):
                self.logging.warning(
                    "Qdrant returned point %s of project %s for a search in project %s. Dropping it.",
                    point.get("id"), payload.get("project_id"), project_id,
                )
                continue
            try:
                hits.append(
                    SimilarityHit(
                        chunk_id=str(payload.get("chunk_id") or point.get("id")),
                        content=payload.get("content") or "",
                        file_id=str(payload.get("file_id")),
                        similarity=point.get("score"),
                        metadata=payload.get("metadata") or {},
                    )
                )
            except PydanticValidationError as e:
                raise RetrievalError(f"Malformed Qdrant point {point.get('id')}: {e}") from e
        return hits
