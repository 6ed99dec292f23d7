from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.rag.models.Chunk import SimilarityHit
from shared.errors import EmbeddingDimensionError, RetrievalError, SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig


class RAGClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # retrieval defaults, overridable per call
        self.embed_dimension = int(helper_config.get_number_val("EMBED_DIMENSION", default=768))
        self.match_threshold = float(helper_config.get_number_val(f"{self.get_client_type().upper()}_MATCH_THRESHOLD", default=0.5))
        self.match_count = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_MATCH_COUNT", default=10))
        self.namespaces = helper_config.get_list_val(f"{self.get_client_type().upper()}_NAMESPACES", default=["default"])

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def check_query_dimension(self, query_embedding: list[float]) -> None:
        """
        Raises:
            EmbeddingDimensionError: If the query embedding does not match the indexed dimensionality.
        """
        if len(query_embedding) != self.embed_dimension:
            raise EmbeddingDimensionError(
                f"Query embedding has {len(query_embedding)} dimensions, the index stores {self.embed_dimension}."
            )

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    def _get_error_class(self) -> type[SuggestionPipelineError]:
        return RetrievalError

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_search(self) -> str:
        """
        Returns the endpoint path for similarity search requests.

        Returns:
            str: The endpoint path (e.g. "/collections/my_col/points/search")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_search_payload(self, query_embedding: list[float], project_id: str, namespaces: list[str], threshold: float, top_k: int) -> dict:
        """
        Builds the backend-specific request payload for a project-scoped cosine similarity search.

        Args:
            query_embedding (list[float]): The query vector.
            project_id (str): Only chunks of this project are eligible.
            namespaces (list[str]): Only chunks in one of these namespaces are eligible.
            threshold (float): Minimum similarity (exclusive).
            top_k (int): Maximum number of hits.

        Returns:
            dict: The payload for the search request.
        """
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def extract_search_hits(self, raw_response: dict | list, project_id: str) -> list[SimilarityHit]:
        """
        Converts a raw search response into SimilarityHits.

        Implementations must drop hits the backend reports for a different project.

        Args:
            raw_response (dict | list): The parsed JSON response body.
            project_id (str): The project the search was scoped to.

        Returns:
            list[SimilarityHit]: Hits in backend order.

        Raises:
            RetrievalError: If the response format is invalid.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_search(
        self,
        query_embedding: list[float],
        project_id: str,
        namespaces: list[str] | None = None,
        threshold: float | None = None,
        top_k: int | None = None,
    ) -> list[SimilarityHit]:
        """Run a project- and namespace-scoped cosine similarity search.

        Returns only hits with similarity strictly above the threshold, ordered by
        descending similarity (ties keep backend order), at most top_k of them.
        An empty list is a valid result.

        Args:
            query_embedding (list[float]): The query vector.
            project_id (str): The project to search in.
            namespaces (list[str] | None): Eligible namespaces, defaults to RAG_NAMESPACES. An empty list matches nothing.
            threshold (float | None): Similarity threshold, defaults to RAG_MATCH_THRESHOLD.
            top_k (int | None): Result bound, defaults to RAG_MATCH_COUNT.

        Returns:
            list[SimilarityHit]: The matching hits.

        Raises:
            EmbeddingDimensionError: If the query vector has the wrong dimensionality.
            RetrievalError: If the store is unreachable or answers with an error.
        """
        self.check_query_dimension(query_embedding)
        namespaces = list(self.namespaces) if namespaces is None else list(namespaces)
        threshold = self.match_threshold if threshold is None else threshold
        top_k = self.match_count if top_k is None else top_k
        if top_k <= 0 or not namespaces:
            return []

        response = await self.do_request(
            method="POST",
            json=self.get_search_payload(query_embedding, project_id, namespaces, threshold, top_k),
            endpoint=self._get_endpoint_search(),
            raise_on_error=True,
        )
        try:
            raw_response = response.json()
        except ValueError as e:
            raise RetrievalError("Search response is not valid JSON.") from e

        hits = [hit for hit in self.extract_search_hits(raw_response, project_id) if hit.similarity > threshold]
        # sorted() is stable, so equal similarities keep the store's order
        hits = sorted(hits, key=lambda hit: hit.similarity, reverse=True)[:top_k]
        self.logging.debug(
            "Search in %s for project %s (namespaces=%s, threshold=%.2f) returned %d hit(s).",
            self.get_engine_name(), project_id, namespaces, threshold, len(hits),
        )
        return hits
