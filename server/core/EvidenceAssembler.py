from shared.clients.project.ProjectClientInterface import ProjectClientInterface
from shared.clients.rag.models.Chunk import ChunkMetadata, SimilarityHit
from shared.errors import SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig
from shared.models.suggestion import EvidenceSnippet

UNKNOWN_FILE = "Unknown file"
UNKNOWN_LOCATION = "Unknown location"


def format_timestamp(seconds: float) -> str:
    """Format an offset in seconds as MM:SS (minutes keep growing past 99)."""
    total = max(int(seconds), 0)
    minutes, remaining = divmod(total, 60)
    return f"{minutes:02d}:{remaining:02d}"


def build_location_label(metadata: ChunkMetadata) -> str:
    """Derive a citable location from chunk metadata: page first, then timestamp."""
    if metadata.page is not None:
        return f"Page {metadata.page}"
    if metadata.timestamp is not None:
        return f"Timestamp {format_timestamp(metadata.timestamp)}"
    return UNKNOWN_LOCATION


class EvidenceAssembler:
    """Joins similarity hits with file metadata into citable evidence snippets."""

    def __init__(self, helper_config: HelperConfig, project_client: ProjectClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._project_client = project_client

    ##########################################
    ################ CORE ####################
    ##########################################

    async def assemble(self, hits: list[SimilarityHit]) -> list[EvidenceSnippet]:
        """Enrich every hit with its file name and location label.

        File metadata is fetched with one batched lookup for all distinct file ids.
        A failed lookup never drops evidence: affected snippets get "Unknown file".

        Args:
            hits (list[SimilarityHit]): Hits in similarity order.

        Returns:
            list[EvidenceSnippet]: One snippet per hit, same order.
        """
        if not hits:
            return []

        file_names = await self._fetch_file_names(hits)
        return [
            EvidenceSnippet(
                **hit.model_dump(),
                file_name=file_names.get(hit.file_id, UNKNOWN_FILE),
                location_label=build_location_label(hit.metadata),
            )
            for hit in hits
        ]

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _fetch_file_names(self, hits: list[SimilarityHit]) -> dict[str, str]:
        # dict.fromkeys keeps first-appearance order while de-duplicating
        file_ids = list(dict.fromkeys(hit.file_id for hit in hits))
        try:
            files = await self._project_client.do_fetch_files_by_ids(file_ids)
        except SuggestionPipelineError as e:
            self.logging.warning("File metadata lookup for %d file(s) failed, using placeholders: %s", len(file_ids), e)
            return {}

        file_names = {file.id: file.name for file in files}
        missing = [file_id for file_id in file_ids if file_id not in file_names]
        if missing:
            self.logging.debug("No file metadata for %d file id(s): %s", len(missing), missing)
        return file_names
