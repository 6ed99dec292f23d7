"""Chunk models: the read side of the vector store contract.

DocumentChunk records are written by the ingestion pipeline; this service only
reads them back as SimilarityHits.
"""

from pydantic import BaseModel, ConfigDict, Field


class ChunkMetadata(BaseModel):
    """Positional metadata of a chunk inside its source file.

    Attributes:
        page:      1-based page number for paged documents (PDF, DOCX).
        timestamp: Offset in seconds for audio/video transcripts.
    """

    model_config = ConfigDict(extra="allow")

    page: int | None = None
    timestamp: float | None = None


class DocumentChunk(BaseModel):
    """An indexed piece of a source document together with its embedding."""

    model_config = ConfigDict(frozen=True)

    id: str
    project_id: str
    file_id: str
    content: str
    embedding: list[float]
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)
    namespace: str = "default"


class SimilarityHit(BaseModel):
    """A chunk matched by a similarity search. Never persisted.

    Attributes:
        chunk_id:   Id of the matched DocumentChunk.
        content:    Text content of the chunk.
        file_id:    Id of the source file.
        similarity: 1 - cosine distance to the query embedding.
        metadata:   Positional metadata of the chunk.
    """

    chunk_id: str
    content: str
    file_id: str
    similarity: float
    metadata: ChunkMetadata = Field(default_factory=ChunkMetadata)
