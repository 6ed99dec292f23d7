"""Tests for evidence assembly and location labels."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from server.core.EvidenceAssembler import EvidenceAssembler, build_location_label, format_timestamp
from shared.clients.project.models.FileInfo import FileInfo
from shared.clients.rag.models.Chunk import ChunkMetadata, SimilarityHit
from shared.errors import ProjectLookupError


def _hit(chunk_id: str, file_id: str, similarity: float, **metadata) -> SimilarityHit:
    return SimilarityHit(
        chunk_id=chunk_id,
        content=f"content {chunk_id}",
        file_id=file_id,
        similarity=similarity,
        metadata=ChunkMetadata(**metadata),
    )


@pytest.fixture
def project_client():
    client = MagicMock()
    client.do_fetch_files_by_ids = AsyncMock(
        return_value=[
            FileInfo(id="F1", name="minutes.pdf", type="application/pdf"),
            FileInfo(id="F2", name="call.mp3", type="audio/mpeg"),
        ]
    )
    return client


class TestLocationLabel:
    def test_page(self):
        assert build_location_label(ChunkMetadata(page=2)) == "Page 2"

    def test_page_zero_is_still_a_page(self):
        assert build_location_label(ChunkMetadata(page=0)) == "Page 0"

    def test_timestamp(self):
        assert build_location_label(ChunkMetadata(timestamp=65)) == "Timestamp 01:05"

    def test_page_wins_over_timestamp(self):
        assert build_location_label(ChunkMetadata(page=4, timestamp=65)) == "Page 4"

    def test_unknown(self):
        assert build_location_label(ChunkMetadata()) == "Unknown location"

    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "00:00"), (9.7, "00:09"), (600, "10:00"), (6000, "100:00")],
    )
    def test_format_timestamp(self, seconds, expected):
        assert format_timestamp(seconds) == expected


class TestAssemble:
    @pytest.mark.asyncio
    async def test_snippets_keep_order_and_names(self, helper_config, project_client):
        assembler = EvidenceAssembler(helper_config=helper_config, project_client=project_client)
        hits = [
            _hit("c1", "F1", 0.9, page=2),
            _hit("c2", "F2", 0.8, timestamp=125),
            _hit("c3", "F1", 0.7),
        ]

        snippets = await assembler.assemble(hits)

        assert [s.chunk_id for s in snippets] == ["c1", "c2", "c3"]
        assert [s.file_name for s in snippets] == ["minutes.pdf", "call.mp3", "minutes.pdf"]
        assert [s.location_label for s in snippets] == ["Page 2", "Timestamp 02:05", "Unknown location"]
        assert snippets[0].similarity == 0.9

    @pytest.mark.asyncio
    async def test_one_lookup_for_distinct_file_ids(self, helper_config, project_client):
        assembler = EvidenceAssembler(helper_config=helper_config, project_client=project_client)

        await assembler.assemble([_hit("c1", "F1", 0.9), _hit("c2", "F2", 0.8), _hit("c3", "F1", 0.7)])

        project_client.do_fetch_files_by_ids.assert_awaited_once_with(["F1", "F2"])

    @pytest.mark.asyncio
    async def test_unknown_file_id_gets_placeholder(self, helper_config, project_client):
        assembler = EvidenceAssembler(helper_config=helper_config, project_client=project_client)

        snippets = await assembler.assemble([_hit("c1", "F9", 0.9)])

        assert snippets[0].file_name == "Unknown file"

    @pytest.mark.asyncio
    async def test_failed_lookup_keeps_all_evidence(self, helper_config, project_client):
        project_client.do_fetch_files_by_ids.side_effect = ProjectLookupError("store down")
        assembler = EvidenceAssembler(helper_config=helper_config, project_client=project_client)

        snippets = await assembler.assemble([_hit("c1", "F1", 0.9, page=1), _hit("c2", "F2", 0.8)])

        assert len(snippets) == 2
        assert {s.file_name for s in snippets} == {"Unknown file"}
        assert snippets[0].location_label == "Page 1"

    @pytest.mark.asyncio
    async def test_no_hits_no_lookup(self, helper_config, project_client):
        assembler = EvidenceAssembler(helper_config=helper_config, project_client=project_client)

        assert await assembler.assemble([]) == []
        project_client.do_fetch_files_by_ids.assert_not_awaited()
