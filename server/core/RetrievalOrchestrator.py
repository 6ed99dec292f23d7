"""Retrieval orchestrator, the single entry point of the suggestion pipeline.

Per request: authorize → load goal → embed → search → assemble → prompt → generate.
The stages run strictly in sequence; any failure, including the deadline
expiring, ends the request in FAILED with an empty suggestion list and a
machine-readable cause. Nothing below this boundary reaches the caller as an
exception.
"""

import asyncio
from enum import Enum

from pydantic import BaseModel, Field

from server.core.EvidenceAssembler import EvidenceAssembler
from server.core.PromptBuilder import PromptBuilder
from server.core.SuggestionGenerator import SuggestionGenerator
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.project.ProjectClientInterface import ProjectClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.errors import AuthorizationError, ErrorCause, SuggestionPipelineError
from shared.helper.HelperConfig import HelperConfig
from shared.models.suggestion import Suggestion, SuggestionRequest

DEFAULT_GOAL = "No goal specified"


class PipelineStage(str, Enum):
    START = "start"
    AUTHORIZING = "authorizing"
    EMBEDDING = "embedding"
    SEARCHING = "searching"
    ASSEMBLING = "assembling"
    PROMPTING = "prompting"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


class SuggestionOutcome(BaseModel):
    """Result of one orchestration. `error` is None exactly when the pipeline reached DONE."""

    suggestions: list[Suggestion] = Field(default_factory=list)
    stage: PipelineStage = PipelineStage.DONE
    error: ErrorCause | None = None
    failed_at: PipelineStage | None = None


class _PipelineRun:
    """Mutable per-request stage tracker, so a timeout still knows where it hit."""

    def __init__(self, logging, project_id: str) -> None:
        self.logging = logging
        self.project_id = project_id
        self.stage = PipelineStage.START

    def transition(self, stage: PipelineStage) -> None:
        self.logging.debug("Suggestions for project %s: %s -> %s", self.project_id, self.stage.value, stage.value)
        self.stage = stage


class RetrievalOrchestrator:
    """Coordinates all pipeline components for one suggestion request."""

    def __init__(
        self,
        helper_config: HelperConfig,
        project_client: ProjectClientInterface,
        embed_client: EmbedClientInterface,
        rag_client: RAGClientInterface,
        evidence_assembler: EvidenceAssembler,
        prompt_builder: PromptBuilder,
        suggestion_generator: SuggestionGenerator,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._project_client = project_client
        self._embed_client = embed_client
        self._rag_client = rag_client
        self._evidence_assembler = evidence_assembler
        self._prompt_builder = prompt_builder
        self._suggestion_generator = suggestion_generator

        self.deadline = float(helper_config.get_number_val("SUGGESTIONS_DEADLINE_SECONDS", default=30))
        self.skip_without_evidence = helper_config.get_bool_val("SUGGESTIONS_SKIP_WITHOUT_EVIDENCE", default=False)

    ##########################################
    ################ CORE ####################
    ##########################################

    async def get_suggestions(
        self,
        project_id: str,
        current_text: str,
        user_id: str,
        deadline: float | None = None,
    ) -> SuggestionOutcome:
        """Produce suggestions for the user's current text. Never raises.

        Args:
            project_id (str): The project whose evidence is searched.
            current_text (str): The user's in-progress text.
            user_id (str): The caller, checked for project membership.
            deadline (float | None): Overall budget in seconds, defaults to SUGGESTIONS_DEADLINE_SECONDS.

        Returns:
            SuggestionOutcome: Suggestions on success; an empty list plus the error cause on failure.
        """
        run = _PipelineRun(self.logging, project_id)
        deadline = self.deadline if deadline is None else deadline
        self.logging.info("Suggestion request — project_id=%s user_id=%s text_length=%d", project_id, user_id, len(current_text))

        try:
            suggestions = await asyncio.wait_for(self._run(run, project_id, current_text, user_id), timeout=deadline)
        except asyncio.TimeoutError:
            return self._fail(run, ErrorCause.TIMEOUT, f"deadline of {deadline:.1f}s expired")
        except SuggestionPipelineError as e:
            return self._fail(run, e.cause, str(e))
        except Exception as e:
            self.logging.exception("Unexpected error in suggestion pipeline for project %s", project_id)
            return self._fail(run, ErrorCause.INTERNAL, repr(e))

        run.transition(PipelineStage.DONE)
        self.logging.info("Suggestion request done — project_id=%s suggestions=%d", project_id, len(suggestions), color="green")
        return SuggestionOutcome(suggestions=suggestions)

    async def _run(self, run: _PipelineRun, project_id: str, current_text: str, user_id: str) -> list[Suggestion]:
        run.transition(PipelineStage.AUTHORIZING)
        if not await self._project_client.do_check_membership(user_id=user_id, project_id=project_id):
            raise AuthorizationError(f"User {user_id} has no access to project {project_id}.")
        goal = (await self._project_client.do_fetch_project_goal(project_id) or "").strip() or DEFAULT_GOAL
        request = SuggestionRequest(project_id=project_id, current_text=current_text, project_goal=goal)

        run.transition(PipelineStage.EMBEDDING)
        embedding = await self._embed_client.do_embed(request.current_text)

        run.transition(PipelineStage.SEARCHING)
        hits = await self._rag_client.do_search(query_embedding=embedding, project_id=request.project_id)
        self.logging.info("Retrieved %d evidence chunk(s) for project %s", len(hits), project_id)
        if not hits and self.skip_without_evidence:
            return []

        run.transition(PipelineStage.ASSEMBLING)
        evidence = await self._evidence_assembler.assemble(hits)

        run.transition(PipelineStage.PROMPTING)
        prompt = self._prompt_builder.build(request.project_goal, request.current_text, evidence)

        run.transition(PipelineStage.GENERATING)
        return await self._suggestion_generator.generate(prompt)

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _fail(self, run: _PipelineRun, cause: ErrorCause, detail: str) -> SuggestionOutcome:
        failed_at = run.stage
        run.transition(PipelineStage.FAILED)
        self.logging.warning(
            "Suggestion request failed — project_id=%s stage=%s cause=%s: %s",
            run.project_id, failed_at.value, cause.value, detail,
        )
        return SuggestionOutcome(stage=PipelineStage.FAILED, error=cause, failed_at=failed_at)
