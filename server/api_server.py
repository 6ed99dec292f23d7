"""FastAPI application entry point for the suggestion service."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.clients.auth.TokenProvider import TokenProvider
from shared.clients.project.ProjectClientInterface import ProjectClientInterface
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.project.ProjectClientManager import ProjectClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from server.core.EvidenceAssembler import EvidenceAssembler
from server.core.PromptBuilder import PromptBuilder
from server.core.RetrievalOrchestrator import RetrievalOrchestrator
from server.core.SuggestionGenerator import SuggestionGenerator
from server.routers.SuggestionRouter import router as suggestion_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    # one token provider per process, shared by every Google client
    token_provider = TokenProvider(helper_config=app.state.helper_config)
    project_client = ProjectClientManager(helper_config=app.state.helper_config).get_client()
    rag_client = RAGClientManager(helper_config=app.state.helper_config).get_client()
    embed_client = EmbedClientManager(helper_config=app.state.helper_config, token_provider=token_provider).get_client()
    llm_client = LLMClientManager(helper_config=app.state.helper_config, token_provider=token_provider).get_client()
    clients = [token_provider, project_client, rag_client, embed_client, llm_client]

    logging.info("Booting all clients...")
    for client in clients:
        await client.boot()
    logging.info("All clients booted successfully.")

    await check_connections(project_client, rag_client)

    prompt_builder = PromptBuilder()
    app.state.orchestrator = RetrievalOrchestrator(
        helper_config=app.state.helper_config,
        project_client=project_client,
        embed_client=embed_client,
        rag_client=rag_client,
        evidence_assembler=EvidenceAssembler(helper_config=app.state.helper_config, project_client=project_client),
        prompt_builder=prompt_builder,
        suggestion_generator=SuggestionGenerator(
            helper_config=app.state.helper_config,
            llm_client=llm_client,
            system_instruction=prompt_builder.system_instruction,
        ),
    )

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down — closing all clients...")
    for client in clients:
        await client.close()
    logging.info("All clients closed.")


app = FastAPI(
    title="suggestion_service",
    description=(
        "Retrieval-augmented critical-thinking assistant. POST /suggestions embeds the user's "
        "current text, retrieves the most similar evidence chunks of the project and asks a "
        "generative model for supporting evidence, contradictions, questions and gaps."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(suggestion_router)


@app.get("/health", tags=["health"])
async def health() -> dict:
    return {"status": "ok", "version": app_version}


async def check_connections(
    project_client: ProjectClientInterface,
    rag_client: RAGClientInterface,
) -> None:
    """Check connectivity to the stores on startup.

    Raises:
        Exception: If the vector store or the metadata store is not reachable.
    """
    for client in [project_client, rag_client]:
        result: httpx.Response = await client.do_healthcheck()
        if not result.is_success:
            raise Exception(
                f"{client.__class__.__name__} is not reachable "
                f"(status {result.status_code}). Cannot serve suggestions."
            )


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting suggestion_service API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", os.getcwd()),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
