from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.core.RetrievalOrchestrator import SuggestionOutcome
from server.dependencies.auth import get_user_id, verify_api_key
from server.models.requests import SuggestionsRequest
from server.models.responses import SuggestionsResponse
from shared.errors import ErrorCause

router = APIRouter(prefix="/suggestions", tags=["suggestions"])

DEGRADED_HEADER = "X-Suggestions-Degraded"


@router.post("")
async def get_suggestions(
    request: Request,
    body: SuggestionsRequest,
    user_id: str = Depends(get_user_id),
    _: None = Depends(verify_api_key),
) -> JSONResponse:
    """Return critical-thinking suggestions for the user's current text.

    The body is always {"suggestions": [...]}. Degraded outcomes keep that shape
    and status 200 so the editor never blocks; only a missing project
    membership answers 403. The degradation cause is exposed in the
    X-Suggestions-Degraded header.

    Args:
        request (Request): FastAPI request (provides app.state.orchestrator).
        body (SuggestionsRequest): JSON body with project_id and current_text.
        user_id (str): The calling end user.
        _ (None): Auth dependency result (unused).

    Returns:
        JSONResponse: The suggestions payload.
    """
    orchestrator = request.app.state.orchestrator
    outcome: SuggestionOutcome = await orchestrator.get_suggestions(
        project_id=body.project_id,
        current_text=body.current_text,
        user_id=user_id,
    )

    payload = SuggestionsResponse(suggestions=outcome.suggestions).model_dump(mode="json", exclude_none=True)
    status_code = 403 if outcome.error == ErrorCause.AUTHORIZATION else 200
    headers = {DEGRADED_HEADER: outcome.error.value} if outcome.error else None
    return JSONResponse(content=payload, status_code=status_code, headers=headers)
