"""Gated search endpoints."""

from fastapi import APIRouter, Depends, Query, Request

from context.workspace import FocusWorkspace
from server.dependencies import get_api_key, get_workspace
from server.schemas.requests import SearchRequest
from server.schemas.responses import ResultsPageDTO, SearchResponseDTO, SearchResultDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/search", tags=["Search"])


@router.post("", response_model=SearchResponseDTO)
async def search(
    request: SearchRequest,
    http_request: Request,
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """
    Validate a query with the relevance oracle and return the filtered results.

    An off-focus query is not an error: it returns status "rejected" with the
    oracle's reason.
    """
    logger.info(
        "Search request",
        extra={
            "extra_fields": {
                "request_id": getattr(http_request.state, "request_id", "unknown"),
                "identity": workspace.user.identity,
            }
        },
    )
    outcome = await workspace.search(request.query)
    return SearchResponseDTO.from_outcome(outcome)


@router.get("/results", response_model=ResultsPageDTO)
async def results_page(
    offset: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1, le=50),
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Page through the current result set without re-querying."""
    orchestrator = workspace.orchestrator
    effective_limit = limit or orchestrator.page_size
    page = orchestrator.page(offset, effective_limit)
    total = len(orchestrator.results)
    return ResultsPageDTO(
        query=orchestrator.last_query,
        offset=offset,
        limit=effective_limit,
        total_results=total,
        has_more=offset + effective_limit < total,
        results=[SearchResultDTO.from_search_result(r) for r in page],
    )
