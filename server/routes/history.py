"""History endpoints - list, filter and delete validated search queries."""

from fastapi import APIRouter, Depends, HTTPException, status

from context.workspace import FocusWorkspace
from server.dependencies import get_api_key, get_workspace
from server.schemas.responses import HistoryResponseDTO

router = APIRouter(prefix="/v1", tags=["History"])


@router.get("/history", response_model=HistoryResponseDTO)
async def list_history(
    filter: str = "",
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Return history entries (most recent first), optionally filtered."""
    orchestrator = workspace.orchestrator
    entries = orchestrator.filter_history(filter) if filter else orchestrator.history()
    return HistoryResponseDTO(
        entries=entries,
        recent=orchestrator.recent_history(),
        total=len(orchestrator.ledger),
    )


@router.delete("/history/{query:path}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    query: str,
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Delete a single history entry."""
    removed = workspace.orchestrator.delete_history_item(query)
    if not removed:
        raise HTTPException(status_code=404, detail="History entry not found")


@router.delete("/history", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Delete all history entries."""
    workspace.orchestrator.clear_history()
