"""Focus session command endpoints."""

from fastapi import APIRouter, Depends

from context.workspace import FocusWorkspace
from server.dependencies import get_api_key, get_workspace
from server.schemas.requests import PauseRequest, StartSessionRequest
from server.schemas.responses import SessionSnapshotDTO, TransitionResponseDTO
from server.utils import ensure_transition

router = APIRouter(prefix="/v1/session", tags=["Session"])


@router.get("", response_model=SessionSnapshotDTO)
async def get_session(
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Return the current session snapshot."""
    return SessionSnapshotDTO.from_snapshot(workspace.session.snapshot())


@router.post("/start", response_model=TransitionResponseDTO)
async def start_session(
    request: StartSessionRequest,
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Lock the user into a focus session."""
    if request.total_seconds is not None:
        result = workspace.start(request.total_seconds)
    else:
        result = workspace.start_duration(request.hours or 0, request.minutes or 0)
    return TransitionResponseDTO.from_transition(ensure_transition(result))


@router.post("/pause", response_model=TransitionResponseDTO)
async def pause_session(
    request: PauseRequest,
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Pause a locked session; requires the account password."""
    result = workspace.pause(request.password)
    return TransitionResponseDTO.from_transition(ensure_transition(result))


@router.post("/resume", response_model=TransitionResponseDTO)
async def resume_session(
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    result = workspace.resume()
    return TransitionResponseDTO.from_transition(ensure_transition(result))


@router.post("/end", response_model=TransitionResponseDTO)
async def end_session(
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    result = workspace.end()
    return TransitionResponseDTO.from_transition(ensure_transition(result))


@router.post("/reset", response_model=TransitionResponseDTO)
async def reset_session(
    workspace: FocusWorkspace = Depends(get_workspace),
    api_key: str = Depends(get_api_key),
):
    """Return an ended session to idle."""
    result = workspace.reset()
    return TransitionResponseDTO.from_transition(ensure_transition(result))
