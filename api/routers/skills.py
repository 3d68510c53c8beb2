"""
Skills API Router
Endpoints for skill tree view sessions.
"""

from fastapi import APIRouter, HTTPException
import logging

from api.models.requests import (
    CreateSessionRequest,
    HoverRequest,
    ActivateRequest,
    ResizeRequest,
    TickRequest,
)
from api.models.responses import (
    SessionResponse,
    HoverResponse,
    ActivateResponse,
    LayoutResponse,
    OverlapReport,
)
from api.services.skill_tree_service import SkillTreeService, UnknownNodeError

router = APIRouter()
logger = logging.getLogger(__name__)

# Service instance
skill_tree_service = SkillTreeService()


def _session_not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session not found: {session_id}")


@router.post("/sessions", response_model=SessionResponse)
async def create_session(request: CreateSessionRequest):
    """
    Open a skill tree session.

    Optional:
    - width, height: Canvas dimensions (settings defaults otherwise)
    - unlocked_ids: Saved progress (first domain open otherwise)
    - taxonomy: Custom taxonomy (built-in one otherwise)
    """
    try:
        return await skill_tree_service.create_session(
            width=request.width,
            height=request.height,
            unlocked_ids=request.unlocked_ids,
            taxonomy=request.taxonomy,
            show_frontier=request.show_frontier,
        )
    except Exception as e:
        logger.error(f"Failed to create skill tree session: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    """Get visible nodes, links and current positions."""
    try:
        state = await skill_tree_service.get_state(session_id)
        if state is None:
            raise _session_not_found(session_id)
        return state
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    """Close a session and stop its layout."""
    closed = await skill_tree_service.close_session(session_id)
    if not closed:
        raise _session_not_found(session_id)
    return {"session_id": session_id, "closed": True}


@router.post("/sessions/{session_id}/hover", response_model=HoverResponse)
async def hover(session_id: str, request: HoverRequest):
    """Highlight a node and get its tooltip."""
    try:
        result = await skill_tree_service.hover(session_id, request.node_id)
        if result is None:
            raise _session_not_found(session_id)
        return result
    except UnknownNodeError:
        raise HTTPException(status_code=404, detail=f"Node not found: {request.node_id}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Hover failed in session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sessions/{session_id}/activate", response_model=ActivateResponse)
async def activate(session_id: str, request: ActivateRequest):
    """
    Double-activation on a node.

    Unlocks the node when its prerequisites are met; otherwise nothing
    changes and changed is false.
    """
    try:
        result = await skill_tree_service.activate(session_id, request.node_id)
        if result is None:
            raise _session_not_found(session_id)
        return result
    except UnknownNodeError:
        raise HTTPException(status_code=404, detail=f"Node not found: {request.node_id}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Activation failed in session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sessions/{session_id}/resize", response_model=SessionResponse)
async def resize(session_id: str, request: ResizeRequest):
    """Apply new canvas dimensions (restarts the layout)."""
    try:
        result = await skill_tree_service.resize(session_id, request.width, request.height)
        if result is None:
            raise _session_not_found(session_id)
        return result
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Resize failed in session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/sessions/{session_id}/tick", response_model=LayoutResponse)
async def tick(session_id: str, request: TickRequest):
    """Advance the layout; stops early once it settles."""
    try:
        result = await skill_tree_service.tick(session_id, request.ticks)
        if result is None:
            raise _session_not_found(session_id)
        return result
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Tick failed in session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/sessions/{session_id}/overlaps", response_model=OverlapReport)
async def get_overlaps(session_id: str):
    """Pairs of nodes closer than their collision spacing."""
    result = await skill_tree_service.overlaps(session_id)
    if result is None:
        raise _session_not_found(session_id)
    return result


@router.post("/sessions/{session_id}/settle", response_model=LayoutResponse)
async def settle(session_id: str):
    """Run the layout one frame at a time until it settles."""
    try:
        result = await skill_tree_service.settle(session_id)
        if result is None:
            raise _session_not_found(session_id)
        return result
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Settle failed in session {session_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
