"""
Skill Tree Service
Holds view sessions and turns them into API responses.
"""

import logging
from typing import Optional, Dict, Any, List
from uuid import uuid4

from api.config import get_settings
from api.models.responses import (
    SessionResponse,
    NodeResponse,
    LinkResponse,
    LayoutResponse,
    PositionResponse,
    HoverResponse,
    TooltipResponse,
    ActivateResponse,
    OverlapReport,
    OverlapResponse,
)
from skilltree.config import LayoutConfig
from skilltree.skills.manager import SkillTreeSession
from skilltree.skills.progression import ProgressRecord
from skilltree.skills.taxonomy import GraphModel, build_skill_graph

logger = logging.getLogger(__name__)


class UnknownNodeError(KeyError):
    """Node id not present in the session's graph."""


class SkillTreeService:
    """
    Service for skill tree view sessions.

    Handles:
    - Session creation from a taxonomy and a saved progress record
    - Hover, activation and resize events
    - Frame-by-frame layout advancement
    - Overlap diagnostics
    """

    def __init__(self):
        settings = get_settings()
        self.default_width = settings.default_width
        self.default_height = settings.default_height
        self.max_ticks = settings.max_ticks_per_request
        self.max_sessions = settings.max_sessions
        self.layout_config = LayoutConfig(seed=settings.layout_seed)
        self.frame_interval = settings.frame_interval_ms / 1000

        # Sessions by id, oldest first
        self._sessions: Dict[str, SkillTreeSession] = {}

    def get_session(self, session_id: str) -> Optional[SkillTreeSession]:
        return self._sessions.get(session_id)

    async def create_session(
        self,
        width: Optional[float] = None,
        height: Optional[float] = None,
        unlocked_ids: Optional[List[str]] = None,
        taxonomy: Optional[Dict[str, Any]] = None,
        show_frontier: bool = False,
    ) -> SessionResponse:
        """Open a new session."""
        graph = GraphModel.build(taxonomy) if taxonomy else build_skill_graph()
        progress = ProgressRecord.of(unlocked_ids) if unlocked_ids is not None else None

        session = SkillTreeSession(
            graph=graph,
            progress=progress,
            width=width or self.default_width,
            height=height or self.default_height,
            layout_config=self.layout_config,
            show_frontier=show_frontier,
        )

        session_id = str(uuid4())
        self._sessions[session_id] = session
        self._evict()

        logger.info(f"Created skill tree session {session_id} ({len(graph)} nodes)")
        return self._session_response(session_id, session)

    def _evict(self) -> None:
        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            self._sessions.pop(oldest).close()
            logger.info(f"Evicted skill tree session {oldest}")

    async def get_state(self, session_id: str) -> Optional[SessionResponse]:
        """Full view state of a session."""
        session = self.get_session(session_id)
        if session is None:
            return None
        return self._session_response(session_id, session)

    async def close_session(self, session_id: str) -> bool:
        """Close a session and stop its layout."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"Closed skill tree session {session_id}")
        return True

    async def close_all(self) -> None:
        """Close every open session."""
        for session_id in list(self._sessions):
            await self.close_session(session_id)

    # ==================== Events ====================

    async def hover(self, session_id: str, node_id: Optional[str]) -> Optional[HoverResponse]:
        """Highlight a node."""
        session = self.get_session(session_id)
        if session is None:
            return None
        if node_id is not None and node_id not in session.graph:
            raise UnknownNodeError(node_id)

        session.hover(node_id)
        tooltip = session.tooltip()
        return HoverResponse(
            session_id=session_id,
            hovered_id=session.hovered_id,
            tooltip=TooltipResponse(**tooltip) if tooltip else None,
        )

    async def activate(self, session_id: str, node_id: str) -> Optional[ActivateResponse]:
        """Unlock a node if its prerequisites are met."""
        session = self.get_session(session_id)
        if session is None:
            return None
        if node_id not in session.graph:
            raise UnknownNodeError(node_id)

        restarts = session.restarts
        changed = session.activate(node_id)
        return ActivateResponse(
            session_id=session_id,
            node_id=node_id,
            changed=changed,
            unlocked_ids=sorted(session.progress.unlocked_ids),
            layout_restarted=session.restarts != restarts,
        )

    async def resize(self, session_id: str, width: float, height: float) -> Optional[SessionResponse]:
        """Apply new canvas dimensions."""
        session = self.get_session(session_id)
        if session is None:
            return None
        session.resize(width, height)
        return self._session_response(session_id, session)

    async def tick(self, session_id: str, ticks: int = 1) -> Optional[LayoutResponse]:
        """Advance the layout by up to max_ticks frames."""
        session = self.get_session(session_id)
        if session is None:
            return None

        for _ in range(min(ticks, self.max_ticks)):
            if not session.handle.is_running:
                break
            session.tick()
        return self._layout_response(session)

    async def settle(self, session_id: str) -> Optional[LayoutResponse]:
        """Run the layout frame by frame until it settles."""
        session = self.get_session(session_id)
        if session is None:
            return None
        if session.handle.is_running:
            await session.handle.run(self.frame_interval)
        return self._layout_response(session)

    async def overlaps(self, session_id: str) -> Optional[OverlapReport]:
        """Overlap diagnostic of the current positions."""
        session = self.get_session(session_id)
        if session is None:
            return None

        handle = session.handle
        found = handle.overlaps if handle.settled else handle.diagnose()
        return OverlapReport(
            session_id=session_id,
            settled=handle.settled,
            count=len(found),
            overlaps=[OverlapResponse(**overlap.to_dict()) for overlap in found],
        )

    # ==================== Serialization ====================

    def _layout_response(self, session: SkillTreeSession) -> LayoutResponse:
        frame = session.handle.frame
        return LayoutResponse(
            tick=frame.tick,
            alpha=frame.alpha,
            state=session.handle.state.value,
            settled=session.handle.settled,
            positions={
                node_id: PositionResponse(**position.to_dict())
                for node_id, position in frame.positions.items()
            },
        )

    def _session_response(self, session_id: str, session: SkillTreeSession) -> SessionResponse:
        return SessionResponse(
            session_id=session_id,
            title=session.graph.title,
            width=session.width,
            height=session.height,
            hovered_id=session.hovered_id,
            unlocked_ids=sorted(session.progress.unlocked_ids),
            nodes=[NodeResponse(**node.to_dict()) for node in session.annotated_nodes()],
            links=[LinkResponse(**link.to_dict()) for link in session.visible_links()],
            layout=self._layout_response(session),
            summary=session.summary(),
        )
