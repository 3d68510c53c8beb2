"""
API Response Models
Pydantic models for API response serialization.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


# =============================================================================
# Graph Responses
# =============================================================================

class NodeResponse(BaseModel):
    """Visible node with its unlock state."""
    id: str
    name: str
    description: str = ""
    level: int
    group_id: str
    state: str
    is_unlocked: bool
    can_unlock: bool
    skill_points: Dict[str, float] = Field(default_factory=dict)
    key_actions: List[str] = Field(default_factory=list)
    concepts: List[str] = Field(default_factory=list)


class LinkResponse(BaseModel):
    """Visible structural link."""
    source_id: str
    target_id: str
    weight: int


class PositionResponse(BaseModel):
    """Layout position of a node."""
    x: float
    y: float
    pinned: bool = False


class LayoutResponse(BaseModel):
    """Latest layout frame."""
    tick: int
    alpha: float
    state: str
    settled: bool
    positions: Dict[str, PositionResponse] = Field(default_factory=dict)


# =============================================================================
# Session Responses
# =============================================================================

class SessionResponse(BaseModel):
    """Full view state of a session."""
    session_id: str
    title: str = ""
    width: float
    height: float
    hovered_id: Optional[str] = None
    unlocked_ids: List[str] = Field(default_factory=list)
    nodes: List[NodeResponse] = Field(default_factory=list)
    links: List[LinkResponse] = Field(default_factory=list)
    layout: LayoutResponse
    summary: Dict[str, Any] = Field(default_factory=dict)


class TooltipResponse(BaseModel):
    """Tooltip content for the hovered node."""
    id: str
    name: str
    description: str = ""
    skill_points: List[Dict[str, Any]] = Field(default_factory=list)
    status: str


class HoverResponse(BaseModel):
    """Result of a hover."""
    session_id: str
    hovered_id: Optional[str] = None
    tooltip: Optional[TooltipResponse] = None


class ActivateResponse(BaseModel):
    """Result of an activation."""
    session_id: str
    node_id: str
    changed: bool
    unlocked_ids: List[str] = Field(default_factory=list)
    layout_restarted: bool = False


class OverlapResponse(BaseModel):
    """Pair of nodes closer than their spacing threshold."""
    node_a: str
    node_b: str
    distance: float
    threshold: float
    depth: float


class OverlapReport(BaseModel):
    """Overlap diagnostic of the current layout."""
    session_id: str
    settled: bool
    count: int
    overlaps: List[OverlapResponse] = Field(default_factory=list)
