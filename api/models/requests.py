"""
API Request Models
Pydantic models for API request validation.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


# =============================================================================
# Session Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to open a skill tree view session."""
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    unlocked_ids: Optional[List[str]] = None
    taxonomy: Optional[Dict[str, Any]] = None
    show_frontier: bool = False


# =============================================================================
# Interaction Requests
# =============================================================================

class HoverRequest(BaseModel):
    """Pointer moved over a node (None clears the highlight)."""
    node_id: Optional[str] = None


class ActivateRequest(BaseModel):
    """Double-activation on a node."""
    node_id: str


class ResizeRequest(BaseModel):
    """Canvas dimensions changed."""
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class TickRequest(BaseModel):
    """Advance the layout by a number of frames."""
    ticks: int = Field(default=1, ge=1)
