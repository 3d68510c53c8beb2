"""
Skill Tree Configuration and Constants
Contains all settings for the skill graph, its layout and its rendering
"""

from enum import IntEnum
from typing import Optional
from pydantic import BaseModel, Field

# =============================================================================
# TAXONOMY CONSTANTS
# =============================================================================

ROOT_ID = "root"
ROOT_NAME = "Skills"

# Five dimensions every module scores on
SKILL_DIMENSIONS = (
    "problem_solving",
    "coding_implementation",
    "systems_thinking",
    "collaboration_communication",
    "learning_adaptability",
)

# Skill points are displayed out of this maximum
MAX_SKILL_POINTS = 5

# Link weights (root -> domain, domain -> module)
DOMAIN_LINK_WEIGHT = 2
MODULE_LINK_WEIGHT = 1

# =============================================================================
# RENDER CONSTANTS
# =============================================================================

# Node radius by level
NODE_RADIUS = {0: 15, 1: 25, 2: 12}

# Curve offset as a fraction of link length
LINK_CURVE_FACTOR = 0.2

# Placeholder labels for nodes whose name is not revealed yet
ROOT_PLACEHOLDER = "?"
NODE_PLACEHOLDER = "..."

# =============================================================================
# ENUMERATIONS
# =============================================================================


class NodeLevel(IntEnum):
    """Depth of a node in the skill tree"""
    ROOT = 0
    DOMAIN = 1
    MODULE = 2


# =============================================================================
# LAYOUT CONFIGURATION
# =============================================================================


class LayoutConfig(BaseModel):
    """
    Force layout parameters.

    Every distance is expressed as a fraction of min(width, height) so the
    layout scales with the canvas.
    """
    # Ring radius per level
    root_ring: float = Field(default=0.10, ge=0.0)
    domain_ring: float = Field(default=0.35, ge=0.0)
    module_ring: float = Field(default=0.60, ge=0.0)

    # Minimum spacing between nodes
    spacing_fraction: float = Field(default=0.20, gt=0.0)

    # Forces
    center_strength: float = 0.8
    link_strength: float = 0.5
    root_charge: float = -4.0  # times spacing
    node_charge: float = -2.0  # times spacing
    charge_distance_max: float = 5.0  # times spacing
    root_collide: float = 0.8  # times spacing
    domain_collide: float = 1.2
    module_collide: float = 0.6
    collide_strength: float = 0.9
    collide_iterations: int = Field(default=5, ge=1)
    radial_strength: float = 1.0

    # Energy
    alpha: float = 1.0
    alpha_min: float = 0.001
    alpha_decay: float = 0.01
    alpha_target: float = 0.0
    velocity_decay: float = 0.3

    # Cooldown budget
    cooldown_time_ms: Optional[float] = 5000.0
    cooldown_ticks: Optional[int] = None

    seed: int = 42

    def ring_fraction(self, level: int) -> float:
        """Ring radius fraction for a level (deeper levels use the module ring)"""
        if level <= NodeLevel.ROOT:
            return self.root_ring
        if level == NodeLevel.DOMAIN:
            return self.domain_ring
        return self.module_ring

    def collide_fraction(self, level: int) -> float:
        """Collision radius fraction for a level"""
        if level <= NodeLevel.ROOT:
            return self.root_collide
        if level == NodeLevel.DOMAIN:
            return self.domain_collide
        return self.module_collide


# =============================================================================
# RENDER STYLE
# =============================================================================


class RenderStyle(BaseModel):
    """Colours and fonts used when painting the graph"""
    unlocked_color: str = "#2DD4BF"
    unlockable_color: str = "#0D9488"
    locked_color: str = "#134E4A"
    border_color: str = "#1E293B"
    border_width: float = 1.5
    glow_color: str = "#2DD4BF"
    glow_blur: float = 10.0
    label_color: str = "#F8FAFC"
    label_background: str = "rgba(15, 23, 42, 0.8)"
    label_padding: float = 4.0
    label_height: float = 16.0
    link_width: float = 1.0
    background_color: str = "#0F172A"

    root_font: str = "bold 12px Arial"
    domain_font: str = "bold 14px Arial"
    module_font: str = "10px Arial"
