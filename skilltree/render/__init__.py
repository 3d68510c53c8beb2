"""
Rendering Module
Drawing surfaces, the skill graph painter and image export.
"""

from skilltree.render.surface import (
    DrawingSurface,
    MatplotlibSurface,
    TextMetrics,
    parse_color,
    parse_font,
)
from skilltree.render.renderer import (
    RenderStats,
    SkillGraphRenderer,
    curve_control_point,
    describe_node,
    display_name,
    link_is_revealed,
    node_radius,
)
from skilltree.render.visualizer import BaseVisualizer, SkillGraphVisualizer

__all__ = [
    "DrawingSurface",
    "MatplotlibSurface",
    "TextMetrics",
    "parse_color",
    "parse_font",
    "RenderStats",
    "SkillGraphRenderer",
    "curve_control_point",
    "describe_node",
    "display_name",
    "link_is_revealed",
    "node_radius",
    "BaseVisualizer",
    "SkillGraphVisualizer",
]
