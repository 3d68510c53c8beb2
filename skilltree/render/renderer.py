"""
Skill Graph Renderer
Paints nodes and curved links with progressive disclosure.
"""

from typing import Optional, List, Dict, Any, Sequence, Tuple
from dataclasses import dataclass
import math

from skilltree.config import (
    NODE_RADIUS,
    LINK_CURVE_FACTOR,
    ROOT_PLACEHOLDER,
    NODE_PLACEHOLDER,
    MAX_SKILL_POINTS,
    NodeLevel,
    RenderStyle,
)
from skilltree.skills.progression import AnnotatedNode, NodeState, status_label
from skilltree.skills.taxonomy import SkillLink
from skilltree.simulation.layout import NodePosition
from skilltree.render.surface import DrawingSurface


@dataclass
class RenderStats:
    """What one render pass drew"""
    nodes_drawn: int = 0
    links_drawn: int = 0
    links_skipped: int = 0
    labels_drawn: int = 0


def node_radius(level: int) -> float:
    """Circle radius for a level (domains largest)"""
    return NODE_RADIUS.get(int(level), NODE_RADIUS[NodeLevel.MODULE])


def link_is_revealed(source: AnnotatedNode, target: AnnotatedNode) -> bool:
    """
    Whether a link may be drawn.

    Hidden when neither end is unlocked, unless both ends are unlockable.
    """
    if source.is_unlocked or target.is_unlocked:
        return True
    return source.can_unlock and target.can_unlock


def curve_control_point(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    factor: float = LINK_CURVE_FACTOR,
) -> Optional[Tuple[float, float]]:
    """
    Control point of the quadratic curve between two points.

    Offset from the midpoint along the perpendicular by factor * length.
    None for a zero-length link.
    """
    dx = x2 - x1
    dy = y2 - y1
    dist = math.hypot(dx, dy)
    if dist == 0:
        return None

    offset = dist * factor
    mid_x = (x1 + x2) / 2
    mid_y = (y1 + y2) / 2
    return (mid_x - dy / dist * offset, mid_y + dx / dist * offset)


def reveals_name(node: AnnotatedNode, hovered: bool) -> bool:
    """Real names are shown once unlocked, or on hover once unlockable"""
    return node.is_unlocked or (hovered and node.can_unlock)


def display_name(node: AnnotatedNode, hovered: bool = False) -> str:
    """Name or placeholder glyph for a node"""
    if reveals_name(node, hovered):
        return node.node.name
    return ROOT_PLACEHOLDER if node.level == NodeLevel.ROOT else NODE_PLACEHOLDER


def describe_node(node: AnnotatedNode, hovered: bool = True) -> Dict[str, Any]:
    """
    Tooltip content for a node.

    Hidden nodes only expose their placeholder and status.
    """
    revealed = reveals_name(node, hovered)
    skill_points = [
        {"skill": skill.replace("_", " "), "value": value, "max": MAX_SKILL_POINTS}
        for skill, value in node.node.skill_points.items()
        if value > 0
    ] if revealed else []

    return {
        "id": node.id,
        "name": display_name(node, hovered),
        "description": node.node.description if revealed else "",
        "skill_points": skill_points,
        "status": status_label(node.state),
    }


class SkillGraphRenderer:
    """
    Paints the visible graph on a DrawingSurface.

    Links are painted first so nodes sit on top of them.
    """

    def __init__(self, style: Optional[RenderStyle] = None):
        self.style = style or RenderStyle()

    def render(
        self,
        surface: DrawingSurface,
        nodes: Sequence[AnnotatedNode],
        links: Sequence[SkillLink],
        positions: Dict[str, NodePosition],
        hovered_id: Optional[str] = None,
    ) -> RenderStats:
        """
        Paint one frame.

        Args:
            surface: Target surface
            nodes: Annotated visible nodes
            links: Visible links
            positions: Current layout positions
            hovered_id: Currently hovered node

        Returns:
            RenderStats
        """
        stats = RenderStats()
        by_id = {node.id: node for node in nodes}

        for link in links:
            source = by_id.get(link.source_id)
            target = by_id.get(link.target_id)
            start = positions.get(link.source_id)
            end = positions.get(link.target_id)
            if source is None or target is None or start is None or end is None:
                stats.links_skipped += 1
                continue
            if self.paint_link(surface, source, target, start, end):
                stats.links_drawn += 1
            else:
                stats.links_skipped += 1

        for node in nodes:
            position = positions.get(node.id)
            if position is None:
                continue
            if self.paint_node(surface, node, position, hovered=node.id == hovered_id):
                stats.labels_drawn += 1
            stats.nodes_drawn += 1

        return stats

    # ==================== Links ====================

    def link_color(self, source: AnnotatedNode, target: AnnotatedNode) -> str:
        """Bright when both ends unlocked, medium for unlocked + unlockable"""
        style = self.style
        if source.is_unlocked and target.is_unlocked:
            return style.unlocked_color
        if (source.is_unlocked and target.can_unlock) or (source.can_unlock and target.is_unlocked):
            return style.unlockable_color
        return style.locked_color

    def paint_link(
        self,
        surface: DrawingSurface,
        source: AnnotatedNode,
        target: AnnotatedNode,
        start: NodePosition,
        end: NodePosition,
    ) -> bool:
        """Paint a link; False when progressive disclosure hides it"""
        if not link_is_revealed(source, target):
            return False

        surface.stroke_style = self.link_color(source, target)
        surface.line_width = self.style.link_width

        surface.begin_path()
        surface.move_to(start.x, start.y)
        control = curve_control_point(start.x, start.y, end.x, end.y)
        if control is None:
            surface.line_to(end.x, end.y)
        else:
            surface.quadratic_curve_to(control[0], control[1], end.x, end.y)
        surface.stroke()
        return True

    # ==================== Nodes ====================

    def node_color(self, node: AnnotatedNode) -> str:
        style = self.style
        if node.state == NodeState.UNLOCKED:
            return style.unlocked_color
        if node.state == NodeState.UNLOCKABLE:
            return style.unlockable_color
        return style.locked_color

    def paint_node(
        self,
        surface: DrawingSurface,
        node: AnnotatedNode,
        position: NodePosition,
        hovered: bool = False,
    ) -> bool:
        """
        Paint a node circle and, when due, its label.

        Returns:
            Whether a label was drawn
        """
        style = self.style
        size = node_radius(node.level)
        x, y = position.x, position.y

        surface.begin_path()
        surface.arc(x, y, size, 0, 2 * math.pi)
        surface.fill_style = self.node_color(node)
        surface.fill()

        if node.can_unlock:
            surface.stroke_style = style.glow_color
            surface.line_width = style.border_width
            surface.shadow_color = style.glow_color
            surface.shadow_blur = style.glow_blur
            surface.stroke()
            surface.shadow_blur = 0

        surface.stroke_style = style.border_color
        surface.line_width = style.border_width
        surface.stroke()

        if node.level > NodeLevel.DOMAIN and not hovered:
            return False

        self._paint_label(surface, node, x, y, size, hovered)
        return True

    def _paint_label(
        self,
        surface: DrawingSurface,
        node: AnnotatedNode,
        x: float,
        y: float,
        size: float,
        hovered: bool,
    ) -> None:
        style = self.style
        if node.level == NodeLevel.DOMAIN:
            surface.font = style.domain_font
        elif node.level == NodeLevel.ROOT:
            surface.font = style.root_font
        else:
            surface.font = style.module_font
        surface.text_align = "center"
        surface.text_baseline = "middle"

        text = display_name(node, hovered)
        padding = style.label_padding
        text_height = style.label_height

        if node.level == NodeLevel.DOMAIN:
            text_width = surface.measure_text(text).width
            surface.fill_style = style.label_background
            surface.fill_rect(
                x - text_width / 2 - padding,
                y + size + 4,
                text_width + padding * 2,
                text_height + padding,
            )

        surface.fill_style = style.label_color
        surface.fill_text(text, x, y + size + text_height / 2 + 6)
