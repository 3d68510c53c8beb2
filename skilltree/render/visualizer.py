"""
Skill Graph Visualizer
Static PNG export of a rendered skill graph frame
"""

from pathlib import Path
from typing import Optional, Dict, Sequence
import logging

import matplotlib.pyplot as plt

from skilltree.config import RenderStyle
from skilltree.render.renderer import SkillGraphRenderer, RenderStats
from skilltree.render.surface import MatplotlibSurface
from skilltree.simulation.layout import NodePosition
from skilltree.skills.progression import AnnotatedNode
from skilltree.skills.taxonomy import SkillLink


logger = logging.getLogger(__name__)


class BaseVisualizer:
    """
    Base visualizer class with common functionality.
    """

    def __init__(self, output_dir: str = "visualizations"):
        """
        Initialize visualizer.

        Args:
            output_dir: Directory to save visualization outputs
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def save_figure(
        self,
        fig: plt.Figure,
        filename: str,
        dpi: int = 100
    ) -> Path:
        """
        Save matplotlib figure to file.

        Args:
            fig: Matplotlib figure
            filename: Output filename
            dpi: Resolution in dots per inch

        Returns:
            Path of the written file
        """
        path = self.output_dir / filename
        fig.savefig(path, dpi=dpi, facecolor=fig.get_facecolor())
        plt.close(fig)
        logger.info(f"Saved visualization to {path}")
        return path


class SkillGraphVisualizer(BaseVisualizer):
    """
    Renders a layout frame to an image through MatplotlibSurface.
    """

    def __init__(
        self,
        output_dir: str = "visualizations",
        style: Optional[RenderStyle] = None,
    ):
        super().__init__(output_dir)
        self.style = style or RenderStyle()
        self.renderer = SkillGraphRenderer(self.style)

    def draw(
        self,
        nodes: Sequence[AnnotatedNode],
        links: Sequence[SkillLink],
        positions: Dict[str, NodePosition],
        width: float,
        height: float,
        hovered_id: Optional[str] = None,
        dpi: int = 100,
    ) -> tuple[plt.Figure, RenderStats]:
        """
        Draw a frame on a new figure sized to the canvas.

        Returns:
            (figure, render stats)
        """
        fig = plt.figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        ax = fig.add_axes((0, 0, 1, 1))
        surface = MatplotlibSurface(ax, width, height, background=self.style.background_color)
        stats = self.renderer.render(surface, nodes, links, positions, hovered_id)
        return fig, stats

    def visualize(
        self,
        nodes: Sequence[AnnotatedNode],
        links: Sequence[SkillLink],
        positions: Dict[str, NodePosition],
        width: float,
        height: float,
        hovered_id: Optional[str] = None,
        filename: str = "skill_graph.png",
        dpi: int = 100,
    ) -> Path:
        """
        Draw a frame and save it.

        Args:
            nodes: Annotated visible nodes
            links: Visible links
            positions: Layout positions
            width: Canvas width
            height: Canvas height
            hovered_id: Hovered node (label revealed)
            filename: Output filename
            dpi: Resolution in dots per inch
        """
        fig, stats = self.draw(nodes, links, positions, width, height, hovered_id, dpi)
        logger.debug(
            f"Rendered {stats.nodes_drawn} nodes, {stats.links_drawn} links "
            f"({stats.links_skipped} hidden)"
        )
        return self.save_figure(fig, filename, dpi)
